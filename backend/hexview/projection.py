"""Web Mercator camera math for a pixel viewport.

Zoom z renders the world as a square of TILE_SIZE * 2**z pixels; pixel x
grows eastward and pixel y southward from the antimeridian/north edge.
Only what the map camera needs is modelled here: deriving the visible
bounds from a center and zoom, and fitting a rectangle into the viewport.
"""

from __future__ import annotations

import math

from .models import GeoPoint, ViewportBounds, ViewportSize

TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798


def clamp_zoom(zoom: int, min_zoom: int, max_zoom: int) -> int:
    return max(min_zoom, min(max_zoom, zoom))


def project(point: GeoPoint, zoom: float) -> tuple[float, float]:
    """Return world pixel (x, y) of a point at the given zoom."""
    scale = TILE_SIZE * 2.0 ** zoom
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, point.lat))
    x = (point.lng + 180.0) / 360.0 * scale
    y = (1.0 - math.asinh(math.tan(math.radians(lat))) / math.pi) / 2.0 * scale
    return x, y


def unproject(x: float, y: float, zoom: float) -> GeoPoint:
    scale = TILE_SIZE * 2.0 ** zoom
    lng = x / scale * 360.0 - 180.0
    lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / scale))))
    return GeoPoint(lat=lat, lng=lng)


def viewport_bounds(center: GeoPoint, zoom: int, size: ViewportSize, margin: float = 0.0) -> ViewportBounds:
    """Visible rectangle, optionally grown by ``margin`` (a fraction of each side)."""
    cx, cy = project(center, zoom)
    half_w = size.width * (1.0 + margin) / 2.0
    half_h = size.height * (1.0 + margin) / 2.0
    southwest = unproject(cx - half_w, cy + half_h, zoom)
    northeast = unproject(cx + half_w, cy - half_h, zoom)
    return ViewportBounds(southwest=southwest, northeast=northeast)


def fit_bounds(
    bounds: ViewportBounds,
    size: ViewportSize,
    min_zoom: int,
    max_zoom: int,
) -> tuple[GeoPoint, int]:
    """Center and largest integer zoom at which ``bounds`` fits inside ``size``."""
    x0, y0 = project(bounds.southwest, 0)
    x1, y1 = project(bounds.northeast, 0)
    width = abs(x1 - x0)
    height = abs(y0 - y1)

    if width == 0 and height == 0:
        zoom = max_zoom
    else:
        scale = min(
            size.width / width if width else math.inf,
            size.height / height if height else math.inf,
        )
        zoom = math.floor(math.log2(scale))
    zoom = clamp_zoom(zoom, min_zoom, max_zoom)

    center = unproject((x0 + x1) / 2.0, (y0 + y1) / 2.0, 0)
    return center, zoom
