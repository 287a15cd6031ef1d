from __future__ import annotations

import math
from typing import Optional, Sequence

from .models import GeoPoint, ViewportBounds

EARTH_RADIUS_M = 6371000.0


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lambda = math.radians(b.lng - a.lng)

    x = math.sin(lat1) * math.sin(lat2) + math.cos(lat1) * math.cos(lat2) * math.cos(d_lambda)
    # acos is undefined just outside [-1, 1], which rounding produces for identical and antipodal points
    x = max(min(x, 1.0), -1.0)
    return EARTH_RADIUS_M * math.acos(x)


def close_ring(points: Sequence[GeoPoint]) -> list[GeoPoint]:
    ring = list(points)
    if ring:
        ring.append(ring[0])
    return ring


def ring_bounds(points: Sequence[GeoPoint]) -> Optional[ViewportBounds]:
    bounds = None
    for point in points:
        if bounds is None:
            bounds = ViewportBounds(southwest=point, northeast=point)
        else:
            bounds = bounds.extend(point)
    return bounds
