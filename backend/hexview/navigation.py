"""Navigation flows driven by user input.

Both flows validate, compute, then apply to the session camera in one step.
Bad input is not an error: the flow declines and the camera stays where it
was, which callers see as a ``False`` return.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from .grid import GridIndex
from .models import GeoPoint
from .resolution import zoom_for_resolution
from .state import MapSession
from .utils import ring_bounds

logger = logging.getLogger(__name__)

GOTO_ZOOM = 16


def parse_coordinate(text: Optional[str]) -> Optional[GeoPoint]:
    parts = (text or "").split(",")
    if len(parts) < 2:
        return None
    # anything after the second comma is ignored
    lat_text, lng_text = parts[0], parts[1]
    # float() accepts digit separators, a typed coordinate does not
    if "_" in lat_text or "_" in lng_text:
        return None
    try:
        lat = float(lat_text)
        lng = float(lng_text)
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return GeoPoint(lat=lat, lng=lng)


def go_to_coordinate(session: MapSession, text: Optional[str], zoom: int = GOTO_ZOOM) -> bool:
    session.navigation.goto_text = text
    point = parse_coordinate(text)
    if point is None:
        logger.debug("Ignoring coordinate input %r", text)
        return False
    session.set_view(point, zoom)
    return True


def find_cell(session: MapSession, cell_id: Optional[str], grid: GridIndex) -> bool:
    session.navigation.search_id = cell_id
    if not grid.is_valid_cell(cell_id):
        logger.debug("Ignoring invalid cell id %r", cell_id)
        return False

    bounds = ring_bounds(grid.cell_to_boundary(cell_id))
    if bounds is None:
        return False
    session.fit_bounds(bounds)

    resolution = grid.get_resolution(cell_id)
    zoom = zoom_for_resolution(resolution)
    if zoom is None:
        logger.info("No curated zoom for resolution %d, keeping fitted zoom %d", resolution, session.camera.zoom)
    else:
        session.set_zoom(zoom)
    return True
