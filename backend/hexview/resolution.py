from __future__ import annotations

import math
from typing import Optional

# Curated for the tile zoom range the map allows. Neighbouring zooms share a
# resolution where stepping would otherwise redraw a visually similar grid.
ZOOM_TO_RESOLUTION: dict[int, int] = {
    5: 1,
    6: 2,
    7: 3,
    8: 3,
    9: 4,
    10: 5,
    11: 6,
    12: 6,
    13: 7,
    14: 8,
    15: 9,
    16: 9,
    17: 10,
    18: 10,
    19: 11,
    20: 11,
    21: 12,
    22: 13,
    23: 14,
    24: 15,
}

# Later (deeper) zooms overwrite earlier ones for shared resolutions.
RESOLUTION_TO_ZOOM: dict[int, int] = {}
for _zoom, _resolution in ZOOM_TO_RESOLUTION.items():
    RESOLUTION_TO_ZOOM[_resolution] = _zoom


def resolution_for_zoom(zoom: int) -> int:
    resolution = ZOOM_TO_RESOLUTION.get(zoom)
    if resolution is None:
        return math.floor((zoom - 1) * 0.7)
    return resolution


def zoom_for_resolution(resolution: int) -> Optional[int]:
    """Exact inverse of the curated table.

    Returns None for resolutions only reachable through the fallback formula;
    callers decide what to do with the camera in that case.
    """
    return RESOLUTION_TO_ZOOM.get(resolution)
