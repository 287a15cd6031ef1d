from __future__ import annotations

import logging
from typing import Protocol, Sequence

import h3

from .models import GeoPoint, ViewportBounds
from .utils import close_ring

logger = logging.getLogger(__name__)


class GridIndex(Protocol):
    def polygon_to_cells(self, ring: Sequence[GeoPoint], resolution: int) -> list[str]:
        ...

    def cell_to_boundary(self, cell_id: str) -> list[GeoPoint]:
        ...

    def cell_area(self, cell_id: str, unit: str = "m^2") -> float:
        ...

    def is_valid_cell(self, cell_id: str) -> bool:
        ...

    def get_resolution(self, cell_id: str) -> int:
        ...


class H3Grid:
    """GridIndex backed by the h3 (v4) bindings."""

    def polygon_to_cells(self, ring: Sequence[GeoPoint], resolution: int) -> list[str]:
        polygon = h3.LatLngPoly([(point.lat, point.lng) for point in ring])
        return list(h3.polygon_to_cells(polygon, resolution))

    def cell_to_boundary(self, cell_id: str) -> list[GeoPoint]:
        return [GeoPoint(lat=lat, lng=lng) for lat, lng in h3.cell_to_boundary(cell_id)]

    def cell_area(self, cell_id: str, unit: str = "m^2") -> float:
        return h3.cell_area(cell_id, unit=unit)

    def is_valid_cell(self, cell_id: str) -> bool:
        if not isinstance(cell_id, str) or not cell_id:
            return False
        return h3.is_valid_cell(cell_id)

    def get_resolution(self, cell_id: str) -> int:
        return h3.get_resolution(cell_id)


def viewport_polygon(bounds: ViewportBounds) -> list[GeoPoint]:
    corners = [
        bounds.southwest,
        GeoPoint(lat=bounds.north, lng=bounds.west),
        bounds.northeast,
        GeoPoint(lat=bounds.south, lng=bounds.east),
    ]
    return close_ring(corners)


def enumerate_cells(bounds: ViewportBounds, resolution: int, grid: GridIndex) -> list[str]:
    ring = viewport_polygon(bounds)
    cells = grid.polygon_to_cells(ring, resolution)
    logger.debug("Enumerated %d cells at resolution %d", len(cells), resolution)
    return cells
