"""Tests for viewport polygons and cell enumeration."""

import h3

from hexview.grid import enumerate_cells, viewport_polygon
from hexview.models import GeoPoint, ViewportBounds, ViewportSize
from hexview.projection import viewport_bounds

from conftest import SAN_FRANCISCO

BOUNDS = ViewportBounds(
    southwest=GeoPoint(lat=37.76, lng=-122.44),
    northeast=GeoPoint(lat=37.79, lng=-122.40),
)


class TestViewportPolygon:
    """Test viewport_polygon."""

    def test_closed_with_five_points(self):
        ring = viewport_polygon(BOUNDS)
        assert len(ring) == 5
        assert ring[0] == ring[-1]

    def test_winding_order(self):
        ring = viewport_polygon(BOUNDS)
        assert ring[0] == GeoPoint(lat=37.76, lng=-122.44)
        assert ring[1] == GeoPoint(lat=37.79, lng=-122.44)
        assert ring[2] == GeoPoint(lat=37.79, lng=-122.40)
        assert ring[3] == GeoPoint(lat=37.76, lng=-122.40)


class TestEnumerateCells:
    """Test enumerate_cells against h3."""

    def test_cells_at_requested_resolution(self, grid):
        cells = enumerate_cells(BOUNDS, 8, grid)

        assert len(cells) > 0
        assert len(set(cells)) == len(cells)
        for cell in cells:
            assert h3.is_valid_cell(cell)
            assert h3.get_resolution(cell) == 8

    def test_cell_centers_inside_viewport(self, grid):
        for cell in enumerate_cells(BOUNDS, 8, grid):
            lat, lng = h3.cell_to_latlng(cell)
            assert BOUNDS.contains(GeoPoint(lat=lat, lng=lng))

    def test_deterministic(self, grid):
        first = enumerate_cells(BOUNDS, 9, grid)
        second = enumerate_cells(BOUNDS, 9, grid)
        assert set(first) == set(second)

    def test_finer_resolution_has_more_cells(self, grid):
        assert len(enumerate_cells(BOUNDS, 9, grid)) > len(enumerate_cells(BOUNDS, 7, grid))

    def test_includes_cell_under_viewport_center(self, grid):
        bounds = viewport_bounds(SAN_FRANCISCO, 15, ViewportSize(width=1024, height=768))
        cells = enumerate_cells(bounds, 9, grid)
        assert h3.latlng_to_cell(SAN_FRANCISCO.lat, SAN_FRANCISCO.lng, 9) in cells

    def test_passes_closed_ring_to_grid(self, fake_grid):
        fake = fake_grid({"a": []}, cover=["a"])
        assert enumerate_cells(BOUNDS, 4, fake) == ["a"]

        ring, resolution = fake.polygons[0]
        assert resolution == 4
        assert ring[0] == ring[-1]
        assert len(ring) == 5
