"""Shared fixtures for the viewer tests."""

import os

# main.py reads its config at import time; never advertise on the test network
os.environ.setdefault("HEXVIEW_DISCOVERY", "false")

import h3
import pytest

from hexview.grid import H3Grid
from hexview.models import CameraState, GeoPoint, ViewportSize
from hexview.state import MapSession

SAN_FRANCISCO = GeoPoint(lat=37.7749, lng=-122.4194)


class FakeGrid:
    """GridIndex with hand-written cells, for exact arithmetic."""

    def __init__(self, boundaries, resolution=9, cover=None):
        self.boundaries = boundaries
        self.resolution = resolution
        self.cover = list(boundaries) if cover is None else cover
        self.polygons = []

    def polygon_to_cells(self, ring, resolution):
        self.polygons.append((list(ring), resolution))
        return list(self.cover)

    def cell_to_boundary(self, cell_id):
        return list(self.boundaries[cell_id])

    def cell_area(self, cell_id, unit="m^2"):
        return 1000.0

    def is_valid_cell(self, cell_id):
        return cell_id in self.boundaries

    def get_resolution(self, cell_id):
        return self.resolution


@pytest.fixture
def grid():
    return H3Grid()


@pytest.fixture
def sf_cell():
    """A resolution 9 cell in San Francisco."""
    return h3.latlng_to_cell(SAN_FRANCISCO.lat, SAN_FRANCISCO.lng, 9)


@pytest.fixture
def session():
    return MapSession(
        id="test-session",
        camera=CameraState(center=GeoPoint(lat=0.0, lng=0.0), zoom=5),
        size=ViewportSize(width=1024, height=768),
    )


@pytest.fixture
def fake_grid():
    return FakeGrid
