from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from .grid import GridIndex, enumerate_cells
from .models import CellRecord, GeoPoint, ViewportBounds
from .utils import close_ring, distance_m

logger = logging.getLogger(__name__)

# Share of non-selected cells that get an identifier label on each redraw.
# Labels are SVG overlays and rendering one per cell makes dense zooms sluggish.
DEFAULT_LABEL_SAMPLE_RATE = 0.2


def average_edge_length_m(vertices: Sequence[GeoPoint]) -> float:
    """Mean distance between consecutive vertices of an open boundary chain.

    The closing edge (last vertex back to the first) is not counted.
    """
    total = 0.0
    edges = 0
    for i in range(1, len(vertices)):
        total += distance_m(vertices[i - 1], vertices[i])
        edges += 1
    if edges == 0:
        return 0.0
    return total / edges


def derive_cell_record(
    cell_id: str,
    grid: GridIndex,
    search_id: Optional[str] = None,
    label_rate: float = DEFAULT_LABEL_SAMPLE_RATE,
    rng: Optional[random.Random] = None,
) -> CellRecord:
    rng = rng or random
    vertices = grid.cell_to_boundary(cell_id)
    selected = cell_id == search_id
    return CellRecord(
        cell_id=cell_id,
        boundary=close_ring(vertices),
        average_edge_length_m=average_edge_length_m(vertices),
        area_m2=grid.cell_area(cell_id, unit="m^2"),
        selected=selected,
        show_label=selected or rng.random() < label_rate,
    )


def build_overlay(
    bounds: ViewportBounds,
    resolution: int,
    search_id: Optional[str],
    grid: GridIndex,
    label_rate: float = DEFAULT_LABEL_SAMPLE_RATE,
    rng: Optional[random.Random] = None,
) -> list[CellRecord]:
    cell_ids = enumerate_cells(bounds, resolution, grid)
    records = [derive_cell_record(cell_id, grid, search_id, label_rate, rng) for cell_id in cell_ids]
    logger.debug(
        "Built overlay of %d cells (%d labelled) at resolution %d",
        len(records),
        sum(1 for record in records if record.show_label),
        resolution,
    )
    return records
