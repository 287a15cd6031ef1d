from __future__ import annotations

from typing import Iterable, Sequence

from .config import ViewerConfig
from .models import CellRecord, GeoPoint, TileLayer
from .utils import ring_bounds

SELECTED_STYLE = {"fillColor": "orange"}


def format_number(value: float) -> str:
    text = f"{value:,.3f}"
    return text.rstrip("0").rstrip(".")


def tooltip_html(cell_id: str, average_edge_length_m: float, area_m2: float) -> str:
    return (
        f"Cell ID: <b>{cell_id}</b>"
        "<br />"
        f"Average edge length (m): <b>{format_number(average_edge_length_m)}</b>"
        "<br />"
        f"Cell area (m^2): <b>{format_number(area_m2)}</b>"
    )


def _lng_lat(ring: Sequence[GeoPoint]) -> list[list[float]]:
    return [[point.lng, point.lat] for point in ring]


def cell_feature(record: CellRecord) -> dict:
    bounds = ring_bounds(record.boundary)
    label_bounds = None
    if record.show_label and bounds is not None:
        label_bounds = [[bounds.south, bounds.west], [bounds.north, bounds.east]]
    return {
        "type": "Feature",
        "id": record.cell_id,
        "geometry": {"type": "Polygon", "coordinates": [_lng_lat(record.boundary)]},
        "properties": {
            "cell_id": record.cell_id,
            "selected": record.selected,
            "style": dict(SELECTED_STYLE) if record.selected else {},
            "tooltip": tooltip_html(record.cell_id, record.average_edge_length_m, record.area_m2),
            "average_edge_length_m": record.average_edge_length_m,
            "area_m2": record.area_m2,
            "show_label": record.show_label,
            "label_bounds": label_bounds,
            "copy_text": record.cell_id,
        },
    }


def feature_collection(records: Iterable[CellRecord]) -> dict:
    return {"type": "FeatureCollection", "features": [cell_feature(record) for record in records]}


def tile_layer(config: ViewerConfig) -> TileLayer:
    return TileLayer(
        url=config.tile_url,
        min_zoom=config.min_zoom,
        max_native_zoom=config.max_native_zoom,
        max_zoom=config.max_zoom,
        attribution=config.tile_attribution,
    )
