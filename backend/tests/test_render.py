"""Tests for the GeoJSON rendering adapter."""

from hexview.config import ViewerConfig
from hexview.models import CellRecord, GeoPoint
from hexview.render import cell_feature, feature_collection, format_number, tile_layer, tooltip_html
from hexview.utils import close_ring

RING = close_ring(
    [
        GeoPoint(lat=0.0, lng=0.0),
        GeoPoint(lat=0.0, lng=1.0),
        GeoPoint(lat=1.0, lng=1.0),
    ]
)


def _record(selected=False, show_label=False):
    return CellRecord(
        cell_id="89283082803ffff",
        boundary=RING,
        average_edge_length_m=201.5,
        area_m2=105332.51312,
        selected=selected,
        show_label=show_label,
    )


class TestFormatting:
    """Test number and tooltip formatting."""

    def test_format_number(self):
        assert format_number(1234567.891234) == "1,234,567.891"
        assert format_number(1000.0) == "1,000"
        assert format_number(12.5) == "12.5"
        assert format_number(0.0) == "0"

    def test_tooltip(self):
        text = tooltip_html("abc", 201.5, 105332.51312)
        assert "Cell ID: <b>abc</b>" in text
        assert "Average edge length (m): <b>201.5</b>" in text
        assert "Cell area (m^2): <b>105,332.513</b>" in text


class TestFeatures:
    """Test cell_feature and feature_collection."""

    def test_geometry_is_lng_lat(self):
        feature = cell_feature(_record())
        ring = feature["geometry"]["coordinates"][0]
        assert ring[1] == [1.0, 0.0]
        assert ring[0] == ring[-1]

    def test_unselected_plain(self):
        properties = cell_feature(_record())["properties"]
        assert properties["style"] == {}
        assert properties["label_bounds"] is None
        assert properties["copy_text"] == "89283082803ffff"

    def test_selected_styled_and_labelled(self):
        properties = cell_feature(_record(selected=True, show_label=True))["properties"]
        assert properties["style"] == {"fillColor": "orange"}
        assert properties["show_label"] is True
        assert properties["label_bounds"] == [[0.0, 0.0], [1.0, 1.0]]

    def test_collection(self):
        collection = feature_collection([_record(), _record(selected=True)])
        assert collection["type"] == "FeatureCollection"
        assert len(collection["features"]) == 2

    def test_tile_layer(self):
        layer = tile_layer(ViewerConfig())
        assert layer.min_zoom == 5
        assert layer.max_native_zoom == 19
        assert layer.max_zoom == 24
        assert "openstreetmap" in layer.url
