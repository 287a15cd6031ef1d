"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from hexview.config import ViewerConfig, parse_bool


class TestViewerConfig:
    """Test ViewerConfig."""

    def test_defaults(self):
        config = ViewerConfig()
        assert config.goto_zoom == 16
        assert config.label_sample_rate == 0.2
        assert config.min_zoom == 5
        assert config.max_zoom == 24

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9100")
        monkeypatch.setenv("HEXVIEW_LABEL_SAMPLE_RATE", "0.5")
        monkeypatch.setenv("HEXVIEW_DISCOVERY", "off")
        monkeypatch.setenv("HEXVIEW_GOTO_ZOOM", "14")

        config = ViewerConfig.from_environment()

        assert config.port == 9100
        assert config.label_sample_rate == 0.5
        assert config.enable_discovery is False
        assert config.goto_zoom == 14

    def test_rejects_out_of_range_rate(self, monkeypatch):
        monkeypatch.setenv("HEXVIEW_LABEL_SAMPLE_RATE", "1.5")
        with pytest.raises(ValidationError):
            ViewerConfig.from_environment()

    @pytest.mark.parametrize(
        "value,default,expected",
        [(None, True, True), ("", False, False), ("yes", False, True), ("0", True, False)],
    )
    def test_parse_bool(self, value, default, expected):
        assert parse_bool(value, default) is expected
