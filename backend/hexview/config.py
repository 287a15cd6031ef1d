"""
Viewer configuration.

Every setting has a default suitable for local use and can be overridden
through a ``HEXVIEW_*`` environment variable (``PORT`` for the listening
port, as the deployment tooling expects).

Example:
    HEXVIEW_LABEL_SAMPLE_RATE=0.5 HEXVIEW_DISCOVERY=false uvicorn hexview.main:app
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

from .models import MAX_VIEWPORT_PX

OSM_TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = '&copy; <a href="https://openstreetmap.org/copyright">OpenStreetMap contributors</a>'

_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


class ViewerConfig(BaseModel):
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO", description="Root logging level name.")
    enable_discovery: bool = Field(
        default=True,
        description="Advertise the service over zeroconf on startup.",
    )

    tile_url: str = Field(default=OSM_TILE_URL)
    tile_attribution: str = Field(default=OSM_ATTRIBUTION)
    min_zoom: int = Field(default=5, ge=0, le=24)
    max_native_zoom: int = Field(default=19, ge=0, le=24)
    max_zoom: int = Field(default=24, ge=0, le=24)

    goto_zoom: int = Field(
        default=16,
        ge=0,
        le=24,
        description="Zoom used when jumping to a typed coordinate (street level).",
    )
    label_sample_rate: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description=(
            "Probability that a non-selected cell gets an identifier label on a redraw. "
            "The selected cell is always labelled."
        ),
    )
    default_width: int = Field(default=1024, ge=1, le=MAX_VIEWPORT_PX)
    default_height: int = Field(default=768, ge=1, le=MAX_VIEWPORT_PX)

    @classmethod
    def from_environment(cls) -> "ViewerConfig":
        defaults = cls()
        env = os.environ
        return cls(
            port=int(env.get("PORT", defaults.port)),
            log_level=env.get("HEXVIEW_LOG_LEVEL", defaults.log_level),
            enable_discovery=parse_bool(env.get("HEXVIEW_DISCOVERY"), defaults.enable_discovery),
            tile_url=env.get("HEXVIEW_TILE_URL", defaults.tile_url),
            tile_attribution=env.get("HEXVIEW_TILE_ATTRIBUTION", defaults.tile_attribution),
            min_zoom=int(env.get("HEXVIEW_MIN_ZOOM", defaults.min_zoom)),
            max_native_zoom=int(env.get("HEXVIEW_MAX_NATIVE_ZOOM", defaults.max_native_zoom)),
            max_zoom=int(env.get("HEXVIEW_MAX_ZOOM", defaults.max_zoom)),
            goto_zoom=int(env.get("HEXVIEW_GOTO_ZOOM", defaults.goto_zoom)),
            label_sample_rate=float(env.get("HEXVIEW_LABEL_SAMPLE_RATE", defaults.label_sample_rate)),
            default_width=int(env.get("HEXVIEW_DEFAULT_WIDTH", defaults.default_width)),
            default_height=int(env.get("HEXVIEW_DEFAULT_HEIGHT", defaults.default_height)),
        )
