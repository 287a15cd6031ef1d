from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Largest accepted map element edge in pixels; keeps a viewport's cell count bounded.
MAX_VIEWPORT_PX = 4096


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class ViewportBounds(BaseModel):
    """Axis-aligned lat/lng rectangle given by its southwest and northeast corners."""

    model_config = ConfigDict(frozen=True)

    southwest: GeoPoint
    northeast: GeoPoint

    @property
    def south(self) -> float:
        return self.southwest.lat

    @property
    def west(self) -> float:
        return self.southwest.lng

    @property
    def north(self) -> float:
        return self.northeast.lat

    @property
    def east(self) -> float:
        return self.northeast.lng

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2)

    def contains(self, point: GeoPoint) -> bool:
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east

    def intersect(self, other: ViewportBounds) -> Optional[ViewportBounds]:
        south = max(self.south, other.south)
        west = max(self.west, other.west)
        north = min(self.north, other.north)
        east = min(self.east, other.east)
        if south > north or west > east:
            return None
        return ViewportBounds(
            southwest=GeoPoint(lat=south, lng=west),
            northeast=GeoPoint(lat=north, lng=east),
        )

    def extend(self, point: GeoPoint) -> ViewportBounds:
        return ViewportBounds(
            southwest=GeoPoint(lat=min(self.south, point.lat), lng=min(self.west, point.lng)),
            northeast=GeoPoint(lat=max(self.north, point.lat), lng=max(self.east, point.lng)),
        )


class ViewportSize(BaseModel):
    width: int = Field(ge=1, le=MAX_VIEWPORT_PX)
    height: int = Field(ge=1, le=MAX_VIEWPORT_PX)


class CameraState(BaseModel):
    center: GeoPoint
    zoom: int
    bounds: Optional[ViewportBounds] = None


class CellRecord(BaseModel):
    cell_id: str
    boundary: list[GeoPoint]
    average_edge_length_m: float
    area_m2: float
    selected: bool = False
    show_label: bool = False


class NavigationState(BaseModel):
    search_id: Optional[str] = None
    goto_text: Optional[str] = None
    resolution: Optional[int] = None


class SettleRequest(BaseModel):
    center: GeoPoint
    zoom: int
    bounds: Optional[ViewportBounds] = None
    size: Optional[ViewportSize] = None


class GotoRequest(BaseModel):
    text: str = Field(default="", max_length=200)


class FindRequest(BaseModel):
    cell_id: str = Field(default="", max_length=64)


class SessionState(BaseModel):
    session_id: str
    camera: CameraState
    size: ViewportSize
    navigation: NavigationState
    revision: int


class OverlayResponse(BaseModel):
    session_id: str
    revision: int
    resolution: int
    overlay: dict


class NavigationResponse(BaseModel):
    applied: bool
    camera: CameraState
    navigation: NavigationState
    overlay: Optional[OverlayResponse] = None


class SessionCreateResponse(BaseModel):
    state: SessionState
    overlay: OverlayResponse


class CellInfo(BaseModel):
    cell_id: str
    resolution: int
    boundary: list[GeoPoint]
    average_edge_length_m: float
    area_m2: float
    tooltip: str


class TileLayer(BaseModel):
    url: str
    min_zoom: int
    max_native_zoom: int
    max_zoom: int
    attribution: str


class MapConfigResponse(BaseModel):
    tile_layer: TileLayer
    zoom_to_resolution: dict[int, int]
    label_sample_rate: float


class ErrorPayload(BaseModel):
    message: str
    code: str = "bad_request"

