from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
import uvicorn

from .cells import average_edge_length_m
from .config import ViewerConfig
from .discovery import start_discovery, stop_discovery
from .grid import H3Grid
from .models import (
    CellInfo,
    MAX_VIEWPORT_PX,
    ErrorPayload,
    FindRequest,
    GeoPoint,
    GotoRequest,
    MapConfigResponse,
    NavigationResponse,
    OverlayResponse,
    SessionCreateResponse,
    SessionState,
    SettleRequest,
    ViewportSize,
)
from .navigation import find_cell, go_to_coordinate
from .render import feature_collection, tile_layer, tooltip_html
from .resolution import ZOOM_TO_RESOLUTION
from .state import ConnectionManager, MapSession, RedrawCoalescer, SessionStore
from .utils import close_ring

logger = logging.getLogger(__name__)

config = ViewerConfig.from_environment()
app = FastAPI(title="Hex Grid Viewer", version="0.1.0")
store = SessionStore(min_zoom=config.min_zoom, max_zoom=config.max_zoom)
manager = ConnectionManager()
grid = H3Grid()
_discovery_handle = None


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


@app.on_event("startup")
async def on_startup() -> None:
    global _discovery_handle
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if config.enable_discovery:
        _discovery_handle = start_discovery(config.port)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    global _discovery_handle
    stop_discovery(_discovery_handle)
    _discovery_handle = None


@app.get("/v1/map/config", response_model=MapConfigResponse)
async def map_config() -> MapConfigResponse:
    return MapConfigResponse(
        tile_layer=tile_layer(config),
        zoom_to_resolution=dict(ZOOM_TO_RESOLUTION),
        label_sample_rate=config.label_sample_rate,
    )


@app.post("/v1/sessions", response_model=SessionCreateResponse)
async def create_session(
    lat: float = 0.0,
    lng: float = 0.0,
    zoom: int = 5,
    h3: Optional[str] = Query(default=None, max_length=64),
    width: Optional[int] = Query(default=None, ge=1, le=MAX_VIEWPORT_PX),
    height: Optional[int] = Query(default=None, ge=1, le=MAX_VIEWPORT_PX),
) -> SessionCreateResponse:
    size = ViewportSize(width=width or config.default_width, height=height or config.default_height)
    session = await store.create_session(GeoPoint(lat=lat, lng=lng), zoom, size)
    if h3:
        session.navigation.search_id = h3
    await _redraw(session.id)

    if h3:
        result = await _navigate(session.id, lambda s: find_cell(s, h3, grid))
        if result is not None and result.applied:
            logger.info("Located cell %s for new session %s", h3, session.id)

    session = await store.get_session(session.id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionCreateResponse(state=session.to_state(), overlay=_overlay_response(session))


@app.get("/v1/sessions/{session_id}", response_model=SessionState)
async def session_state(session_id: str) -> SessionState:
    session = await store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session.to_state()


@app.delete("/v1/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    session = await store.remove_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"ok": True}


@app.post("/v1/sessions/{session_id}/settle", response_model=OverlayResponse)
async def settle(session_id: str, payload: SettleRequest) -> OverlayResponse:
    session = await store.settle(session_id, payload)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    session = await _redraw(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return _overlay_response(session)


@app.post("/v1/sessions/{session_id}/goto", response_model=NavigationResponse)
async def goto(session_id: str, payload: GotoRequest) -> NavigationResponse:
    result = await _navigate(session_id, lambda s: go_to_coordinate(s, payload.text, config.goto_zoom))
    if result is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return result


@app.post("/v1/sessions/{session_id}/find", response_model=NavigationResponse)
async def find(session_id: str, payload: FindRequest) -> NavigationResponse:
    result = await _navigate(session_id, lambda s: find_cell(s, payload.cell_id, grid))
    if result is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return result


@app.get("/v1/cells/{cell_id}", response_model=CellInfo)
async def cell_info(cell_id: str) -> CellInfo:
    if not grid.is_valid_cell(cell_id):
        raise HTTPException(status_code=404, detail="Cell not found")
    vertices = grid.cell_to_boundary(cell_id)
    edge_m = average_edge_length_m(vertices)
    area_m2 = grid.cell_area(cell_id, unit="m^2")
    return CellInfo(
        cell_id=cell_id,
        resolution=grid.get_resolution(cell_id),
        boundary=close_ring(vertices),
        average_edge_length_m=edge_m,
        area_m2=area_m2,
        tooltip=tooltip_html(cell_id, edge_m, area_m2),
    )


@app.websocket("/v1/ws/{session_id}")
async def websocket_endpoint(websocket: WebSocket, session_id: str) -> None:
    await websocket.accept()
    session = await store.get_session(session_id)
    if session is None:
        await websocket.send_json({"type": "error", "payload": ErrorPayload(message="session_not_found").model_dump()})
        await websocket.close(code=1008)
        return

    await manager.connect(session_id, websocket)
    await websocket.send_json({"type": "state", "payload": session.to_state().model_dump(mode="json")})

    async def rebuild(request: SettleRequest) -> None:
        if await store.settle(session_id, request) is None:
            return
        try:
            await _redraw(session_id)
        except Exception:
            logger.exception("Redraw failed for session %s", session_id)
            await websocket.send_json(
                {"type": "error", "payload": ErrorPayload(message="redraw_failed", code="server_error").model_dump()}
            )

    coalescer = RedrawCoalescer(rebuild)
    redraw_task = asyncio.create_task(coalescer.run())

    try:
        while True:
            data = await websocket.receive_json()
            msg_type = data.get("type")
            payload = data.get("payload", {})

            try:
                if msg_type == "settle":
                    coalescer.submit(SettleRequest.model_validate(payload))

                elif msg_type == "goto":
                    goto_request = GotoRequest.model_validate(payload)
                    await _navigate(session_id, lambda s: go_to_coordinate(s, goto_request.text, config.goto_zoom))

                elif msg_type == "find":
                    find_request = FindRequest.model_validate(payload)
                    await _navigate(session_id, lambda s: find_cell(s, find_request.cell_id, grid))

                elif msg_type == "ping":
                    await websocket.send_json(
                        {"type": "pong", "payload": {"ts": datetime.now(timezone.utc).isoformat()}}
                    )

                else:
                    await websocket.send_json(
                        {"type": "error", "payload": ErrorPayload(message="unknown_message_type").model_dump()}
                    )
            except ValidationError:
                await websocket.send_json(
                    {"type": "error", "payload": ErrorPayload(message="invalid_payload").model_dump()}
                )

    except WebSocketDisconnect:
        logger.debug("Session %s socket disconnected", session_id)
    finally:
        await manager.disconnect(session_id, websocket)
        coalescer.close()
        await redraw_task


async def _redraw(session_id: str) -> Optional[MapSession]:
    session = await store.rebuild_overlay(session_id, grid, config.label_sample_rate)
    if session is not None:
        await manager.broadcast(
            session_id,
            {"type": "overlay", "payload": _overlay_response(session).model_dump(mode="json")},
        )
    return session


async def _navigate(session_id: str, action: Callable[[MapSession], bool]) -> Optional[NavigationResponse]:
    result = await store.navigate(session_id, action)
    if result is None:
        return None
    session, applied = result

    overlay = None
    if applied:
        await manager.broadcast(session_id, {"type": "camera", "payload": session.camera.model_dump(mode="json")})
        redrawn = await _redraw(session_id)
        if redrawn is not None:
            session = redrawn
            overlay = _overlay_response(session)

    return NavigationResponse(
        applied=applied,
        camera=session.camera,
        navigation=session.navigation.model_copy(),
        overlay=overlay,
    )


def _overlay_response(session: MapSession) -> OverlayResponse:
    return OverlayResponse(
        session_id=session.id,
        revision=session.revision,
        resolution=session.navigation.resolution if session.navigation.resolution is not None else session.resolution,
        overlay=feature_collection(session.overlay),
    )


def run() -> None:
    uvicorn.run("hexview.main:app", host="0.0.0.0", port=config.port)
