from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from fastapi import WebSocket

from .cells import DEFAULT_LABEL_SAMPLE_RATE, build_overlay
from .grid import GridIndex
from .models import (
    CameraState,
    CellRecord,
    GeoPoint,
    NavigationState,
    SessionState,
    SettleRequest,
    ViewportBounds,
    ViewportSize,
)
from .projection import clamp_zoom, fit_bounds, viewport_bounds
from .resolution import resolution_for_zoom

logger = logging.getLogger(__name__)

MIN_ZOOM = 5
MAX_ZOOM = 24
# Client-reported bounds may exceed the projected viewport by this fraction per side.
BOUNDS_MARGIN = 0.1


@dataclass
class MapSession:
    """Camera, selection and current overlay of one map view."""

    id: str
    camera: CameraState
    size: ViewportSize
    min_zoom: int = MIN_ZOOM
    max_zoom: int = MAX_ZOOM
    navigation: NavigationState = field(default_factory=NavigationState)
    overlay: List[CellRecord] = field(default_factory=list)
    revision: int = 0

    @property
    def resolution(self) -> int:
        return resolution_for_zoom(self.camera.zoom)

    def visible_bounds(self) -> ViewportBounds:
        if self.camera.bounds is not None:
            return self.camera.bounds
        return viewport_bounds(self.camera.center, self.camera.zoom, self.size)

    def set_view(self, center: GeoPoint, zoom: int) -> None:
        self.camera = CameraState(center=center, zoom=clamp_zoom(zoom, self.min_zoom, self.max_zoom))

    def set_zoom(self, zoom: int) -> None:
        self.set_view(self.camera.center, zoom)

    def fit_bounds(self, bounds: ViewportBounds) -> None:
        center, zoom = fit_bounds(bounds, self.size, self.min_zoom, self.max_zoom)
        self.set_view(center, zoom)

    def settle(self, request: SettleRequest) -> None:
        if request.size is not None:
            self.size = request.size
        zoom = clamp_zoom(request.zoom, self.min_zoom, self.max_zoom)
        bounds = None
        if request.bounds is not None:
            # resolution follows zoom, so the area is capped to what that zoom can show
            limit = viewport_bounds(request.center, zoom, self.size, margin=BOUNDS_MARGIN)
            bounds = request.bounds.intersect(limit)
            if bounds != request.bounds:
                logger.debug("Clipped reported bounds for session %s to the zoom %d viewport", self.id, zoom)
        self.camera = CameraState(center=request.center, zoom=zoom, bounds=bounds)

    def replace_overlay(self, records: List[CellRecord], resolution: int) -> None:
        self.overlay = records
        self.navigation.resolution = resolution
        self.revision += 1

    def to_state(self) -> SessionState:
        return SessionState(
            session_id=self.id,
            camera=self.camera,
            size=self.size,
            navigation=self.navigation.model_copy(),
            revision=self.revision,
        )


class SessionStore:
    def __init__(self, min_zoom: int = MIN_ZOOM, max_zoom: int = MAX_ZOOM) -> None:
        self._sessions: Dict[str, MapSession] = {}
        self._lock = asyncio.Lock()
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom

    async def create_session(self, center: GeoPoint, zoom: int, size: ViewportSize) -> MapSession:
        async with self._lock:
            session = MapSession(
                id=uuid4().hex,
                camera=CameraState(center=center, zoom=clamp_zoom(zoom, self.min_zoom, self.max_zoom)),
                size=size,
                min_zoom=self.min_zoom,
                max_zoom=self.max_zoom,
            )
            self._sessions[session.id] = session
            return session

    async def get_session(self, session_id: str) -> Optional[MapSession]:
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove_session(self, session_id: str) -> Optional[MapSession]:
        async with self._lock:
            return self._sessions.pop(session_id, None)

    async def settle(self, session_id: str, request: SettleRequest) -> Optional[MapSession]:
        async with self._lock:
            session = self._sessions.get(session_id)
            if not session:
                return None
            session.settle(request)
            return session

    async def navigate(self, session_id: str, action: Callable[[MapSession], bool]) -> Optional[tuple[MapSession, bool]]:
        async with self._lock:
            session = self._sessions.get(session_id)
            if not session:
                return None
            return session, action(session)

    async def rebuild_overlay(
        self,
        session_id: str,
        grid: GridIndex,
        label_rate: float = DEFAULT_LABEL_SAMPLE_RATE,
        rng: Optional[random.Random] = None,
    ) -> Optional[MapSession]:
        async with self._lock:
            session = self._sessions.get(session_id)
            if not session:
                return None
            resolution = session.resolution
            records = build_overlay(
                session.visible_bounds(),
                resolution,
                session.navigation.search_id,
                grid,
                label_rate,
                rng,
            )
            session.replace_overlay(records, resolution)
            return session


class RedrawCoalescer:
    """Run overlay rebuilds for camera settles, keeping only the latest pending one.

    Settles submitted while a rebuild is running, or before the loop gets to
    run, collapse into a single rebuild for the most recent camera.
    """

    def __init__(self, rebuild: Callable[[SettleRequest], Awaitable[None]]) -> None:
        self._rebuild = rebuild
        self._pending: Optional[SettleRequest] = None
        self._wake = asyncio.Event()
        self._closed = False
        self.rebuilds = 0

    def submit(self, request: SettleRequest) -> None:
        self._pending = request
        self._wake.set()

    def close(self) -> None:
        self._closed = True
        self._wake.set()

    async def run(self) -> None:
        while True:
            await self._wake.wait()
            self._wake.clear()
            request, self._pending = self._pending, None
            if request is not None:
                try:
                    await self._rebuild(request)
                except Exception:
                    logger.exception("Overlay rebuild failed; waiting for the next settle")
                else:
                    self.rebuilds += 1
            if self._closed and self._pending is None:
                return


class ConnectionManager:
    def __init__(self) -> None:
        self._connections: Dict[str, List[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, session_id: str, socket: WebSocket) -> None:
        async with self._lock:
            self._connections.setdefault(session_id, []).append(socket)

    async def disconnect(self, session_id: str, socket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(session_id)
            if not sockets:
                return
            if socket in sockets:
                sockets.remove(socket)
            if not sockets:
                self._connections.pop(session_id, None)

    async def broadcast(self, session_id: str, message: dict) -> None:
        async with self._lock:
            sockets = list(self._connections.get(session_id, []))
        for socket in sockets:
            try:
                await socket.send_json(message)
            except Exception:
                logger.debug("Dropping message to closed socket for session %s", session_id)
