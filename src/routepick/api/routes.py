"""
API routes.

The browser map client drives one session per open map view:
- POST   `/api/sessions`                          create a session (permission query, no prompt)
- GET    `/api/sessions/{id}`                     current panel
- POST   `/api/sessions/{id}/clicks`              map click
- POST   `/api/sessions/{id}/current-location`    GPS origin capture (browser-reported)
- POST   `/api/sessions/{id}/permission`          permission change event
- POST   `/api/sessions/{id}/reset`               clear selections and route
- POST   `/api/sessions/{id}/route`               compute and draw the route
- DELETE `/api/sessions/{id}`                     drop the session
- GET    `/api/map-config`                        tile layer + default viewport
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from routepick.config.settings import get_settings
from routepick.domain.models import Coordinate, PermissionStatus
from routepick.ingestion.geocoding_client import GeocodingClient
from routepick.ingestion.routing_client import RoutingClient
from routepick.session.controller import SelectionController
from routepick.session.factory import open_session
from routepick.session.geolocation import ReportedGeolocation
from routepick.session.presentation import PanelView, build_panel

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class SessionHandle:
    controller: SelectionController
    geolocation: ReportedGeolocation


class SessionRegistry:
    """In-memory map sessions keyed by id; nothing survives a restart.

    Sessions idle for longer than `ttl_seconds` are dropped, and past `max_sessions`
    the least recently used ones go first. Both checks run on every add and lookup.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float,
        max_sessions: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[SessionHandle, float]] = OrderedDict()

    def _evict(self, now: float) -> None:
        expired = [sid for sid, (_, touched) in self._sessions.items() if now - touched > self._ttl_seconds]
        for sid in expired:
            del self._sessions[sid]
        while len(self._sessions) > self._max_sessions:
            sid, _ = self._sessions.popitem(last=False)
            expired.append(sid)
        if expired:
            logger.info("Dropped %d idle map session(s)", len(expired))

    def add(self, handle: SessionHandle) -> str:
        now = self._clock()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = (handle, now)
        self._evict(now)
        return session_id

    def get(self, session_id: str) -> SessionHandle:
        now = self._clock()
        self._evict(now)
        entry = self._sessions.get(session_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        self._sessions[session_id] = (entry[0], now)
        self._sessions.move_to_end(session_id)
        return entry[0]

    def remove(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)


class CreateSessionRequest(BaseModel):
    permission: PermissionStatus = PermissionStatus.UNKNOWN


class SessionResponse(BaseModel):
    session_id: str
    panel: PanelView


class CurrentLocationRequest(BaseModel):
    """What the browser observed when the user pressed "use my location"."""

    confirmed: bool = False
    position: Coordinate | None = None
    error: Literal["permission_denied", "position_unavailable", "timeout"] | None = None
    permission: PermissionStatus | None = None


class PermissionChangeRequest(BaseModel):
    status: PermissionStatus


@lru_cache
def _clients() -> tuple[GeocodingClient, RoutingClient]:
    settings = get_settings()
    return GeocodingClient(settings), RoutingClient(settings)


@lru_cache
def _registry() -> SessionRegistry:
    cfg = get_settings().api
    return SessionRegistry(ttl_seconds=cfg.session_ttl_seconds, max_sessions=cfg.max_sessions)


def _panel(handle: SessionHandle) -> PanelView:
    return build_panel(handle.controller.state, get_settings().delivery)


@router.get("/api/map-config")
def get_map_config() -> dict:
    """Return the tile layer and default viewport for the map renderer."""
    cfg = get_settings().map
    return {
        "tile_layer": cfg.tile_layer.model_dump(mode="json"),
        "default_center": list(cfg.default_center),
        "default_zoom": cfg.default_zoom,
    }


@router.post("/api/sessions", response_model=SessionResponse)
async def create_session(body: CreateSessionRequest | None = None) -> SessionResponse:
    body = body or CreateSessionRequest()
    geocoder, routing = _clients()
    geolocation = ReportedGeolocation(permission=body.permission)
    controller = await open_session(
        get_settings(), geolocation=geolocation, geocoder=geocoder, router=routing
    )
    handle = SessionHandle(controller=controller, geolocation=geolocation)
    session_id = _registry().add(handle)
    logger.info("Opened map session %s (permission=%s)", session_id, body.permission.value)
    return SessionResponse(session_id=session_id, panel=_panel(handle))


@router.get("/api/sessions/{session_id}", response_model=PanelView)
def get_session(session_id: str) -> PanelView:
    return _panel(_registry().get(session_id))


@router.delete("/api/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> None:
    _registry().remove(session_id)


@router.post("/api/sessions/{session_id}/clicks", response_model=PanelView)
async def post_click(session_id: str, coord: Coordinate) -> PanelView:
    handle = _registry().get(session_id)
    await handle.controller.on_map_click(coord)
    return _panel(handle)


@router.post("/api/sessions/{session_id}/current-location", response_model=PanelView)
async def post_current_location(session_id: str, body: CurrentLocationRequest) -> PanelView:
    handle = _registry().get(session_id)
    if body.permission is not None:
        handle.controller.state.permission.on_permission_change(body.permission)
    handle.geolocation.report(position=body.position, error=body.error, permission=body.permission)

    async def confirm() -> bool:
        return body.confirmed

    await handle.controller.on_use_current_location(confirm)
    return _panel(handle)


@router.post("/api/sessions/{session_id}/permission", response_model=PanelView)
def post_permission(session_id: str, body: PermissionChangeRequest) -> PanelView:
    handle = _registry().get(session_id)
    handle.controller.state.permission.on_permission_change(body.status)
    return _panel(handle)


@router.post("/api/sessions/{session_id}/reset", response_model=PanelView)
def post_reset(session_id: str) -> PanelView:
    handle = _registry().get(session_id)
    handle.controller.reset()
    return _panel(handle)


@router.post("/api/sessions/{session_id}/route", response_model=PanelView)
async def post_route(session_id: str) -> PanelView:
    handle = _registry().get(session_id)
    await handle.controller.request_route()
    return _panel(handle)
