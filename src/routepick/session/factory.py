"""Wiring helpers: build a ready-to-use session from settings."""

from __future__ import annotations

from routepick.config.settings import Settings
from routepick.session.controller import AddressResolver, RouteProvider, SelectionController
from routepick.session.geolocation import Geolocation
from routepick.session.map_surface import InMemoryMapSurface
from routepick.session.permission import PermissionGate
from routepick.session.state import MapSessionState


async def open_session(
    settings: Settings,
    *,
    geolocation: Geolocation,
    geocoder: AddressResolver,
    router: RouteProvider,
) -> SelectionController:
    """Create a map session and query the GPS permission status once (no prompt)."""
    gate = PermissionGate(geolocation)
    await gate.mount()
    state = MapSessionState(surface=InMemoryMapSurface(settings.map), permission=gate)
    return SelectionController(state, geocoder=geocoder, router=router)
