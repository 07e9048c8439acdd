"""
Selection controller.

Drives the two-step pickup/drop-off selection on the map:
- 1st click -> origin (`origin_set`)
- 2nd click -> destination (`both_set`)
- 3rd click -> start over: clear everything, the same click becomes the new origin

GPS capture always restarts the cycle with a fresh origin. Route computation is an
explicit request once both points exist.

Ordering:
Every click, reset and applied GPS position bumps `state.generation`. A geocoding result is applied only while
its selection is still the one created under the same generation; a route or GPS
result only while no newer action happened. Stale results are dropped on arrival,
in-flight requests are not cancelled.
"""

from __future__ import annotations

import logging
from typing import Protocol

from routepick.domain.models import (
    AddressSelection,
    Coordinate,
    Notice,
    NoticeKind,
    Role,
    Route,
    RouteNotFound,
    RouteResult,
    SelectionState,
)
from routepick.ingestion.routing_client import RoutingServiceError
from routepick.session.geolocation import GeolocationError
from routepick.session.permission import ConfirmDialog
from routepick.session.state import MapSessionState

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND_MESSAGE = "Aucun itinéraire trouvé entre ces deux adresses."
ROUTING_ERROR_MESSAGE = "Le service d'itinéraire est indisponible. Réessayez plus tard."


class AddressResolver(Protocol):
    def fallback(self, coord: Coordinate) -> str: ...

    async def resolve_address(self, coord: Coordinate) -> str: ...


class RouteProvider(Protocol):
    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RouteResult: ...


class SelectionController:
    def __init__(self, state: MapSessionState, *, geocoder: AddressResolver, router: RouteProvider):
        self.state = state
        self._geocoder = geocoder
        self._router = router

    # ----------------
    # Internal transitions
    # ----------------
    def _begin_action(self) -> int:
        self.state.generation += 1
        self.state.notice = None
        return self.state.generation

    def _is_current(self, generation: int) -> bool:
        return self.state.generation == generation

    def _clear_route(self) -> None:
        self.state.route_result = None
        self.state.surface.clear_route()

    def _clear_selections(self) -> None:
        self.state.selections.clear()
        self.state.selection_tokens.clear()
        self.state.surface.clear_markers()
        self._clear_route()

    def _place(self, role: Role, coord: Coordinate, generation: int) -> None:
        """Record a selection right away, labelled with coordinates until the address resolves."""
        label = self._geocoder.fallback(coord)
        self.state.selections[role] = AddressSelection(role=role, coordinate=coord, display_address=label)
        self.state.selection_tokens[role] = generation
        self.state.surface.add_marker(role, coord, label)
        self._clear_route()

    async def _resolve(self, role: Role, coord: Coordinate, generation: int) -> None:
        address = await self._geocoder.resolve_address(coord)
        if self.state.selection_tokens.get(role) != generation:
            logger.debug("Discarding stale address for %s (generation %s)", role.value, generation)
            return
        self.state.selections[role] = AddressSelection(role=role, coordinate=coord, display_address=address)
        self.state.surface.add_marker(role, coord, address)

    async def _select(self, role: Role, coord: Coordinate, generation: int) -> None:
        self._place(role, coord, generation)
        await self._resolve(role, coord, generation)

    # ----------------
    # User actions
    # ----------------
    async def on_map_click(self, coord: Coordinate) -> SelectionState:
        """Advance the selection cycle with a clicked coordinate."""
        generation = self._begin_action()
        current = self.state.selection_state

        if current is SelectionState.BOTH_SET:
            self._clear_selections()
            current = SelectionState.EMPTY

        role = Role.ORIGIN if current is SelectionState.EMPTY else Role.DESTINATION
        await self._select(role, coord, generation)
        return self.state.selection_state

    async def on_use_current_location(self, confirm: ConfirmDialog) -> SelectionState:
        """Use the device position as a fresh origin (drops any destination and route).

        On capture failure a notice is recorded and selections are left as they were,
        so the user can still pick the address on the map. Declining the dialog or a
        failed capture leaves the generation alone, so in-flight requests still land.
        """
        issued = self.state.generation
        try:
            coord = await self.state.permission.request_and_capture(confirm)
        except GeolocationError as exc:
            if self._is_current(issued):
                self.state.notice = Notice(kind=exc.notice_kind, message=exc.message)
            logger.info("Current location unavailable: %s", type(exc).__name__)
            return self.state.selection_state

        if coord is None:
            return self.state.selection_state
        if not self._is_current(issued):
            logger.debug("Discarding stale device position (generation %s)", issued)
            return self.state.selection_state

        generation = self._begin_action()
        self._clear_selections()
        await self._select(Role.ORIGIN, coord, generation)
        return self.state.selection_state

    def reset(self) -> None:
        """Clear selections, markers and route."""
        self._begin_action()
        self._clear_selections()

    async def request_route(self) -> RouteResult | None:
        """Compute and draw the route between the current origin and destination.

        Returns None when the request is not possible, was superseded, or failed.
        """
        state = self.state
        origin, destination = state.origin, state.destination
        if origin is None or destination is None:
            logger.debug("Route requested without both selections; ignoring.")
            return None
        if isinstance(state.route_result, Route):
            return state.route_result

        generation = state.generation
        if state.route_request_generation == generation:
            logger.debug("Route request already in flight (generation %s)", generation)
            return None

        state.route_request_generation = generation
        state.notice = None
        try:
            result = await self._router.compute_route(origin.coordinate, destination.coordinate)
        except RoutingServiceError as exc:
            logger.warning("Route computation failed: %s", str(exc))
            if self._is_current(generation):
                state.notice = Notice(kind=NoticeKind.ROUTING_SERVICE_ERROR, message=ROUTING_ERROR_MESSAGE)
            return None
        finally:
            if state.route_request_generation == generation:
                state.route_request_generation = None

        if not self._is_current(generation):
            logger.debug("Discarding stale route (generation %s)", generation)
            return None

        if isinstance(result, RouteNotFound):
            state.route_result = result
            state.notice = Notice(kind=NoticeKind.ROUTE_NOT_FOUND, message=ROUTE_NOT_FOUND_MESSAGE)
            return result

        state.surface.clear_route()
        state.surface.draw_route(result.geometry)
        state.surface.fit_bounds(result.geometry or (origin.coordinate, destination.coordinate))
        state.route_result = result
        return result
