"""
Map session state.

One `MapSessionState` holds everything a single map view needs (map surface,
permission gate, selections, route, generation counter). It is created per
session and handed to the `SelectionController`; nothing here is module-global.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from routepick.domain.models import AddressSelection, Notice, Role, RouteResult, SelectionState
from routepick.session.map_surface import InMemoryMapSurface
from routepick.session.permission import PermissionGate


@dataclass
class MapSessionState:
    surface: InMemoryMapSurface
    permission: PermissionGate
    selections: dict[Role, AddressSelection] = field(default_factory=dict)
    route_result: RouteResult | None = None
    notice: Notice | None = None
    # Bumped by every user action; async results carry the value they were issued under.
    generation: int = 0
    # Generation that created the current selection of each role.
    selection_tokens: dict[Role, int] = field(default_factory=dict)
    route_request_generation: int | None = None

    @property
    def origin(self) -> AddressSelection | None:
        return self.selections.get(Role.ORIGIN)

    @property
    def destination(self) -> AddressSelection | None:
        return self.selections.get(Role.DESTINATION)

    @property
    def selection_state(self) -> SelectionState:
        if self.origin is None:
            return SelectionState.EMPTY
        if self.destination is None:
            return SelectionState.ORIGIN_SET
        return SelectionState.BOTH_SET
