"""
Panel view model.

`build_panel` is a pure function of the session state (selections, permission status,
route result) plus the delivery tariffs; it decides what the pickup/drop-off panel
shows and which controls are enabled. It never mutates the session.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field

from routepick.config.settings import DeliverySettings
from routepick.domain.models import (
    DeliveryOption,
    Notice,
    PermissionStatus,
    Role,
    Route,
    SelectionState,
)
from routepick.session.state import MapSessionState

USE_LOCATION_LABEL = "Utiliser ma position actuelle"
ALLOW_LOCATION_LABEL = "Autoriser la localisation"

STATUS_HINTS = {
    SelectionState.EMPTY: "Cliquez sur la carte pour choisir l'adresse de ramassage.",
    SelectionState.ORIGIN_SET: "Cliquez sur la carte pour choisir l'adresse de livraison.",
    SelectionState.BOTH_SET: "Calculez l'itinéraire ou cliquez pour recommencer.",
}


class RouteSummary(BaseModel):
    distance_km: float
    duration_minutes: int | None = None


class PanelView(BaseModel):
    selection_state: SelectionState
    permission: PermissionStatus
    pickup_address: str = ""
    dropoff_address: str = ""
    hint: str
    can_request_route: bool
    route_pending: bool = False
    use_location_label: str
    route: RouteSummary | None = None
    show_delivery_options: bool = False
    delivery_options: list[DeliveryOption] = Field(default_factory=list)
    notice: Notice | None = None
    map: dict[str, Any] = Field(default_factory=dict)


def delivery_options(route: Route, delivery: DeliverySettings) -> list[DeliveryOption]:
    """Price each configured vehicle for `route` (vehicles over their range are skipped)."""
    distance_km = route.distance_m / 1000
    if route.duration_s is not None:
        base_minutes = route.duration_s / 60
    else:
        base_minutes = distance_km * 60 / delivery.average_speed_kmh

    options: list[DeliveryOption] = []
    for vehicle in delivery.vehicles:
        if vehicle.max_distance_km is not None and distance_km > vehicle.max_distance_km:
            continue
        options.append(
            DeliveryOption(
                code=vehicle.code,
                label=vehicle.label,
                price=round(vehicle.base_fare + vehicle.per_km * distance_km, 2),
                currency=delivery.currency,
                eta_minutes=max(1, math.ceil(base_minutes * vehicle.speed_factor)),
            )
        )
    return options


def build_panel(state: MapSessionState, delivery: DeliverySettings) -> PanelView:
    selection_state = state.selection_state
    route = state.route_result if isinstance(state.route_result, Route) else None
    route_pending = state.route_request_generation is not None
    permission = state.permission.status

    summary = None
    options: list[DeliveryOption] = []
    if route is not None:
        summary = RouteSummary(
            distance_km=round(route.distance_m / 1000, 2),
            duration_minutes=math.ceil(route.duration_s / 60) if route.duration_s is not None else None,
        )
        options = delivery_options(route, delivery)

    origin = state.selections.get(Role.ORIGIN)
    destination = state.selections.get(Role.DESTINATION)
    return PanelView(
        selection_state=selection_state,
        permission=permission,
        pickup_address=origin.display_address if origin else "",
        dropoff_address=destination.display_address if destination else "",
        hint=STATUS_HINTS[selection_state],
        can_request_route=(
            selection_state is SelectionState.BOTH_SET and route is None and not route_pending
        ),
        route_pending=route_pending,
        use_location_label=(
            ALLOW_LOCATION_LABEL if permission is PermissionStatus.DENIED else USE_LOCATION_LABEL
        ),
        route=summary,
        show_delivery_options=route is not None,
        delivery_options=options,
        notice=state.notice,
        map=state.surface.snapshot(),
    )
