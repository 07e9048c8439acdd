from routepick.config.settings import DeliverySettings, VehicleTariff, get_settings
from routepick.domain.models import (
    ROUTE_NOT_FOUND,
    AddressSelection,
    Coordinate,
    PermissionStatus,
    Role,
    Route,
)
from routepick.session.geolocation import ReportedGeolocation
from routepick.session.map_surface import InMemoryMapSurface
from routepick.session.permission import PermissionGate
from routepick.session.presentation import (
    ALLOW_LOCATION_LABEL,
    USE_LOCATION_LABEL,
    build_panel,
    delivery_options,
)
from routepick.session.state import MapSessionState

DELIVERY = DeliverySettings(
    currency="MAD",
    average_speed_kmh=30,
    vehicles=[
        VehicleTariff(code="moto", label="Moto", base_fare=10, per_km=3, speed_factor=0.8, max_distance_km=5),
        VehicleTariff(code="car", label="Voiture", base_fare=20, per_km=5),
    ],
)


def _state() -> MapSessionState:
    return MapSessionState(
        surface=InMemoryMapSurface(get_settings().map),
        permission=PermissionGate(ReportedGeolocation()),
    )


def _select(state: MapSessionState, role: Role, lat: float, lon: float) -> None:
    state.selections[role] = AddressSelection(
        role=role, coordinate=Coordinate(lat=lat, lon=lon), display_address=f"{role.value} address"
    )


def test_empty_panel_disables_route_and_hides_options():
    panel = build_panel(_state(), DELIVERY)

    assert panel.selection_state.value == "empty"
    assert panel.pickup_address == ""
    assert not panel.can_request_route
    assert not panel.show_delivery_options
    assert panel.use_location_label == USE_LOCATION_LABEL


def test_route_control_enabled_only_with_both_selections_and_no_route():
    state = _state()
    _select(state, Role.ORIGIN, 1, 1)
    assert not build_panel(state, DELIVERY).can_request_route

    _select(state, Role.DESTINATION, 2, 2)
    panel = build_panel(state, DELIVERY)
    assert panel.can_request_route
    assert panel.pickup_address == "origin address"
    assert panel.dropoff_address == "destination address"

    state.route_request_generation = state.generation
    assert not build_panel(state, DELIVERY).can_request_route
    state.route_request_generation = None

    state.route_result = ROUTE_NOT_FOUND
    panel = build_panel(state, DELIVERY)
    assert panel.can_request_route
    assert not panel.show_delivery_options

    state.route_result = Route(geometry=(), distance_m=4000.0, duration_s=600.0)
    panel = build_panel(state, DELIVERY)
    assert not panel.can_request_route
    assert panel.show_delivery_options
    assert panel.route.distance_km == 4.0
    assert panel.route.duration_minutes == 10


def test_denied_permission_changes_location_label():
    state = _state()
    state.permission.on_permission_change(PermissionStatus.DENIED)

    panel = build_panel(state, DELIVERY)

    assert panel.permission is PermissionStatus.DENIED
    assert panel.use_location_label == ALLOW_LOCATION_LABEL


def test_delivery_options_price_by_distance_and_skip_out_of_range_vehicles():
    short = delivery_options(Route(geometry=(), distance_m=4000.0, duration_s=600.0), DELIVERY)
    assert [(o.code, o.price, o.eta_minutes) for o in short] == [("moto", 22.0, 8), ("car", 40.0, 10)]

    far = delivery_options(Route(geometry=(), distance_m=12000.0), DELIVERY)
    # No duration from the service: 12 km at 30 km/h.
    assert [(o.code, o.price, o.eta_minutes) for o in far] == [("car", 80.0, 24)]
