"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- map inputs (`Coordinate`)
- selection state (`AddressSelection`, `SelectionState`, `PermissionStatus`)
- routing output (`Route`, `ROUTE_NOT_FOUND`)
- panel output (`DeliveryOption`, `Notice`)

Everything here is process-local and lives as long as one map session.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class Role(str, Enum):
    ORIGIN = "origin"
    DESTINATION = "destination"


class SelectionState(str, Enum):
    EMPTY = "empty"
    ORIGIN_SET = "origin_set"
    BOTH_SET = "both_set"


class PermissionStatus(str, Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


class AddressSelection(BaseModel):
    """A chosen origin or destination; replaced (never mutated) on reselection."""

    model_config = ConfigDict(frozen=True)

    role: Role
    coordinate: Coordinate
    display_address: str


class Route(BaseModel):
    """A computed path between origin and destination."""

    model_config = ConfigDict(frozen=True)

    geometry: tuple[Coordinate, ...]
    distance_m: float = Field(..., ge=0)
    duration_s: float | None = Field(default=None, ge=0)


class RouteNotFound:
    """Sentinel type: the routing service answered with an empty route list."""

    _instance: "RouteNotFound | None" = None

    def __new__(cls) -> "RouteNotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ROUTE_NOT_FOUND"

    def __bool__(self) -> bool:
        return False


ROUTE_NOT_FOUND = RouteNotFound()

RouteResult = Union[Route, RouteNotFound]


class NoticeKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    LOCATION_TIMEOUT = "location_timeout"
    ROUTE_NOT_FOUND = "route_not_found"
    ROUTING_SERVICE_ERROR = "routing_service_error"


class Notice(BaseModel):
    """A user-visible message left behind by a failed operation."""

    kind: NoticeKind
    message: str


class DeliveryOption(BaseModel):
    """One priced vehicle choice shown in the delivery-options panel."""

    code: str
    label: str
    price: float = Field(..., ge=0)
    currency: str
    eta_minutes: int = Field(..., ge=0)
