"""
Device geolocation capability.

The session never talks to GPS hardware itself; it consumes an object that can
report the current position and the permission status. In the browser deployment
the position comes from the client (`ReportedGeolocation`); tests use stubs.
"""

from __future__ import annotations

from typing import Protocol

from routepick.domain.models import Coordinate, NoticeKind, PermissionStatus


class GeolocationError(Exception):
    """Base class for position capture failures."""

    notice_kind: NoticeKind = NoticeKind.POSITION_UNAVAILABLE
    message = "Votre position n'a pas pu être déterminée."


class PermissionDeniedError(GeolocationError):
    notice_kind = NoticeKind.PERMISSION_DENIED
    message = "L'accès à la localisation a été refusé. Sélectionnez l'adresse sur la carte."


class PositionUnavailableError(GeolocationError):
    notice_kind = NoticeKind.POSITION_UNAVAILABLE
    message = "Position indisponible. Sélectionnez l'adresse sur la carte."


class LocationTimeoutError(GeolocationError):
    notice_kind = NoticeKind.LOCATION_TIMEOUT
    message = "La localisation a pris trop de temps. Sélectionnez l'adresse sur la carte."


ERROR_CODES: dict[str, type[GeolocationError]] = {
    "permission_denied": PermissionDeniedError,
    "position_unavailable": PositionUnavailableError,
    "timeout": LocationTimeoutError,
}


class Geolocation(Protocol):
    async def get_current_position(self) -> Coordinate: ...

    async def query_permission(self) -> PermissionStatus: ...


class ReportedGeolocation:
    """Geolocation backed by whatever the browser client last reported.

    The client performs the actual `navigator.geolocation` call and posts either a
    position or an error code; `report()` stores it for the next capture.
    """

    def __init__(self, permission: PermissionStatus = PermissionStatus.UNKNOWN):
        self._permission = permission
        self._position: Coordinate | None = None
        self._error: str | None = None

    def report(
        self,
        *,
        position: Coordinate | None = None,
        error: str | None = None,
        permission: PermissionStatus | None = None,
    ) -> None:
        if error is not None and error not in ERROR_CODES:
            raise ValueError(f"Unknown geolocation error code: {error!r}")
        self._position = position
        self._error = error
        if permission is not None:
            self._permission = permission

    async def get_current_position(self) -> Coordinate:
        if self._error is not None:
            raise ERROR_CODES[self._error]()
        if self._position is None:
            raise PositionUnavailableError()
        return self._position

    async def query_permission(self) -> PermissionStatus:
        return self._permission
