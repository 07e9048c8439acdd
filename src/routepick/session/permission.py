"""
GPS permission gate.

Tracks whether the user allowed location access and makes sure a position is only
requested after an explicit confirmation when access is not already granted.

Transitions:
- unknown -> granted | denied   (first capture attempt, or the status query at mount)
- denied  -> granted            (user confirms the dialog and the capture succeeds)
- granted -> denied             (permission revoked outside the app)
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from routepick.domain.models import Coordinate, PermissionStatus
from routepick.session.geolocation import Geolocation, GeolocationError

logger = logging.getLogger(__name__)

ConfirmDialog = Callable[[], Awaitable[bool]]


class PermissionGate:
    def __init__(self, geolocation: Geolocation):
        self._geolocation = geolocation
        self.status = PermissionStatus.UNKNOWN

    async def mount(self) -> PermissionStatus:
        """Query the current status without triggering a location prompt."""
        try:
            self.status = await self._geolocation.query_permission()
        except GeolocationError as exc:
            logger.info("Permission query unavailable (%s); status stays unknown.", type(exc).__name__)
        return self.status

    def on_permission_change(self, status: PermissionStatus) -> None:
        """Apply an external permission change notification."""
        if status != self.status:
            logger.info("Geolocation permission changed: %s -> %s", self.status.value, status.value)
        self.status = status

    async def request_and_capture(self, confirm: ConfirmDialog) -> Coordinate | None:
        """Capture the device position, asking for confirmation unless already granted.

        Returns None when the user declines the dialog (nothing is requested).

        Raises:
            GeolocationError: The capture failed; status is now `denied`.
        """
        if self.status != PermissionStatus.GRANTED:
            if not await confirm():
                logger.debug("User declined the location dialog.")
                return None

        try:
            position = await self._geolocation.get_current_position()
        except GeolocationError:
            self.on_permission_change(PermissionStatus.DENIED)
            raise

        self.on_permission_change(PermissionStatus.GRANTED)
        return position
