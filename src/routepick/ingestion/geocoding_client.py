"""
Reverse geocoding client (Nominatim-compatible).

Turns a clicked or GPS-captured coordinate into a human-readable address for the
pickup/drop-off fields. Lookups are best-effort: any failure (network error, non-2xx,
empty result) degrades to a deterministic coordinates-only string so that a
selection never blocks on the geocoder. One attempt per call, no retries.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from routepick.config.settings import Settings
from routepick.core.http import aget_json
from routepick.domain.models import Coordinate

logger = logging.getLogger(__name__)


def fallback_address(coord: Coordinate, precision: int = 5) -> str:
    """Return the coordinates-only display string used when geocoding is unavailable."""
    return f"{coord.lat:.{precision}f}, {coord.lon:.{precision}f}"


def _display_name(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    name = payload.get("display_name")
    if not isinstance(name, str) or not name.strip():
        return None
    return name.strip()


class GeocodingClient:
    """Resolves display addresses; never raises to the caller."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def fallback(self, coord: Coordinate) -> str:
        return fallback_address(coord, self._settings.geocoding.fallback_precision)

    async def _fetch_reverse(self, coord: Coordinate) -> Any:
        """Call the reverse endpoint and return the raw JSON response."""
        cfg = self._settings.geocoding
        params: dict[str, Any] = {
            "lat": coord.lat,
            "lon": coord.lon,
            "format": "jsonv2",
            "zoom": cfg.zoom,
        }
        headers = {"Accept-Language": cfg.language} if cfg.language else None
        return await aget_json(
            cfg.base_url,
            params=params,
            headers=headers,
            timeout_seconds=cfg.timeout_seconds,
            user_agent=self._settings.app.user_agent,
        )

    async def resolve_address(self, coord: Coordinate) -> str:
        """Return the address for `coord`, or the coordinates-only fallback."""
        try:
            payload = await self._fetch_reverse(coord)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Reverse geocoding failed for lat=%.5f lon=%.5f: %s", coord.lat, coord.lon, str(exc)
            )
            return self.fallback(coord)

        name = _display_name(payload)
        if name is None:
            logger.info("Reverse geocoding returned no address for lat=%.5f lon=%.5f", coord.lat, coord.lon)
            return self.fallback(coord)
        return name
