"""
Routing client (OSRM-compatible).

Sole responsibility: talk to the routing service over HTTP and return normalized outputs.
- coordinate formatting (`lon,lat;lon,lat`)
- URL construction (`/route/v1/{profile}/...`)
- bounded timeout + one retry for transient failures
- parsing the first route's GeoJSON geometry into `Coordinate`s

An empty `routes` list is a normal answer (`ROUTE_NOT_FOUND`); anything else that goes
wrong is a `RoutingServiceError`, which callers report to the user without retrying.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from routepick.config.settings import Settings
from routepick.core.http import aget_json
from routepick.domain.models import ROUTE_NOT_FOUND, Coordinate, Route, RouteResult

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class RoutingServiceError(RuntimeError):
    """Transport, server or payload failure from the routing service."""


def format_coordinates(coords: list[Coordinate]) -> str:
    """Convert coordinates to the OSRM path form `lon,lat;lon,lat`."""
    return ";".join(f"{c.lon:.6f},{c.lat:.6f}" for c in coords)


def parse_route_response(payload: Any) -> RouteResult:
    """Normalize an OSRM `/route` JSON body.

    Raises:
        RoutingServiceError: If the body is not a recognizable route response.
    """
    if not isinstance(payload, dict):
        raise RoutingServiceError("Unexpected routing response shape; expected an object.")

    code = payload.get("code")
    if code == "NoRoute":
        return ROUTE_NOT_FOUND
    if code not in (None, "Ok"):
        raise RoutingServiceError(f"Routing service error: {payload.get('message') or code}")

    routes = payload.get("routes")
    if not isinstance(routes, list):
        raise RoutingServiceError("Routing response is missing the routes array.")
    if not routes:
        return ROUTE_NOT_FOUND

    first = routes[0]
    try:
        raw_coords = first["geometry"]["coordinates"]
        geometry = tuple(Coordinate(lat=float(lat), lon=float(lon)) for lon, lat, *_ in raw_coords)
        return Route(
            geometry=geometry,
            distance_m=float(first["distance"]),
            duration_s=float(first["duration"]) if first.get("duration") is not None else None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise RoutingServiceError(f"Malformed route in routing response: {exc}") from exc


class RoutingClient:
    """Computes a route between two coordinates via the external routing service."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _route_url(self, origin: Coordinate, destination: Coordinate) -> str:
        cfg = self._settings.routing
        path = format_coordinates([origin, destination])
        return f"{cfg.base_url.rstrip('/')}/route/v1/{cfg.profile}/{path}"

    async def _get_with_retry(self, url: str, *, params: dict[str, Any]) -> Any:
        """GET JSON with a bounded retry for 429/5xx and transport errors."""
        cfg = self._settings.routing
        max_attempts = int(cfg.retry.max_attempts)
        base_delay_seconds = float(cfg.retry.base_delay_seconds)
        max_delay_seconds = float(cfg.retry.max_delay_seconds)

        for attempt in range(max_attempts + 1):
            try:
                return await aget_json(
                    url,
                    params=params,
                    timeout_seconds=cfg.timeout_seconds,
                    user_agent=self._settings.app.user_agent,
                )
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                # OSRM answers 400 with code=NoRoute for unreachable points.
                if status == 400:
                    try:
                        body = exc.response.json()
                    except ValueError:
                        body = None
                    if isinstance(body, dict) and body.get("code") == "NoRoute":
                        return body
                if status not in _RETRYABLE_STATUS or attempt >= max_attempts:
                    raise RoutingServiceError(f"Routing service returned HTTP {status}") from exc
                delay = min(max_delay_seconds, base_delay_seconds * (2**attempt))
                logger.warning(
                    "Routing request failed with status=%s; retrying in %.2fs (attempt %s/%s)",
                    status,
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                await asyncio.sleep(delay)
            except httpx.TransportError as exc:
                if attempt >= max_attempts:
                    raise RoutingServiceError(f"Routing service unreachable: {exc}") from exc
                delay = min(max_delay_seconds, base_delay_seconds * (2**attempt))
                logger.warning(
                    "Routing transport error; retrying in %.2fs (attempt %s/%s)",
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                await asyncio.sleep(delay)
            except httpx.HTTPError as exc:
                raise RoutingServiceError(f"Routing request failed: {exc}") from exc
            except ValueError as exc:
                raise RoutingServiceError("Routing service returned invalid JSON.") from exc

        raise RoutingServiceError("Routing request failed without an exception (unexpected).")

    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """Return the first route between `origin` and `destination`, or `ROUTE_NOT_FOUND`.

        Raises:
            RoutingServiceError: On transport/server errors (after one retry) or bad payloads.
        """
        url = self._route_url(origin, destination)
        params = {"overview": "full", "geometries": "geojson"}
        logger.info(
            "Requesting route %.5f,%.5f -> %.5f,%.5f",
            origin.lat,
            origin.lon,
            destination.lat,
            destination.lon,
        )
        payload = await self._get_with_retry(url, params=params)
        return parse_route_response(payload)
