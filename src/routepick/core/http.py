"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the geocoding and
routing adapters.

Design goals:
- Small surface area (async GET JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can decide how to fail (the geocoder falls back to
  coordinates, the router surfaces a service error).
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "routepick/0.1.0 (+https://local)"


def _headers(user_agent: str | None, headers: dict[str, str] | None) -> dict[str, str]:
    request_headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)
    return request_headers


async def aget_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
    user_agent: str | None = None,
) -> Any:
    """GET `url` without blocking the event loop and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        resp = await client.get(url, params=params, headers=_headers(user_agent, headers))
        resp.raise_for_status()
        return resp.json()
