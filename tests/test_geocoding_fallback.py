import httpx
import pytest

from routepick.config.settings import get_settings
from routepick.domain.models import Coordinate
from routepick.ingestion.geocoding_client import GeocodingClient, fallback_address


@pytest.mark.asyncio
async def test_geocoding_failure_falls_back_to_rounded_coordinates(monkeypatch):
    async def failing_get_json(url, *, params=None, headers=None, timeout_seconds=10, user_agent=None):  # noqa: ARG001
        raise httpx.ConnectError("network down", request=httpx.Request("GET", url))

    monkeypatch.setattr("routepick.ingestion.geocoding_client.aget_json", failing_get_json)

    client = GeocodingClient(get_settings())
    address = await client.resolve_address(Coordinate(lat=34.05, lon=-118.24))

    assert address == "34.05000, -118.24000"
    assert "34.05" in address and "-118.24" in address
    # Deterministic: same coordinate, same fallback.
    assert await client.resolve_address(Coordinate(lat=34.05, lon=-118.24)) == address


@pytest.mark.asyncio
async def test_geocoding_http_error_and_empty_result_fall_back(monkeypatch):
    responses = [
        {"display_name": "   "},
        {"error": "Unable to geocode"},
        [],
    ]

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=10, user_agent=None):  # noqa: ARG001
        if not responses:
            request = httpx.Request("GET", url)
            response = httpx.Response(503, request=request)
            raise httpx.HTTPStatusError("503", request=request, response=response)
        return responses.pop(0)

    monkeypatch.setattr("routepick.ingestion.geocoding_client.aget_json", fake_get_json)

    client = GeocodingClient(get_settings())
    coord = Coordinate(lat=33.5731, lon=-7.5898)
    results = [await client.resolve_address(coord) for _ in range(4)]

    assert results == ["33.57310, -7.58980"] * 4


@pytest.mark.asyncio
async def test_geocoding_returns_display_name_with_single_request(monkeypatch):
    calls: list[dict] = []

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=10, user_agent=None):  # noqa: ARG001
        calls.append(dict(params or {}))
        return {"display_name": "Boulevard Mohammed V, Casablanca, Maroc"}

    monkeypatch.setattr("routepick.ingestion.geocoding_client.aget_json", fake_get_json)

    client = GeocodingClient(get_settings())
    address = await client.resolve_address(Coordinate(lat=33.59, lon=-7.61))

    assert address == "Boulevard Mohammed V, Casablanca, Maroc"
    assert len(calls) == 1
    assert calls[0]["lat"] == 33.59
    assert calls[0]["lon"] == -7.61
    assert calls[0]["format"] == "jsonv2"


def test_fallback_precision_is_configurable():
    coord = Coordinate(lat=34.0522342, lon=-118.2436849)
    assert fallback_address(coord, 2) == "34.05, -118.24"
    assert fallback_address(coord) == "34.05223, -118.24368"
