import httpx
import pytest

from routepick.cli import EXIT_NO_ROUTE, EXIT_ROUTING_ERROR, main


def _patch_routing(monkeypatch, payload=None, error=None):
    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=10, user_agent=None):  # noqa: ARG001
        if error is not None:
            raise error(url)
        return payload

    async def fake_sleep(*_args, **_kwargs):
        return None

    monkeypatch.setattr("routepick.ingestion.routing_client.aget_json", fake_get_json)
    monkeypatch.setattr("routepick.ingestion.routing_client.asyncio.sleep", fake_sleep)


ROUTE_ARGS = ["route", "--from-lat", "33.57", "--from-lon", "-7.59", "--to-lat", "33.6", "--to-lon", "-7.62"]


def test_cli_route_prints_distance_and_options(monkeypatch, capsys):
    _patch_routing(
        monkeypatch,
        payload={
            "code": "Ok",
            "routes": [
                {
                    "distance": 5000.0,
                    "duration": 600.0,
                    "geometry": {"coordinates": [[-7.59, 33.57], [-7.62, 33.6]]},
                }
            ],
        },
    )

    assert main(ROUTE_ARGS) == 0
    out = capsys.readouterr().out
    assert "Distance: 5.00 km" in out
    assert "Voiture: 45.00 MAD" in out


def test_cli_route_exit_codes(monkeypatch, capsys):
    _patch_routing(monkeypatch, payload={"code": "Ok", "routes": []})
    assert main(ROUTE_ARGS) == EXIT_NO_ROUTE

    _patch_routing(
        monkeypatch,
        error=lambda url: httpx.ConnectError("down", request=httpx.Request("GET", url)),
    )
    assert main(ROUTE_ARGS) == EXIT_ROUTING_ERROR
    assert "Routing service error" in capsys.readouterr().out


def test_cli_geocode_falls_back_offline(monkeypatch, capsys):
    async def failing_get_json(url, *, params=None, headers=None, timeout_seconds=10, user_agent=None):  # noqa: ARG001
        raise httpx.ConnectError("down", request=httpx.Request("GET", url))

    monkeypatch.setattr("routepick.ingestion.geocoding_client.aget_json", failing_get_json)

    assert main(["geocode", "--lat", "34.05", "--lon", "-118.24"]) == 0
    assert capsys.readouterr().out.strip() == "34.05000, -118.24000"


@pytest.mark.parametrize(
    "argv",
    [
        ["geocode", "--lat", "123", "--lon", "0"],
        ["geocode", "--lat", "0", "--lon", "abc"],
        ["route", "--from-lat", "33.57", "--from-lon", "-7.59", "--to-lat", "33.6", "--to-lon", "200"],
    ],
)
def test_cli_rejects_out_of_range_coordinates(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)

    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "must be within" in err or "invalid longitude" in err
