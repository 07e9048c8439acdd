"""
RoutePick CLI entrypoint.

This CLI is intended for quick local checks of the geocoding/routing services and for
starting the API. It delegates to the same adapters the map sessions use.
"""

from __future__ import annotations

import argparse
import asyncio
import json

from routepick.config.settings import get_settings
from routepick.core.logging import configure_logging
from routepick.domain.models import Coordinate, RouteNotFound
from routepick.ingestion.geocoding_client import GeocodingClient
from routepick.ingestion.routing_client import RoutingClient, RoutingServiceError
from routepick.session.presentation import delivery_options

EXIT_ROUTING_ERROR = 1
EXIT_NO_ROUTE = 2


def _bounded_float(name: str, limit: float):
    def parse(raw: str) -> float:
        try:
            value = float(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid {name}: {raw!r}") from None
        if not -limit <= value <= limit:
            raise argparse.ArgumentTypeError(f"{name} must be within [-{limit:g}, {limit:g}], got {raw}")
        return value

    return parse


_latitude = _bounded_float("latitude", 90)
_longitude = _bounded_float("longitude", 180)


def _cmd_geocode(args: argparse.Namespace) -> int:
    """Handle the `geocode` subcommand."""
    client = GeocodingClient(get_settings())
    address = asyncio.run(client.resolve_address(Coordinate(lat=args.lat, lon=args.lon)))
    print(address)
    return 0


def _cmd_route(args: argparse.Namespace) -> int:
    """Handle the `route` subcommand."""
    settings = get_settings()
    client = RoutingClient(settings)
    origin = Coordinate(lat=args.from_lat, lon=args.from_lon)
    destination = Coordinate(lat=args.to_lat, lon=args.to_lon)

    try:
        result = asyncio.run(client.compute_route(origin, destination))
    except RoutingServiceError as exc:
        print(f"Routing service error: {exc}")
        return EXIT_ROUTING_ERROR

    if isinstance(result, RouteNotFound):
        print("No route found between these points.")
        return EXIT_NO_ROUTE

    options = delivery_options(result, settings.delivery)
    if args.json:
        payload = {
            "distance_m": result.distance_m,
            "duration_s": result.duration_s,
            "points": len(result.geometry),
            "delivery_options": [o.model_dump(mode="json") for o in options],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    duration = f"{result.duration_s / 60:.1f} min" if result.duration_s is not None else "n/a"
    print(f"Distance: {result.distance_m / 1000:.2f} km  Duration: {duration}")
    for option in options:
        print(f"  - {option.label}: {option.price:.2f} {option.currency}  ~{option.eta_minutes} min")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("routepick.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the RoutePick CLI."""
    parser = argparse.ArgumentParser(prog="routepick")
    sub = parser.add_subparsers(dest="command", required=True)

    geo = sub.add_parser("geocode", help="Reverse geocode a coordinate (falls back to coordinates).")
    geo.add_argument("--lat", required=True, type=_latitude)
    geo.add_argument("--lon", required=True, type=_longitude)
    geo.set_defaults(func=_cmd_geocode)

    route = sub.add_parser("route", help="Compute a route and price the delivery options.")
    route.add_argument("--from-lat", required=True, type=_latitude)
    route.add_argument("--from-lon", required=True, type=_longitude)
    route.add_argument("--to-lat", required=True, type=_latitude)
    route.add_argument("--to-lon", required=True, type=_longitude)
    route.add_argument("--json", action="store_true", help="Print JSON output.")
    route.set_defaults(func=_cmd_route)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
