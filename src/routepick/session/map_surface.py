"""
Map surface: the single map instance owned by a session.

`InMemoryMapSurface` keeps the overlays (markers, one route polyline, viewport) as
plain data; the browser renderer draws whatever `snapshot()` returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from routepick.config.settings import MapSettings
from routepick.core.geo import Bounds, bounding_box
from routepick.domain.models import Coordinate, Role


@dataclass(frozen=True)
class Marker:
    role: Role
    coordinate: Coordinate
    label: str


@dataclass
class InMemoryMapSurface:
    settings: MapSettings
    markers: dict[Role, Marker] = field(default_factory=dict)
    route_geometry: tuple[Coordinate, ...] | None = None
    viewport: Bounds | None = None

    def add_marker(self, role: Role, coord: Coordinate, label: str) -> None:
        """Place the marker for `role`, replacing any previous one."""
        self.markers[role] = Marker(role=role, coordinate=coord, label=label)

    def clear_markers(self) -> None:
        self.markers.clear()

    def draw_route(self, geometry: Iterable[Coordinate]) -> None:
        """Draw `geometry` as the only route polyline."""
        self.route_geometry = tuple(geometry)

    def clear_route(self) -> None:
        self.route_geometry = None

    @property
    def has_route(self) -> bool:
        return self.route_geometry is not None

    def fit_bounds(self, coords: Iterable[Coordinate]) -> None:
        bounds = bounding_box(coords)
        if bounds is not None:
            self.viewport = bounds

    def snapshot(self) -> dict[str, Any]:
        """Serialize overlays for the browser renderer."""
        tile = self.settings.tile_layer
        return {
            "tile_layer": {
                "url_template": tile.url_template,
                "attribution": tile.attribution,
                "max_zoom": tile.max_zoom,
            },
            "markers": [
                {
                    "role": m.role.value,
                    "lat": m.coordinate.lat,
                    "lon": m.coordinate.lon,
                    "label": m.label,
                }
                for m in self.markers.values()
            ],
            "route": [[c.lat, c.lon] for c in self.route_geometry] if self.route_geometry else None,
            "viewport": self.viewport.as_list() if self.viewport else None,
        }
