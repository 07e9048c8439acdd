"""
Geospatial helpers.

We keep a tiny geometry layer here so the map surface can do
viewport calculations without pulling in heavier GIS dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from routepick.domain.models import Coordinate


@dataclass(frozen=True)
class Bounds:
    """South-west / north-east corners of a viewport, in decimal degrees."""

    south: float
    west: float
    north: float
    east: float

    def as_list(self) -> list[list[float]]:
        """Return `[[south, west], [north, east]]` (the shape map renderers expect)."""
        return [[self.south, self.west], [self.north, self.east]]


def bounding_box(coords: Iterable[Coordinate]) -> Bounds | None:
    """Return the bounding box of `coords`, or None for an empty input."""
    points = list(coords)
    if not points:
        return None
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return Bounds(south=min(lats), west=min(lons), north=max(lats), east=max(lons))
