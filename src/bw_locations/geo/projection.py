from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Bounds:
    north: float
    south: float
    east: float
    west: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def to_dict(self) -> Dict[str, float]:
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


# Botswana national extent (decimal degrees).
BOTSWANA_BOUNDS = Bounds(north=-17.78, south=-26.87, east=29.43, west=19.99)


@dataclass(frozen=True)
class ScreenPoint:
    """Percent offsets inside the map box: x from the west edge, y from the north."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


def parse_bounds(raw: str) -> Bounds:
    parts = [p.strip() for p in (raw or "").split(",")]
    if len(parts) != 4:
        raise ValueError("bbox must be minLng,minLat,maxLng,maxLat")
    min_lng, min_lat, max_lng, max_lat = [float(p) for p in parts]
    if max_lng <= min_lng or max_lat <= min_lat:
        raise ValueError("bbox is invalid")
    return Bounds(north=max_lat, south=min_lat, east=max_lng, west=min_lng)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def project_to_box(lat: float, lng: float, bounds: Bounds = BOTSWANA_BOUNDS) -> ScreenPoint:
    """Linear lat/lng -> [0, 100] x [0, 100] rescale for pin placement.

    Points outside ``bounds`` land on the nearest edge.
    """
    x = (lng - bounds.west) / (bounds.east - bounds.west) * 100.0
    y = (bounds.north - lat) / (bounds.north - bounds.south) * 100.0
    return ScreenPoint(x=_clamp(x), y=_clamp(y))
