"""Great-circle distance and radius queries over the location dataset."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from bw_locations.errors import ValidationError
from bw_locations.models import LocationLevel, Plot, Settlement, parse_level
from bw_locations.normalize import normalize_name
from bw_locations.store import LocationStore


EARTH_RADIUS_KM = 6371.0

NEARBY_LEVELS = (LocationLevel.SETTLEMENT, LocationLevel.PLOT)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres on a sphere of radius 6371 km.

    a = sin²(Δφ/2) + cos φ1 ⋅ cos φ2 ⋅ sin²(Δλ/2)
    c = 2 ⋅ atan2(√a, √(1−a))
    d = R ⋅ c
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlng = math.radians(lng2) - math.radians(lng1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    # Float error can push a just past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


@dataclass(frozen=True)
class NearbyHit:
    entity: Union[Settlement, Plot]
    distance_km: float

    def to_dict(self) -> Dict[str, Any]:
        out = self.entity.to_dict()
        out["distance_km"] = round(self.distance_km, 3)
        return out


def validate_coordinates(lat: float, lng: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValidationError("lat/lng must be finite numbers")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError("lat must be between -90 and 90")
    if not -180.0 <= lng <= 180.0:
        raise ValidationError("lng must be between -180 and 180")


def find_nearby(
    store: LocationStore,
    lat: float,
    lng: float,
    radius_km: float,
    level: Any = LocationLevel.SETTLEMENT,
) -> List[NearbyHit]:
    """Every settlement (or plot) within ``radius_km`` of the point.

    Linear scan; entities without coordinates are skipped. Ordered by
    distance, then name, then id.
    """
    validate_coordinates(lat, lng)
    if not math.isfinite(radius_km) or radius_km < 0:
        raise ValidationError("radius_km must be a non-negative number")
    level = parse_level(level)
    if level not in NEARBY_LEVELS:
        raise ValidationError("nearby supports settlement and plot levels")

    entities = store.settlements if level is LocationLevel.SETTLEMENT else store.plots
    hits: List[NearbyHit] = []
    for entity in entities:
        if not entity.has_coordinates:
            continue
        distance = haversine_km(lat, lng, entity.latitude, entity.longitude)
        if distance <= radius_km:
            hits.append(NearbyHit(entity=entity, distance_km=distance))
    hits.sort(key=lambda h: (h.distance_km, normalize_name(h.entity.name), h.entity.id))
    return hits
