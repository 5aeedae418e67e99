from bw_locations.geo.distance import EARTH_RADIUS_KM, NearbyHit, find_nearby, haversine_km
from bw_locations.geo.projection import (
    BOTSWANA_BOUNDS,
    Bounds,
    ScreenPoint,
    parse_bounds,
    project_to_box,
)

__all__ = [
    "BOTSWANA_BOUNDS",
    "Bounds",
    "EARTH_RADIUS_KM",
    "NearbyHit",
    "ScreenPoint",
    "find_nearby",
    "haversine_km",
    "parse_bounds",
    "project_to_box",
]
