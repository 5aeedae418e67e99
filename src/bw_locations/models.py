from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any, Dict, Optional

from bw_locations.errors import ValidationError


class LocationLevel(StrEnum):
    """The four levels of the administrative hierarchy, top first."""

    DISTRICT = "district"
    SETTLEMENT = "settlement"
    WARD = "ward"
    PLOT = "plot"


class SearchType(StrEnum):
    """Which entity collections a search runs over."""

    ALL = "all"
    DISTRICT = "district"
    SETTLEMENT = "settlement"
    WARD = "ward"
    PLOT = "plot"

    def includes(self, level: LocationLevel) -> bool:
        return self is SearchType.ALL or self.value == level.value


@dataclass(frozen=True)
class District:
    id: int
    code: str
    name: str
    type: str
    region: str
    population: int
    area_km2: float

    @property
    def population_density(self) -> Optional[float]:
        if not self.area_km2:
            return None
        return self.population / self.area_km2

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["population_density"] = self.population_density
        return out


@dataclass(frozen=True)
class Settlement:
    """City, town or village. Census-only localities have no coordinates."""

    id: int
    district_id: int
    name: str
    type: str
    population: Optional[int] = None
    is_major: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    post_code: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Ward:
    id: int
    settlement_id: int
    name: str
    ward_number: str
    constituency: str
    population: Optional[int] = None
    area_description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Plot:
    """Addressable parcel. ``settlement_id`` mirrors the ward's settlement."""

    id: int
    ward_id: int
    settlement_id: int
    full_address: str
    latitude: float
    longitude: float
    street_name: Optional[str] = None
    plot_number: Optional[str] = None
    block_name: Optional[str] = None

    @property
    def name(self) -> str:
        return self.full_address

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_level(value: Any) -> LocationLevel:
    if isinstance(value, LocationLevel):
        return value
    try:
        return LocationLevel(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown location level: {value}") from None
