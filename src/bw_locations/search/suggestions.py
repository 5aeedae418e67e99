from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from bw_locations.errors import ValidationError
from bw_locations.models import LocationLevel
from bw_locations.normalize import normalize_name
from bw_locations.store import LocationStore


@dataclass(frozen=True)
class Suggestion:
    id: int
    name: str
    type: str
    district_name: Optional[str]
    population: Optional[int]
    is_major: bool
    level: LocationLevel

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["level"] = self.level.value
        return out


def suggest(store: LocationStore, query: str, limit: int = 10) -> List[Suggestion]:
    """Autocomplete on name prefixes: settlements first, districts fill the rest."""
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    needle = normalize_name(query)
    if not needle:
        return []

    settlements = [s for s in store.settlements if normalize_name(s.name).startswith(needle)]
    settlements.sort(
        key=lambda s: (
            not s.is_major,
            s.population is None,
            -(s.population or 0),
            normalize_name(s.name),
            s.id,
        )
    )
    out: List[Suggestion] = [
        Suggestion(
            id=s.id,
            name=s.name,
            type=s.type,
            district_name=store.district_of(s).name,
            population=s.population,
            is_major=s.is_major,
            level=LocationLevel.SETTLEMENT,
        )
        for s in settlements[:limit]
    ]

    remaining = limit - len(out)
    if remaining > 0:
        districts = [d for d in store.districts if normalize_name(d.name).startswith(needle)]
        districts.sort(key=lambda d: (-d.population, normalize_name(d.name), d.id))
        for d in districts[:remaining]:
            out.append(
                Suggestion(
                    id=d.id,
                    name=d.name,
                    type=d.type,
                    district_name=d.name,
                    population=d.population,
                    is_major=False,
                    level=LocationLevel.DISTRICT,
                )
            )
    return out
