from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from bw_locations.errors import ValidationError
from bw_locations.feature_flags import get_flags
from bw_locations.models import District, LocationLevel, Plot, SearchType, Settlement, Ward
from bw_locations.normalize import match_rank, normalize_name
from bw_locations.store import LocationStore


logger = logging.getLogger("bwloc.search")

MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 20


@dataclass(frozen=True)
class SettlementHit:
    settlement: Settlement
    district: District

    @property
    def id(self) -> int:
        return self.settlement.id

    def to_dict(self) -> Dict[str, Any]:
        out = self.settlement.to_dict()
        out["district"] = self.district.to_dict()
        return out


@dataclass(frozen=True)
class WardHit:
    ward: Ward
    settlement: Settlement
    district: District

    @property
    def id(self) -> int:
        return self.ward.id

    def to_dict(self) -> Dict[str, Any]:
        out = self.ward.to_dict()
        out["settlement"] = self.settlement.to_dict()
        out["district"] = self.district.to_dict()
        return out


@dataclass(frozen=True)
class PlotHit:
    plot: Plot
    ward: Ward
    settlement: Settlement
    district: District

    @property
    def id(self) -> int:
        return self.plot.id

    def to_dict(self) -> Dict[str, Any]:
        out = self.plot.to_dict()
        out["ward"] = self.ward.to_dict()
        out["settlement"] = self.settlement.to_dict()
        out["district"] = self.district.to_dict()
        return out


@dataclass(frozen=True)
class GroupedResult:
    """Per-type ranked hits for one query. Lists for unrequested types are empty."""

    query: str
    type: SearchType
    limit: int
    districts: List[District] = field(default_factory=list)
    settlements: List[SettlementHit] = field(default_factory=list)
    wards: List[WardHit] = field(default_factory=list)
    plots: List[PlotHit] = field(default_factory=list)
    request_id: Optional[int] = None

    @property
    def total_results(self) -> int:
        return len(self.districts) + len(self.settlements) + len(self.wards) + len(self.plots)

    def ids(self) -> Dict[str, List[int]]:
        return {
            "districts": [d.id for d in self.districts],
            "settlements": [h.id for h in self.settlements],
            "wards": [h.id for h in self.wards],
            "plots": [h.id for h in self.plots],
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "districts": [d.to_dict() for d in self.districts],
            "settlements": [h.to_dict() for h in self.settlements],
            "wards": [h.to_dict() for h in self.wards],
            "plots": [h.to_dict() for h in self.plots],
        }


def parse_search_type(value: Any) -> SearchType:
    if isinstance(value, SearchType):
        return value
    raw = str(value or "").strip().lower()
    try:
        return SearchType(raw)
    except ValueError:
        allowed = ", ".join(t.value for t in SearchType)
        raise ValidationError(f"type must be one of: {allowed}") from None


def _best_rank(keys: Iterable[Optional[str]], needle: str) -> Optional[int]:
    best: Optional[int] = None
    for key in keys:
        rank = match_rank(key, needle)
        if rank is not None and (best is None or rank < best):
            best = rank
            if best == 0:
                break
    return best


def _population_key(population: Optional[int]) -> Tuple[bool, int]:
    # Known populations first, larger first.
    return (population is None, -(population or 0))


class SearchIndex:
    """Ranked name search across districts, settlements, wards and plots.

    Each entity has one or more searchable keys; the entity's rank is the
    best of its keys (0 exact, 1 prefix, 2 substring). Matching entities
    are collected into a dict keyed by id, so an entity reached through
    several keys shows up once with its best rank, and only then ranked
    and cut to ``limit``.
    """

    def __init__(self, store: LocationStore):
        self.store = store
        self._district_keys: List[Tuple[District, Tuple[str, ...]]] = [
            (d, (d.name, d.code)) for d in store.districts
        ]
        self._settlement_keys: List[Tuple[Settlement, Tuple[str, ...]]] = [
            (s, (s.name,)) for s in store.settlements
        ]
        self._ward_keys: List[Tuple[Ward, Tuple[str, ...]]] = [
            (w, (w.name,)) for w in store.wards
        ]
        self._plot_keys: List[Tuple[Plot, Tuple[Optional[str], ...]]] = [
            (p, (p.full_address, p.street_name, p.block_name)) for p in store.plots
        ]

    @staticmethod
    def _collect(
        entries: Sequence[Tuple[Any, Tuple[Optional[str], ...]]],
        needle: str,
        keep: Callable[[Any], bool],
    ) -> Dict[int, Tuple[int, Any]]:
        found: Dict[int, Tuple[int, Any]] = {}
        for entity, keys in entries:
            if not keep(entity):
                continue
            rank = _best_rank(keys, needle)
            if rank is None:
                continue
            prev = found.get(entity.id)
            if prev is None or rank < prev[0]:
                found[entity.id] = (rank, entity)
        return found

    def _search_districts(self, needle: str, limit: int) -> List[District]:
        found = self._collect(self._district_keys, needle, lambda d: True)
        ranked = sorted(
            found.values(),
            key=lambda rd: (rd[0], -rd[1].population, normalize_name(rd[1].name), rd[1].id),
        )
        return [d for _, d in ranked[:limit]]

    def _search_settlements(
        self, needle: str, limit: int, district_id: Optional[int], settlement_id: Optional[int]
    ) -> List[SettlementHit]:
        def keep(s: Settlement) -> bool:
            if district_id is not None and s.district_id != district_id:
                return False
            if settlement_id is not None and s.id != settlement_id:
                return False
            return True

        found = self._collect(self._settlement_keys, needle, keep)
        ranked = sorted(
            found.values(),
            key=lambda rs: (
                rs[0],
                not rs[1].is_major,
                _population_key(rs[1].population),
                normalize_name(rs[1].name),
                rs[1].id,
            ),
        )
        return [
            SettlementHit(settlement=s, district=self.store.district_of(s))
            for _, s in ranked[:limit]
        ]

    def _search_wards(
        self, needle: str, limit: int, district_id: Optional[int], settlement_id: Optional[int]
    ) -> List[WardHit]:
        def keep(w: Ward) -> bool:
            if settlement_id is not None and w.settlement_id != settlement_id:
                return False
            if district_id is not None:
                return self.store.settlement_of(w).district_id == district_id
            return True

        found = self._collect(self._ward_keys, needle, keep)
        ranked = sorted(
            found.values(),
            key=lambda rw: (
                rw[0],
                _population_key(rw[1].population),
                normalize_name(rw[1].name),
                rw[1].id,
            ),
        )
        hits: List[WardHit] = []
        for _, w in ranked[:limit]:
            s = self.store.settlement_of(w)
            hits.append(WardHit(ward=w, settlement=s, district=self.store.district_of(s)))
        return hits

    def _search_plots(
        self, needle: str, limit: int, district_id: Optional[int], settlement_id: Optional[int]
    ) -> List[PlotHit]:
        def keep(p: Plot) -> bool:
            if settlement_id is not None and p.settlement_id != settlement_id:
                return False
            if district_id is not None:
                return self.store.settlement(p.settlement_id).district_id == district_id
            return True

        found = self._collect(self._plot_keys, needle, keep)
        ranked = sorted(
            found.values(),
            key=lambda rp: (rp[0], normalize_name(rp[1].full_address), rp[1].id),
        )
        hits: List[PlotHit] = []
        for _, p in ranked[:limit]:
            w = self.store.ward_of(p)
            s = self.store.settlement(p.settlement_id)
            hits.append(PlotHit(plot=p, ward=w, settlement=s, district=self.store.district_of(s)))
        return hits

    def search(
        self,
        query: str,
        type: Any = SearchType.ALL,
        limit: int = DEFAULT_LIMIT,
        *,
        district_id: Optional[int] = None,
        settlement_id: Optional[int] = None,
        request_id: Optional[int] = None,
    ) -> GroupedResult:
        """Run one ranked search.

        Raises ``ValidationError`` for a query shorter than two characters
        as typed, a limit below one or an unknown type, and
        ``NotFoundError`` for an unknown scope id. Zero matches is a normal
        result with empty lists, as is an all-blank query.
        """

        if len(query or "") < MIN_QUERY_LENGTH:
            raise ValidationError(
                f"Search query must be at least {MIN_QUERY_LENGTH} characters"
            )
        search_type = parse_search_type(type)
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError("limit must be an integer")
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        if district_id is not None:
            self.store.district(district_id)
        if settlement_id is not None:
            self.store.settlement(settlement_id)

        start = time.perf_counter()
        needle = normalize_name(query)
        districts: List[District] = []
        settlements: List[SettlementHit] = []
        wards: List[WardHit] = []
        plots: List[PlotHit] = []

        if search_type.includes(LocationLevel.DISTRICT):
            districts = self._search_districts(needle, limit)
        if search_type.includes(LocationLevel.SETTLEMENT):
            settlements = self._search_settlements(needle, limit, district_id, settlement_id)
        if search_type.includes(LocationLevel.WARD):
            wards = self._search_wards(needle, limit, district_id, settlement_id)
        if search_type.includes(LocationLevel.PLOT):
            plots = self._search_plots(needle, limit, district_id, settlement_id)

        result = GroupedResult(
            query=query,
            type=search_type,
            limit=limit,
            districts=districts,
            settlements=settlements,
            wards=wards,
            plots=plots,
            request_id=request_id,
        )

        if get_flags().search_debug:
            logger.info(
                json.dumps(
                    {
                        "event": "location_search",
                        "query": query,
                        "type": search_type.value,
                        "limit": limit,
                        "district_id": district_id,
                        "settlement_id": settlement_id,
                        "request_id": request_id,
                        "counts": {k: len(v) for k, v in result.ids().items()},
                        "ms": round((time.perf_counter() - start) * 1000.0, 3),
                    },
                    sort_keys=True,
                )
            )
        return result
