from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bw_locations.errors import DatasetError, NotFoundError
from bw_locations.models import District, Plot, Settlement, Ward
from bw_locations.normalize import normalize_name


logger = logging.getLogger("bwloc.store")


def _default_data_path() -> Path:
    # Optional override for deployments that ship a fuller census extract.
    env = os.getenv("BWLOC_DATA_PATH")
    if env:
        return Path(env)
    return Path(__file__).resolve().parent / "data" / "botswana_locations.json"


@dataclass(frozen=True)
class DistrictSettlements:
    district: District
    settlements: List[Settlement]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "district": self.district.to_dict(),
            "settlements": [s.to_dict() for s in self.settlements],
        }


@dataclass(frozen=True)
class SettlementWards:
    settlement: Settlement
    district: District
    wards: List[Ward]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "settlement": self.settlement.to_dict(),
            "district": self.district.to_dict(),
            "wards": [w.to_dict() for w in self.wards],
        }


@dataclass(frozen=True)
class WardPlots:
    ward: Ward
    settlement: Settlement
    district: District
    plots: List[Plot]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ward": self.ward.to_dict(),
            "settlement": self.settlement.to_dict(),
            "district": self.district.to_dict(),
            "plots": [p.to_dict() for p in self.plots],
        }


def _settlement_order(s: Settlement) -> Tuple[Any, ...]:
    # is_major desc, population desc (unknown last), name asc
    return (not s.is_major, -(s.population if s.population is not None else -1), s.name, s.id)


def _require(row: Dict[str, Any], key: str, kind: str) -> Any:
    if key not in row or row[key] is None:
        raise DatasetError(f"{kind} row is missing '{key}': {row!r}")
    return row[key]


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _opt_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_district(row: Dict[str, Any]) -> District:
    return District(
        id=int(_require(row, "id", "district")),
        code=str(_require(row, "code", "district")),
        name=str(_require(row, "name", "district")),
        type=str(row.get("type") or ""),
        region=str(row.get("region") or ""),
        population=int(row.get("population") or 0),
        area_km2=float(row.get("area_km2") or 0),
    )


def _parse_settlement(row: Dict[str, Any]) -> Settlement:
    return Settlement(
        id=int(_require(row, "id", "settlement")),
        district_id=int(_require(row, "district_id", "settlement")),
        name=str(_require(row, "name", "settlement")),
        type=str(row.get("type") or "village"),
        population=_opt_int(row.get("population")),
        is_major=bool(row.get("is_major", False)),
        latitude=_opt_float(row.get("latitude")),
        longitude=_opt_float(row.get("longitude")),
        post_code=_opt_str(row.get("post_code")),
    )


def _parse_ward(row: Dict[str, Any]) -> Ward:
    return Ward(
        id=int(_require(row, "id", "ward")),
        settlement_id=int(_require(row, "settlement_id", "ward")),
        name=str(_require(row, "name", "ward")),
        ward_number=str(row.get("ward_number") or ""),
        constituency=str(row.get("constituency") or ""),
        population=_opt_int(row.get("population")),
        area_description=_opt_str(row.get("area_description")),
    )


def _parse_plot(row: Dict[str, Any]) -> Plot:
    return Plot(
        id=int(_require(row, "id", "plot")),
        ward_id=int(_require(row, "ward_id", "plot")),
        settlement_id=int(_require(row, "settlement_id", "plot")),
        full_address=str(_require(row, "full_address", "plot")),
        latitude=float(_require(row, "latitude", "plot")),
        longitude=float(_require(row, "longitude", "plot")),
        street_name=_opt_str(row.get("street_name")),
        plot_number=_opt_str(row.get("plot_number")),
        block_name=_opt_str(row.get("block_name")),
    )


def _index_by_id(items: Iterable[Any], kind: str) -> Dict[int, Any]:
    out: Dict[int, Any] = {}
    for item in items:
        if item.id in out:
            raise DatasetError(f"duplicate {kind} id {item.id}")
        out[item.id] = item
    return dict(sorted(out.items()))


class LocationStore:
    """Read-only District -> Settlement -> Ward -> Plot reference hierarchy.

    The whole dataset is validated on construction; a store that exists
    always satisfies the parent-reference invariants:

    - every settlement points at an existing district
    - every ward points at an existing settlement
    - every plot points at an existing ward and repeats that ward's
      settlement id
    - names are unique within their parent (not globally)

    All lookups are pure projections of the loaded data.
    """

    def __init__(
        self,
        districts: Iterable[District],
        settlements: Iterable[Settlement],
        wards: Iterable[Ward],
        plots: Iterable[Plot] = (),
    ) -> None:
        self._districts: Dict[int, District] = _index_by_id(districts, "district")
        self._settlements: Dict[int, Settlement] = _index_by_id(settlements, "settlement")
        self._wards: Dict[int, Ward] = _index_by_id(wards, "ward")
        self._plots: Dict[int, Plot] = _index_by_id(plots, "plot")
        self._validate()

        self._settlements_by_district: Dict[int, List[Settlement]] = {d: [] for d in self._districts}
        for s in self._settlements.values():
            self._settlements_by_district[s.district_id].append(s)
        for items in self._settlements_by_district.values():
            items.sort(key=_settlement_order)

        self._wards_by_settlement: Dict[int, List[Ward]] = {s: [] for s in self._settlements}
        for w in self._wards.values():
            self._wards_by_settlement[w.settlement_id].append(w)
        for items in self._wards_by_settlement.values():
            items.sort(key=lambda w: (w.name, w.id))

        self._plots_by_ward: Dict[int, List[Plot]] = {w: [] for w in self._wards}
        for p in self._plots.values():
            self._plots_by_ward[p.ward_id].append(p)
        for items in self._plots_by_ward.values():
            items.sort(key=lambda p: (p.full_address, p.id))

        self._districts_by_code: List[District] = sorted(
            self._districts.values(), key=lambda d: (d.code, d.id)
        )

    def _validate(self) -> None:
        seen: set = set()
        for s in self._settlements.values():
            if s.district_id not in self._districts:
                raise DatasetError(
                    f"settlement {s.id} ({s.name}) references unknown district {s.district_id}"
                )
            key = ("settlement", s.district_id, normalize_name(s.name))
            if key in seen:
                raise DatasetError(
                    f"settlement name '{s.name}' repeated in district {s.district_id}"
                )
            seen.add(key)

        for w in self._wards.values():
            if w.settlement_id not in self._settlements:
                raise DatasetError(
                    f"ward {w.id} ({w.name}) references unknown settlement {w.settlement_id}"
                )
            key = ("ward", w.settlement_id, normalize_name(w.name))
            if key in seen:
                raise DatasetError(
                    f"ward name '{w.name}' repeated in settlement {w.settlement_id}"
                )
            seen.add(key)

        for p in self._plots.values():
            ward = self._wards.get(p.ward_id)
            if ward is None:
                raise DatasetError(f"plot {p.id} references unknown ward {p.ward_id}")
            if p.settlement_id != ward.settlement_id:
                raise DatasetError(
                    f"plot {p.id} settlement_id {p.settlement_id} does not match "
                    f"ward {ward.id} settlement_id {ward.settlement_id}"
                )
            key = ("plot", p.settlement_id, normalize_name(p.full_address))
            if key in seen:
                raise DatasetError(
                    f"plot address '{p.full_address}' repeated in settlement {p.settlement_id}"
                )
            seen.add(key)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LocationStore":
        if not isinstance(payload, dict):
            raise DatasetError("location dataset must be a JSON object")
        try:
            return cls(
                districts=[_parse_district(r) for r in payload.get("districts") or []],
                settlements=[_parse_settlement(r) for r in payload.get("settlements") or []],
                wards=[_parse_ward(r) for r in payload.get("wards") or []],
                plots=[_parse_plot(r) for r in payload.get("plots") or []],
            )
        except DatasetError:
            raise
        except (TypeError, ValueError) as exc:
            raise DatasetError(f"malformed location dataset: {exc}") from exc

    @classmethod
    def from_path(cls, path: Path) -> "LocationStore":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        store = cls.from_dict(raw)
        logger.info(
            "loaded location dataset %s: districts=%s settlements=%s wards=%s plots=%s",
            path,
            len(store._districts),
            len(store._settlements),
            len(store._wards),
            len(store._plots),
        )
        return store

    # Collection views, id order.

    @property
    def districts(self) -> List[District]:
        return list(self._districts.values())

    @property
    def settlements(self) -> List[Settlement]:
        return list(self._settlements.values())

    @property
    def wards(self) -> List[Ward]:
        return list(self._wards.values())

    @property
    def plots(self) -> List[Plot]:
        return list(self._plots.values())

    # Id accessors.

    def district(self, district_id: int) -> District:
        try:
            return self._districts[district_id]
        except KeyError:
            raise NotFoundError("district", district_id) from None

    def settlement(self, settlement_id: int) -> Settlement:
        try:
            return self._settlements[settlement_id]
        except KeyError:
            raise NotFoundError("settlement", settlement_id) from None

    def ward(self, ward_id: int) -> Ward:
        try:
            return self._wards[ward_id]
        except KeyError:
            raise NotFoundError("ward", ward_id) from None

    def plot(self, plot_id: int) -> Plot:
        try:
            return self._plots[plot_id]
        except KeyError:
            raise NotFoundError("plot", plot_id) from None

    def district_of(self, settlement: Settlement) -> District:
        return self._districts[settlement.district_id]

    def settlement_of(self, ward: Ward) -> Settlement:
        return self._settlements[ward.settlement_id]

    def ward_of(self, plot: Plot) -> Ward:
        return self._wards[plot.ward_id]

    # Parent-scoped lookups.

    def get_districts(self) -> List[District]:
        return list(self._districts_by_code)

    def get_settlements(self, district_id: int) -> DistrictSettlements:
        district = self.district(district_id)
        return DistrictSettlements(
            district=district,
            settlements=list(self._settlements_by_district[district.id]),
        )

    def get_wards(self, settlement_id: int) -> SettlementWards:
        settlement = self.settlement(settlement_id)
        return SettlementWards(
            settlement=settlement,
            district=self.district_of(settlement),
            wards=list(self._wards_by_settlement[settlement.id]),
        )

    def get_plots(self, ward_id: int) -> WardPlots:
        ward = self.ward(ward_id)
        settlement = self.settlement_of(ward)
        return WardPlots(
            ward=ward,
            settlement=settlement,
            district=self.district_of(settlement),
            plots=list(self._plots_by_ward[ward.id]),
        )


def load_store(path: Optional[Path] = None) -> LocationStore:
    return LocationStore.from_path(path or _default_data_path())


@lru_cache(maxsize=1)
def get_store() -> LocationStore:
    """Process-wide store, seeded once from the reference dataset."""

    return load_store()


def reset_store_cache() -> None:
    """Test helper to force a reload (e.g. after changing BWLOC_DATA_PATH)."""

    get_store.cache_clear()
