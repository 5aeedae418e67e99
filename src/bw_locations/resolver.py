from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from bw_locations.errors import ValidationError
from bw_locations.models import District, LocationLevel, Settlement, Ward, parse_level
from bw_locations.normalize import normalize_name
from bw_locations.store import LocationStore


Resolved = Union[District, Settlement, Ward]

RESOLVABLE_LEVELS = (LocationLevel.DISTRICT, LocationLevel.SETTLEMENT, LocationLevel.WARD)


class ExactMatchResolver:
    """Auto-commit support: does typed text name a known entity exactly?

    Names are unique only inside their parent, so when a parent scope is
    given the scan is limited to its children. Without a scope the whole
    level is scanned in id order and the first hit wins.
    """

    def __init__(self, store: LocationStore):
        self.store = store

    def _candidates(self, level: LocationLevel, parent_scope: Optional[int]) -> Iterable[Resolved]:
        if level is LocationLevel.DISTRICT:
            if parent_scope is not None:
                raise ValidationError("District level does not take a parent scope")
            return self.store.districts
        if level is LocationLevel.SETTLEMENT:
            if parent_scope is None:
                return self.store.settlements
            district = self.store.district(parent_scope)
            return [s for s in self.store.settlements if s.district_id == district.id]
        if parent_scope is None:
            return self.store.wards
        settlement = self.store.settlement(parent_scope)
        return [w for w in self.store.wards if w.settlement_id == settlement.id]

    def resolve(
        self, level: Any, typed_text: Optional[str], parent_scope: Optional[int] = None
    ) -> Optional[Resolved]:
        level = parse_level(level)
        if level not in RESOLVABLE_LEVELS:
            raise ValidationError("Exact match supports district, settlement and ward")
        candidates = self._candidates(level, parent_scope)
        needle = normalize_name(typed_text)
        if not needle:
            return None
        for entity in candidates:
            if normalize_name(entity.name) == needle:
                return entity
        return None
