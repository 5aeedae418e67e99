from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from bw_locations.models import District, LocationLevel, Settlement, Ward, parse_level
from bw_locations.resolver import ExactMatchResolver, Resolved
from bw_locations.store import LocationStore


logger = logging.getLogger("bwloc.cascade")


@dataclass(frozen=True)
class CascadeState:
    """Selection snapshot. A set child always has its parent chain set."""

    district: Optional[District] = None
    settlement: Optional[Settlement] = None
    ward: Optional[Ward] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "district_id": self.district.id if self.district else None,
            "settlement_id": self.settlement.id if self.settlement else None,
            "ward_id": self.ward.id if self.ward else None,
        }


@dataclass(frozen=True)
class LocationSelection:
    """The value handed to the listing/search form after each transition."""

    state: str
    city: str
    ward: str

    @classmethod
    def from_state(cls, state: CascadeState) -> "LocationSelection":
        return cls(
            state=state.district.name if state.district else "",
            city=state.settlement.name if state.settlement else "",
            ward=state.ward.name if state.ward else "",
        )

    def to_dict(self) -> Dict[str, str]:
        return {"state": self.state, "city": self.city, "ward": self.ward}


Listener = Callable[[LocationSelection], None]


class CascadeController:
    """District -> Settlement -> Ward selection with child invalidation and
    parent inference.

    Picking a parent clears everything below it. Picking a child fills in
    (or re-points) everything above it from the store. Each transition
    replaces the snapshot and notifies every listener exactly once.
    """

    def __init__(self, store: LocationStore, resolver: Optional[ExactMatchResolver] = None):
        self.store = store
        self.resolver = resolver or ExactMatchResolver(store)
        self._state = CascadeState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> CascadeState:
        return self._state

    @property
    def selection(self) -> LocationSelection:
        return LocationSelection.from_state(self._state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: CascadeState) -> LocationSelection:
        self._state = state
        event = LocationSelection.from_state(state)
        logger.debug("cascade transition %s -> %s", state.to_dict(), event.to_dict())
        for listener in list(self._listeners):
            listener(event)
        return event

    def set_district(self, district: Optional[District]) -> LocationSelection:
        return self._commit(CascadeState(district=district))

    def set_settlement(self, settlement: Optional[Settlement]) -> LocationSelection:
        if settlement is None:
            return self._commit(CascadeState(district=self._state.district))
        district = self._state.district
        if district is None or district.id != settlement.district_id:
            district = self.store.district(settlement.district_id)
        return self._commit(CascadeState(district=district, settlement=settlement))

    def set_ward(self, ward: Optional[Ward]) -> LocationSelection:
        if ward is None:
            return self._commit(
                CascadeState(district=self._state.district, settlement=self._state.settlement)
            )
        settlement = self._state.settlement
        if settlement is None or settlement.id != ward.settlement_id:
            settlement = self.store.settlement(ward.settlement_id)
        district = self._state.district
        if district is None or district.id != settlement.district_id:
            district = self.store.district(settlement.district_id)
        return self._commit(CascadeState(district=district, settlement=settlement, ward=ward))

    def clear(self) -> LocationSelection:
        return self._commit(CascadeState())

    def select_district_id(self, district_id: int) -> LocationSelection:
        return self.set_district(self.store.district(district_id))

    def select_settlement_id(self, settlement_id: int) -> LocationSelection:
        return self.set_settlement(self.store.settlement(settlement_id))

    def select_ward_id(self, ward_id: int) -> LocationSelection:
        return self.set_ward(self.store.ward(ward_id))

    def type_text(self, level: Any, text: Optional[str]) -> Optional[Resolved]:
        """Commit ``text`` if it names an entity exactly in the current scope.

        Returns the committed entity, or None when nothing matched (state
        and listeners untouched).
        """
        level = parse_level(level)
        scope: Optional[int] = None
        if level is LocationLevel.SETTLEMENT and self._state.district is not None:
            scope = self._state.district.id
        elif level is LocationLevel.WARD and self._state.settlement is not None:
            scope = self._state.settlement.id
        match = self.resolver.resolve(level, text, scope)
        if match is None:
            return None
        if level is LocationLevel.DISTRICT:
            self.set_district(match)
        elif level is LocationLevel.SETTLEMENT:
            self.set_settlement(match)
        else:
            self.set_ward(match)
        return match
