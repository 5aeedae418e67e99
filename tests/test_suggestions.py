import pytest

from bw_locations.errors import ValidationError
from bw_locations.models import LocationLevel
from bw_locations.search import suggest


def test_empty_query_returns_nothing(store):
    assert suggest(store, "") == []
    assert suggest(store, "   ") == []


def test_settlements_before_districts(store):
    items = suggest(store, "gab", limit=10)
    assert [(i.name, i.level) for i in items] == [
        ("Gaborone", LocationLevel.SETTLEMENT),
        ("Gabane", LocationLevel.SETTLEMENT),
        ("Gaborone", LocationLevel.DISTRICT),
    ]
    assert items[0].district_name == "Gaborone"
    assert items[2].district_name == "Gaborone"


def test_major_settlements_rank_ahead_of_minor(store):
    items = suggest(store, "s", limit=30)
    settlements = [i for i in items if i.level is LocationLevel.SETTLEMENT]
    flags = [i.is_major for i in settlements]
    assert flags == sorted(flags, reverse=True)
    assert settlements[-1].name == "Sowa Town"


def test_districts_fill_remaining_slots(store):
    items = suggest(store, "central", limit=3)
    assert [i.level for i in items] == [LocationLevel.DISTRICT] * 3
    # Ordered by population, largest first.
    assert [i.name for i in items] == [
        "Central Serowe-Palapye",
        "Central Tutume",
        "Central Mahalapye",
    ]


def test_limit_caps_total(store):
    assert len(suggest(store, "m", limit=4)) == 4
    with pytest.raises(ValidationError):
        suggest(store, "m", limit=0)


def test_to_dict_uses_plain_level(store):
    payload = suggest(store, "maun")[0].to_dict()
    assert payload["level"] == "settlement"
    assert payload["population"] == 85293
