import pytest

from bw_locations.cascade import CascadeController, CascadeState, LocationSelection
from bw_locations.errors import NotFoundError


@pytest.fixture
def controller(store):
    return CascadeController(store)


def test_initial_state_is_empty(controller):
    assert controller.state == CascadeState()
    assert controller.selection.to_dict() == {"state": "", "city": "", "ward": ""}


def test_new_district_invalidates_children(store, controller):
    controller.set_district(store.district(11))
    controller.set_settlement(store.settlement(16))
    controller.set_ward(None)
    controller.set_district(store.district(15))

    state = controller.state
    assert state.district.name == "Central Serowe-Palapye"
    assert state.settlement is None
    assert state.ward is None


def test_settlement_infers_district(store, controller):
    controller.set_settlement(store.settlement(59))
    assert controller.state.district.name == "Ngamiland East"
    assert controller.state.ward is None


def test_settlement_repoints_inconsistent_district(store, controller):
    controller.set_district(store.district(1))
    controller.set_settlement(store.settlement(16))
    assert controller.state.district.id == 11


def test_settlement_clears_ward(store, controller):
    controller.set_ward(store.ward(8))
    controller.set_settlement(store.settlement(2))
    assert controller.state.ward is None
    assert controller.state.district.name == "Francistown"


def test_ward_infers_full_chain(store, controller):
    controller.set_ward(store.ward(20))
    state = controller.state
    assert state.settlement.name == "Mogoditshane"
    assert state.district.name == "Kweneng East"


def test_clear_resets_everything(store, controller):
    controller.select_ward_id(11)
    controller.clear()
    assert controller.state == CascadeState()


def test_each_transition_emits_one_snapshot(store, controller):
    events = []
    controller.subscribe(events.append)

    controller.select_district_id(1)
    controller.select_settlement_id(1)
    controller.select_ward_id(8)
    controller.clear()

    assert [e.to_dict() for e in events] == [
        {"state": "Gaborone", "city": "", "ward": ""},
        {"state": "Gaborone", "city": "Gaborone", "ward": ""},
        {"state": "Gaborone", "city": "Gaborone", "ward": "Block 8"},
        {"state": "", "city": "", "ward": ""},
    ]


def test_ward_selection_emits_once_even_when_inferring(controller):
    events = []
    controller.subscribe(events.append)
    controller.select_ward_id(29)
    assert events == [LocationSelection(state="Kweneng East", city="Molepolole", ward="Lekgaba")]


def test_unsubscribe_stops_events(controller):
    events = []
    unsubscribe = controller.subscribe(events.append)
    controller.select_district_id(2)
    unsubscribe()
    controller.select_district_id(3)
    assert len(events) == 1


def test_type_text_commits_exact_match(controller):
    events = []
    controller.subscribe(events.append)

    assert controller.type_text("settlement", "molepol") is None
    assert events == []

    match = controller.type_text("settlement", "MOLEPOLOLE")
    assert match.id == 21
    assert controller.state.district.name == "Kweneng East"
    assert len(events) == 1


def test_type_text_is_scoped_to_current_parent(store, controller):
    controller.select_settlement_id(20)
    ward = controller.type_text("ward", "block 8")
    assert ward.id == 23

    controller.select_district_id(11)
    assert controller.type_text("settlement", "Maun") is None
    assert controller.state.district.id == 11


def test_unknown_ids_raise(controller):
    with pytest.raises(NotFoundError):
        controller.select_settlement_id(999)
    assert controller.state == CascadeState()
