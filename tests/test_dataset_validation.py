import copy
import json

import pytest

from bw_locations.errors import DatasetError
from bw_locations.store import LocationStore


def _broken(payload, mutate):
    data = copy.deepcopy(payload)
    mutate(data)
    return data


def test_mini_dataset_loads(mini_payload):
    store = LocationStore.from_dict(mini_payload)
    assert len(store.wards) == 3


def test_plot_with_mismatched_settlement_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["plots"][0].update(settlement_id=3))
    with pytest.raises(DatasetError, match="plot 1"):
        LocationStore.from_dict(data)


def test_dangling_district_reference_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["settlements"][0].update(district_id=42))
    with pytest.raises(DatasetError, match="unknown district 42"):
        LocationStore.from_dict(data)


def test_dangling_settlement_reference_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["wards"][0].update(settlement_id=42))
    with pytest.raises(DatasetError, match="unknown settlement 42"):
        LocationStore.from_dict(data)


def test_dangling_ward_reference_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["plots"][1].update(ward_id=42))
    with pytest.raises(DatasetError, match="unknown ward 42"):
        LocationStore.from_dict(data)


def test_duplicate_ids_are_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["wards"][2].update(id=1))
    with pytest.raises(DatasetError, match="duplicate ward id 1"):
        LocationStore.from_dict(data)


def test_duplicate_name_within_parent_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["wards"][2].update(name="  BLOCK 5 "))
    with pytest.raises(DatasetError, match="repeated in settlement 1"):
        LocationStore.from_dict(data)


def test_missing_required_field_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["settlements"][1].pop("name"))
    with pytest.raises(DatasetError, match="missing 'name'"):
        LocationStore.from_dict(data)


def test_non_numeric_value_is_rejected(mini_payload):
    data = _broken(mini_payload, lambda d: d["plots"][0].update(latitude="north"))
    with pytest.raises(DatasetError, match="malformed"):
        LocationStore.from_dict(data)


def test_from_path_reads_json(tmp_path, mini_payload):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(mini_payload), encoding="utf-8")
    store = LocationStore.from_path(path)
    assert store.settlement(2).name == "Old Gaborone Road"


def test_non_object_payload_is_rejected():
    with pytest.raises(DatasetError):
        LocationStore.from_dict([])
