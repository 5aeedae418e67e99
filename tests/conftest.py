import os
import socket
import sys
import urllib.request
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"
BUNDLED_DATA = SRC / "bw_locations" / "data" / "botswana_locations.json"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0]
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)
    monkeypatch.setattr(
        urllib.request,
        "urlopen",
        lambda *args, **kwargs: (_ for _ in ()).throw(
            RuntimeError("Network access blocked in tests")
        ),
    )


@pytest.fixture(autouse=True)
def fresh_env(monkeypatch):
    from bw_locations.feature_flags import reset_flags_cache
    from bw_locations.store import reset_store_cache

    for name in list(os.environ):
        if name.startswith("BWLOC_"):
            monkeypatch.delenv(name, raising=False)
    reset_flags_cache()
    reset_store_cache()
    yield
    reset_flags_cache()
    reset_store_cache()


@pytest.fixture
def store():
    from bw_locations.store import load_store

    return load_store(BUNDLED_DATA)


@pytest.fixture
def mini_payload():
    """Tiny hierarchy with a shared ward name and a non-prefix 'gabor' match."""
    return {
        "districts": [
            {"id": 1, "code": "01", "name": "Gaborone", "type": "city", "region": "Greater Gaborone", "population": 244107, "area_km2": 169},
            {"id": 2, "code": "30", "name": "Kweneng East", "type": "rural_district", "region": "Central", "population": 330442, "area_km2": 4456},
        ],
        "settlements": [
            {"id": 1, "district_id": 1, "name": "Gaborone", "type": "city", "population": 244107, "is_major": True, "latitude": -24.6282, "longitude": 25.9231},
            {"id": 2, "district_id": 2, "name": "Old Gaborone Road", "type": "village", "population": 900000, "is_major": True, "latitude": -24.60, "longitude": 25.85},
            {"id": 3, "district_id": 2, "name": "Mogoditshane", "type": "village", "population": 88098, "is_major": True, "latitude": -24.6378, "longitude": 25.8661},
            {"id": 4, "district_id": 2, "name": "Gaborone West Annex", "type": "village", "population": 10, "is_major": False},
        ],
        "wards": [
            {"id": 1, "settlement_id": 1, "name": "Block 5", "ward_number": "Ward 1", "constituency": "Gaborone West"},
            {"id": 2, "settlement_id": 3, "name": "Block 5", "ward_number": "Ward 5", "constituency": "Mogoditshane"},
            {"id": 3, "settlement_id": 1, "name": "Village", "ward_number": "Ward 2", "constituency": "Gaborone Central"},
        ],
        "plots": [
            {"id": 1, "ward_id": 1, "settlement_id": 1, "full_address": "Plot 10, Block 5, Gaborone", "street_name": "Block 5 Road", "block_name": "Block 5", "latitude": -24.64, "longitude": 25.90},
            {"id": 2, "ward_id": 2, "settlement_id": 3, "full_address": "Plot 22, Block 5, Mogoditshane", "block_name": "Block 5", "latitude": -24.63, "longitude": 25.87},
        ],
    }


@pytest.fixture
def mini_store(mini_payload):
    from bw_locations.store import LocationStore

    return LocationStore.from_dict(mini_payload)
