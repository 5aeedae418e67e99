from __future__ import annotations

import pytest


def _reset_flags(monkeypatch, **env):
    from bw_locations.feature_flags import reset_flags_cache

    for k, v in env.items():
        if v is None:
            monkeypatch.delenv(k, raising=False)
        else:
            monkeypatch.setenv(k, str(v))
    reset_flags_cache()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from bw_locations.api.app import app

    return TestClient(app)


def test_defaults(monkeypatch):
    from bw_locations.feature_flags import get_flags

    _reset_flags(monkeypatch)
    flags = get_flags()
    assert flags.plot_search and flags.nearby and flags.suggestions
    assert flags.search_debug is False


@pytest.mark.parametrize("raw,expected", [("0", False), ("off", False), ("yes", True), ("maybe", True)])
def test_env_parsing(monkeypatch, raw, expected):
    from bw_locations.feature_flags import get_flags

    _reset_flags(monkeypatch, BWLOC_FEATURE_NEARBY=raw)
    assert get_flags().nearby is expected


def test_require_enabled():
    from bw_locations.feature_flags import require_enabled

    require_enabled(True)
    with pytest.raises(RuntimeError, match="Nearby is disabled"):
        require_enabled(False, message="Nearby is disabled")


def test_plot_search_flag_gates_plots(monkeypatch, client):
    params = {"q": "block 5", "type": "all"}
    assert client.get("/api/locations/search", params=params).json()["data"]["plots"]

    _reset_flags(monkeypatch, BWLOC_FEATURE_PLOT_SEARCH="0")
    body = client.get("/api/locations/search", params=params).json()
    assert body["data"]["plots"] == []
    assert body["data"]["wards"]
    assert body["totalResults"] == len(body["data"]["wards"])

    resp = client.get("/api/locations/search", params={"q": "block 5", "type": "plot"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Plot search is disabled"


def test_nearby_flag(monkeypatch, client):
    _reset_flags(monkeypatch, BWLOC_FEATURE_NEARBY="false")
    resp = client.get("/api/locations/nearby", params={"lat": -24.6, "lng": 25.9})
    assert resp.status_code == 404


def test_suggestions_flag(monkeypatch, client):
    _reset_flags(monkeypatch, BWLOC_FEATURE_SUGGESTIONS="0")
    assert client.get("/api/locations/suggestions", params={"q": "ga"}).status_code == 404
