from __future__ import annotations

import dataclasses
import logging
import math
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException

from bw_locations.api.schemas import PinnedLocation, SelectionPayload
from bw_locations.cascade import CascadeController
from bw_locations.errors import LocationError, NotFoundError
from bw_locations.feature_flags import get_flags, require_enabled
from bw_locations.geo import BOTSWANA_BOUNDS, find_nearby, parse_bounds, project_to_box
from bw_locations.models import SearchType
from bw_locations.resolver import ExactMatchResolver
from bw_locations.search import SearchIndex, parse_search_type, suggest
from bw_locations.store import LocationStore, get_store


logger = logging.getLogger("bwloc.api")

router = APIRouter(tags=["locations"])

MAX_SEARCH_LIMIT = 100
MAX_SUGGESTION_LIMIT = 50


def _store() -> LocationStore:
    return get_store()


@lru_cache(maxsize=4)
def _search_index(store: LocationStore) -> SearchIndex:
    return SearchIndex(store)


def _index() -> SearchIndex:
    return _search_index(_store())


def _http_error(exc: LocationError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _parse_id(raw: str, kind: str) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {kind} ID") from None
    if value <= 0:
        raise HTTPException(status_code=400, detail=f"Invalid {kind} ID")
    return value


def _require_feature(flag: bool, name: str) -> None:
    try:
        require_enabled(flag, message=f"{name} is disabled")
    except RuntimeError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@router.get("/locations/districts")
def list_districts() -> Dict[str, Any]:
    districts = _store().get_districts()
    return {"success": True, "data": [d.to_dict() for d in districts], "count": len(districts)}


@router.get("/locations/districts/{district_id}/settlements")
def list_settlements(district_id: str) -> Dict[str, Any]:
    did = _parse_id(district_id, "district")
    try:
        result = _store().get_settlements(did)
    except LocationError as exc:
        raise _http_error(exc) from exc
    return {"success": True, "data": result.to_dict(), "count": len(result.settlements)}


@router.get("/locations/settlements/{settlement_id}/wards")
def list_wards(settlement_id: str) -> Dict[str, Any]:
    sid = _parse_id(settlement_id, "settlement")
    try:
        result = _store().get_wards(sid)
    except LocationError as exc:
        raise _http_error(exc) from exc
    return {"success": True, "data": result.to_dict(), "count": len(result.wards)}


@router.get("/locations/wards/{ward_id}/plots")
def list_plots(ward_id: str) -> Dict[str, Any]:
    wid = _parse_id(ward_id, "ward")
    try:
        result = _store().get_plots(wid)
    except LocationError as exc:
        raise _http_error(exc) from exc
    return {"success": True, "data": result.to_dict(), "count": len(result.plots)}


@router.get("/locations/search")
def search_locations(
    q: str = "",
    type: str = "all",
    limit: int = 20,
    district_id: Optional[int] = None,
    settlement_id: Optional[int] = None,
    request_id: Optional[int] = None,
) -> Dict[str, Any]:
    flags = get_flags()
    limit = _clamp(limit, 1, MAX_SEARCH_LIMIT)
    try:
        search_type = parse_search_type(type)
        if search_type is SearchType.PLOT:
            _require_feature(flags.plot_search, "Plot search")
        result = _index().search(
            q,
            search_type,
            limit,
            district_id=district_id,
            settlement_id=settlement_id,
            request_id=request_id,
        )
    except LocationError as exc:
        raise _http_error(exc) from exc
    if not flags.plot_search and result.plots:
        result = dataclasses.replace(result, plots=[])
    return {
        "success": True,
        "data": result.to_dict(),
        "query": q,
        "type": result.type.value,
        "totalResults": result.total_results,
        "limit": limit,
        "requestId": request_id,
    }


@router.get("/locations/suggestions")
def location_suggestions(q: str = "", limit: int = 10) -> Dict[str, Any]:
    _require_feature(get_flags().suggestions, "Suggestions")
    items = suggest(_store(), q, _clamp(limit, 1, MAX_SUGGESTION_LIMIT))
    return {
        "success": True,
        "data": [s.to_dict() for s in items],
        "query": q,
        "count": len(items),
    }


@router.get("/locations/resolve")
def resolve_location(level: str, text: str = "", parent_id: Optional[int] = None) -> Dict[str, Any]:
    try:
        match = ExactMatchResolver(_store()).resolve(level, text, parent_id)
    except LocationError as exc:
        raise _http_error(exc) from exc
    return {"success": True, "data": match.to_dict() if match is not None else None}


@router.get("/locations/selection")
def location_selection(
    district_id: Optional[int] = None,
    settlement_id: Optional[int] = None,
    ward_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Consolidated {state, city, ward} for a (possibly partial) id triple.

    The deepest id wins; parents are inferred from it.
    """
    controller = CascadeController(_store())
    try:
        if district_id is not None:
            controller.select_district_id(district_id)
        if settlement_id is not None:
            controller.select_settlement_id(settlement_id)
        if ward_id is not None:
            controller.select_ward_id(ward_id)
    except LocationError as exc:
        raise _http_error(exc) from exc
    return {
        "success": True,
        "data": SelectionPayload.from_selection(controller.selection).model_dump(),
        "ids": controller.state.to_dict(),
    }


@router.get("/locations/nearby")
def nearby_locations(
    lat: float,
    lng: float,
    radius_km: float = 25.0,
    level: str = "settlement",
) -> Dict[str, Any]:
    _require_feature(get_flags().nearby, "Nearby search")
    try:
        hits = find_nearby(_store(), lat, lng, radius_km, level)
    except LocationError as exc:
        raise _http_error(exc) from exc
    return {"success": True, "data": [h.to_dict() for h in hits], "count": len(hits)}


@router.get("/locations/project")
def project_location(lat: float, lng: float, bbox: str = "") -> Dict[str, Any]:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise HTTPException(status_code=400, detail="lat/lng must be finite numbers")
    bounds = BOTSWANA_BOUNDS
    if bbox:
        try:
            bounds = parse_bounds(bbox)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    point = project_to_box(lat, lng, bounds)
    return {"success": True, "data": point.to_dict(), "inBounds": bounds.contains(lat, lng)}


@router.post("/locations/pin")
def pin_location(payload: PinnedLocation = Body(...)) -> Dict[str, Any]:
    data: Dict[str, Any] = {"pin": payload.model_dump(mode="json"), "point": None, "inBounds": None}
    if payload.has_coordinates:
        lat, lng = payload.latitude, payload.longitude
        data["point"] = project_to_box(lat, lng).to_dict()
        data["inBounds"] = BOTSWANA_BOUNDS.contains(lat, lng)
    logger.info("pin accepted source=%s in_bounds=%s", payload.location_source.value, data["inBounds"])
    return {"success": True, "data": data}

