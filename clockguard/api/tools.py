"""History, fingerprint, geofence and evidence endpoints."""

from __future__ import annotations

import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from clockguard.core.evidence import (
    DeviceResetEvidence,
    SecurityEvidence,
    describe_device,
    parse_security_data,
    security_warnings,
)
from clockguard.core.fingerprint import (
    decode_fingerprint,
    describe_fingerprint,
    fingerprint_device,
    fingerprint_to_dict,
)
from clockguard.core.geo import is_valid_coordinate
from clockguard.core.geofence import check_geofence, nearest_location
from clockguard.storage.locations import parse_locations

router = APIRouter(prefix="/api/v1")


async def _json_body(request: Request) -> dict | None:
    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _invalid_json() -> JSONResponse:
    return JSONResponse(content={"error": "invalid JSON"}, status_code=400)


@router.get("/history/{session_id}")
async def get_history(session_id: str) -> JSONResponse:
    from clockguard.main import get_processor

    history = get_processor().history_for(session_id)
    entries = [e.to_dict() for e in history.get()]
    return JSONResponse(content={"entries": entries, "capacity": history.capacity})


@router.delete("/history/{session_id}")
async def clear_history(session_id: str) -> JSONResponse:
    """Forget a session's stored positions (privacy)."""
    from clockguard.main import get_processor

    get_processor().history_for(session_id).clear()
    return JSONResponse(content={"cleared": True})


@router.post("/fingerprint")
async def encode_device(request: Request) -> JSONResponse:
    from clockguard.api.clock import parse_device

    body = await _json_body(request)
    if body is None:
        return _invalid_json()
    try:
        device = parse_device(body)
    except (TypeError, ValueError, OverflowError):
        return JSONResponse(content={"error": "invalid device"}, status_code=422)
    return JSONResponse(content={"fingerprint": fingerprint_device(device)})


@router.post("/fingerprint/decode")
async def decode_device(request: Request) -> JSONResponse:
    body = await _json_body(request)
    if body is None:
        return _invalid_json()
    encoded = str(body.get("fingerprint", ""))
    try:
        fp = decode_fingerprint(encoded)
    except (TypeError, ValueError):
        return JSONResponse(content={"error": "invalid fingerprint"}, status_code=422)
    return JSONResponse(content={
        "device": fingerprint_to_dict(fp),
        "label": describe_fingerprint(encoded),
    })


@router.post("/geofence/check")
async def geofence_check(request: Request) -> JSONResponse:
    """Check a position against the configured (or supplied) locations."""
    from clockguard.main import get_processor

    body = await _json_body(request)
    if body is None:
        return _invalid_json()
    try:
        lat = float(body["latitude"])
        lng = float(body["longitude"])
    except (KeyError, TypeError, ValueError):
        return JSONResponse(content={"error": "invalid position"}, status_code=422)
    if not is_valid_coordinate(lat, lng):
        return JSONResponse(content={"error": "invalid position"}, status_code=422)

    if "locations" in body:
        locations = parse_locations(body.get("locations") or [])
    else:
        locations = get_processor().valid_locations()

    result = check_geofence(lat, lng, locations)
    content = {
        "is_valid": result.is_valid,
        "location": result.matched_location.to_dict() if result.matched_location else None,
        "distance_m": result.distance,
        "nearest": None,
    }
    if not result.is_valid:
        nearest = nearest_location(lat, lng, locations)
        if nearest is not None:
            content["nearest"] = {
                "name": nearest.location.name,
                "distance_m": round(nearest.distance),
            }
    return JSONResponse(content=content)


@router.post("/evidence/inspect")
async def inspect_evidence(request: Request) -> JSONResponse:
    """Decode a stored ``security_data`` value for the admin device view."""
    body = await _json_body(request)
    if body is None:
        return _invalid_json()

    evidence = parse_security_data(body.get("security_data"))
    content = {
        "kind": evidence.kind,
        "device": describe_device(evidence),
        "warnings": security_warnings(evidence),
    }
    if isinstance(evidence, SecurityEvidence):
        content["evidence"] = evidence.to_dict()
    elif isinstance(evidence, DeviceResetEvidence):
        content["reset_timestamp"] = evidence.reset_timestamp
        content["reset_reason"] = evidence.reset_reason
    return JSONResponse(content=content)
