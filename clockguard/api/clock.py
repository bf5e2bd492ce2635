"""Clock-in / clock-out API endpoints.

This is the thin FastAPI adapter. It parses the JSON the attendance client
sends, converts it to internal models, and calls the processor.
"""

from __future__ import annotations

import json
import math

from fastapi import APIRouter, Request, Response

from clockguard.core.errors import GeolocationError
from clockguard.core.fingerprint import fingerprint_to_dict
from clockguard.core.geo import is_valid_coordinate
from clockguard.core.models import (
    ClockDecision,
    ClockEvent,
    ClockRequestData,
    DeviceEnvironment,
    GeoReading,
)
from clockguard.providers.submitted import SubmittedDeviceInfo

router = APIRouter(prefix="/api/v1")

_OUTCOME_STATUS = {
    "accepted": 200,
    "confirmation_required": 409,
    "rejected": 403,
}


def _json_response(content: dict, status_code: int = 200) -> Response:
    return Response(
        content=json.dumps(content),
        status_code=status_code,
        media_type="application/json",
    )


def _finite_float(value) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _optional_float(value) -> float | None:
    return None if value is None else _finite_float(value)


def _optional_int(value) -> int | None:
    return None if value is None else int(value)


def parse_position(pos: dict) -> GeoReading:
    """Parse a position. Raises ValueError/KeyError/TypeError on bad input."""
    latitude = _finite_float(pos["latitude"])
    longitude = _finite_float(pos["longitude"])
    if not is_valid_coordinate(latitude, longitude):
        raise ValueError(f"coordinates out of range: {latitude}, {longitude}")
    return GeoReading(
        latitude=latitude,
        longitude=longitude,
        accuracy=_finite_float(pos["accuracy"]),
        timestamp_ms=int(_finite_float(pos["timestamp"])),
        altitude=_optional_float(pos.get("altitude")),
        speed=_optional_float(pos.get("speed")),
    )


def parse_device(dev: dict) -> SubmittedDeviceInfo:
    return SubmittedDeviceInfo(
        user_agent=str(dev.get("user_agent", "")),
        platform=str(dev.get("platform", "")),
        language=str(dev.get("language", "")),
        timezone=str(dev.get("timezone", "")),
        screen_width=_optional_int(dev.get("screen_width")),
        screen_height=_optional_int(dev.get("screen_height")),
        device_memory=_optional_float(dev.get("device_memory")),
        hardware_concurrency=_optional_int(dev.get("hardware_concurrency")),
    )


def _parse_environment(env: dict, user_agent: str) -> DeviceEnvironment:
    return DeviceEnvironment(
        hostname=str(env.get("hostname", "")),
        protocol=str(env.get("protocol", "")),
        has_extension_runtime=bool(env.get("has_extension_runtime", False)),
        has_devtools_hook=bool(env.get("has_devtools_hook", False)),
        user_agent=str(env.get("user_agent", user_agent)),
    )


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _parse_clock_request(body: dict, event: ClockEvent, client_ip: str | None) -> ClockRequestData:
    device = parse_device(body.get("device") or {})

    reading = None
    if body.get("position") is not None:
        reading = parse_position(body["position"])

    error_kind = None
    error_message = None
    err = body.get("geolocation_error")
    if isinstance(err, dict):
        error_kind = err.get("kind")
        error_message = err.get("message")
    elif err is not None:
        error_kind = str(err)

    return ClockRequestData(
        event=event,
        session_id=str(body.get("session_id", "")),
        user_id=str(body.get("user_id", "")),
        reading=reading,
        geolocation_error=error_kind,
        error_message=error_message,
        device=device,
        environment=_parse_environment(body.get("environment") or {}, device.user_agent),
        client_ip=client_ip,
        confirmed=bool(body.get("confirmed", False)),
    )


def decision_to_dict(decision: ClockDecision, record_id: int = 0) -> dict:
    security = decision.security
    result = {
        "accepted": decision.accepted,
        "outcome": decision.outcome,
        "reason": decision.reason,
        "is_secure": security.is_secure,
        "validation": security.validation.to_dict(),
        "device_fingerprint": security.encoded_fingerprint,
        "device": fingerprint_to_dict(security.fingerprint),
        "location": {
            "lat": security.reading.latitude,
            "lng": security.reading.longitude,
        },
        "geofence": None,
        "nearest": None,
        "record_id": record_id,
    }
    if decision.geofence is not None:
        matched = decision.geofence.matched_location
        result["geofence"] = {
            "is_valid": decision.geofence.is_valid,
            "location": matched.to_dict() if matched else None,
            "distance_m": round(decision.geofence.distance, 1)
            if decision.geofence.distance is not None else None,
        }
    if decision.nearest is not None:
        result["nearest"] = {
            "name": decision.nearest.location.name,
            "distance_m": round(decision.nearest.distance),
        }
    return result


async def _handle_clock(request: Request, event: ClockEvent) -> Response:
    from clockguard.main import get_processor

    processor = get_processor()
    body_bytes = await request.body()

    try:
        body = json.loads(body_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _json_response({"accepted": False, "error": "invalid JSON"}, 400)
    if not isinstance(body, dict):
        return _json_response({"accepted": False, "error": "invalid JSON"}, 400)

    try:
        clock_request = _parse_clock_request(body, event, _client_ip(request))
    except (KeyError, TypeError, ValueError, OverflowError, AttributeError):
        return _json_response({"accepted": False, "error": "invalid position"}, 422)

    if not clock_request.session_id:
        return _json_response({"accepted": False, "error": "session_id is required"}, 422)

    try:
        decision, record_id = await processor.process_clock_event(clock_request)
    except GeolocationError as exc:
        return _json_response(
            {"accepted": False, "error": exc.kind.value, "message": exc.message},
            422,
        )

    return _json_response(
        decision_to_dict(decision, record_id),
        _OUTCOME_STATUS.get(decision.outcome, 200),
    )


@router.post("/clock-in")
async def clock_in(request: Request) -> Response:
    """Validate a clock-in attempt and record it when accepted."""
    return await _handle_clock(request, ClockEvent.CLOCK_IN)


@router.post("/clock-out")
async def clock_out(request: Request) -> Response:
    """Validate a clock-out attempt and record it when accepted."""
    return await _handle_clock(request, ClockEvent.CLOCK_OUT)
