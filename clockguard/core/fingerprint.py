"""Device fingerprinting.

The fingerprint is weak corroborating evidence, not identity. It is stored
as base64 of its JSON form so it fits a text column and can be decoded
again for admin inspection.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, TYPE_CHECKING

from clockguard.core.models import DeviceFingerprint

if TYPE_CHECKING:
    from clockguard.providers.base import DeviceInfoProvider

# Transport keys, in field order.
_KEYS = (
    ("user_agent", "userAgent"),
    ("platform", "platform"),
    ("language", "language"),
    ("timezone", "timezone"),
    ("screen_resolution", "screenResolution"),
    ("device_memory", "deviceMemory"),
    ("hardware_concurrency", "hardwareConcurrency"),
)


def _read(provider: Any, name: str, default: Any = None) -> Any:
    try:
        value = getattr(provider, name)
    except Exception:
        return default
    return default if value is None else value


def generate_fingerprint(provider: DeviceInfoProvider) -> DeviceFingerprint:
    """Read the provider into a fingerprint. Never raises."""
    width = _read(provider, "screen_width")
    height = _read(provider, "screen_height")
    resolution = f"{width}x{height}" if width is not None and height is not None else ""
    return DeviceFingerprint(
        user_agent=str(_read(provider, "user_agent", "")),
        platform=str(_read(provider, "platform", "")),
        language=str(_read(provider, "language", "")),
        timezone=str(_read(provider, "timezone", "")),
        screen_resolution=resolution,
        device_memory=_read(provider, "device_memory"),
        hardware_concurrency=_read(provider, "hardware_concurrency"),
    )


def fingerprint_to_dict(fp: DeviceFingerprint) -> dict:
    data = {}
    for attr, key in _KEYS:
        value = getattr(fp, attr)
        if value is not None:
            data[key] = value
    return data


def encode_fingerprint(fp: DeviceFingerprint) -> str:
    payload = json.dumps(fingerprint_to_dict(fp), separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_fingerprint(encoded: str) -> DeviceFingerprint:
    """Inverse of encode_fingerprint. Raises ValueError if the input is not one."""
    try:
        data = json.loads(base64.b64decode(encoded, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("not an encoded device fingerprint") from exc
    if not isinstance(data, dict):
        raise ValueError("not an encoded device fingerprint")

    kwargs = {}
    for attr, key in _KEYS:
        if key in data:
            kwargs[attr] = data[key]
    return DeviceFingerprint(**kwargs)


def fingerprint_device(provider: DeviceInfoProvider) -> str:
    return encode_fingerprint(generate_fingerprint(provider))


def describe_fingerprint(encoded: str | None) -> str:
    """Short human label, e.g. "Linux armv8l (412x915)". Never raises."""
    if not encoded:
        return "Unknown device"
    try:
        fp = decode_fingerprint(encoded)
    except ValueError:
        return "Unknown device"
    return f"{fp.platform or 'Unknown'} ({fp.screen_resolution or 'Unknown'})"
