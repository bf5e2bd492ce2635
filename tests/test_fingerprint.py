"""Tests for device fingerprinting."""

from __future__ import annotations

import base64
import json

import pytest

from clockguard.core.fingerprint import (
    decode_fingerprint,
    describe_fingerprint,
    encode_fingerprint,
    fingerprint_device,
    generate_fingerprint,
)
from clockguard.providers.submitted import SubmittedDeviceInfo

PIXEL = SubmittedDeviceInfo(
    user_agent="Mozilla/5.0 (Linux; Android 14; Pixel 7)",
    platform="Linux armv8l",
    language="id-ID",
    timezone="Asia/Jakarta",
    screen_width=412,
    screen_height=915,
    device_memory=8,
    hardware_concurrency=8,
)


class FlakyDevice:
    """A provider whose reads partly blow up."""
    user_agent = "Mozilla/5.0"
    language = "en-US"
    timezone = "Europe/Paris"
    screen_width = 1920
    screen_height = 1080

    @property
    def platform(self):
        raise RuntimeError("navigator.platform unavailable")

    @property
    def device_memory(self):
        raise AttributeError("not exposed")


def test_generate_from_provider():
    fp = generate_fingerprint(PIXEL)
    assert fp.platform == "Linux armv8l"
    assert fp.screen_resolution == "412x915"
    assert fp.device_memory == 8
    assert fp.hardware_concurrency == 8


def test_missing_and_failing_attributes_never_raise():
    fp = generate_fingerprint(FlakyDevice())
    assert fp.platform == ""
    assert fp.device_memory is None
    assert fp.hardware_concurrency is None
    assert fp.screen_resolution == "1920x1080"


def test_unknown_screen_size():
    fp = generate_fingerprint(SubmittedDeviceInfo(platform="Win32"))
    assert fp.screen_resolution == ""


def test_encoding_is_base64_json():
    encoded = fingerprint_device(PIXEL)
    data = json.loads(base64.b64decode(encoded))
    assert data["screenResolution"] == "412x915"
    assert data["userAgent"].startswith("Mozilla/5.0")
    assert data["hardwareConcurrency"] == 8


def test_absent_optional_fields_are_omitted():
    data = json.loads(base64.b64decode(fingerprint_device(FlakyDevice())))
    assert "deviceMemory" not in data
    assert "hardwareConcurrency" not in data


def test_decode_reverses_encode():
    fp = generate_fingerprint(PIXEL)
    assert decode_fingerprint(encode_fingerprint(fp)) == fp


def test_decode_rejects_garbage():
    with pytest.raises(ValueError):
        decode_fingerprint("not base64 at all!")
    with pytest.raises(ValueError):
        decode_fingerprint(base64.b64encode(b"[1, 2]").decode())


def test_describe_fingerprint():
    assert describe_fingerprint(fingerprint_device(PIXEL)) == "Linux armv8l (412x915)"
    assert describe_fingerprint(None) == "Unknown device"
    assert describe_fingerprint("%%%") == "Unknown device"
    assert describe_fingerprint(fingerprint_device(SubmittedDeviceInfo())) == "Unknown (Unknown)"
