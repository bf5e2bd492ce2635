"""Tests for the security evidence tagged union."""

from __future__ import annotations

import json

from clockguard.core.evidence import (
    DeviceResetEvidence,
    LegacyEvidence,
    SecurityEvidence,
    build_security_evidence,
    describe_device,
    parse_security_data,
    security_warnings,
)
from clockguard.core.fingerprint import encode_fingerprint
from clockguard.core.models import (
    ClockEvent,
    DeviceFingerprint,
    RiskLevel,
    SecureLocationResult,
    ValidationResult,
)

from conftest import honest_reading

FINGERPRINT = DeviceFingerprint(platform="iPhone", screen_resolution="390x844")


def make_result() -> SecureLocationResult:
    return SecureLocationResult(
        reading=honest_reading(),
        validation=ValidationResult(
            is_valid=True, confidence=60, risk_level=RiskLevel.MEDIUM,
            warnings=["Device appears to be in developer/debug mode",
                      "Suspiciously high GPS accuracy detected"],
            detected_issues=["developer_mode", "perfect_accuracy"],
        ),
        fingerprint=FINGERPRINT,
        encoded_fingerprint=encode_fingerprint(FINGERPRINT),
        is_secure=True,
    )


def test_stored_evidence_parses_back():
    evidence = build_security_evidence(make_result(), ClockEvent.CLOCK_IN,
                                       "2026-10-17T08:00:00+00:00", "Head office")
    parsed = parse_security_data(evidence.to_json())
    assert isinstance(parsed, SecurityEvidence)
    assert parsed == evidence
    assert parsed.kind == "security"
    assert parsed.event == "clock_in"
    assert describe_device(parsed) == "iPhone (390x844)"
    assert security_warnings(parsed)[0].startswith("Device appears")


def test_older_payload_without_issue_tags():
    raw = json.dumps({
        "confidence": 85,
        "riskLevel": "low",
        "deviceFingerprint": encode_fingerprint(FINGERPRINT),
        "warnings": [],
        "timestamp": "2025-01-01T00:00:00Z",
        "photoStatus": "uploaded",
    })
    parsed = parse_security_data(raw)
    assert isinstance(parsed, SecurityEvidence)
    assert parsed.detected_issues == ()


def test_device_reset_marker():
    evidence = build_security_evidence(make_result(), ClockEvent.CLOCK_OUT, "t")
    data = evidence.to_dict()
    data.update(device_reset=True, reset_timestamp="2026-10-17T09:00:00Z",
                reset_reason="Admin reset")

    parsed = parse_security_data(data)
    assert isinstance(parsed, DeviceResetEvidence)
    assert parsed.reset_reason == "Admin reset"
    assert parsed.previous is not None
    assert describe_device(parsed) == "iPhone (390x844)"
    assert len(security_warnings(parsed)) == 2


def test_reset_marker_without_snapshot():
    parsed = parse_security_data({"device_reset": True})
    assert isinstance(parsed, DeviceResetEvidence)
    assert parsed.previous is None
    assert security_warnings(parsed) == []


def test_anything_else_is_legacy():
    samples = [
        None,
        "",
        "not json",
        "[1, 2, 3]",
        '"just a string"',
        json.dumps({"confidence": "high", "riskLevel": "low"}),
        json.dumps({"confidence": 80, "riskLevel": "extreme"}),
        json.dumps({"confidence": 80, "riskLevel": "low", "warnings": "oops"}),
        json.dumps({"confidence": True, "riskLevel": "low"}),
    ]
    for raw in samples:
        parsed = parse_security_data(raw)
        assert isinstance(parsed, LegacyEvidence), raw
        assert security_warnings(parsed) == []
        assert describe_device(parsed) == "Unknown device"


def test_legacy_keeps_raw_text():
    assert parse_security_data("not json").raw == "not json"
