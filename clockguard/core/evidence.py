"""Security evidence attached to attendance records.

Stored as a JSON string next to each clock event. Records written by older
clients or edited by hand may hold anything, so parsing is total: every
input maps to one of three variants and nothing raises.

- ``SecurityEvidence``: a current validation snapshot.
- ``DeviceResetEvidence``: an admin "reset device" marker.
- ``LegacyEvidence``: anything else, kept verbatim.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Union

from clockguard.core.fingerprint import describe_fingerprint
from clockguard.core.models import ClockEvent, RiskLevel, SecureLocationResult


@dataclass(frozen=True)
class SecurityEvidence:
    confidence: float
    risk_level: RiskLevel
    device_fingerprint: str
    timestamp: str
    warnings: tuple[str, ...] = ()
    detected_issues: tuple[str, ...] = ()
    event: str = ""
    location: str = ""
    kind: str = field(default="security", init=False)

    def to_dict(self) -> dict:
        return {
            "confidence": self.confidence,
            "riskLevel": self.risk_level.value,
            "deviceFingerprint": self.device_fingerprint,
            "warnings": list(self.warnings),
            "detectedIssues": list(self.detected_issues),
            "timestamp": self.timestamp,
            "event": self.event,
            "location": self.location,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True)
class DeviceResetEvidence:
    reset_timestamp: str = ""
    reset_reason: str = ""
    previous: SecurityEvidence | None = None
    kind: str = field(default="device_reset", init=False)


@dataclass(frozen=True)
class LegacyEvidence:
    raw: str
    kind: str = field(default="legacy", init=False)


Evidence = Union[SecurityEvidence, DeviceResetEvidence, LegacyEvidence]


def build_security_evidence(
    result: SecureLocationResult,
    event: ClockEvent,
    timestamp: str,
    location_name: str = "",
) -> SecurityEvidence:
    validation = result.validation
    return SecurityEvidence(
        confidence=validation.confidence,
        risk_level=validation.risk_level,
        device_fingerprint=result.encoded_fingerprint,
        timestamp=timestamp,
        warnings=tuple(validation.warnings),
        detected_issues=tuple(validation.detected_issues),
        event=event.value,
        location=location_name,
    )


def _str_list(value: object) -> tuple[str, ...] | None:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return None
    return tuple(value)


def _parse_security(data: dict) -> SecurityEvidence | None:
    confidence = data.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return None
    try:
        risk = RiskLevel(data.get("riskLevel"))
    except ValueError:
        return None
    warnings = _str_list(data.get("warnings"))
    issues = _str_list(data.get("detectedIssues"))
    if warnings is None or issues is None:
        return None
    return SecurityEvidence(
        confidence=confidence,
        risk_level=risk,
        device_fingerprint=str(data.get("deviceFingerprint") or ""),
        timestamp=str(data.get("timestamp") or ""),
        warnings=warnings,
        detected_issues=issues,
        event=str(data.get("event") or ""),
        location=str(data.get("location") or ""),
    )


def parse_security_data(raw: str | dict | None) -> Evidence:
    """Classify a stored ``security_data`` value. Never raises."""
    if isinstance(raw, dict):
        data = raw
        text = json.dumps(raw, default=str)
    else:
        text = raw or ""
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return LegacyEvidence(raw=str(text))

    if not isinstance(data, dict):
        return LegacyEvidence(raw=text)

    if data.get("device_reset") is True:
        return DeviceResetEvidence(
            reset_timestamp=str(data.get("reset_timestamp") or ""),
            reset_reason=str(data.get("reset_reason") or ""),
            previous=_parse_security(data),
        )

    evidence = _parse_security(data)
    return evidence if evidence is not None else LegacyEvidence(raw=text)


def security_warnings(evidence: Evidence) -> list[str]:
    if isinstance(evidence, SecurityEvidence):
        return list(evidence.warnings)
    if isinstance(evidence, DeviceResetEvidence) and evidence.previous is not None:
        return list(evidence.previous.warnings)
    return []


def describe_device(evidence: Evidence) -> str:
    if isinstance(evidence, SecurityEvidence):
        return describe_fingerprint(evidence.device_fingerprint)
    if isinstance(evidence, DeviceResetEvidence) and evidence.previous is not None:
        return describe_fingerprint(evidence.previous.device_fingerprint)
    return describe_fingerprint(None)
