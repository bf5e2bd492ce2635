"""Mock-location and developer-mode heuristics.

Each check inspects a single reading (or the client environment) and either
returns a Deduction or nothing. Checks are independent: the order only
affects the order of warnings, never the score.
"""

from __future__ import annotations

import re

from clockguard.core.models import (
    Deduction,
    DeviceEnvironment,
    GeoReading,
    ValidationResult,
)
from clockguard.core.rules import DetectionRules, classify_risk

_PATTERNS = (
    re.compile(r"(\d)\1{3,}"),                          # same digit 4+ times
    re.compile(r"1234|2345|3456|4567|5678|6789"),       # ascending run
    re.compile(r"9876|8765|7654|6543|5432|4321"),       # descending run
)

_MOCK_GPS_AGENT_MARKERS = ("MockLocation", "FakeGPS")


def _decimal_digits(value: float) -> str:
    """Digits after the decimal point, as the shortest round-trip repr prints them."""
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(value, ".17f").rstrip("0")
    _, _, decimals = text.partition(".")
    return decimals


def has_artificial_pattern(value: float) -> bool:
    decimals = _decimal_digits(value)
    if len(decimals) < 4:
        return False
    return any(p.search(decimals) for p in _PATTERNS)


def _is_integer(value: float) -> bool:
    return float(value) % 1 == 0


def mock_location_deductions(
    reading: GeoReading,
    now_ms: int,
    rules: DetectionRules,
) -> list[Deduction]:
    found: list[Deduction] = []

    if reading.accuracy < rules.min_plausible_accuracy_m:
        found.append(Deduction(
            "perfect_accuracy",
            "Suspiciously high GPS accuracy detected",
            rules.perfect_accuracy_penalty,
        ))

    if _is_integer(reading.latitude) or _is_integer(reading.longitude):
        found.append(Deduction(
            "rounded_coordinates",
            "Coordinates appear to be manually set",
            rules.rounded_coordinates_penalty,
        ))

    if has_artificial_pattern(reading.latitude) or has_artificial_pattern(reading.longitude):
        found.append(Deduction(
            "artificial_pattern",
            "Coordinates show artificial patterns",
            rules.artificial_pattern_penalty,
        ))

    if reading.altitude is not None and not (
        rules.min_altitude_m <= reading.altitude <= rules.max_altitude_m
    ):
        found.append(Deduction(
            "unrealistic_altitude",
            "Unrealistic altitude detected",
            rules.unrealistic_altitude_penalty,
        ))

    if reading.speed is not None and reading.speed < 0:
        found.append(Deduction(
            "invalid_speed",
            "Invalid speed value detected",
            rules.invalid_speed_penalty,
        ))

    # Readings from the future are as suspicious as stale ones.
    if abs(now_ms - reading.timestamp_ms) > rules.max_reading_age_ms:
        found.append(Deduction(
            "outdated_timestamp",
            "GPS timestamp is significantly outdated",
            rules.outdated_timestamp_penalty,
        ))

    return found


def detect_mock_location(
    reading: GeoReading,
    now_ms: int,
    rules: DetectionRules | None = None,
) -> ValidationResult:
    """Score a single reading for signs of spoofing.

    Confidence is not clamped here and may go below zero.
    """
    rules = rules or DetectionRules()
    deductions = mock_location_deductions(reading, now_ms, rules)
    confidence = rules.base_confidence - sum(d.penalty for d in deductions)
    return ValidationResult(
        is_valid=confidence >= rules.detector_valid_from,
        confidence=confidence,
        risk_level=classify_risk(
            confidence, rules.detector_high_below, rules.detector_medium_below,
        ),
        warnings=[d.warning for d in deductions],
        detected_issues=[d.tag for d in deductions],
    )


def developer_mode_indicators(env: DeviceEnvironment) -> list[bool]:
    user_agent = env.user_agent or ""
    return [
        env.hostname == "localhost",
        env.protocol == "file:",
        bool(env.has_extension_runtime),
        bool(env.has_devtools_hook),
        *(marker in user_agent for marker in _MOCK_GPS_AGENT_MARKERS),
    ]


def check_developer_mode(env: DeviceEnvironment | None, rules: DetectionRules | None = None) -> bool:
    """True when enough debug/mock indicators are present at once."""
    if env is None:
        return False
    rules = rules or DetectionRules()
    return sum(developer_mode_indicators(env)) >= rules.developer_mode_min_indicators


def developer_mode_deduction(
    env: DeviceEnvironment | None,
    rules: DetectionRules,
) -> Deduction | None:
    if not check_developer_mode(env, rules):
        return None
    return Deduction(
        "developer_mode",
        "Device appears to be in developer/debug mode",
        rules.developer_mode_penalty,
    )
