"""Tunable heuristic constants for the anti-fraud checks.

All penalties are confidence points deducted from a base of 100. The raw
mock detector and the comprehensive validator classify risk with separate
threshold sets; keep them distinct.
"""

from __future__ import annotations

from dataclasses import dataclass

from clockguard.core.models import RiskLevel


@dataclass
class DetectionRules:
    base_confidence: float = 100.0

    # Mock-location detector
    min_plausible_accuracy_m: float = 5.0
    perfect_accuracy_penalty: float = 15.0
    rounded_coordinates_penalty: float = 20.0
    artificial_pattern_penalty: float = 15.0
    min_altitude_m: float = -100.0
    max_altitude_m: float = 10_000.0
    unrealistic_altitude_penalty: float = 10.0
    invalid_speed_penalty: float = 10.0
    max_reading_age_ms: int = 30_000
    outdated_timestamp_penalty: float = 10.0

    # Mock detector classification
    detector_high_below: float = 60.0
    detector_medium_below: float = 80.0
    detector_valid_from: float = 70.0

    # Developer mode
    developer_mode_min_indicators: int = 3
    developer_mode_penalty: float = 25.0

    # Velocity
    max_realistic_speed_kmh: float = 120.0
    impossible_velocity_penalty: float = 30.0

    # Network cross-check
    max_network_distance_m: float = 1000.0
    location_mismatch_penalty: float = 20.0

    # Comprehensive validator classification
    combined_high_below: float = 50.0
    combined_medium_below: float = 75.0
    combined_valid_from: float = 60.0


def classify_risk(confidence: float, high_below: float, medium_below: float) -> RiskLevel:
    if confidence < high_below:
        return RiskLevel.HIGH
    if confidence < medium_below:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
