"""Impossible-travel detection between two timestamped positions."""

from __future__ import annotations

import math

from clockguard.core.geo import haversine_m
from clockguard.core.models import Deduction, LocationHistoryEntry, VelocityCheck
from clockguard.core.rules import DetectionRules

MAX_REALISTIC_SPEED_KMH = 120.0


def check_velocity(
    previous: LocationHistoryEntry,
    current: LocationHistoryEntry,
    max_realistic_kmh: float = MAX_REALISTIC_SPEED_KMH,
) -> VelocityCheck:
    distance_m = haversine_m(
        previous.latitude, previous.longitude, current.latitude, current.longitude,
    )
    elapsed_s = (current.timestamp_ms - previous.timestamp_ms) / 1000

    if elapsed_s <= 0:
        # Any movement in zero (or negative) time is impossible.
        speed_kmh = math.inf if distance_m > 0 else 0.0
    else:
        speed_kmh = distance_m / elapsed_s * 3.6

    return VelocityCheck(
        is_realistic=speed_kmh <= max_realistic_kmh,
        speed_kmh=speed_kmh,
        max_realistic_kmh=max_realistic_kmh,
    )


def velocity_deduction(
    previous: LocationHistoryEntry | None,
    current: LocationHistoryEntry,
    rules: DetectionRules,
) -> Deduction | None:
    if previous is None:
        return None
    check = check_velocity(previous, current, rules.max_realistic_speed_kmh)
    if check.is_realistic:
        return None
    return Deduction(
        "impossible_velocity",
        f"Impossible travel speed detected: {check.speed_kmh:.1f} km/h",
        rules.impossible_velocity_penalty,
    )
