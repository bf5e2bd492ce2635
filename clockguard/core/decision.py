"""Clock-in/clock-out decision policy.

Applied identically to both events:

- high risk (or an insecure result) is rejected outright,
- medium risk needs an explicit user confirmation,
- the position must then fall inside an active geofence.
"""

from __future__ import annotations

from typing import Iterable

from clockguard.core.geofence import check_geofence, nearest_location
from clockguard.core.models import (
    ClockDecision,
    RiskLevel,
    SecureLocationResult,
    ValidLocation,
)

ACCEPTED = "accepted"
CONFIRMATION_REQUIRED = "confirmation_required"
REJECTED = "rejected"


def decide_clock_event(
    security: SecureLocationResult,
    locations: Iterable[ValidLocation],
    confirmed: bool = False,
) -> ClockDecision:
    validation = security.validation

    if not security.is_secure or validation.risk_level == RiskLevel.HIGH:
        return ClockDecision(REJECTED, "high_risk", security)

    if validation.risk_level == RiskLevel.MEDIUM and not confirmed:
        return ClockDecision(CONFIRMATION_REQUIRED, "confirmation_required", security)

    active = [loc for loc in locations if loc.active]
    if not active:
        return ClockDecision(REJECTED, "no_active_locations", security)

    reading = security.reading
    geofence = check_geofence(reading.latitude, reading.longitude, active)
    if not geofence.is_valid:
        nearest = nearest_location(reading.latitude, reading.longitude, active)
        return ClockDecision(REJECTED, "outside_geofence", security,
                             geofence=geofence, nearest=nearest)

    return ClockDecision(ACCEPTED, "ok", security, geofence=geofence)
