"""Comprehensive location validator.

Combines the mock-location detector, the developer-mode heuristic, the
velocity check and the network cross-check into one risk assessment.
Confidence is re-derived from the union of triggered deductions rather
than compounded from the sub-results.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, TYPE_CHECKING

import structlog

from clockguard.core.geo import haversine_m
from clockguard.core.mock_detection import developer_mode_deduction, mock_location_deductions
from clockguard.core.models import (
    Deduction,
    DeviceEnvironment,
    GeoReading,
    LocationHistoryEntry,
    ValidationResult,
)
from clockguard.core.rules import DetectionRules, classify_risk
from clockguard.core.velocity import velocity_deduction

if TYPE_CHECKING:
    from clockguard.providers.base import NetworkLocator

log = structlog.get_logger()


def _now_ms() -> int:
    return int(time.time() * 1000)


class LocationValidator:
    """Runs every anti-fraud check against one reading."""

    def __init__(
        self,
        rules: DetectionRules | None = None,
        network_locator: NetworkLocator | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._rules = rules or DetectionRules()
        self._network = network_locator
        self._clock = clock

    async def _velocity(
        self,
        reading: GeoReading,
        previous: LocationHistoryEntry | None,
    ) -> Deduction | None:
        return velocity_deduction(previous, LocationHistoryEntry.from_reading(reading), self._rules)

    async def _network_mismatch(
        self,
        reading: GeoReading,
        client_ip: str | None,
    ) -> Deduction | None:
        if self._network is None:
            return None
        try:
            estimate = await self._network.locate(client_ip)
        except Exception:
            log.debug("network_check_skipped", exc_info=True)
            return None
        if estimate is None:
            return None

        distance = haversine_m(
            reading.latitude, reading.longitude, estimate.latitude, estimate.longitude,
        )
        if distance <= self._rules.max_network_distance_m:
            return None
        return Deduction(
            "location_mismatch",
            "GPS location differs significantly from network location",
            self._rules.location_mismatch_penalty,
        )

    async def validate(
        self,
        reading: GeoReading,
        previous: LocationHistoryEntry | None = None,
        environment: DeviceEnvironment | None = None,
        client_ip: str | None = None,
    ) -> ValidationResult:
        rules = self._rules
        deductions = mock_location_deductions(reading, self._clock(), rules)

        dev_mode = developer_mode_deduction(environment, rules)
        if dev_mode is not None:
            deductions.append(dev_mode)

        velocity, network = await asyncio.gather(
            self._velocity(reading, previous),
            self._network_mismatch(reading, client_ip),
        )
        deductions.extend(d for d in (velocity, network) if d is not None)

        raw = rules.base_confidence - sum(d.penalty for d in deductions)
        confidence = max(0.0, min(rules.base_confidence, raw))

        result = ValidationResult(
            is_valid=confidence >= rules.combined_valid_from,
            confidence=confidence,
            risk_level=classify_risk(
                confidence, rules.combined_high_below, rules.combined_medium_below,
            ),
            warnings=[d.warning for d in deductions],
            detected_issues=[d.tag for d in deductions],
        )
        log.debug("location_validated", confidence=confidence,
                  risk=result.risk_level.value, issues=result.detected_issues)
        return result
