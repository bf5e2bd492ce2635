"""Secure-location acquisition flow.

Single pass, no internal retries:

1. request the device position (bounded wait),
2. validate it against the session's latest history entry,
3. fingerprint the device,
4. append the reading to the history.

A geolocation failure surfaces as GeolocationError and leaves the history
untouched.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from clockguard.core.errors import GeolocationError, GeolocationErrorKind
from clockguard.core.fingerprint import encode_fingerprint, generate_fingerprint
from clockguard.core.models import (
    DeviceEnvironment,
    LocationHistoryEntry,
    RiskLevel,
    SecureLocationResult,
)
from clockguard.providers.base import PositionOptions

if TYPE_CHECKING:
    from clockguard.core.history import LocationHistory
    from clockguard.core.validator import LocationValidator
    from clockguard.providers.base import DeviceInfoProvider, LocationProvider

log = structlog.get_logger()


class SecureLocationService:
    """Acquires a position and attaches a risk assessment to it."""

    def __init__(
        self,
        validator: LocationValidator,
        options: PositionOptions | None = None,
    ) -> None:
        self._validator = validator
        self._options = options or PositionOptions()

    async def _request_position(self, provider: LocationProvider):
        timeout_s = self._options.timeout_ms / 1000
        try:
            return await asyncio.wait_for(provider.request(self._options), timeout=timeout_s)
        except asyncio.TimeoutError as exc:
            raise GeolocationError(GeolocationErrorKind.TIMEOUT) from exc

    async def acquire_secure_location(
        self,
        location_provider: LocationProvider,
        device_provider: DeviceInfoProvider,
        history: LocationHistory,
        environment: DeviceEnvironment | None = None,
        client_ip: str | None = None,
    ) -> SecureLocationResult:
        try:
            reading = await self._request_position(location_provider)
        except GeolocationError as exc:
            log.info("geolocation_failed", kind=exc.kind.value)
            raise

        previous = history.latest()
        validation = await self._validator.validate(
            reading, previous=previous, environment=environment, client_ip=client_ip,
        )
        fingerprint = generate_fingerprint(device_provider)
        history.append(LocationHistoryEntry.from_reading(reading))

        return SecureLocationResult(
            reading=reading,
            validation=validation,
            fingerprint=fingerprint,
            encoded_fingerprint=encode_fingerprint(fingerprint),
            is_secure=validation.is_valid and validation.risk_level != RiskLevel.HIGH,
        )
