"""Providers backed by what the attendance client submitted with its request.

The browser samples the position and device properties; the server only
sees the values it was sent.
"""

from __future__ import annotations

from dataclasses import dataclass

from clockguard.core.errors import GeolocationError, GeolocationErrorKind
from clockguard.core.models import GeoReading
from clockguard.providers.base import PositionOptions


class SubmittedLocationProvider:
    """LocationProvider replaying a client-side reading or failure."""

    def __init__(
        self,
        reading: GeoReading | None = None,
        error: GeolocationErrorKind | None = None,
        message: str | None = None,
    ) -> None:
        self._reading = reading
        self._error = error
        self._message = message

    async def request(self, options: PositionOptions) -> GeoReading:
        if self._error is not None:
            raise GeolocationError(self._error, self._message)
        if self._reading is None:
            raise GeolocationError(GeolocationErrorKind.POSITION_UNAVAILABLE)
        return self._reading


@dataclass(frozen=True)
class SubmittedDeviceInfo:
    """DeviceInfoProvider over the ``device`` section of a request."""
    user_agent: str = ""
    platform: str = ""
    language: str = ""
    timezone: str = ""
    screen_width: int | None = None
    screen_height: int | None = None
    device_memory: float | None = None
    hardware_concurrency: int | None = None
