"""Capability interfaces (ports) for device and network location sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from clockguard.core.models import GeoReading, NetworkLocation


@dataclass(frozen=True)
class PositionOptions:
    high_accuracy: bool = True
    timeout_ms: int = 15_000
    max_cache_age_ms: int = 0


class LocationProvider(Protocol):
    """Port: acquires the device position. Raises GeolocationError on failure."""

    async def request(self, options: PositionOptions) -> GeoReading: ...


class DeviceInfoProvider(Protocol):
    """Port: read-only view of browser/device properties."""

    @property
    def user_agent(self) -> str: ...

    @property
    def platform(self) -> str: ...

    @property
    def language(self) -> str: ...

    @property
    def timezone(self) -> str: ...

    @property
    def screen_width(self) -> int: ...

    @property
    def screen_height(self) -> int: ...

    @property
    def device_memory(self) -> float | None: ...

    @property
    def hardware_concurrency(self) -> int | None: ...


class NetworkLocator(Protocol):
    """Port: best-effort IP based location estimate. Returns None on any failure."""

    async def locate(self, client_ip: str | None = None) -> NetworkLocation | None: ...
