"""Storage interfaces (ports) for records, history and configured locations."""

from __future__ import annotations

from typing import Any, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from clockguard.core.models import AttendanceRecord, ValidLocation


class AttendanceStorage(Protocol):
    """Port: persists accepted attendance records to durable storage."""

    async def store(self, record: AttendanceRecord) -> None: ...

    async def store_batch(self, records: list[AttendanceRecord]) -> None: ...


class KeyValueStore(Protocol):
    """Port: small durable key-value store holding JSON-compatible values."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class LocationSource(Protocol):
    """Port: read-only list of admin-configured valid locations."""

    def list_locations(self) -> list[ValidLocation]: ...
