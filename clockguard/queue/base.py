"""Hand-off port for accepted clock events awaiting persistence."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from clockguard.core.models import AttendanceRecord


class RecordQueue(Protocol):
    """Accepted AttendanceRecords, delivered in order to the storage consumer."""

    async def put(self, record: AttendanceRecord) -> None: ...

    async def get(self) -> AttendanceRecord: ...

    def qsize(self) -> int: ...
