"""Bounded in-process buffer between the clock endpoints and the storage writer."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clockguard.core.models import AttendanceRecord


class AsyncioRecordQueue:
    """RecordQueue over asyncio.Queue.

    Records live only in memory: anything still queued at shutdown is lost.
    `put` waits when `max_size` records are pending.
    """

    def __init__(self, max_size: int = 1_000) -> None:
        self._queue: asyncio.Queue[AttendanceRecord] = asyncio.Queue(maxsize=max_size)

    async def put(self, record: AttendanceRecord) -> None:
        await self._queue.put(record)

    async def get(self) -> AttendanceRecord:
        return await self._queue.get()

    def qsize(self) -> int:
        return self._queue.qsize()
