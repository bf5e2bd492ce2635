"""File-based storage implementation.

Stores attendance records as JSON Lines, one line per accepted clock event.

Directory structure: base_dir/YYYY/MM/DD/attendance.jsonl
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from clockguard.core.models import AttendanceRecord

log = structlog.get_logger()


class FileAttendanceStorage:
    """AttendanceStorage backed by day-partitioned files on disk."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _day_dir(self, timestamp_ms: int) -> Path:
        """Return the directory for a given timestamp."""
        dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
        path = self._base_dir / f"{dt.year:04d}" / f"{dt.month:02d}" / f"{dt.day:02d}"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _serialize_record(self, record: AttendanceRecord) -> str:
        ts = datetime.fromtimestamp(record.server_timestamp_ms / 1000, tz=timezone.utc)
        data = {
            "id": record.record_id,
            "ts": ts.isoformat(),
            "event": record.event.value,
            "user_id": record.user_id,
            "session": record.session_id[:8],
            "location": f"{record.reading.latitude},{record.reading.longitude}",
            "location_name": record.location_name,
            "reading": asdict(record.reading),
            "risk_level": record.risk_level.value,
            "device_fingerprint": record.encoded_fingerprint,
            "security_data": record.security_data,
        }
        return json.dumps(data, separators=(",", ":"))

    async def store(self, record: AttendanceRecord) -> None:
        """Append a single attendance record to today's file."""
        day_dir = self._day_dir(record.server_timestamp_ms)
        jsonl_path = day_dir / "attendance.jsonl"
        with open(jsonl_path, "a") as f:
            f.write(self._serialize_record(record) + "\n")

        log.debug("record_written", record_id=record.record_id,
                  path=str(day_dir))

    async def store_batch(self, records: list[AttendanceRecord]) -> None:
        """Store a batch of attendance records."""
        for record in records:
            await self.store(record)

    def read_all_records(self) -> list[dict]:
        """Read every stored record, oldest partition first."""
        records: list[dict] = []
        for path in sorted(self._base_dir.glob("*/*/*/attendance.jsonl")):
            with open(path) as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(json.loads(line))
                    except json.JSONDecodeError:
                        log.warning("record_line_corrupt", path=str(path))
        return records
