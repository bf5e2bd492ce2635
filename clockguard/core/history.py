"""Bounded per-session location history used for velocity checks.

This is local, best-effort context and not a source of truth: unreadable
entries are dropped rather than reported.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from clockguard.core.geo import is_valid_coordinate
from clockguard.core.models import LocationHistoryEntry

if TYPE_CHECKING:
    from clockguard.storage.base import KeyValueStore

HISTORY_CAPACITY = 10
_KEY_PREFIX = "location_history"


def _entry_from_dict(item: object) -> LocationHistoryEntry | None:
    if not isinstance(item, dict):
        return None
    try:
        entry = LocationHistoryEntry(
            latitude=float(item["lat"]),
            longitude=float(item["lng"]),
            timestamp_ms=int(item["timestamp"]),
        )
    except (KeyError, TypeError, ValueError, OverflowError):
        return None
    if not is_valid_coordinate(entry.latitude, entry.longitude):
        return None
    return entry


class LocationHistory:
    """FIFO of the last ``capacity`` positions of one session."""

    def __init__(
        self,
        store: KeyValueStore,
        session_id: str,
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._store = store
        self._key = f"{_KEY_PREFIX}:{session_id}"
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self) -> list[LocationHistoryEntry]:
        raw = self._store.get(self._key)
        if not isinstance(raw, list):
            return []
        entries = [_entry_from_dict(item) for item in raw]
        return [e for e in entries if e is not None]

    def latest(self) -> LocationHistoryEntry | None:
        entries = self.get()
        return entries[-1] if entries else None

    def append(self, entry: LocationHistoryEntry) -> None:
        entries = self.get()
        entries.append(entry)
        # Oldest entries are evicted first.
        entries = entries[-self._capacity:]
        self._store.set(self._key, [e.to_dict() for e in entries])

    def clear(self) -> None:
        self._store.delete(self._key)
