"""Tests for the bounded location history and its backing stores."""

from __future__ import annotations

import pytest

from clockguard.core.history import LocationHistory
from clockguard.core.models import LocationHistoryEntry
from clockguard.storage.history_store import FileKeyValueStore, MemoryKeyValueStore


def entry(i: int) -> LocationHistoryEntry:
    return LocationHistoryEntry(latitude=-6.1 - i / 1000, longitude=106.8, timestamp_ms=1000 * i)


def test_append_and_get_in_order():
    history = LocationHistory(MemoryKeyValueStore(), "session-a")
    history.append(entry(1))
    history.append(entry(2))
    assert [e.timestamp_ms for e in history.get()] == [1000, 2000]
    assert history.latest() == entry(2)


def test_eleventh_entry_evicts_the_first():
    history = LocationHistory(MemoryKeyValueStore(), "session-a")
    for i in range(1, 12):
        history.append(entry(i))

    entries = history.get()
    assert len(entries) == 10
    assert entries[0] == entry(2)
    assert entries[-1] == entry(11)


def test_clear_empties_history():
    history = LocationHistory(MemoryKeyValueStore(), "session-a")
    for i in range(5):
        history.append(entry(i))
    history.clear()
    assert history.get() == []
    assert history.latest() is None


def test_sessions_are_isolated():
    store = MemoryKeyValueStore()
    a = LocationHistory(store, "session-a")
    b = LocationHistory(store, "session-b")
    a.append(entry(1))
    assert b.get() == []
    b.clear()
    assert a.get() == [entry(1)]


def test_unreadable_entries_are_dropped():
    store = MemoryKeyValueStore()
    history = LocationHistory(store, "session-a")
    store.set("location_history:session-a", [
        {"lat": 1.5, "lng": 2.5, "timestamp": 10},
        {"lat": "north"},
        {"lat": float("nan"), "lng": 2.5, "timestamp": 11},
        "garbage",
    ])
    assert history.get() == [LocationHistoryEntry(1.5, 2.5, 10)]

    store.set("location_history:session-a", {"not": "a list"})
    assert history.get() == []


def test_stored_format():
    store = MemoryKeyValueStore()
    LocationHistory(store, "s").append(LocationHistoryEntry(1.5, 2.5, 10))
    assert store.get("location_history:s") == [{"lat": 1.5, "lng": 2.5, "timestamp": 10}]


def test_custom_capacity():
    history = LocationHistory(MemoryKeyValueStore(), "s", capacity=3)
    for i in range(5):
        history.append(entry(i))
    assert [e.timestamp_ms for e in history.get()] == [2000, 3000, 4000]

    with pytest.raises(ValueError):
        LocationHistory(MemoryKeyValueStore(), "s", capacity=0)


def test_file_store_survives_restart(tmp_path):
    history = LocationHistory(FileKeyValueStore(tmp_path), "session/with:odd chars")
    history.append(entry(1))

    reopened = LocationHistory(FileKeyValueStore(tmp_path), "session/with:odd chars")
    assert reopened.get() == [entry(1)]

    reopened.clear()
    assert LocationHistory(FileKeyValueStore(tmp_path), "session/with:odd chars").get() == []


def test_file_store_ignores_corrupt_file(tmp_path):
    store = FileKeyValueStore(tmp_path)
    store.set("k", [1, 2])
    for path in tmp_path.glob("*.json"):
        path.write_text("{not json")
    assert store.get("k") is None
    store.delete("k")
    store.delete("k")


def test_file_store_ignores_non_utf8_file(tmp_path):
    store = FileKeyValueStore(tmp_path)
    history = LocationHistory(store, "session-a")
    history.append(entry(1))
    for path in tmp_path.glob("*.json"):
        path.write_bytes(b"\xff\xfe[garbage")

    assert history.get() == []
    history.append(entry(2))
    assert history.get() == [entry(2)]
