"""Service statistics and active-session tracking.

Tracks in-memory counters and a sliding window of recently active sessions.
No framework dependencies.
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from dataclasses import dataclass


@dataclass
class SessionActivity:
    """Tracks a single session's recent activity."""
    last_seen: float          # time.monotonic() timestamp
    last_event: str           # "clock_in" or "clock_out"
    attempts: int = 0


class ServiceStats:
    """Thread-safe counters for clock attempts and their outcomes.

    A session is "active" if its last attempt was within
    ``active_window_seconds`` (default 900s).
    """

    def __init__(self, active_window_seconds: float = 900.0) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()
        self._active_window = active_window_seconds

        # Counters
        self.attempts: int = 0
        self.geolocation_errors: Counter[str] = Counter()
        self.risk_levels: Counter[str] = Counter()
        self.outcomes: Counter[str] = Counter()
        self.issues: Counter[str] = Counter()
        self.records_stored: int = 0
        self.records_rejected: int = 0
        self.storage_errors: int = 0
        self.queue_depth: int = 0
        self.queue_max_depth: int = 0

        # Session tracking: session_id → SessionActivity
        self._sessions: dict[str, SessionActivity] = {}

    def _touch(self, session_id: str, event: str, now: float) -> None:
        """Caller holds lock."""
        if session_id in self._sessions:
            activity = self._sessions[session_id]
            activity.last_seen = now
            activity.last_event = event
            activity.attempts += 1
        else:
            self._sessions[session_id] = SessionActivity(
                last_seen=now, last_event=event, attempts=1,
            )

    def record_geolocation_error(self, session_id: str, event: str, kind: str) -> None:
        now = time.monotonic()
        with self._lock:
            self.attempts += 1
            self.geolocation_errors[kind] += 1
            self._touch(session_id, event, now)

    def record_decision(
        self,
        session_id: str,
        event: str,
        risk_level: str,
        outcome: str,
        issues: list[str],
    ) -> None:
        now = time.monotonic()
        with self._lock:
            self.attempts += 1
            self.risk_levels[risk_level] += 1
            self.outcomes[outcome] += 1
            self.issues.update(issues)
            self._touch(session_id, event, now)

    def record_stored(self, count: int = 1) -> None:
        with self._lock:
            self.records_stored += count

    def record_rejected(self, count: int = 1) -> None:
        with self._lock:
            self.records_rejected += count

    def record_storage_error(self) -> None:
        with self._lock:
            self.storage_errors += 1

    def update_queue_depth(self, depth: int) -> None:
        with self._lock:
            self.queue_depth = depth
            if depth > self.queue_max_depth:
                self.queue_max_depth = depth

    def _prune_stale_sessions(self, now: float) -> None:
        """Remove sessions not seen within the active window. Caller holds lock."""
        cutoff = now - self._active_window
        stale = [sid for sid, s in self._sessions.items() if s.last_seen < cutoff]
        for sid in stale:
            del self._sessions[sid]

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        now_mono = time.monotonic()
        with self._lock:
            self._prune_stale_sessions(now_mono)

            clocked_in = sum(
                1 for s in self._sessions.values() if s.last_event == "clock_in"
            )

            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "attempts": self.attempts,
                "geolocation_errors": dict(self.geolocation_errors),
                "risk_levels": dict(self.risk_levels),
                "outcomes": dict(self.outcomes),
                "detected_issues": dict(self.issues),
                "records_stored": self.records_stored,
                "records_rejected": self.records_rejected,
                "storage_errors": self.storage_errors,
                "queue_depth": self.queue_depth,
                "queue_max_depth_ever": self.queue_max_depth,
                "active_sessions": {
                    "total": len(self._sessions),
                    "last_clock_in": clocked_in,
                    "last_clock_out": len(self._sessions) - clocked_in,
                    "window_seconds": self._active_window,
                },
            }
