"""Clock processor — validates clock-in/out attempts and enqueues accepted records.

This is the core business logic. It depends on the RecordQueue,
AttendanceStorage, KeyValueStore and LocationSource protocols, not concrete
implementations.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from clockguard.core.decision import decide_clock_event
from clockguard.core.errors import GeolocationError, GeolocationErrorKind
from clockguard.core.evidence import build_security_evidence
from clockguard.core.history import HISTORY_CAPACITY, LocationHistory
from clockguard.core.models import AttendanceRecord, ClockDecision, ValidLocation
from clockguard.providers.submitted import SubmittedDeviceInfo, SubmittedLocationProvider

if TYPE_CHECKING:
    from clockguard.core.acquisition import SecureLocationService
    from clockguard.core.models import ClockRequestData
    from clockguard.core.stats import ServiceStats
    from clockguard.queue.base import RecordQueue
    from clockguard.storage.base import AttendanceStorage, KeyValueStore, LocationSource

log = structlog.get_logger()


class ClockProcessor:
    """Runs the anti-fraud pipeline for one attempt and enqueues accepted events."""

    def __init__(
        self,
        service: SecureLocationService,
        locations: LocationSource,
        history_store: KeyValueStore,
        queue: RecordQueue,
        storage: AttendanceStorage,
        stats: ServiceStats,
        history_capacity: int = HISTORY_CAPACITY,
    ) -> None:
        self._service = service
        self._locations = locations
        self._history_store = history_store
        self._queue = queue
        self._storage = storage
        self._stats = stats
        self._history_capacity = history_capacity
        self._next_record_id = 1

    def history_for(self, session_id: str) -> LocationHistory:
        return LocationHistory(self._history_store, session_id, self._history_capacity)

    def valid_locations(self) -> list[ValidLocation]:
        return self._locations.list_locations()

    def _location_provider(self, request: ClockRequestData) -> SubmittedLocationProvider:
        kind = None
        if request.geolocation_error is not None:
            try:
                kind = GeolocationErrorKind(request.geolocation_error)
            except ValueError:
                kind = GeolocationErrorKind.POSITION_UNAVAILABLE
        return SubmittedLocationProvider(request.reading, kind, request.error_message)

    async def process_clock_event(self, request: ClockRequestData) -> tuple[ClockDecision, int]:
        """Process one attempt. Returns (decision, record_id); record_id is 0 unless stored.

        Raises GeolocationError when the device position could not be acquired.
        """
        event = request.event.value
        session = request.session_id[:8]

        try:
            security = await self._service.acquire_secure_location(
                self._location_provider(request),
                request.device or SubmittedDeviceInfo(),
                self.history_for(request.session_id),
                environment=request.environment,
                client_ip=request.client_ip,
            )
        except GeolocationError as exc:
            self._stats.record_geolocation_error(request.session_id, event, exc.kind.value)
            log.info("clock_event_failed", session=session, clock_event=event,
                     kind=exc.kind.value)
            raise

        decision = decide_clock_event(
            security, self.valid_locations(), confirmed=request.confirmed,
        )
        validation = security.validation
        self._stats.record_decision(
            request.session_id, event, validation.risk_level.value,
            decision.outcome, validation.detected_issues,
        )
        log.info("clock_event_decided", session=session, clock_event=event,
                 outcome=decision.outcome, reason=decision.reason,
                 risk=validation.risk_level.value, confidence=validation.confidence)

        if not decision.accepted:
            return decision, 0

        now_ms = int(time.time() * 1000)
        location_name = decision.geofence.matched_location.name if decision.geofence else ""
        evidence = build_security_evidence(
            security,
            request.event,
            datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).isoformat(),
            location_name,
        )
        record = AttendanceRecord(
            server_timestamp_ms=now_ms,
            event=request.event,
            user_id=request.user_id,
            session_id=request.session_id,
            reading=security.reading,
            risk_level=validation.risk_level,
            encoded_fingerprint=security.encoded_fingerprint,
            security_data=evidence.to_json(),
            location_name=location_name,
            record_id=self._next_record_id,
        )
        self._next_record_id += 1

        try:
            await self._queue.put(record)
        except Exception:
            log.error("queue_put_failed", session=session,
                      record_id=record.record_id, exc_info=True)
            self._stats.record_rejected()
            return decision, 0

        self._stats.update_queue_depth(self._queue.qsize())
        log.info("record_enqueued", session=session, record_id=record.record_id)
        return decision, record.record_id

    async def run_storage_consumer(self) -> None:
        """Consume from the queue and write to storage. Runs as a background task."""
        log.info("storage_consumer_started")
        while True:
            record = await self._queue.get()
            try:
                await self._storage.store(record)
                self._stats.record_stored(1)
                self._stats.update_queue_depth(self._queue.qsize())
                log.debug("record_stored", record_id=record.record_id,
                          session=record.session_id[:8])
            except Exception:
                log.error("storage_write_failed", record_id=record.record_id,
                          exc_info=True)
                self._stats.record_storage_error()
