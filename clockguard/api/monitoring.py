"""Health check and monitoring endpoints."""

from __future__ import annotations

import shutil
from pathlib import Path

from fastapi import APIRouter

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health() -> dict:
    """Basic health check."""
    from clockguard.main import get_config, get_processor, get_stats

    stats = get_stats()
    config = get_config()

    storage_path = Path(config.storage.base_dir)
    try:
        disk = shutil.disk_usage(storage_path if storage_path.exists() else ".")
        disk_free_gb = round(disk.free / (1024 ** 3), 1)
        storage_writable = True
    except OSError:
        disk_free_gb = -1
        storage_writable = False

    snapshot = stats.snapshot()
    return {
        "status": "ok",
        "version": "0.1.0",
        "uptime_seconds": snapshot["uptime_seconds"],
        "queue_depth": snapshot["queue_depth"],
        "storage_writable": storage_writable,
        "disk_free_gb": disk_free_gb,
        "active_locations": sum(1 for loc in get_processor().valid_locations() if loc.active),
    }


@router.get("/stats")
async def stats() -> dict:
    """Attempt counters, outcome/risk breakdowns and active sessions.

    The ``active_sessions`` section shows sessions seen in the last N seconds
    (configurable window), split by whether their last event was a clock-in
    or a clock-out.
    """
    from clockguard.main import get_stats

    return get_stats().snapshot()


@router.get("/config")
async def get_client_config() -> dict:
    """Configuration endpoint for the attendance client.

    The client calls this on startup to learn how to sample positions.
    """
    from clockguard.main import get_config

    config = get_config()
    return {
        "geolocation": {
            "enableHighAccuracy": config.geolocation.high_accuracy,
            "timeout": config.geolocation.timeout_ms,
            "maximumAge": config.geolocation.max_cache_age_ms,
        },
        "history_capacity": config.history.capacity,
        "max_reading_age_ms": config.rules.max_reading_age_ms,
    }
