"""Shared test fixtures."""

from __future__ import annotations

import time

import pytest
from httpx import ASGITransport, AsyncClient

import clockguard.main as main_module
from clockguard.config import AppConfig
from clockguard.core.acquisition import SecureLocationService
from clockguard.core.models import GeoReading, ValidLocation
from clockguard.core.processor import ClockProcessor
from clockguard.core.stats import ServiceStats
from clockguard.core.validator import LocationValidator
from clockguard.providers.ip_geolocation import NullNetworkLocator
from clockguard.queue.asyncio_queue import AsyncioRecordQueue
from clockguard.storage.file_storage import FileAttendanceStorage
from clockguard.storage.history_store import MemoryKeyValueStore
from clockguard.storage.locations import StaticLocationSource

# Site center and a point ~30 m from it. Decimals avoid the
# repeated/sequential digit heuristics.
SITE_LAT, SITE_LNG = -6.17511, 106.82719
NEAR_LAT, NEAR_LNG = -6.175321, 106.827043
# ~1.1 km south of the site.
FAR_LAT, FAR_LNG = -6.18511, 106.82719

SITE_LOCATIONS = [
    ValidLocation(id="hq", name="Head office", latitude=SITE_LAT,
                  longitude=SITE_LNG, radius_m=100),
    ValidLocation(id="old", name="Closed branch", latitude=FAR_LAT,
                  longitude=FAR_LNG, radius_m=100, active=False),
]


def now_ms() -> int:
    return int(time.time() * 1000)


def honest_reading(**overrides) -> GeoReading:
    values = dict(latitude=NEAR_LAT, longitude=NEAR_LNG, accuracy=12.0,
                  timestamp_ms=now_ms(), altitude=35.0, speed=None)
    values.update(overrides)
    return GeoReading(**values)


@pytest.fixture(autouse=True)
def _init_server(tmp_path):
    """Initialize service singletons for every test, using a temp directory."""
    config = AppConfig()
    config.storage.base_dir = str(tmp_path / "data")
    config.history.backend = "memory"
    config.network.enabled = False
    config.logging.level = "warning"

    stats = ServiceStats(active_window_seconds=config.stats.active_window_seconds)
    validator = LocationValidator(rules=config.rules, network_locator=NullNetworkLocator())
    processor = ClockProcessor(
        service=SecureLocationService(validator),
        locations=StaticLocationSource(SITE_LOCATIONS),
        history_store=MemoryKeyValueStore(),
        queue=AsyncioRecordQueue(max_size=config.queue.max_size),
        storage=FileAttendanceStorage(base_dir=config.storage.base_dir),
        stats=stats,
    )

    # Patch module-level singletons
    main_module._config = config
    main_module._stats = stats
    main_module._processor = processor

    yield

    # Cleanup
    main_module._config = None
    main_module._stats = None
    main_module._processor = None


@pytest.fixture
async def client():
    from clockguard.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
