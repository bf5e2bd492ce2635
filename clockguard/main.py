"""ClockGuard service — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, providers, queue, storage, and API layers.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from clockguard.api.clock import router as clock_router
from clockguard.api.monitoring import router as monitoring_router
from clockguard.api.tools import router as tools_router
from clockguard.config import AppConfig, load_config
from clockguard.core.acquisition import SecureLocationService
from clockguard.core.processor import ClockProcessor
from clockguard.core.stats import ServiceStats
from clockguard.core.validator import LocationValidator
from clockguard.providers.base import PositionOptions
from clockguard.providers.ip_geolocation import HttpNetworkLocator, NullNetworkLocator
from clockguard.queue.asyncio_queue import AsyncioRecordQueue
from clockguard.storage.file_storage import FileAttendanceStorage
from clockguard.storage.history_store import FileKeyValueStore, MemoryKeyValueStore
from clockguard.storage.locations import YamlLocationSource

log = structlog.get_logger()

# Module-level singletons (set during startup)
_processor: ClockProcessor | None = None
_stats: ServiceStats | None = None
_config: AppConfig | None = None


def get_processor() -> ClockProcessor:
    assert _processor is not None, "Service not initialized"
    return _processor


def get_stats() -> ServiceStats:
    assert _stats is not None, "Service not initialized"
    return _stats


def get_config() -> AppConfig:
    assert _config is not None, "Service not initialized"
    return _config


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


def build_processor(config: AppConfig, stats: ServiceStats) -> ClockProcessor:
    """Assemble the processor and its collaborators from config."""
    if config.network.enabled:
        locator = HttpNetworkLocator(
            url=config.network.url,
            self_url=config.network.self_url,
            timeout_seconds=config.network.timeout_seconds,
        )
    else:
        locator = NullNetworkLocator()

    if config.history.backend == "memory":
        history_store = MemoryKeyValueStore()
    else:
        history_store = FileKeyValueStore(config.history.base_dir)

    validator = LocationValidator(rules=config.rules, network_locator=locator)
    service = SecureLocationService(
        validator,
        PositionOptions(
            high_accuracy=config.geolocation.high_accuracy,
            timeout_ms=config.geolocation.timeout_ms,
            max_cache_age_ms=config.geolocation.max_cache_age_ms,
        ),
    )
    return ClockProcessor(
        service=service,
        locations=YamlLocationSource(config.storage.locations_file),
        history_store=history_store,
        queue=AsyncioRecordQueue(max_size=config.queue.max_size),
        storage=FileAttendanceStorage(base_dir=config.storage.base_dir),
        stats=stats,
        history_capacity=config.history.capacity,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _processor, _stats, _config

    _config = load_config()
    _setup_logging(_config)

    log.info("service_starting",
             env=_config.server.env,
             storage_dir=_config.storage.base_dir,
             locations_file=_config.storage.locations_file,
             network_check=_config.network.enabled)

    _stats = ServiceStats(active_window_seconds=_config.stats.active_window_seconds)
    _processor = build_processor(_config, _stats)

    # Start background storage consumer
    consumer_task = asyncio.create_task(_processor.run_storage_consumer())

    log.info("service_started",
             host=_config.server.host,
             port=_config.server.port)

    yield

    # Shutdown
    consumer_task.cancel()
    try:
        await consumer_task
    except asyncio.CancelledError:
        pass
    log.info("service_stopped")


app = FastAPI(
    title="ClockGuard",
    description="Location anti-fraud validation for attendance clock-in/out",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(clock_router)
app.include_router(monitoring_router)
app.include_router(tools_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    config = load_config()
    uvicorn.run("clockguard.main:app", host=config.server.host, port=config.server.port)
