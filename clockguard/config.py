"""Service configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: CLOCKGUARD_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from clockguard.core.rules import DetectionRules


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class QueueConfig:
    max_size: int = 1_000


@dataclass
class StorageConfig:
    base_dir: str = "data/attendance"
    locations_file: str = "locations.yaml"


@dataclass
class GeolocationConfig:
    high_accuracy: bool = True
    timeout_ms: int = 15_000
    max_cache_age_ms: int = 0


@dataclass
class NetworkConfig:
    enabled: bool = True
    url: str = "https://ipapi.co/{ip}/json/"
    self_url: str = "https://ipapi.co/json/"
    timeout_seconds: float = 3.0


@dataclass
class HistoryConfig:
    backend: str = "file"  # "file" or "memory"
    base_dir: str = "data/history"
    capacity: int = 10


@dataclass
class StatsConfig:
    active_window_seconds: float = 900.0


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    geolocation: GeolocationConfig = field(default_factory=GeolocationConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    rules: DetectionRules = field(default_factory=DetectionRules)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "CLOCKGUARD_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "CLOCKGUARD_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "CLOCKGUARD_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "CLOCKGUARD_QUEUE_MAX_SIZE": lambda v: setattr(config.queue, "max_size", int(v)),
        "CLOCKGUARD_STORAGE_BASE_DIR": lambda v: setattr(config.storage, "base_dir", v),
        "CLOCKGUARD_STORAGE_LOCATIONS_FILE": lambda v: setattr(config.storage, "locations_file", v),
        "CLOCKGUARD_GEOLOCATION_TIMEOUT_MS": lambda v: setattr(config.geolocation, "timeout_ms", int(v)),
        "CLOCKGUARD_NETWORK_ENABLED": lambda v: setattr(config.network, "enabled", _parse_bool(v)),
        "CLOCKGUARD_NETWORK_URL": lambda v: setattr(config.network, "url", v),
        "CLOCKGUARD_NETWORK_TIMEOUT": lambda v: setattr(config.network, "timeout_seconds", float(v)),
        "CLOCKGUARD_HISTORY_BACKEND": lambda v: setattr(config.history, "backend", v),
        "CLOCKGUARD_HISTORY_BASE_DIR": lambda v: setattr(config.history, "base_dir", v),
        "CLOCKGUARD_HISTORY_CAPACITY": lambda v: setattr(config.history, "capacity", int(v)),
        "CLOCKGUARD_STATS_ACTIVE_WINDOW": lambda v: setattr(config.stats, "active_window_seconds", float(v)),
        "CLOCKGUARD_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "CLOCKGUARD_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)

    # Every heuristic constant can be tuned: CLOCKGUARD_RULES_<FIELD>.
    for f in fields(DetectionRules):
        val = os.environ.get(f"CLOCKGUARD_RULES_{f.name.upper()}")
        if val is not None:
            current = getattr(config.rules, f.name)
            setattr(config.rules, f.name, type(current)(val))


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    # Try to load YAML
    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in fields(AppConfig):
            values = raw.get(section.name)
            if not isinstance(values, dict):
                continue
            target = getattr(config, section.name)
            for k, v in values.items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
