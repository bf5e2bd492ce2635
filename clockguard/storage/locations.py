"""Valid-location sources.

The YAML file looks like::

    locations:
      - name: Head office
        latitude: -6.175110
        longitude: 106.827190
        radius_m: 100
        active: true
"""

from __future__ import annotations

import math
from pathlib import Path

import structlog
import yaml

from clockguard.core.geo import is_valid_coordinate
from clockguard.core.models import ValidLocation

log = structlog.get_logger()


def parse_locations(raw: list[dict]) -> list[ValidLocation]:
    """Convert raw dicts to ValidLocation, skipping malformed entries."""
    if not isinstance(raw, list):
        log.warning("locations_not_a_list", type=type(raw).__name__)
        return []

    locations: list[ValidLocation] = []
    for i, item in enumerate(raw):
        try:
            location = ValidLocation(
                id=str(item["id"]) if item.get("id") is not None else None,
                name=str(item.get("name", "")),
                latitude=float(item["latitude"]),
                longitude=float(item["longitude"]),
                radius_m=float(item.get("radius_m", item.get("radius", 0))),
                active=bool(item.get("active", True)),
            )
        except (KeyError, TypeError, ValueError, AttributeError):
            log.warning("location_entry_skipped", index=i)
            continue
        if not is_valid_coordinate(location.latitude, location.longitude) \
                or not math.isfinite(location.radius_m):
            log.warning("location_entry_skipped", index=i)
            continue
        locations.append(location)
    return locations


class StaticLocationSource:
    """LocationSource over a fixed in-memory list."""

    def __init__(self, locations: list[ValidLocation]) -> None:
        self._locations = list(locations)

    def list_locations(self) -> list[ValidLocation]:
        return list(self._locations)


class YamlLocationSource:
    """LocationSource backed by a YAML file, re-read when it changes on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._mtime: float | None = None
        self._cached: list[ValidLocation] = []

    def list_locations(self) -> list[ValidLocation]:
        try:
            mtime = self._path.stat().st_mtime
        except FileNotFoundError:
            if self._mtime is not None:
                log.warning("locations_file_missing", path=str(self._path))
            self._mtime = None
            self._cached = []
            return []

        if mtime != self._mtime:
            # A broken file keeps the last good list until it changes again.
            self._mtime = mtime
            try:
                with open(self._path) as f:
                    raw = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError):
                log.error("locations_file_unreadable", path=str(self._path), exc_info=True)
                return list(self._cached)
            if not isinstance(raw, dict):
                log.error("locations_file_invalid", path=str(self._path),
                          type=type(raw).__name__)
                return list(self._cached)
            self._cached = parse_locations(raw.get("locations", []) or [])
            log.info("locations_loaded", path=str(self._path), count=len(self._cached))
        return list(self._cached)
