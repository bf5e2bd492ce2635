"""Geofence membership against admin-configured valid locations."""

from __future__ import annotations

from typing import Iterable

from clockguard.core.geo import haversine_m
from clockguard.core.models import GeofenceResult, NearestLocation, ValidLocation


def check_geofence(
    latitude: float,
    longitude: float,
    locations: Iterable[ValidLocation],
) -> GeofenceResult:
    """Return the first active location (input order) whose radius contains the point.

    No closest-match tie-break is applied; a miss carries no distance info.
    """
    for location in locations:
        if not location.active:
            continue
        distance = haversine_m(latitude, longitude, location.latitude, location.longitude)
        if distance <= location.radius_m:
            return GeofenceResult(is_valid=True, matched_location=location, distance=distance)
    return GeofenceResult(is_valid=False)


def nearest_location(
    latitude: float,
    longitude: float,
    locations: Iterable[ValidLocation],
) -> NearestLocation | None:
    """Closest active location, for telling the user how far off they are."""
    best: NearestLocation | None = None
    for location in locations:
        if not location.active:
            continue
        distance = haversine_m(latitude, longitude, location.latitude, location.longitude)
        if best is None or distance < best.distance:
            best = NearestLocation(location=location, distance=distance)
    return best
