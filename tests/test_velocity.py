"""Tests for the impossible-travel check."""

from __future__ import annotations

import math

from clockguard.core.models import LocationHistoryEntry
from clockguard.core.rules import DetectionRules
from clockguard.core.velocity import check_velocity, velocity_deduction


def entry(lat: float, lng: float, ts: int) -> LocationHistoryEntry:
    return LocationHistoryEntry(latitude=lat, longitude=lng, timestamp_ms=ts)


def test_one_degree_in_one_second_is_impossible():
    check = check_velocity(entry(0, 0, 0), entry(0, 1, 1000))
    assert check.speed_kmh > 120 * 1000
    assert not check.is_realistic
    assert check.max_realistic_kmh == 120


def test_standing_still_is_realistic():
    for elapsed in (1, 1000, 3_600_000):
        check = check_velocity(entry(-6.17511, 106.82719, 0),
                               entry(-6.17511, 106.82719, elapsed))
        assert check.speed_kmh == 0
        assert check.is_realistic


def test_city_driving_is_realistic():
    # ~1 km north in one minute is ~60 km/h.
    check = check_velocity(entry(0, 0, 0), entry(0.009, 0, 60_000))
    assert 55 < check.speed_kmh < 65
    assert check.is_realistic


def test_zero_elapsed_with_movement_is_impossible():
    check = check_velocity(entry(0, 0, 5000), entry(0, 0.001, 5000))
    assert math.isinf(check.speed_kmh)
    assert not check.is_realistic


def test_negative_elapsed_with_movement_is_impossible():
    check = check_velocity(entry(0, 0, 5000), entry(0, 0.001, 1000))
    assert not check.is_realistic


def test_zero_elapsed_without_movement_is_a_no_op():
    check = check_velocity(entry(1.5, 2.5, 5000), entry(1.5, 2.5, 5000))
    assert check.speed_kmh == 0
    assert check.is_realistic


def test_custom_ceiling():
    check = check_velocity(entry(0, 0, 0), entry(0.009, 0, 60_000), max_realistic_kmh=30)
    assert not check.is_realistic


def test_deduction_only_with_previous_location():
    rules = DetectionRules()
    current = entry(0, 1, 1000)
    assert velocity_deduction(None, current, rules) is None
    assert velocity_deduction(entry(0, 1, 0), current, rules) is None

    deduction = velocity_deduction(entry(0, 0, 0), current, rules)
    assert deduction is not None
    assert deduction.tag == "impossible_velocity"
    assert deduction.penalty == 30
    assert deduction.warning.startswith("Impossible travel speed detected: ")
    assert deduction.warning.endswith(" km/h")
