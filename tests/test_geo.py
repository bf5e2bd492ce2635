"""Tests for the Haversine distance helper."""

from __future__ import annotations

import math

from clockguard.core.geo import EARTH_RADIUS_M, haversine_m, is_valid_coordinate


def test_distance_to_self_is_zero():
    assert haversine_m(-6.17511, 106.82719, -6.17511, 106.82719) == 0.0


def test_distance_is_symmetric():
    pairs = [
        ((-6.17511, 106.82719), (-6.18511, 106.82719)),
        ((48.8566, 2.3522), (45.764, 4.835)),
        ((0.0, 179.9), (0.0, -179.9)),
    ]
    for a, b in pairs:
        assert haversine_m(*a, *b) == haversine_m(*b, *a)


def test_short_meridian_distance():
    # ~0.00808 degrees of latitude at the equator is ~900 m.
    d = haversine_m(0.0, 0.0, 0.00808, 0.0)
    assert abs(d - 900) / 900 < 0.01


def test_one_degree_of_longitude_at_equator():
    expected = EARTH_RADIUS_M * math.pi / 180
    assert math.isclose(haversine_m(0, 0, 0, 1), expected, rel_tol=1e-9)


def test_antipodal_points():
    assert math.isclose(haversine_m(0, 0, 0, 180), EARTH_RADIUS_M * math.pi, rel_tol=1e-9)


def test_nan_propagates():
    assert math.isnan(haversine_m(float("nan"), 0, 0, 0))


def test_valid_coordinates():
    assert is_valid_coordinate(-6.17511, 106.82719)
    assert is_valid_coordinate(90.0, -180.0)
    assert is_valid_coordinate(-90.0, 180.0)


def test_invalid_coordinates():
    for lat, lng in [
        (math.nan, 106.8),
        (-6.2, math.nan),
        (math.inf, 106.8),
        (-6.2, -math.inf),
        (90.01, 106.8),
        (-6.2, 180.5),
    ]:
        assert not is_valid_coordinate(lat, lng), (lat, lng)
