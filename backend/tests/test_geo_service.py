"""Tests for great-circle distance and geofences."""
import math

import pytest

from attendease.services.geo_service import (EARTH_RADIUS_METERS, Coordinates, Geofence,
                                             NoGeofence, haversine_distance)

PAIRS = [
    (Coordinates(0, 0), Coordinates(0, 0.002)),
    (Coordinates(33.3152, 44.3661), Coordinates(33.3160, 44.3700)),
    (Coordinates(-33.8688, 151.2093), Coordinates(51.5074, -0.1278)),
    (Coordinates(89.9, 10), Coordinates(-89.9, -170)),
]


def test_identical_points_are_zero_distance():
    """Same coordinates give exactly zero."""
    point = Coordinates(48.8584, 2.2945)
    assert haversine_distance(point, point) == 0.0


@pytest.mark.parametrize('a,b', PAIRS)
def test_distance_is_symmetric_and_positive(a, b):
    """dist(a, b) == dist(b, a) and distinct points are apart."""
    assert haversine_distance(a, b) == haversine_distance(b, a)
    assert haversine_distance(a, b) > 0


def test_known_short_distance():
    """0.002 degrees of longitude on the equator is about 222 m."""
    distance = haversine_distance(Coordinates(0, 0), Coordinates(0, 0.002))
    assert round(distance) == 222


def test_antipodal_points():
    """Antipodes are half the circumference apart, without a math domain error."""
    distance = haversine_distance(Coordinates(0, 0), Coordinates(0, 180))
    assert math.isclose(distance, math.pi * EARTH_RADIUS_METERS, rel_tol=1e-9)

    near = haversine_distance(Coordinates(45, 0), Coordinates(-45, 180))
    assert math.isclose(near, math.pi * EARTH_RADIUS_METERS, rel_tol=1e-6)


def test_geofence_boundary_is_inside():
    """A position exactly on the radius is accepted."""
    center = Coordinates(0, 0)
    position = Coordinates(0, 0.0005)
    radius = haversine_distance(position, center)

    assert Geofence(center, radius).contains(position)
    assert not Geofence(center, radius - 0.01).contains(position)


def test_geofence_variants_compare_by_value():
    """The two session variants are plain value types."""
    assert NoGeofence() == NoGeofence()
    assert Geofence(Coordinates(1, 2), 50) == Geofence(Coordinates(1, 2), 50)
