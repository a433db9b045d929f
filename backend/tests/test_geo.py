"""
Tests for distance helpers.
"""
import pytest

from app.services.routing.geo import (
    Coordinate,
    estimate_duration_s,
    haversine_m,
    km_to_miles,
    path_distance_m,
)


class TestHaversine:
    """Tests for great-circle distance."""

    def test_same_point_is_zero(self):
        point = Coordinate(40.7128, -74.0060)
        assert haversine_m(point, point) == 0

    def test_one_degree_of_latitude(self):
        """One degree of latitude is roughly 111.2 km."""
        distance = haversine_m(Coordinate(0.0, 0.0), Coordinate(1.0, 0.0))
        assert distance == pytest.approx(111_195, rel=1e-3)

    def test_symmetric(self):
        a = Coordinate(40.7128, -74.0060)
        b = Coordinate(40.7580, -73.9855)
        assert haversine_m(a, b) == pytest.approx(haversine_m(b, a))

    def test_path_distance_sums_legs(self):
        a = Coordinate(40.0, -75.0)
        b = Coordinate(40.01, -75.0)
        c = Coordinate(40.0, -74.97)
        assert path_distance_m([a, b, c]) == pytest.approx(haversine_m(a, b) + haversine_m(b, c))

    def test_path_distance_of_single_point(self):
        assert path_distance_m([Coordinate(1.0, 1.0)]) == 0
        assert path_distance_m([]) == 0


class TestConversions:
    """Tests for unit conversions and formatting."""

    def test_km_to_miles(self):
        assert km_to_miles(10) == pytest.approx(6.21371)

    def test_duration_at_default_speed(self):
        """25 mph covers one mile in 144 seconds."""
        assert estimate_duration_s(1609.34) == pytest.approx(144.0)

    def test_duration_at_custom_speed(self):
        assert estimate_duration_s(1609.34, speed_mph=60) == pytest.approx(60.0)
