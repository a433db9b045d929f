"""
Great-circle distance and unit helpers.

All distances are straight-line haversine distances; no road network is
consulted anywhere in the planner.
"""
import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6_371_000
METERS_PER_MILE = 1609.34


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance between two coordinates in meters."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c


def path_distance_m(points: list[Coordinate]) -> float:
    """Sum of consecutive haversine distances along `points`."""
    return sum(haversine_m(points[i], points[i + 1]) for i in range(len(points) - 1))


def km_to_miles(km: float) -> float:
    return km * 0.621371


def estimate_duration_s(distance_m: float, speed_mph: float = 25.0) -> float:
    """Travel time in seconds at a constant average speed."""
    speed_mps = speed_mph * METERS_PER_MILE / 3600
    return distance_m / speed_mps
