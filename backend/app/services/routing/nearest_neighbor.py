"""
Nearest-neighbour tour construction.

Offline fallback used whenever the external optimization service cannot
produce an order. Greedy, O(n^2), no return leg and no local search.
"""
from dataclasses import dataclass

from app.services.routing.geo import (
    Coordinate,
    estimate_duration_s,
    haversine_m,
    path_distance_m,
)


@dataclass
class OptimizationResult:
    """Visit order with its distance and duration estimate."""

    order: list[int]
    total_distance_m: float
    total_duration_s: float
    source: str = "fallback"


def nearest_neighbor_tour(
    points: list[Coordinate],
    speed_mph: float = 25.0,
) -> OptimizationResult:
    """
    Order points by repeatedly visiting the closest unvisited one.

    Index 0 is the fixed start. Ties go to the lowest index. Callers must
    pass at least two points.

    Args:
        points: Coordinates, first element is the start
        speed_mph: Average speed for the duration estimate

    Returns:
        OptimizationResult with a permutation of range(len(points))
    """
    n = len(points)

    if n <= 2:
        distance = path_distance_m(points)
        return OptimizationResult(
            order=list(range(n)),
            total_distance_m=distance,
            total_duration_s=estimate_duration_s(distance, speed_mph),
        )

    visited = [False] * n
    visited[0] = True
    order = [0]
    current = 0
    total_distance = 0.0

    while len(order) < n:
        nearest = -1
        nearest_dist = float("inf")

        for i in range(n):
            if visited[i]:
                continue
            dist = haversine_m(points[current], points[i])
            if dist < nearest_dist:
                nearest_dist = dist
                nearest = i

        visited[nearest] = True
        order.append(nearest)
        total_distance += nearest_dist
        current = nearest

    return OptimizationResult(
        order=order,
        total_distance_m=total_distance,
        total_duration_s=estimate_duration_s(total_distance, speed_mph),
    )
