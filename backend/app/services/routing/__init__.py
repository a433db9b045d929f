"""
Routing sub-package.

Contains:
- Haversine geometry helpers
- Nearest-neighbour fallback tour
- External optimization service client
- Route optimizer facade
"""

from app.services.routing.geo import Coordinate, haversine_m
from app.services.routing.nearest_neighbor import OptimizationResult, nearest_neighbor_tour
from app.services.routing.optimization_client import (
    OptimizationClient,
    OptimizationServiceError,
    optimization_client,
)
from app.services.routing.route_optimizer import RouteOptimizer, route_optimizer

__all__ = [
    "Coordinate",
    "haversine_m",
    "OptimizationResult",
    "nearest_neighbor_tour",
    "OptimizationClient",
    "OptimizationServiceError",
    "optimization_client",
    "RouteOptimizer",
    "route_optimizer",
]
