"""
Route order optimization with offline fallback.
"""
import logging
from typing import Optional

from app.core.config import settings
from app.services.routing.geo import Coordinate
from app.services.routing.nearest_neighbor import OptimizationResult, nearest_neighbor_tour
from app.services.routing.optimization_client import (
    OptimizationClient,
    OptimizationServiceError,
    optimization_client,
)

logger = logging.getLogger(__name__)


class RouteOptimizer:
    """
    Orders stops into a short visit sequence.

    Tries the external optimization service first. Any failure there is
    logged and replaced by the nearest-neighbour tour, so optimization
    always succeeds for two or more points.
    """

    def __init__(
        self,
        client: Optional[OptimizationClient] = None,
        speed_mph: Optional[float] = None,
    ):
        self.client = client or optimization_client
        self.speed_mph = speed_mph or settings.AVERAGE_SPEED_MPH

    def fallback(self, points: list[Coordinate]) -> OptimizationResult:
        return nearest_neighbor_tour(points, self.speed_mph)

    async def optimize(self, points: list[Coordinate]) -> OptimizationResult:
        """
        Produce a visit order starting at index 0.

        Args:
            points: At least two coordinates; the first is the fixed start

        Returns:
            OptimizationResult with order, distance (m) and duration (s)
        """
        if len(points) < 2:
            raise ValueError("At least two points are required for optimization")

        if not self.client.is_configured:
            logger.debug("Optimization service not configured, using nearest-neighbour fallback")
            return self.fallback(points)

        try:
            result = await self.client.optimize(points)
            logger.info(
                f"Optimized {len(points)} points via service: "
                f"{result.total_distance_m:.0f} m, {result.total_duration_s:.0f} s"
            )
            return result
        except OptimizationServiceError as e:
            logger.warning(f"Route optimization service failed, using fallback: {e.message}")
        except Exception as e:
            logger.warning(f"Unexpected route optimization error, using fallback: {e}", exc_info=True)

        return self.fallback(points)

    async def optimize_from(
        self,
        start: Coordinate,
        stops: list[Coordinate],
    ) -> OptimizationResult:
        """
        Optimize stops from an external start such as the current location.

        The start point is prepended for optimization and stripped from the
        returned order, so indices refer to `stops`.
        """
        result = await self.optimize([start] + stops)
        return OptimizationResult(
            order=[i - 1 for i in result.order[1:]],
            total_distance_m=result.total_distance_m,
            total_duration_s=result.total_duration_s,
            source=result.source,
        )


route_optimizer = RouteOptimizer()
