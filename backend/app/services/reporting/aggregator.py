"""
End-of-day report aggregation.

Turns a route, its stops and the answers collected at them into an
ExecutiveSummary. Pure: identical inputs always give identical output, and
nothing is read from or written to storage here.
"""
import logging
from typing import Optional

from app.models.stop import StopStatus
from app.services.reporting.insights import (
    DEFAULT_OBSERVATION,
    InsightSource,
    rule_based_insights,
)
from app.services.reporting.issues import IssueDetector
from app.services.reporting.timing import (
    minutes_between,
    round_half_up,
    round_int,
    time_spent_minutes,
)
from app.services.reporting.trends import TrendCalculator
from app.services.reporting.types import (
    ExecutiveSummary,
    ResponseSnapshot,
    RouteSnapshot,
    StopSnapshot,
)

logger = logging.getLogger(__name__)


class ReportAggregator:
    """
    Computes timing metrics, trends, flagged issues and observations.

    Times are whole minutes, distance is kilometers with one decimal.
    """

    def __init__(self, insight_source: Optional[InsightSource] = None):
        self.insight_source = insight_source or rule_based_insights

    @staticmethod
    def time_spent(stop: StopSnapshot) -> int:
        return time_spent_minutes(stop.arrived_at, stop.departed_at)

    @staticmethod
    def wall_clock_minutes(route: RouteSnapshot) -> Optional[int]:
        """Elapsed minutes between route start and completion, if both are known."""
        minutes = minutes_between(route.started_at, route.completed_at)
        if minutes is None:
            return None
        return max(0, round_int(minutes))

    def _observations(
        self,
        route: RouteSnapshot,
        stops: list[StopSnapshot],
        responses: list[ResponseSnapshot],
    ) -> list[str]:
        try:
            observations = list(self.insight_source.generate(route, stops, responses))
        except Exception as e:
            logger.warning(
                f"Insight source failed for route {route.id}, using default observation: {e}",
                exc_info=True,
            )
            return [DEFAULT_OBSERVATION]
        return observations or [DEFAULT_OBSERVATION]

    def generate(
        self,
        route: RouteSnapshot,
        stops: list[StopSnapshot],
        responses: list[ResponseSnapshot],
    ) -> ExecutiveSummary:
        """
        Build the executive summary of one route.

        Args:
            route: Route snapshot (distance in meters, duration in seconds)
            stops: Stop snapshots in visit order
            responses: Every response collected on the route

        Returns:
            ExecutiveSummary
        """
        completed = [s for s in stops if s.status == StopStatus.COMPLETED]
        skipped = [s for s in stops if s.status == StopStatus.SKIPPED]

        on_site = sum(self.time_spent(s) for s in completed)
        drive = max(0, round_int(route.total_duration / 60) - on_site)

        total_time = self.wall_clock_minutes(route)
        if total_time is None:
            total_time = on_site + drive

        hours = total_time / 60
        locations_per_hour = round_half_up(len(completed) / hours, 1) if hours > 0 else 0.0
        average_per_stop = round_int(on_site / len(completed)) if completed else 0

        return ExecutiveSummary(
            total_stops=len(stops),
            completed_stops=len(completed),
            skipped_stops=len(skipped),
            pending_stops=len(stops) - len(completed) - len(skipped),
            total_drive_time=drive,
            total_on_site_time=on_site,
            total_time=total_time,
            locations_per_hour=locations_per_hour,
            average_time_per_stop=average_per_stop,
            total_distance=round_half_up(route.total_distance / 1000, 1),
            trends=TrendCalculator.calculate(stops, responses),
            observations=self._observations(route, stops, responses),
            issues=IssueDetector.detect(stops, responses),
        )


report_aggregator = ReportAggregator()


def generate_report(
    route: RouteSnapshot,
    stops: list[StopSnapshot],
    responses: list[ResponseSnapshot],
    insight_source: Optional[InsightSource] = None,
) -> ExecutiveSummary:
    """Aggregate with the default rules or an injected insight source."""
    aggregator = ReportAggregator(insight_source) if insight_source else report_aggregator
    return aggregator.generate(route, stops, responses)
