"""
Narrative observations for the executive summary.

The default source is a deterministic rule engine. Any object with a
matching ``generate`` method can be injected instead (for example a client
for a remote narrative service).
"""
from typing import Protocol

from app.models.question import QuestionType
from app.models.stop import StopStatus
from app.services.reporting.categories import (
    answered_yes,
    captured_images,
    follow_up_responses,
    issue_responses,
    rating_values,
)
from app.services.reporting.timing import minutes_between, round_half_up, round_int
from app.services.reporting.types import ResponseSnapshot, RouteSnapshot, StopSnapshot

DEFAULT_OBSERVATION = "Route completed. Review individual stop details for more information."


class InsightSource(Protocol):
    def generate(
        self,
        route: RouteSnapshot,
        stops: list[StopSnapshot],
        responses: list[ResponseSnapshot],
    ) -> list[str]:
        ...


class RuleBasedInsights:
    """Observation rules over completion, timing, answers and distance."""

    # Completion (%)
    STRONG_COMPLETION_PCT = 80
    LOW_COMPLETION_PCT = 50

    # On-site time (minutes)
    OUTLIER_FACTOR = 2
    QUICK_VISIT_MINUTES = 5
    EXTENDED_VISIT_MINUTES = 30

    # Share of completed stops reporting issues (%)
    HIGH_ISSUE_PCT = 50

    # Average rating
    EXCELLENT_RATING = 4.5
    GOOD_RATING = 4.0
    POOR_RATING = 3.0
    LOW_RATING_MAX = 2

    # Miles travelled per completed stop
    SPREAD_OUT_MILES_PER_STOP = 6
    CLUSTERED_MILES_PER_STOP = 1.2
    METERS_PER_MILE = 1609.34

    def generate(
        self,
        route: RouteSnapshot,
        stops: list[StopSnapshot],
        responses: list[ResponseSnapshot],
    ) -> list[str]:
        completed = [s for s in stops if s.status == StopStatus.COMPLETED]

        observations: list[str] = []
        observations += self._completion(stops, completed)
        observations += self._timing(completed)
        observations += self._issues(responses, completed)
        observations += self._follow_ups(responses)
        observations += self._ratings(responses)
        observations += self._skipped(stops)
        observations += self._documentation(responses)
        observations += self._distance(route, completed)

        if not observations:
            observations.append(DEFAULT_OBSERVATION)
        return observations

    def _completion(self, stops: list[StopSnapshot], completed: list[StopSnapshot]) -> list[str]:
        if not stops:
            return []
        rate = len(completed) / len(stops) * 100
        if rate == 100:
            return ["All scheduled stops were successfully completed."]
        if rate >= self.STRONG_COMPLETION_PCT:
            remaining = len(stops) - len(completed)
            return [f"Strong completion rate of {round_int(rate)}% with {remaining} stop(s) remaining."]
        if rate < self.LOW_COMPLETION_PCT:
            return [f"Completion rate of {round_int(rate)}% indicates potential scheduling or access issues."]
        return []

    def _timing(self, completed: list[StopSnapshot]) -> list[str]:
        times = []
        for stop in completed:
            minutes = minutes_between(stop.arrived_at, stop.departed_at)
            if minutes is not None:
                times.append(minutes)
        if not times:
            return []

        average = sum(times) / len(times)
        longest = max(times)
        observations = []

        if longest > average * self.OUTLIER_FACTOR:
            observations.append(
                f"One or more stops took significantly longer than average "
                f"({round_int(longest)} min vs {round_int(average)} min average)."
            )

        if average < self.QUICK_VISIT_MINUTES:
            observations.append(
                "Average stop time was under 5 minutes, indicating efficient visits or quick tasks."
            )
        elif average > self.EXTENDED_VISIT_MINUTES:
            observations.append(
                f"Average stop time of {round_int(average)} minutes suggests complex or extended interactions."
            )
        return observations

    def _issues(self, responses: list[ResponseSnapshot], completed: list[StopSnapshot]) -> list[str]:
        reported = [r for r in issue_responses(responses) if answered_yes(r)]
        if not reported:
            if completed:
                return ["No issues were reported during today's visits."]
            return []

        if completed:
            rate = len(reported) / len(completed) * 100
            if rate > self.HIGH_ISSUE_PCT:
                return [
                    f"High issue rate: {len(reported)} of {len(completed)} stops "
                    f"({round_int(rate)}%) reported problems."
                ]
        return [f"{len(reported)} stop(s) reported issues that may require follow-up."]

    def _follow_ups(self, responses: list[ResponseSnapshot]) -> list[str]:
        needed = [r for r in follow_up_responses(responses) if answered_yes(r)]
        if needed:
            return [f"{len(needed)} location(s) require follow-up attention."]
        return []

    def _ratings(self, responses: list[ResponseSnapshot]) -> list[str]:
        ratings = rating_values(responses)
        if not ratings:
            return []

        average = sum(ratings) / len(ratings)
        shown = f"{round_half_up(average, 1):.1f}"
        observations = []

        if average >= self.EXCELLENT_RATING:
            observations.append(f"Excellent customer satisfaction with an average rating of {shown}/5.")
        elif average >= self.GOOD_RATING:
            observations.append(f"Good customer satisfaction ({shown}/5 average rating).")
        elif average < self.POOR_RATING:
            observations.append(f"Customer satisfaction needs attention with {shown}/5 average rating.")

        low = sum(1 for rating in ratings if rating <= self.LOW_RATING_MAX)
        if low:
            observations.append(f"{low} stop(s) received low satisfaction ratings (2 or below).")
        return observations

    def _skipped(self, stops: list[StopSnapshot]) -> list[str]:
        skipped = [s for s in stops if s.status == StopStatus.SKIPPED]
        if not skipped:
            return []
        names = ", ".join(s.display_name for s in skipped)
        return [f"{len(skipped)} stop(s) were skipped: {names}"]

    def _documentation(self, responses: list[ResponseSnapshot]) -> list[str]:
        observations = []
        photos = captured_images(responses, QuestionType.PHOTO)
        if photos:
            observations.append(f"{photos} photo(s) documented across all visits.")
        signatures = captured_images(responses, QuestionType.SIGNATURE)
        if signatures:
            observations.append(f"{signatures} signature(s) collected.")
        return observations

    def _distance(self, route: RouteSnapshot, completed: list[StopSnapshot]) -> list[str]:
        if route.total_distance <= 0 or not completed:
            return []
        miles_per_stop = route.total_distance / self.METERS_PER_MILE / len(completed)
        if miles_per_stop > self.SPREAD_OUT_MILES_PER_STOP:
            return [
                f"High travel distance per stop ({round_half_up(miles_per_stop, 1):.1f} mi) "
                f"- consider optimizing route clustering."
            ]
        if miles_per_stop < self.CLUSTERED_MILES_PER_STOP:
            return ["Efficient route with stops clustered closely together."]
        return []


rule_based_insights = RuleBasedInsights()
