"""
Trend classification over stops and responses.
"""
from app.models.stop import StopStatus
from app.services.reporting.categories import (
    answered_yes,
    follow_up_responses,
    issue_responses,
    rating_values,
)
from app.services.reporting.timing import round_half_up, round_int
from app.services.reporting.types import (
    ResponseSnapshot,
    StopSnapshot,
    TrendDirection,
    TrendItem,
)


class TrendCalculator:
    """
    Classifies completion, issue, follow-up and satisfaction trends.

    Each trend is only emitted when its category is present. Percentages
    are rounded to whole numbers before classification.
    """

    # Completion rate (%): >= positive, >= neutral, else negative
    COMPLETION_POSITIVE_PCT = 80
    COMPLETION_NEUTRAL_PCT = 50

    # Issue rate (%): > negative, > neutral, else positive
    ISSUE_NEGATIVE_PCT = 30
    ISSUE_NEUTRAL_PCT = 10

    # Average rating: >= positive, >= neutral, else negative
    RATING_POSITIVE = 4.0
    RATING_NEUTRAL = 3.0

    @classmethod
    def completion_rate(cls, stops: list[StopSnapshot]) -> int:
        """
        Whole-percent completion rate, rounded half-up.

        The classification sees this rounded value, so 799 of 1000 stops
        (79.9%) reports as 80% and classifies positive, while a strict
        reading of the 80% threshold on the raw ratio would call it neutral.
        The rounded rate is what the trend displays, and the two stay
        consistent that way.
        """
        if not stops:
            return 0
        completed = sum(1 for s in stops if s.status == StopStatus.COMPLETED)
        return round_int(completed / len(stops) * 100)

    @classmethod
    def classify_completion(cls, rate: int) -> TrendDirection:
        if rate >= cls.COMPLETION_POSITIVE_PCT:
            return TrendDirection.POSITIVE
        if rate >= cls.COMPLETION_NEUTRAL_PCT:
            return TrendDirection.NEUTRAL
        return TrendDirection.NEGATIVE

    @classmethod
    def classify_issue_rate(cls, rate: int) -> TrendDirection:
        if rate > cls.ISSUE_NEGATIVE_PCT:
            return TrendDirection.NEGATIVE
        if rate > cls.ISSUE_NEUTRAL_PCT:
            return TrendDirection.NEUTRAL
        return TrendDirection.POSITIVE

    @classmethod
    def classify_follow_ups(cls, count: int) -> TrendDirection:
        return TrendDirection.NEUTRAL if count > 0 else TrendDirection.POSITIVE

    @classmethod
    def classify_rating(cls, average: float) -> TrendDirection:
        if average >= cls.RATING_POSITIVE:
            return TrendDirection.POSITIVE
        if average >= cls.RATING_NEUTRAL:
            return TrendDirection.NEUTRAL
        return TrendDirection.NEGATIVE

    @classmethod
    def calculate(
        cls,
        stops: list[StopSnapshot],
        responses: list[ResponseSnapshot],
    ) -> list[TrendItem]:
        trends: list[TrendItem] = []

        if stops:
            rate = cls.completion_rate(stops)
            trends.append(TrendItem("Completion Rate", f"{rate}%", cls.classify_completion(rate)))

        issues = issue_responses(responses)
        if issues:
            found = sum(1 for r in issues if answered_yes(r))
            rate = round_int(found / len(issues) * 100)
            trends.append(TrendItem("Issues Reported", f"{rate}%", cls.classify_issue_rate(rate)))

        follow_ups = follow_up_responses(responses)
        if follow_ups:
            needed = sum(1 for r in follow_ups if answered_yes(r))
            trends.append(TrendItem("Follow-ups Needed", str(needed), cls.classify_follow_ups(needed)))

        ratings = rating_values(responses)
        if ratings:
            average = sum(ratings) / len(ratings)
            trends.append(
                TrendItem(
                    "Avg. Satisfaction",
                    f"{round_half_up(average, 1):.1f}/5",
                    cls.classify_rating(average),
                )
            )

        return trends
