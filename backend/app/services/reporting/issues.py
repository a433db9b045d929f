"""
Flagged issue detection.
"""
from collections import defaultdict

from app.models.question import QuestionType
from app.models.stop import StopStatus
from app.services.reporting.categories import (
    answered_yes,
    format_number,
    is_description,
    is_issue_question,
    numeric_value,
)
from app.services.reporting.types import (
    FlaggedIssue,
    ResponseSnapshot,
    Severity,
    StopSnapshot,
)


class IssueDetector:
    """Flags reported problems, low ratings and skipped stops."""

    LOW_RATING_MAX = 2
    CRITICAL_RATING = 1

    @classmethod
    def _issue_description(cls, stop: StopSnapshot, stop_responses: list[ResponseSnapshot]) -> str:
        description = next((r for r in stop_responses if is_description(r)), None)
        if description is not None and description.value:
            return f"Issue at {stop.display_name}: {description.value}"
        return f"Issue reported at {stop.display_name}"

    @classmethod
    def detect(
        cls,
        stops: list[StopSnapshot],
        responses: list[ResponseSnapshot],
    ) -> list[FlaggedIssue]:
        """
        Collect issues stop by stop, then order them high, medium, low.

        The sort is stable, so issues of equal severity keep stop order.
        """
        by_stop: dict[str, list[ResponseSnapshot]] = defaultdict(list)
        for response in responses:
            by_stop[response.stop_id].append(response)

        issues: list[FlaggedIssue] = []

        for stop in stops:
            stop_responses = by_stop.get(stop.id, [])

            for response in stop_responses:
                if is_issue_question(response) and answered_yes(response):
                    issues.append(
                        FlaggedIssue(
                            Severity.MEDIUM,
                            cls._issue_description(stop, stop_responses),
                            stop.id,
                        )
                    )

                if response.question_type == QuestionType.RATING:
                    rating = numeric_value(response.value)
                    if rating is not None and rating <= cls.LOW_RATING_MAX:
                        severity = Severity.HIGH if rating == cls.CRITICAL_RATING else Severity.MEDIUM
                        issues.append(
                            FlaggedIssue(
                                severity,
                                f"Low satisfaction rating ({format_number(rating)}/5) at {stop.display_name}",
                                stop.id,
                            )
                        )

            if stop.status == StopStatus.SKIPPED:
                issues.append(FlaggedIssue(Severity.LOW, f"Stop skipped: {stop.display_name}", stop.id))

        return sorted(issues, key=lambda issue: issue.severity.rank)
