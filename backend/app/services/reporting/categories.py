"""
Response categories recognised by the report rules.

Questions are matched by type and by keywords in their (snapshotted) text,
so user-defined questions such as "Any issues on site?" are picked up.
"""
from typing import Any, Iterable, Optional

from app.models.question import QuestionType
from app.services.reporting.types import ResponseSnapshot

ISSUE_KEYWORD = "issue"
FOLLOW_UP_KEYWORDS = ("follow-up", "followup")
DESCRIPTION_KEYWORD = "description"


def is_issue_question(response: ResponseSnapshot) -> bool:
    return response.question_type == QuestionType.YES_NO and ISSUE_KEYWORD in response.text_lower


def is_follow_up_question(response: ResponseSnapshot) -> bool:
    return response.question_type == QuestionType.YES_NO and any(
        keyword in response.text_lower for keyword in FOLLOW_UP_KEYWORDS
    )


def is_description(response: ResponseSnapshot) -> bool:
    return response.question_type == QuestionType.TEXT and DESCRIPTION_KEYWORD in response.text_lower


def answered_yes(response: ResponseSnapshot) -> bool:
    return response.value is True


def numeric_value(value: Any) -> Optional[float]:
    """Number held by a rating/number answer, None if unanswered or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def issue_responses(responses: Iterable[ResponseSnapshot]) -> list[ResponseSnapshot]:
    return [r for r in responses if is_issue_question(r)]


def follow_up_responses(responses: Iterable[ResponseSnapshot]) -> list[ResponseSnapshot]:
    return [r for r in responses if is_follow_up_question(r)]


def rating_values(responses: Iterable[ResponseSnapshot]) -> list[float]:
    """Numeric values of answered rating responses, in input order."""
    values = []
    for r in responses:
        if r.question_type != QuestionType.RATING:
            continue
        number = numeric_value(r.value)
        if number is not None:
            values.append(number)
    return values


def captured_images(responses: Iterable[ResponseSnapshot], question_type: QuestionType) -> int:
    return sum(1 for r in responses if r.question_type == question_type and r.image_data)


def format_number(value: float) -> str:
    """2.0 -> '2', 2.5 -> '2.5'."""
    return str(int(value)) if float(value).is_integer() else str(value)
