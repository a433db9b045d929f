"""
Database models.
"""
from app.models.base import TimestampMixin, UUIDMixin
from app.models.day_report import DayReport
from app.models.question import QuestionResponse, QuestionTemplate, QuestionType
from app.models.route import ROUTE_TRANSITIONS, Route, RouteStatus
from app.models.stop import STOP_TRANSITIONS, Stop, StopStatus

__all__ = [
    "UUIDMixin",
    "TimestampMixin",
    "Route",
    "RouteStatus",
    "ROUTE_TRANSITIONS",
    "Stop",
    "StopStatus",
    "STOP_TRANSITIONS",
    "QuestionTemplate",
    "QuestionResponse",
    "QuestionType",
    "DayReport",
]
