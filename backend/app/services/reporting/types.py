"""
Plain data structures consumed and produced by report aggregation.

Snapshots are detached copies of the ORM rows so aggregation stays a pure
function of its inputs.
"""
import enum
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union

Timestamp = Union[datetime, str, None]


class TrendDirection(str, enum.Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Severity(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


@dataclass(frozen=True)
class RouteSnapshot:
    id: str
    user_id: str
    date: date
    status: str
    total_distance: float = 0.0  # meters
    total_duration: float = 0.0  # seconds
    started_at: Timestamp = None
    completed_at: Timestamp = None


@dataclass(frozen=True)
class StopSnapshot:
    id: str
    order: int
    address: str
    status: str
    name: Optional[str] = None
    arrived_at: Timestamp = None
    departed_at: Timestamp = None

    @property
    def display_name(self) -> str:
        return self.name or self.address


@dataclass(frozen=True)
class ResponseSnapshot:
    stop_id: str
    question_id: str
    question_text: str
    question_type: str
    value: Any = None
    image_data: Optional[str] = None
    timestamp: Timestamp = None

    @property
    def text_lower(self) -> str:
        return self.question_text.lower()


@dataclass(frozen=True)
class TrendItem:
    label: str
    value: str
    trend: TrendDirection


@dataclass(frozen=True)
class FlaggedIssue:
    severity: Severity
    description: str
    stop_id: Optional[str] = None


@dataclass
class ExecutiveSummary:
    """Aggregated metrics of one route. Times in minutes, distance in km."""

    total_stops: int = 0
    completed_stops: int = 0
    skipped_stops: int = 0
    pending_stops: int = 0
    total_drive_time: int = 0
    total_on_site_time: int = 0
    total_time: int = 0
    locations_per_hour: float = 0.0
    average_time_per_stop: int = 0
    total_distance: float = 0.0
    trends: list[TrendItem] = field(default_factory=list)
    observations: list[str] = field(default_factory=list)
    issues: list[FlaggedIssue] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["trends"] = [
            {"label": t.label, "value": t.value, "trend": t.trend.value} for t in self.trends
        ]
        data["issues"] = [
            {"severity": i.severity.value, "description": i.description, "stop_id": i.stop_id}
            for i in self.issues
        ]
        return data
