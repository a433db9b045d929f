"""
Day report schemas.
"""
from datetime import date as date_type, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel


class TrendItemSchema(BaseModel):
    label: str
    value: str
    trend: str


class FlaggedIssueSchema(BaseModel):
    severity: str
    description: str
    stop_id: Optional[str] = None


class ExecutiveSummarySchema(BaseModel):
    """Aggregated metrics, trends, observations and issues of one route."""
    total_stops: int
    completed_stops: int
    skipped_stops: int
    pending_stops: int
    total_drive_time: int
    total_on_site_time: int
    total_time: int
    locations_per_hour: float
    average_time_per_stop: int
    total_distance: float
    trends: list[TrendItemSchema]
    observations: list[str]
    issues: list[FlaggedIssueSchema]


class StopReportSchema(BaseModel):
    stop_id: str
    order: int
    address: str
    name: Optional[str]
    status: str
    arrived_at: Optional[str]
    departed_at: Optional[str]
    time_spent: int
    responses: list[dict[str, Any]]


class DayReportResponse(BaseModel):
    """Persisted day report."""
    id: UUID
    route_id: UUID
    user_id: str
    date: date_type
    summary: ExecutiveSummarySchema
    stop_reports: list[StopReportSchema]
    generated_at: datetime

    class Config:
        from_attributes = True


class DayReportListResponse(BaseModel):
    items: list[DayReportResponse]
    total: int


class EmailExportResponse(BaseModel):
    """Mailto payload for sharing a report."""
    subject: str
    body: str
    mailto: str
