"""
Pydantic schemas for API request/response models.
"""

from app.schemas.question import (
    QuestionImportResponse,
    QuestionResponseSchema,
    QuestionTemplateCreate,
    QuestionTemplateResponse,
    QuestionTemplateUpdate,
    ResponseSave,
)
from app.schemas.report import (
    DayReportListResponse,
    DayReportResponse,
    EmailExportResponse,
    ExecutiveSummarySchema,
    FlaggedIssueSchema,
    StopReportSchema,
    TrendItemSchema,
)
from app.schemas.route import (
    CoordinateSchema,
    OptimizeRequest,
    OptimizeResponse,
    RouteCreate,
    RouteListResponse,
    RouteOptimizeRequest,
    RouteResponse,
    RouteStatusUpdate,
    StopCreate,
    StopEventRequest,
    StopImportResponse,
    StopReorderRequest,
    StopResponse,
)

__all__ = [
    # Routes
    "CoordinateSchema",
    "RouteCreate",
    "RouteResponse",
    "RouteListResponse",
    "RouteStatusUpdate",
    "RouteOptimizeRequest",
    "OptimizeRequest",
    "OptimizeResponse",
    "StopCreate",
    "StopEventRequest",
    "StopResponse",
    "StopReorderRequest",
    "StopImportResponse",
    # Questions
    "QuestionTemplateCreate",
    "QuestionTemplateUpdate",
    "QuestionTemplateResponse",
    "ResponseSave",
    "QuestionResponseSchema",
    "QuestionImportResponse",
    # Reports
    "TrendItemSchema",
    "FlaggedIssueSchema",
    "ExecutiveSummarySchema",
    "StopReportSchema",
    "DayReportResponse",
    "DayReportListResponse",
    "EmailExportResponse",
]
