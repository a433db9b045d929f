"""
Day report API routes, including exports.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.report import DayReportListResponse, DayReportResponse, EmailExportResponse
from app.services.pdf_export import pdf_exporter
from app.services.report_service import ReportService
from app.services.reporting.export import (
    email_payload,
    executive_summary_text,
    export_csv,
    export_filename,
)

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(db: AsyncSession = Depends(get_db)) -> ReportService:
    return ReportService(db)


@router.post("/routes/{route_id}", response_model=DayReportResponse, status_code=201)
async def generate_report(
    route_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> DayReportResponse:
    """
    Generate the day report of a route.

    Regenerating replaces the stored report and keeps its ID.
    """
    report = await service.generate_report(route_id)
    return DayReportResponse.model_validate(report)


@router.get("", response_model=DayReportListResponse)
async def list_reports(
    user_id: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=365),
    service: ReportService = Depends(get_report_service),
) -> DayReportListResponse:
    """Get a user's reports, newest first."""
    reports = await service.list_reports(user_id, limit)
    return DayReportListResponse(
        items=[DayReportResponse.model_validate(r) for r in reports],
        total=len(reports),
    )


@router.get("/routes/{route_id}", response_model=DayReportResponse)
async def get_route_report(
    route_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> DayReportResponse:
    report = await service.get_report_for_route(route_id)
    return DayReportResponse.model_validate(report)


@router.get("/{report_id}", response_model=DayReportResponse)
async def get_report(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> DayReportResponse:
    report = await service.get_report(report_id)
    return DayReportResponse.model_validate(report)


@router.delete("/{report_id}", status_code=204)
async def delete_report(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> None:
    await service.delete_report(report_id)


# =============================================================================
# Exports
# =============================================================================

@router.get("/{report_id}/export/csv")
async def export_report_csv(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> Response:
    """Export stop details and answers as CSV."""
    report = await service.get_report(report_id)
    return Response(
        content=export_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(report, "csv")}"'},
    )


@router.get("/{report_id}/export/pdf")
async def export_report_pdf(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> Response:
    """Export the report as a downloadable PDF."""
    report = await service.get_report(report_id)
    return Response(
        content=pdf_exporter.export_day_report(report),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(report, "pdf")}"'},
    )


@router.get("/{report_id}/export/text", response_class=PlainTextResponse)
async def export_report_text(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> str:
    """Plain-text executive summary."""
    report = await service.get_report(report_id)
    return executive_summary_text(report)


@router.get("/{report_id}/export/email", response_model=EmailExportResponse)
async def export_report_email(
    report_id: UUID,
    recipient: Optional[str] = Query(None, description="Pre-filled recipient address"),
    service: ReportService = Depends(get_report_service),
) -> EmailExportResponse:
    """Mailto payload for sharing the executive summary."""
    report = await service.get_report(report_id)
    return EmailExportResponse(**email_payload(report, recipient))
