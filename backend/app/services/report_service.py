"""
Day report generation and storage.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import ReportNotFoundException, RouteNotFoundException
from app.models.day_report import DayReport
from app.models.question import QuestionResponse
from app.models.route import Route
from app.models.stop import Stop
from app.services.reporting import (
    InsightSource,
    ReportAggregator,
    ResponseSnapshot,
    RouteSnapshot,
    StopSnapshot,
    report_aggregator,
)
from app.services.reporting.timing import parse_timestamp

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    parsed = parse_timestamp(value)
    return parsed.isoformat().replace("+00:00", "Z") if parsed else None


def route_snapshot(route: Route) -> RouteSnapshot:
    return RouteSnapshot(
        id=str(route.id),
        user_id=route.user_id,
        date=route.date,
        status=route.status.value,
        total_distance=route.total_distance or 0.0,
        total_duration=route.total_duration or 0.0,
        started_at=route.started_at,
        completed_at=route.completed_at,
    )


def stop_snapshot(stop: Stop) -> StopSnapshot:
    return StopSnapshot(
        id=str(stop.id),
        order=stop.order,
        address=stop.address,
        name=stop.name,
        status=stop.status.value,
        arrived_at=stop.arrived_at,
        departed_at=stop.departed_at,
    )


def response_snapshot(response: QuestionResponse) -> ResponseSnapshot:
    return ResponseSnapshot(
        stop_id=str(response.stop_id),
        question_id=str(response.question_id),
        question_text=response.question_text,
        question_type=response.question_type.value,
        value=response.value,
        image_data=response.image_data,
        timestamp=response.timestamp,
    )


def _response_dict(response: ResponseSnapshot) -> dict:
    return {
        "question_id": response.question_id,
        "question_text": response.question_text,
        "question_type": response.question_type,
        "value": response.value,
        "image_data": response.image_data,
        "timestamp": _iso(response.timestamp),
    }


def build_stop_reports(
    stops: list[StopSnapshot],
    responses: list[ResponseSnapshot],
    aggregator: ReportAggregator,
) -> list[dict]:
    """One serializable report per stop, with its full response list."""
    by_stop: dict[str, list[ResponseSnapshot]] = {}
    for response in responses:
        by_stop.setdefault(response.stop_id, []).append(response)

    return [
        {
            "stop_id": stop.id,
            "order": stop.order,
            "address": stop.address,
            "name": stop.name,
            "status": stop.status,
            "arrived_at": _iso(stop.arrived_at),
            "departed_at": _iso(stop.departed_at),
            "time_spent": aggregator.time_spent(stop),
            "responses": [_response_dict(r) for r in by_stop.get(stop.id, [])],
        }
        for stop in stops
    ]


class ReportService:
    """Generates, stores and retrieves day reports."""

    def __init__(self, db: AsyncSession, insight_source: Optional[InsightSource] = None):
        self.db = db
        self.aggregator = ReportAggregator(insight_source) if insight_source else report_aggregator

    async def _load_route_data(
        self, route_id: uuid.UUID
    ) -> tuple[Route, list[Stop], list[QuestionResponse]]:
        result = await self.db.execute(
            select(Route)
            .options(selectinload(Route.stops))
            .where(Route.id == route_id)
            .execution_options(populate_existing=True)
        )
        route = result.scalar_one_or_none()
        if not route:
            raise RouteNotFoundException(str(route_id))

        responses = await self.db.execute(
            select(QuestionResponse)
            .where(QuestionResponse.route_id == route_id)
            .order_by(QuestionResponse.timestamp)
        )
        return route, sorted(route.stops, key=lambda s: s.order), list(responses.scalars().all())

    async def generate_report(self, route_id: uuid.UUID) -> DayReport:
        """
        Generate the route's report, replacing any previous one.

        Summary and stop reports are computed in full before anything is
        written, and the write is a single commit: either the new report is
        stored or the previous one remains untouched.

        Raises:
            RouteNotFoundException: If the route does not exist
        """
        route, stops, responses = await self._load_route_data(route_id)

        route_snap = route_snapshot(route)
        stop_snaps = [stop_snapshot(s) for s in stops]
        response_snaps = [response_snapshot(r) for r in responses]

        summary = self.aggregator.generate(route_snap, stop_snaps, response_snaps)
        stop_reports = build_stop_reports(stop_snaps, response_snaps, self.aggregator)
        generated_at = datetime.now(timezone.utc)

        existing = await self.db.scalar(select(DayReport).where(DayReport.route_id == route_id))
        try:
            if existing:
                report = existing
                report.user_id = route.user_id
                report.date = route.date
                report.summary = summary.to_dict()
                report.stop_reports = stop_reports
                report.generated_at = generated_at
            else:
                report = DayReport(
                    route_id=route.id,
                    user_id=route.user_id,
                    date=route.date,
                    summary=summary.to_dict(),
                    stop_reports=stop_reports,
                    generated_at=generated_at,
                )
                self.db.add(report)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(report)
        logger.info(
            f"{'Regenerated' if existing else 'Generated'} report {report.id} for route {route_id}: "
            f"{summary.completed_stops}/{summary.total_stops} stops, {len(summary.issues)} issues"
        )
        return report

    async def get_report(self, report_id: uuid.UUID) -> DayReport:
        report = await self.db.get(DayReport, report_id)
        if not report:
            raise ReportNotFoundException(str(report_id))
        return report

    async def get_report_for_route(self, route_id: uuid.UUID) -> DayReport:
        report = await self.db.scalar(select(DayReport).where(DayReport.route_id == route_id))
        if not report:
            raise ReportNotFoundException(f"route:{route_id}")
        return report

    async def list_reports(self, user_id: str, limit: Optional[int] = None) -> list[DayReport]:
        """A user's reports, newest first."""
        result = await self.db.execute(
            select(DayReport)
            .where(DayReport.user_id == user_id)
            .order_by(DayReport.date.desc(), DayReport.generated_at.desc())
            .limit(limit or settings.REPORT_HISTORY_LIMIT)
        )
        return list(result.scalars().all())

    async def delete_report(self, report_id: uuid.UUID) -> None:
        report = await self.get_report(report_id)
        await self.db.delete(report)
        await self.db.commit()
        logger.info(f"Deleted report {report_id}")
