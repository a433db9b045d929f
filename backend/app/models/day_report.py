"""
Persisted end-of-day report.
"""
import uuid
from datetime import date as date_type, datetime

from sqlalchemy import JSON, Date, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import TimestampMixin, UUIDMixin, utc_now


class DayReport(Base, UUIDMixin, TimestampMixin):
    """
    Executive summary and per-stop detail for one route.

    At most one report exists per route; regeneration overwrites the
    content of the existing row.
    """

    __tablename__ = "day_reports"

    route_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)

    summary: Mapped[dict] = mapped_column(JSON, nullable=False)
    stop_reports: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DayReport {self.id} for route {self.route_id}>"
