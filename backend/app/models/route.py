"""
Daily route model.
"""
import enum
from datetime import date as date_type, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Enum,
    Float,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.stop import Stop


class RouteStatus(str, enum.Enum):
    """Route lifecycle status."""

    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not ROUTE_TRANSITIONS[self]

    def can_transition_to(self, target: "RouteStatus") -> bool:
        return target in ROUTE_TRANSITIONS[self]


ROUTE_TRANSITIONS: dict[RouteStatus, frozenset[RouteStatus]] = {
    RouteStatus.PLANNING: frozenset({RouteStatus.ACTIVE, RouteStatus.CANCELLED}),
    RouteStatus.ACTIVE: frozenset({RouteStatus.COMPLETED, RouteStatus.CANCELLED}),
    RouteStatus.COMPLETED: frozenset(),
    RouteStatus.CANCELLED: frozenset(),
}


class Route(Base, UUIDMixin, TimestampMixin):
    """
    One day's plan for one user.

    Totals are the optimizer's estimate: distance in meters, duration in
    seconds.
    """

    __tablename__ = "routes"

    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[RouteStatus] = mapped_column(
        Enum(RouteStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=RouteStatus.PLANNING,
        nullable=False,
    )

    # Optimizer output
    optimized_order: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    total_distance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_duration: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    stops: Mapped[list["Stop"]] = relationship(
        "Stop",
        back_populates="route",
        order_by="Stop.order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_route_user_date"),)

    def __repr__(self) -> str:
        return f"<Route {self.id} for {self.user_id} on {self.date}>"
