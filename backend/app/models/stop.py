"""
Stop model: one planned visit within a route.
"""
import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.route import Route


class StopStatus(str, enum.Enum):
    """Stop visit status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return not STOP_TRANSITIONS[self]

    def can_transition_to(self, target: "StopStatus") -> bool:
        return target in STOP_TRANSITIONS[self]


STOP_TRANSITIONS: dict[StopStatus, frozenset[StopStatus]] = {
    StopStatus.PENDING: frozenset({StopStatus.IN_PROGRESS, StopStatus.COMPLETED, StopStatus.SKIPPED}),
    StopStatus.IN_PROGRESS: frozenset({StopStatus.COMPLETED}),
    StopStatus.COMPLETED: frozenset(),
    StopStatus.SKIPPED: frozenset(),
}


class Stop(Base, UUIDMixin, TimestampMixin):
    """
    Planned visit location.

    `order` is the zero-based position in the visit sequence and stays
    contiguous within the route.
    """

    __tablename__ = "stops"

    route_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    address: Mapped[str] = mapped_column(String(500), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[StopStatus] = mapped_column(
        Enum(StopStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=StopStatus.PENDING,
        nullable=False,
    )

    arrived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    departed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    route: Mapped["Route"] = relationship("Route", back_populates="stops")

    @property
    def display_name(self) -> str:
        return self.name or self.address

    def __repr__(self) -> str:
        return f"<Stop #{self.order} in route {self.route_id}>"
