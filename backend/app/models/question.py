"""
Question templates and per-stop responses.
"""
import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import TimestampMixin, UUIDMixin, utc_now


class QuestionType(str, enum.Enum):
    """Answer kind of a question."""

    TEXT = "text"
    MULTIPLE_CHOICE = "multipleChoice"
    YES_NO = "yesNo"
    PHOTO = "photo"
    SIGNATURE = "signature"
    RATING = "rating"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"


_question_type_enum = Enum(
    QuestionType,
    values_callable=lambda e: [m.value for m in e],
    native_enum=False,
)


class QuestionTemplate(Base, UUIDMixin, TimestampMixin):
    """Question asked at every stop of a user's routes."""

    __tablename__ = "question_templates"

    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    text: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[QuestionType] = mapped_column(_question_type_enum, nullable=False)
    options: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<QuestionTemplate {self.order}: {self.text}>"


class QuestionResponse(Base, UUIDMixin):
    """
    Answer to one question at one stop.

    Question text and type are copied at save time so later template edits
    do not change historical reports.
    """

    __tablename__ = "question_responses"

    stop_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stops.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    route_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("question_templates.id", ondelete="CASCADE"),
        nullable=False,
    )

    question_text: Mapped[str] = mapped_column(String(500), nullable=False)
    question_type: Mapped[QuestionType] = mapped_column(_question_type_enum, nullable=False)

    # bool for yesNo, number for rating/number, string otherwise, null if unanswered
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    image_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("stop_id", "question_id", name="uq_response_stop_question"),
    )

    def __repr__(self) -> str:
        return f"<QuestionResponse {self.question_text!r}={self.value!r}>"
