"""
Question templates and the answers collected at stops.
"""
import logging
import uuid
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    QuestionNotFoundException,
    StopNotFoundException,
    ValidationException,
)
from app.models.question import QuestionResponse, QuestionTemplate, QuestionType
from app.models.stop import Stop
from app.services.csv_import import ImportResult, parse_question_rows, read_rows

logger = logging.getLogger(__name__)


DEFAULT_QUESTIONS: list[dict] = [
    {"text": "Contact Name", "type": QuestionType.TEXT, "required": False},
    {"text": "Was anyone present?", "type": QuestionType.YES_NO, "required": True},
    {
        "text": "Visit outcome",
        "type": QuestionType.MULTIPLE_CHOICE,
        "required": True,
        "options": ["Completed successfully", "Partially completed", "Unable to complete", "Rescheduled"],
    },
    {"text": "Any issues found?", "type": QuestionType.YES_NO, "required": True},
    {"text": "Issue description", "type": QuestionType.TEXT, "required": False},
    {"text": "Photo documentation", "type": QuestionType.PHOTO, "required": False},
    {"text": "Customer satisfaction", "type": QuestionType.RATING, "required": False},
    {"text": "Follow-up needed?", "type": QuestionType.YES_NO, "required": True},
    {"text": "Customer signature", "type": QuestionType.SIGNATURE, "required": False},
    {"text": "Additional notes", "type": QuestionType.TEXT, "required": False},
]


NON_NULLABLE_FIELDS = frozenset({"text", "type", "required", "is_active", "order"})


class QuestionService:
    """Question template and response operations bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Templates
    # =========================================================================

    async def _ensure_defaults(self, user_id: str) -> None:
        """Seed the default question set the first time a user is seen."""
        count = await self.db.scalar(
            select(func.count()).select_from(QuestionTemplate).where(QuestionTemplate.user_id == user_id)
        )
        if count:
            return

        for index, question in enumerate(DEFAULT_QUESTIONS, start=1):
            self.db.add(
                QuestionTemplate(
                    user_id=user_id,
                    text=question["text"],
                    type=question["type"],
                    options=question.get("options"),
                    required=question["required"],
                    is_default=True,
                    is_active=True,
                    order=index,
                )
            )
        await self.db.commit()
        logger.info(f"Seeded {len(DEFAULT_QUESTIONS)} default questions for {user_id}")

    async def list_questions(self, user_id: str, include_inactive: bool = False) -> list[QuestionTemplate]:
        await self._ensure_defaults(user_id)

        query = select(QuestionTemplate).where(QuestionTemplate.user_id == user_id)
        if not include_inactive:
            query = query.where(QuestionTemplate.is_active.is_(True))
        result = await self.db.execute(query.order_by(QuestionTemplate.order, QuestionTemplate.created_at))
        return list(result.scalars().all())

    async def get_question(self, question_id: uuid.UUID) -> QuestionTemplate:
        question = await self.db.get(QuestionTemplate, question_id)
        if not question:
            raise QuestionNotFoundException(str(question_id))
        return question

    @staticmethod
    def _check_options(question_type: QuestionType, options: Optional[list[str]]) -> None:
        if question_type == QuestionType.MULTIPLE_CHOICE and not options:
            raise ValidationException("Multiple choice questions need at least one option")

    async def create_question(
        self,
        user_id: str,
        text: str,
        question_type: QuestionType,
        options: Optional[list[str]] = None,
        required: bool = False,
        order: Optional[int] = None,
    ) -> QuestionTemplate:
        """Add a custom question, appended after the existing ones by default."""
        self._check_options(question_type, options)
        await self._ensure_defaults(user_id)

        if order is None:
            highest = await self.db.scalar(
                select(func.max(QuestionTemplate.order)).where(QuestionTemplate.user_id == user_id)
            )
            order = (highest or 0) + 1

        question = QuestionTemplate(
            user_id=user_id,
            text=text,
            type=question_type,
            options=options,
            required=required,
            is_default=False,
            is_active=True,
            order=order,
        )
        self.db.add(question)
        await self.db.commit()
        await self.db.refresh(question)
        return question

    async def update_question(self, question_id: uuid.UUID, **changes: Any) -> QuestionTemplate:
        """
        Update a template.

        Existing responses keep the text and type they were saved with.
        """
        question = await self.get_question(question_id)

        cleared = sorted(field for field in NON_NULLABLE_FIELDS & changes.keys() if changes[field] is None)
        if cleared:
            raise ValidationException(
                f"Fields cannot be null: {', '.join(cleared)}", details={"fields": cleared}
            )

        try:
            for field, value in changes.items():
                setattr(question, field, value)
            self._check_options(question.type, question.options)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(question)
        return question

    async def deactivate_question(self, question_id: uuid.UUID) -> QuestionTemplate:
        return await self.update_question(question_id, is_active=False)

    async def import_questions_csv(self, user_id: str, content: bytes) -> ImportResult:
        """
        Add custom questions from a CSV with text, type, options and
        required columns, appended after the user's existing questions.

        Raises:
            CSVImportError: If the upload is not readable CSV
        """
        result = ImportResult()
        rows = parse_question_rows(read_rows(content), result.warnings)

        for row in rows:
            question = await self.create_question(
                user_id,
                row.text,
                row.type,
                options=row.options,
                required=row.required,
            )
            result.created.append(question)

        if not result.created:
            result.errors.append("No valid questions found in CSV.")

        logger.info(f"Imported {len(result.created)} questions for {user_id}")
        return result

    # =========================================================================
    # Responses
    # =========================================================================

    async def save_response(
        self,
        stop_id: uuid.UUID,
        question_id: uuid.UUID,
        value: Any = None,
        image_data: Optional[str] = None,
    ) -> QuestionResponse:
        """
        Save the answer to a question at a stop.

        The first save snapshots the question's text and type; saving again
        replaces the value and image in place.
        """
        stop = await self.db.get(Stop, stop_id)
        if not stop:
            raise StopNotFoundException(str(stop_id))

        result = await self.db.execute(
            select(QuestionResponse).where(
                QuestionResponse.stop_id == stop_id,
                QuestionResponse.question_id == question_id,
            )
        )
        response = result.scalar_one_or_none()

        if response is None:
            question = await self.get_question(question_id)
            response = QuestionResponse(
                stop_id=stop_id,
                route_id=stop.route_id,
                question_id=question_id,
                question_text=question.text,
                question_type=question.type,
            )
            self.db.add(response)

        response.value = value
        response.image_data = image_data

        await self.db.commit()
        await self.db.refresh(response)
        return response

    async def list_stop_responses(self, stop_id: uuid.UUID) -> list[QuestionResponse]:
        result = await self.db.execute(
            select(QuestionResponse)
            .where(QuestionResponse.stop_id == stop_id)
            .order_by(QuestionResponse.timestamp)
        )
        return list(result.scalars().all())

    async def list_route_responses(self, route_id: uuid.UUID) -> list[QuestionResponse]:
        result = await self.db.execute(
            select(QuestionResponse)
            .where(QuestionResponse.route_id == route_id)
            .order_by(QuestionResponse.timestamp)
        )
        return list(result.scalars().all())

    async def delete_response(self, stop_id: uuid.UUID, question_id: uuid.UUID) -> None:
        await self.db.execute(
            delete(QuestionResponse).where(
                QuestionResponse.stop_id == stop_id,
                QuestionResponse.question_id == question_id,
            )
        )
        await self.db.commit()
