"""
Question template and stop response API routes.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.question import (
    QuestionImportResponse,
    QuestionResponseSchema,
    QuestionTemplateCreate,
    QuestionTemplateResponse,
    QuestionTemplateUpdate,
    ResponseSave,
)
from app.services.question_service import QuestionService

router = APIRouter(tags=["questions"])


def get_question_service(db: AsyncSession = Depends(get_db)) -> QuestionService:
    return QuestionService(db)


@router.get("/questions", response_model=list[QuestionTemplateResponse])
async def list_questions(
    user_id: str = Query(..., min_length=1),
    include_inactive: bool = Query(False),
    service: QuestionService = Depends(get_question_service),
) -> list[QuestionTemplateResponse]:
    """Get a user's questions in display order, seeding defaults on first use."""
    questions = await service.list_questions(user_id, include_inactive)
    return [QuestionTemplateResponse.model_validate(q) for q in questions]


@router.post("/questions", response_model=QuestionTemplateResponse, status_code=201)
async def create_question(
    data: QuestionTemplateCreate,
    service: QuestionService = Depends(get_question_service),
) -> QuestionTemplateResponse:
    question = await service.create_question(
        data.user_id,
        data.text,
        data.type,
        options=data.options,
        required=data.required,
        order=data.order,
    )
    return QuestionTemplateResponse.model_validate(question)


@router.post("/questions/import", response_model=QuestionImportResponse)
async def import_questions(
    user_id: str = Query(..., min_length=1),
    file: UploadFile = File(..., description="CSV with text, type, options and required columns"),
    service: QuestionService = Depends(get_question_service),
) -> QuestionImportResponse:
    """Add custom questions from a CSV upload."""
    result = await service.import_questions_csv(user_id, await file.read())
    return QuestionImportResponse(
        success=result.success,
        imported=len(result.created),
        questions=[QuestionTemplateResponse.model_validate(q) for q in result.created],
        errors=result.errors,
        warnings=result.warnings,
    )


@router.patch("/questions/{question_id}", response_model=QuestionTemplateResponse)
async def update_question(
    question_id: UUID,
    data: QuestionTemplateUpdate,
    service: QuestionService = Depends(get_question_service),
) -> QuestionTemplateResponse:
    question = await service.update_question(question_id, **data.model_dump(exclude_unset=True))
    return QuestionTemplateResponse.model_validate(question)


@router.delete("/questions/{question_id}", response_model=QuestionTemplateResponse)
async def deactivate_question(
    question_id: UUID,
    service: QuestionService = Depends(get_question_service),
) -> QuestionTemplateResponse:
    """Deactivate a question. Stored answers are kept."""
    question = await service.deactivate_question(question_id)
    return QuestionTemplateResponse.model_validate(question)


# =============================================================================
# Responses
# =============================================================================

@router.put("/stops/{stop_id}/responses/{question_id}", response_model=QuestionResponseSchema)
async def save_response(
    stop_id: UUID,
    question_id: UUID,
    data: ResponseSave,
    service: QuestionService = Depends(get_question_service),
) -> QuestionResponseSchema:
    """Save (or overwrite) the answer to a question at a stop."""
    response = await service.save_response(stop_id, question_id, data.value, data.image_data)
    return QuestionResponseSchema.model_validate(response)


@router.get("/stops/{stop_id}/responses", response_model=list[QuestionResponseSchema])
async def list_stop_responses(
    stop_id: UUID,
    service: QuestionService = Depends(get_question_service),
) -> list[QuestionResponseSchema]:
    responses = await service.list_stop_responses(stop_id)
    return [QuestionResponseSchema.model_validate(r) for r in responses]


@router.delete("/stops/{stop_id}/responses/{question_id}", status_code=204)
async def delete_response(
    stop_id: UUID,
    question_id: UUID,
    service: QuestionService = Depends(get_question_service),
) -> None:
    await service.delete_response(stop_id, question_id)
