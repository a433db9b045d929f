"""
Question template and response schemas.
"""
from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.question import QuestionType


class QuestionTemplateCreate(BaseModel):
    """Schema for creating a question template."""
    user_id: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1, max_length=500)
    type: QuestionType
    options: Optional[list[str]] = None
    required: bool = False
    order: Optional[int] = Field(None, ge=0)


class QuestionTemplateUpdate(BaseModel):
    """Schema for updating a question template."""
    text: Optional[str] = Field(None, min_length=1, max_length=500)
    type: Optional[QuestionType] = None
    options: Optional[list[str]] = None
    required: Optional[bool] = None
    is_active: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


class QuestionTemplateResponse(BaseModel):
    """Question template response schema."""
    id: UUID
    user_id: str
    text: str
    type: QuestionType
    options: Optional[list[str]]
    required: bool
    is_default: bool
    is_active: bool
    order: int

    class Config:
        from_attributes = True


class ResponseSave(BaseModel):
    """Answer to a question at a stop."""
    value: Optional[Union[bool, int, float, str]] = None
    image_data: Optional[str] = Field(None, description="Base64 data URL for photo/signature")


class QuestionResponseSchema(BaseModel):
    """Stored answer with snapshotted question text and type."""
    id: UUID
    stop_id: UUID
    route_id: UUID
    question_id: UUID
    question_text: str
    question_type: QuestionType
    value: Any
    image_data: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True


class QuestionImportResponse(BaseModel):
    """Result of a question CSV upload."""
    success: bool
    imported: int
    questions: list[QuestionTemplateResponse]
    errors: list[str]
    warnings: list[str]
