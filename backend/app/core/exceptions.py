"""
Standardized exception handling.

Provides consistent error responses across all endpoints with:
- Unique error codes for client-side handling
- Request tracking via request_id
- HTTP status code alignment
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ErrorDetail(BaseModel):
    """Standardized error response format."""
    code: str
    message: str
    status_code: int
    timestamp: str
    request_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Wrapper for error responses."""
    error: ErrorDetail


# =============================================================================
# Base Exception Classes
# =============================================================================

class AppException(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message or self.message
        self.details = details
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert exception to standardized error response."""
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                status_code=self.status_code,
                timestamp=_timestamp(),
                request_id=request_id,
                details=self.details,
            )
        )


# =============================================================================
# Client Errors (4xx)
# =============================================================================

class ValidationException(AppException):
    """Invalid input data."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    message = "Invalid input data"


class NotFoundException(AppException):
    """Resource not found."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    message = "Resource not found"


class ConflictException(AppException):
    """Resource conflict (duplicate, state conflict)."""
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
    message = "Resource conflict"


# =============================================================================
# Domain-Specific Exceptions
# =============================================================================

class ResourceNotFoundException(NotFoundException):
    """A stored route-planning record does not exist."""
    resource = "Resource"
    id_field = "id"

    def __init__(self, resource_id):
        super().__init__(
            message=f"{self.resource} with ID '{resource_id}' not found",
            details={self.id_field: str(resource_id)},
        )


class RouteNotFoundException(ResourceNotFoundException):
    error_code = "ROUTE_NOT_FOUND"
    resource, id_field = "Route", "route_id"


class StopNotFoundException(ResourceNotFoundException):
    error_code = "STOP_NOT_FOUND"
    resource, id_field = "Stop", "stop_id"


class QuestionNotFoundException(ResourceNotFoundException):
    error_code = "QUESTION_NOT_FOUND"
    resource, id_field = "Question", "question_id"


class ReportNotFoundException(ResourceNotFoundException):
    error_code = "REPORT_NOT_FOUND"
    resource, id_field = "Report", "report_id"


class InvalidStatusTransitionException(ConflictException):
    """Requested status change is not allowed from the current status."""
    error_code = "INVALID_STATUS_TRANSITION"

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            message=f"Cannot change {entity} status from '{current}' to '{requested}'",
            details={"entity": entity, "current": current, "requested": requested}
        )


class InsufficientDataException(ValidationException):
    """Not enough data for operation."""
    error_code = "INSUFFICIENT_DATA"

    def __init__(self, resource: str, required: int, provided: int):
        super().__init__(
            message=f"Insufficient {resource}: required {required}, provided {provided}",
            details={"resource": resource, "required": required, "provided": provided}
        )


# =============================================================================
# Exception Handler Registration
# =============================================================================

def get_request_id(request: Request) -> str:
    """Extract or generate request ID."""
    return getattr(request.state, "request_id", None) or str(uuid4())


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all application exceptions with standardized format."""
    request_id = get_request_id(request)
    response = exc.to_response(request_id=request_id)

    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message}", extra={"request_id": request_id})

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
        headers={"X-Request-ID": request_id},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id(request)

    logger.exception(f"Unhandled exception: {exc}", extra={"request_id": request_id})

    error = ErrorResponse(
        error=ErrorDetail(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            status_code=500,
            timestamp=_timestamp(),
            request_id=request_id,
        )
    )

    return JSONResponse(
        status_code=500,
        content=error.model_dump(),
        headers={"X-Request-ID": request_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
