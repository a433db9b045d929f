"""
Route and stop schemas.
"""
from datetime import date as date_type, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.route import RouteStatus
from app.models.stop import StopStatus


class CoordinateSchema(BaseModel):
    """Latitude/longitude pair in decimal degrees."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# =============================================================================
# Stops
# =============================================================================

class StopCreate(BaseModel):
    """Schema for adding a stop to a route."""
    address: str = Field(..., min_length=1, max_length=500)
    name: Optional[str] = Field(None, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    notes: Optional[str] = None


class StopResponse(BaseModel):
    """Stop response schema."""
    id: UUID
    route_id: UUID
    address: str
    name: Optional[str]
    latitude: float
    longitude: float
    order: int
    status: StopStatus
    arrived_at: Optional[datetime]
    departed_at: Optional[datetime]
    notes: Optional[str]

    class Config:
        from_attributes = True


class StopImportResponse(BaseModel):
    """Result of a stop CSV upload."""
    success: bool
    imported: int
    stops: list[StopResponse]
    errors: list[str]
    warnings: list[str]


class StopReorderRequest(BaseModel):
    """Move one stop from one position to another."""
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


# =============================================================================
# Routes
# =============================================================================

class RouteCreate(BaseModel):
    """Schema for creating a user's route for a date."""
    user_id: str = Field(..., min_length=1, max_length=100)
    date: date_type
    name: Optional[str] = Field(None, max_length=255)


class RouteStatusUpdate(BaseModel):
    """Route status change request."""
    status: RouteStatus


class RouteResponse(BaseModel):
    """Route response schema with ordered stops."""
    id: UUID
    user_id: str
    date: date_type
    name: Optional[str]
    status: RouteStatus
    optimized_order: list[int]
    total_distance: float = Field(..., description="Meters")
    total_duration: float = Field(..., description="Seconds")
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    stops: list[StopResponse] = []

    class Config:
        from_attributes = True


class RouteListResponse(BaseModel):
    """Route list response."""
    items: list[RouteResponse]
    total: int


# =============================================================================
# Optimization
# =============================================================================

class RouteOptimizeRequest(BaseModel):
    """Optimize a stored route, optionally from the worker's current position."""
    start: Optional[CoordinateSchema] = Field(
        None, description="Current location, prepended as the fixed start point"
    )


class OptimizeRequest(BaseModel):
    """Stateless optimization request. The first point is the fixed start."""
    points: list[CoordinateSchema] = Field(..., min_length=2)


class OptimizeResponse(BaseModel):
    """Visit order with distance and duration estimate."""
    order: list[int]
    total_distance_m: float
    total_duration_s: float
    source: str = Field(..., description="'service' or 'fallback'")


class StopEventRequest(BaseModel):
    """Arrival or departure; the current time is used when omitted."""
    timestamp: Optional[datetime] = None
