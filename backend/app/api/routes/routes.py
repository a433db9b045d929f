"""
Route planning API routes.
"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.route import (
    OptimizeRequest,
    OptimizeResponse,
    RouteCreate,
    RouteListResponse,
    RouteOptimizeRequest,
    RouteResponse,
    RouteStatusUpdate,
    StopCreate,
    StopEventRequest,
    StopImportResponse,
    StopReorderRequest,
    StopResponse,
)
from app.services.route_service import RouteService
from app.services.routing import Coordinate, route_optimizer

router = APIRouter(prefix="/routes", tags=["routes"])
optimize_router = APIRouter(tags=["optimization"])


def get_route_service(db: AsyncSession = Depends(get_db)) -> RouteService:
    return RouteService(db)


@router.post("", response_model=RouteResponse, status_code=201)
async def create_route(
    data: RouteCreate,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """Create the user's route for a date, or return the existing one."""
    route = await service.create_route(data.user_id, data.date, data.name)
    return RouteResponse.model_validate(route)


@router.get("", response_model=RouteListResponse)
async def list_routes(
    user_id: str = Query(..., min_length=1),
    service: RouteService = Depends(get_route_service),
) -> RouteListResponse:
    """Get a user's routes, newest first."""
    routes = await service.list_routes(user_id)
    return RouteListResponse(
        items=[RouteResponse.model_validate(r) for r in routes],
        total=len(routes),
    )


@router.get("/by-date/{user_id}/{route_date}", response_model=RouteResponse)
async def get_route_by_date(
    user_id: str,
    route_date: date,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """Get a user's route for a date."""
    route = await service.get_route_for_date(user_id, route_date)
    return RouteResponse.model_validate(route)


@router.get("/{route_id}", response_model=RouteResponse)
async def get_route(
    route_id: UUID,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """Get route by ID with stops in visit order."""
    route = await service.get_route(route_id)
    return RouteResponse.model_validate(route)


@router.patch("/{route_id}/status", response_model=RouteResponse)
async def update_route_status(
    route_id: UUID,
    data: RouteStatusUpdate,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """Start, complete or cancel a route."""
    route = await service.update_status(route_id, data.status)
    return RouteResponse.model_validate(route)


# =============================================================================
# Stops
# =============================================================================

@router.post("/{route_id}/stops", response_model=StopResponse, status_code=201)
async def add_stop(
    route_id: UUID,
    data: StopCreate,
    service: RouteService = Depends(get_route_service),
) -> StopResponse:
    """Append a stop to the route."""
    stop = await service.add_stop(
        route_id,
        address=data.address,
        latitude=data.latitude,
        longitude=data.longitude,
        name=data.name,
        notes=data.notes,
    )
    return StopResponse.model_validate(stop)


@router.post("/{route_id}/stops/import", response_model=StopImportResponse)
async def import_stops(
    route_id: UUID,
    file: UploadFile = File(..., description="CSV with an address column and an optional name column"),
    service: RouteService = Depends(get_route_service),
) -> StopImportResponse:
    """
    Append stops from a CSV upload.

    Every address is geocoded, one request per second, so the response
    arrives only after the whole file is processed.
    """
    result = await service.import_stops_csv(route_id, await file.read())
    return StopImportResponse(
        success=result.success,
        imported=len(result.created),
        stops=[StopResponse.model_validate(s) for s in result.created],
        errors=result.errors,
        warnings=result.warnings,
    )


@router.delete("/{route_id}/stops/{stop_id}", response_model=RouteResponse)
async def remove_stop(
    route_id: UUID,
    stop_id: UUID,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """Remove a stop; the remaining stops are renumbered."""
    route = await service.remove_stop(route_id, stop_id)
    return RouteResponse.model_validate(route)


@router.post("/{route_id}/stops/reorder", response_model=RouteResponse)
async def reorder_stops(
    route_id: UUID,
    data: StopReorderRequest,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """Move one stop to a new position."""
    route = await service.reorder_stops(route_id, data.from_index, data.to_index)
    return RouteResponse.model_validate(route)


@router.post("/{route_id}/optimize", response_model=RouteResponse)
async def optimize_route(
    route_id: UUID,
    data: Optional[RouteOptimizeRequest] = None,
    service: RouteService = Depends(get_route_service),
) -> RouteResponse:
    """
    Optimize the visit order of a route.

    Uses the external optimization service when configured and reachable,
    the nearest-neighbour tour otherwise.
    """
    start = None
    if data and data.start:
        start = Coordinate(data.start.latitude, data.start.longitude)
    route, _ = await service.optimize_route(route_id, start)
    return RouteResponse.model_validate(route)


@router.post("/{route_id}/stops/{stop_id}/arrive", response_model=StopResponse)
async def arrive_at_stop(
    route_id: UUID,
    stop_id: UUID,
    data: Optional[StopEventRequest] = None,
    service: RouteService = Depends(get_route_service),
) -> StopResponse:
    stop = await service.mark_arrived(route_id, stop_id, data.timestamp if data else None)
    return StopResponse.model_validate(stop)


@router.post("/{route_id}/stops/{stop_id}/depart", response_model=StopResponse)
async def depart_from_stop(
    route_id: UUID,
    stop_id: UUID,
    data: Optional[StopEventRequest] = None,
    service: RouteService = Depends(get_route_service),
) -> StopResponse:
    stop = await service.mark_departed(route_id, stop_id, data.timestamp if data else None)
    return StopResponse.model_validate(stop)


@router.post("/{route_id}/stops/{stop_id}/skip", response_model=StopResponse)
async def skip_stop(
    route_id: UUID,
    stop_id: UUID,
    service: RouteService = Depends(get_route_service),
) -> StopResponse:
    stop = await service.mark_skipped(route_id, stop_id)
    return StopResponse.model_validate(stop)


# =============================================================================
# Stateless optimization
# =============================================================================

@optimize_router.post("/optimize", response_model=OptimizeResponse)
async def optimize_points(data: OptimizeRequest) -> OptimizeResponse:
    """Order arbitrary points; the first point is the fixed start."""
    points = [Coordinate(p.latitude, p.longitude) for p in data.points]
    result = await route_optimizer.optimize(points)
    return OptimizeResponse(
        order=result.order,
        total_distance_m=result.total_distance_m,
        total_duration_s=result.total_duration_s,
        source=result.source,
    )
