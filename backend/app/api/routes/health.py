"""
Health check endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import check_db_connection, get_db
from app.services.routing import optimization_client

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/health/detailed")
async def detailed_health_check(
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Detailed health check including dependencies.

    An unconfigured optimization service is reported as "offline" and does
    not degrade the status, since optimization falls back to a local tour.
    """
    checks = {
        "api": "healthy",
        "database": "healthy" if await check_db_connection(db) else "unhealthy",
        "optimization": "offline",
    }

    if optimization_client.is_configured:
        checks["optimization"] = (
            "healthy" if await optimization_client.health_check() else "unhealthy (using fallback)"
        )

    overall = "healthy" if checks["database"] == "healthy" else "degraded"

    return {
        "status": overall,
        "checks": checks,
    }
