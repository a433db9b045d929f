"""
API routes module.
"""

from fastapi import APIRouter

from app.api.routes import (
    geocoding,
    health,
    questions,
    reports,
    routes,
)

# Main API router (mounted at /api/v1)
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(routes.router)
api_router.include_router(routes.optimize_router)
api_router.include_router(questions.router)
api_router.include_router(reports.router)
api_router.include_router(geocoding.router)
