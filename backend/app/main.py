"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.logging import setup_logging, RequestLoggingMiddleware
from app.core.exceptions import register_exception_handlers
from app.api.routes import api_router
from app.services.routing import optimization_client

setup_logging(
    level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
    json_format=not settings.DEBUG,
)

logger = logging.getLogger(__name__)


async def detect_optimizer_mode() -> str:
    """Return which ordering strategy requests will use right now."""
    if not optimization_client.is_configured:
        logger.info("Optimization service not configured: using nearest-neighbour fallback")
        return "nearest_neighbor"

    if await optimization_client.health_check():
        logger.info("Optimization service reachable at %s", optimization_client.base_url)
        return "service"

    logger.warning("Optimization service unreachable: requests will fall back to nearest-neighbour")
    return "service_with_fallback"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.validate_production_settings()
    await init_db()
    app.state.optimizer_mode = await detect_optimizer_mode()
    logger.info("Route planner ready (optimizer: %s)", app.state.optimizer_mode)
    yield
    await close_db()
    logger.info("Route planner stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Daily route planning: stop ordering, visit questionnaires and end-of-day reports",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )

    # Handlers before middleware so error bodies carry the request id
    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict:
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs",
            "optimizer": getattr(request.app.state, "optimizer_mode", "unknown"),
        }

    return app


app = create_app()
