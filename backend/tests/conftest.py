"""
Pytest configuration and fixtures for testing.
"""
from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.database import Base, get_db
from app.main import app
from app.services.reporting.types import ResponseSnapshot, RouteSnapshot, StopSnapshot

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ROUTE_DAY = date(2024, 5, 1)
DAY_START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Create database session for testing."""
    session_factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    """Create test client with the database dependency overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Snapshot builders
# =============================================================================

def at(minutes: int) -> datetime:
    """Timestamp `minutes` after 09:00 UTC on the test day."""
    return DAY_START + timedelta(minutes=minutes)


def make_route(**overrides) -> RouteSnapshot:
    data = {
        "id": "route-1",
        "user_id": "driver-1",
        "date": ROUTE_DAY,
        "status": "completed",
        "total_distance": 0.0,
        "total_duration": 0.0,
    }
    data.update(overrides)
    return RouteSnapshot(**data)


def make_stop(index: int, status: str = "completed", **overrides) -> StopSnapshot:
    data = {
        "id": f"stop-{index}",
        "order": index,
        "address": f"{100 + index} Main St",
        "status": status,
        "name": f"Customer {index}",
    }
    data.update(overrides)
    return StopSnapshot(**data)


def make_response(stop_id: str, text: str, question_type: str, value=None, **overrides) -> ResponseSnapshot:
    data = {
        "stop_id": stop_id,
        "question_id": f"q-{text.lower().replace(' ', '-')}",
        "question_text": text,
        "question_type": question_type,
        "value": value,
    }
    data.update(overrides)
    return ResponseSnapshot(**data)


@pytest.fixture
def sample_points():
    """Five stops around lower Manhattan."""
    from app.services.routing.geo import Coordinate

    return [
        Coordinate(40.7128, -74.0060),
        Coordinate(40.7306, -73.9866),
        Coordinate(40.7061, -74.0087),
        Coordinate(40.7580, -73.9855),
        Coordinate(40.7209, -74.0007),
    ]
