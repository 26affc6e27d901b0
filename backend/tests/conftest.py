"""
Shared fixtures for the test suite.
"""

import os

# Keep the module-level engine away from the working directory
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core import settings
from app.db import Base, get_db
from app.main import app


NOW = datetime(2026, 1, 10, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """A fixed instant inside the playoffs."""
    return NOW


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_maker):
    """Database session for seeding and direct service calls."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker, monkeypatch):
    """HTTP client for the API, backed by the per-test database."""
    monkeypatch.setattr(settings, "ODDS_SIMULATIONS", 500)

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
