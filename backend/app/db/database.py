"""
Database connection and session management.
"""

import os
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from .models import Base


def normalize_database_url(url: str) -> str:
    """
    Rewrite hosted PostgreSQL URLs to use the asyncpg driver.

    Hosting providers hand out `postgres://` or `postgresql://` URLs; the async
    engine needs `postgresql+asyncpg://`.
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://") and "+asyncpg" not in url:
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


DATABASE_URL = normalize_database_url(os.getenv(
    "DATABASE_URL",
    "sqlite+aiosqlite:///./playoff_pickem.db"
))

engine_options = {"echo": os.getenv("SQL_ECHO", "false").lower() == "true"}
if not DATABASE_URL.startswith("sqlite"):
    engine_options.update(pool_pre_ping=True, pool_recycle=300)

engine = create_async_engine(DATABASE_URL, **engine_options)

# Create session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    """Drop all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for getting a database session.

    Route handlers commit explicitly; anything left uncommitted is rolled back
    when the session closes.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
