"""Database configuration and connection management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings


def async_database_url(url: str) -> str:
    """Point plain ``postgresql://`` URLs at the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str, **options: Any) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    PostgreSQL connections are tagged with the application name and pooled;
    ``options`` override the defaults (tests pass ``poolclass=NullPool``).

    Args:
        url: Database URL, sync or async form
        options: Extra ``create_async_engine`` arguments

    Returns:
        Async engine
    """
    url = async_database_url(url)
    engine_options: dict[str, Any] = {"echo": settings.debug}

    if url.startswith("postgresql+asyncpg://"):
        engine_options["connect_args"] = {
            "server_settings": {"application_name": settings.app_name},
        }
        if "poolclass" not in options:
            engine_options.update(
                pool_pre_ping=True,
                pool_size=10,
                max_overflow=20,
                pool_recycle=3600,
            )

    engine_options.update(options)
    return create_async_engine(url, **engine_options)


DATABASE_URL = async_database_url(settings.database_url)

# Create async engine with connection pooling
engine: AsyncEngine = build_engine(DATABASE_URL)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
