"""
PetHaven Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, FastAPI dependency and a
       timeout guard for individual storage calls.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transaction model:
    One session (and therefore one transaction) per request. Services that
    must commit several writes as a unit (the application status transition)
    commit explicitly; the dependency's final commit is then a no-op.
"""

import asyncio
import logging
from typing import Any, AsyncGenerator, Awaitable, Dict, TypeVar

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for server databases; SQLite (tests, local runs) manages its own pool."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the transition engine commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    the test suite uses for create_all().
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Timeout Guard ─────────────────────────────────────────────────────────
async def bounded(awaitable: Awaitable[T], operation: str) -> T:
    """
    Await a storage call, giving up after settings.db_timeout_seconds.

    Args:
        awaitable: The pending session call (execute, flush, commit, ...)
        operation: Short label used in logs and the error context

    Raises:
        ServiceUnavailableError: the call did not finish in time (→ 503)
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=settings.db_timeout_seconds)
    except asyncio.TimeoutError:
        logger.error(
            "Storage call '%s' exceeded %.1fs timeout",
            operation,
            settings.db_timeout_seconds,
        )
        raise ServiceUnavailableError(context={"operation": operation})


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
