"""Async SQLAlchemy engine, declarative base and session factory.

Provides:
- Base: Declarative base for all dashboard tables
- get_session(): AsyncSession generator used as the repositories' session factory
- store_errors(): wraps unexpected SQLAlchemy failures into StoreFault
- init_db() / close_db(): lifespan hooks
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.dashboard.config import get_settings
from src.dashboard.core.errors import StoreFault

logger = structlog.get_logger(__name__)

# ── Module-level engine (lazy init) ────────────────────────────────────────

_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.DATABASE_URL,
            pool_size=10,
            max_overflow=5,
            pool_pre_ping=True,
            echo=False,
        )
    return _engine


# ── Declarative Base ────────────────────────────────────────────────────────


class Base(DeclarativeBase):
    """Base class for dashboard models."""


# ── Session Factory ─────────────────────────────────────────────────────────


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession bound to the engine."""
    engine = get_engine()
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Log unexpected persistence failures and re-raise them as StoreFault."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("store.operation_failed", operation=operation, exc_info=True)
        raise StoreFault(f"Store operation failed: {operation}") from exc


# ── Database Initialization ─────────────────────────────────────────────────


async def init_db() -> None:
    """Create all tables if they don't exist."""
    # Import models so they register on Base.metadata
    from src.dashboard.contacts import models as _contacts  # noqa: F401
    from src.dashboard.deal_contacts import models as _deal_contacts  # noqa: F401
    from src.dashboard.auth import models as _auth  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and close all connections."""
    global _engine
    if _engine:
        await _engine.dispose()
        _engine = None
