"""
Database Configuration

Async SQLAlchemy engine, session factory and the declarative Base.

Sessions are request scoped: ``get_db`` yields one session per request and
closes it on every exit path. Write paths open their own transaction with
``async with db.begin():`` so a raised exception rolls everything back.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from fest_api.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _build_engine():
    engine_kwargs: dict = {"echo": settings.db_echo, "pool_pre_ping": True}
    if settings.db_null_pool:
        engine_kwargs["poolclass"] = NullPool
    return create_async_engine(settings.database_url, **engine_kwargs)


engine = _build_engine()

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a database session.

    The session is always closed, whether the handler returns normally,
    returns an error envelope, or raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Check connectivity on startup."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Dispose of the engine and its pooled connections."""
    await engine.dispose()
