"""Database connection and session management.

The engine is created once per process on application startup and disposed
on shutdown (see `api/main.py`).
"""
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings
from .models import Base

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def init_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create the engine and session factory if they do not exist yet."""
    global _engine, _session_factory
    if _engine is not None:
        return _engine

    _engine = create_async_engine(
        database_url or get_settings().database_url,
        pool_pre_ping=True,          # Verify connections before using
    )
    # Entities stay usable after commit; async sessions cannot lazy-load.
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False, autoflush=False)
    return _engine


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None


def session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database engine is not initialized. Call init_engine() on startup.")
    return _session_factory


async def create_schema() -> None:
    """Create all tables. Used for local development and tests; production runs alembic."""
    if _engine is None:
        raise RuntimeError("Database engine is not initialized. Call init_engine() on startup.")
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Yields:
        AsyncSession: SQLAlchemy database session
    """
    async with session_factory()() as db:
        yield db
