from __future__ import annotations

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tutorsched.core.config import get_settings

from .base import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(database_url: str) -> dict[str, Any]:
    # pre-ping is for networked servers only
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True}


def _get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        database_url = get_settings().database_url
        _engine = create_async_engine(database_url, echo=False, **_engine_options(database_url))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the configured state database."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(_get_engine(), expire_on_commit=False)
    return _session_factory


async def init_models() -> None:
    """Create the state table if it does not exist yet."""
    async with _get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close pooled connections; the next call builds a fresh engine from settings."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
