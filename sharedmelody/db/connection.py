"""Async engine and per-request session management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sharedmelody.monitoring import setup_query_monitoring
from sharedmelody.settings import get_settings

logger = logging.getLogger(__name__)

# Sized for request/response traffic: 10 warm connections, 30 at peak.
POSTGRES_POOL_OPTIONS: dict[str, Any] = {
    "pool_size": 10,
    "max_overflow": 20,
    "pool_pre_ping": True,
    "pool_recycle": 1800,
    "pool_timeout": 30,
}

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_AFTER_COMMIT_KEY = "after_commit_callbacks"


def get_database_url() -> str:
    return get_settings().resolved_database_url


def get_database_type() -> str:
    return get_settings().database_type


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite only enforces ``REFERENCES`` when the pragma is set per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine(url: str | None = None) -> AsyncEngine:
    """Build an engine for ``url`` (defaults to the configured database)."""

    url = url or get_database_url()
    if url.startswith("sqlite"):
        engine = create_async_engine(url)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_async_engine(url, **POSTGRES_POOL_OPTIONS)

    setup_query_monitoring(
        engine,
        slow_query_threshold=get_settings().slow_query_threshold,
        log_pool_checkouts=logger.isEnabledFor(logging.DEBUG),
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_engine()
        logger.info("Created %s engine", get_database_type())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections; the next request recreates the engine."""

    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def run_after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """Queue ``callback`` to run once ``session`` has committed.

    Callbacks are dropped when the transaction rolls back.
    """

    session.info.setdefault(_AFTER_COMMIT_KEY, []).append(callback)


async def commit_session(session: AsyncSession) -> None:
    """Commit ``session`` and then run the callbacks queued on it."""

    await session.commit()
    for callback in session.info.pop(_AFTER_COMMIT_KEY, []):
        await callback()


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request.

    Commits when the request succeeds and rolls back when it raises. The
    connection goes back to the pool on every path.
    """

    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            session.info.pop(_AFTER_COMMIT_KEY, None)
            await session.rollback()
            raise
        await commit_session(session)
