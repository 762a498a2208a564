"""Pytest fixtures shared by the SharedMelody test-suite.

Database tests run against an in-memory ``sqlite+aiosqlite`` engine created
through :func:`sharedmelody.db.connection.create_engine`, so foreign keys are
enforced exactly like they are for the local development database.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from sharedmelody.db.connection import create_engine, create_session_factory
from sharedmelody.db.models import Base
from sharedmelody.settings import get_settings
from tests import _ensure_repo_on_path
from tests.support import MemoryCache, seed_catalog


def pytest_configure(config: pytest.Config) -> None:
    _ensure_repo_on_path()


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Drop the cached settings so environment tweaks apply per test."""

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    pytest.importorskip("aiosqlite")
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session over freshly created tables."""

    async with create_session_factory(engine)() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()


@pytest_asyncio.fixture
async def catalog(session: AsyncSession) -> AsyncSession:
    await seed_catalog(session)
    return session


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()
