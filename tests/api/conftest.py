"""Fixtures wiring the FastAPI app to the in-memory test database."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sharedmelody.cache import get_cache_client
from sharedmelody.db.connection import commit_session, get_db
from sharedmelody.main import app
from sharedmelody.security import create_access_token
from tests.support import MemoryCache


@pytest_asyncio.fixture
async def api_client(
    catalog: AsyncSession, memory_cache: MemoryCache
) -> AsyncIterator[AsyncClient]:
    """HTTP client whose requests share the seeded test session."""

    async def _override_db() -> AsyncIterator[AsyncSession]:
        yield catalog
        await commit_session(catalog)

    async def _override_cache() -> MemoryCache:
        return memory_cache

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_cache_client] = _override_cache
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[int], dict[str, str]]:
    def _headers(user_id: int = 1) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
