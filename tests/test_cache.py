"""Tests for the Redis cache client and its retry backoff."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from sharedmelody import cache


@dataclass
class _StubRedis:
    """Tiny Redis stand-in that can emulate connection failures."""

    should_fail: bool = False
    closed: bool = False
    data: dict[str, str] = field(default_factory=dict)

    async def ping(self) -> None:
        if self.should_fail:
            raise RedisConnectionError("Redis unavailable for test")

    async def aclose(self) -> None:
        self.closed = True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.data.pop(key, None)

    async def scan_iter(self, match: str):
        prefix = match.rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key


class _StubRedisFactory:
    """Mimics :meth:`redis.asyncio.Redis.from_url` with queued outcomes."""

    failures: ClassVar[list[bool]] = []
    created_clients: ClassVar[list[_StubRedis]] = []

    @classmethod
    def from_url(cls, *_: object, **__: object) -> _StubRedis:
        client = _StubRedis(should_fail=cls.failures.pop(0))
        cls.created_clients.append(client)
        return client


@pytest.fixture
def stub_redis(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cache, "Redis", _StubRedisFactory)
    _StubRedisFactory.failures = []
    _StubRedisFactory.created_clients = []
    yield _StubRedisFactory
    cache._redis_client = None
    cache._redis_disabled_until = 0.0


@pytest.mark.asyncio
async def test_get_redis_backs_off_after_failure(
    stub_redis: type[_StubRedisFactory],
) -> None:
    await cache.close_redis()
    stub_redis.failures = [True, False]

    assert await cache.get_redis() is None
    assert stub_redis.created_clients[0].closed is True

    # Still inside the cool-down window: no new connection attempt.
    assert await cache.get_redis() is None
    assert len(stub_redis.created_clients) == 1

    cache._redis_disabled_until = 0.0
    client = await cache.get_redis()
    assert client is stub_redis.created_clients[1]
    assert await cache.get_redis() is client


@pytest.mark.asyncio
async def test_cache_client_round_trips_json() -> None:
    redis = _StubRedis()
    client = cache.CacheClient(redis, default_ttl=60)

    await client.set_json("favorites:top:5", [{"song_id": 1}])

    assert await client.get_json("favorites:top:5") == [{"song_id": 1}]
    assert await client.get_json("favorites:top:10") is None


@pytest.mark.asyncio
async def test_cache_client_delete_pattern() -> None:
    redis = _StubRedis(
        data={"favorites:top:5": "[]", "favorites:top:10": "[]", "favorites:stats:1": "{}"}
    )
    client = cache.CacheClient(redis, default_ttl=60)

    await client.delete_pattern(cache.favorites_top_pattern())

    assert set(redis.data) == {"favorites:stats:1"}


@pytest.mark.asyncio
async def test_cache_client_without_redis_is_a_noop() -> None:
    client = cache.CacheClient(None, default_ttl=60)

    await client.set_json("k", {"a": 1})
    await client.delete("k")
    await client.delete_pattern("k*")

    assert await client.get_json("k") is None


def test_cache_keys() -> None:
    assert cache.favorites_top_key(10) == "favorites:top:10"
    assert cache.favorites_stats_key(7) == "favorites:stats:7"
