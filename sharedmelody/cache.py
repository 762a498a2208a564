"""Redis access for favorites rankings and per-song stats.

Redis is optional at runtime. When the server cannot be reached the helpers
here return ``None`` or do nothing, and callers fall through to the database.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable
from typing import Any, TypeVar

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from sharedmelody.settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOP_KEY_PREFIX = "favorites:top"
STATS_KEY_PREFIX = "favorites:stats"

_REDIS_UNAVAILABLE = (RedisConnectionError, RedisTimeoutError, OSError)

_redis_client: Redis | None = None
_redis_disabled_until = 0.0
_connect_lock = asyncio.Lock()


def favorites_top_key(limit: int) -> str:
    return f"{TOP_KEY_PREFIX}:{limit}"


def favorites_top_pattern() -> str:
    return f"{TOP_KEY_PREFIX}:*"


def favorites_stats_key(song_id: int | str) -> str:
    return f"{STATS_KEY_PREFIX}:{song_id}"


def _in_backoff() -> bool:
    return time.monotonic() < _redis_disabled_until


async def get_redis() -> Redis | None:
    """Return the shared client, connecting on first use.

    After a failed ping no new attempt is made for
    ``REDIS_RETRY_BACKOFF_SECONDS``.
    """

    global _redis_client, _redis_disabled_until

    if _in_backoff():
        logger.debug("Skipping Redis connect during backoff window")
        return None

    async with _connect_lock:
        if _redis_client is not None or _in_backoff():
            return _redis_client

        settings = get_settings()
        candidate = Redis.from_url(settings.redis_url, decode_responses=True, encoding="utf-8")
        try:
            await candidate.ping()
        except _REDIS_UNAVAILABLE as exc:
            logger.warning(
                "Redis unreachable (%s); caching off for %.0fs",
                exc,
                settings.redis_retry_backoff_seconds,
            )
            await candidate.aclose()
            _redis_disabled_until = time.monotonic() + settings.redis_retry_backoff_seconds
            return None

        logger.info("Connected to Redis")
        _redis_client = candidate
        return candidate


class CacheClient:
    """JSON values in Redis. Without a connection every call is a no-op."""

    def __init__(self, redis: Redis | None, *, default_ttl: int | None = None) -> None:
        self._redis = redis
        self._default_ttl = default_ttl or get_settings().favorites_cache_ttl

    async def _guarded(self, action: str, call: Awaitable[T]) -> T | None:
        try:
            return await call
        except _REDIS_UNAVAILABLE as exc:
            logger.debug("Redis %s failed: %s", action, exc)
            return None

    async def get_json(self, key: str) -> Any:
        if self._redis is None:
            return None
        raw = await self._guarded(f"GET {key}", self._redis.get(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring undecodable cache entry %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._redis is None:
            return
        await self._guarded(
            f"SET {key}",
            self._redis.set(key, json.dumps(value, default=str), ex=ttl or self._default_ttl),
        )

    async def delete(self, *keys: str) -> None:
        if self._redis is None or not keys:
            return
        await self._guarded("DEL", self._redis.delete(*keys))

    async def delete_pattern(self, pattern: str) -> None:
        if self._redis is None:
            return
        matches = await self._guarded(f"SCAN {pattern}", self._collect_keys(pattern))
        if matches:
            await self.delete(*matches)

    async def _collect_keys(self, pattern: str) -> list[str]:
        return [key async for key in self._redis.scan_iter(match=pattern)]


async def get_cache_client() -> CacheClient:
    """FastAPI dependency; the client is Redis-less while Redis is down."""
    return CacheClient(await get_redis())


async def close_redis() -> None:
    global _redis_client, _redis_disabled_until
    client, _redis_client = _redis_client, None
    _redis_disabled_until = 0.0
    if client is not None:
        await client.aclose()


__all__ = [
    "CacheClient",
    "close_redis",
    "favorites_stats_key",
    "favorites_top_key",
    "favorites_top_pattern",
    "get_cache_client",
    "get_redis",
]
