"""Startup warmup so the first request does not pay connection setup costs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from sharedmelody.cache import get_redis
from sharedmelody.db.connection import get_engine

logger = logging.getLogger(__name__)


async def warmup_database(
    resolve_engine: Callable[[], AsyncEngine] = get_engine,
) -> bool:
    """Open a pooled connection and run ``SELECT 1``.

    Failures are logged rather than raised so the API can still start and
    report 503s once traffic arrives.
    """

    start = time.perf_counter()
    try:
        async with resolve_engine().begin() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database warmup failed: %s", exc)
        return False

    elapsed = (time.perf_counter() - start) * 1000
    logger.info("Database connection warmed up (%.0fms)", elapsed)
    return True


async def warmup_redis() -> bool:
    """Establish the Redis singleton; caching is optional so this never fails."""

    start = time.perf_counter()
    try:
        redis = await get_redis()
    except (RedisError, OSError) as exc:
        logger.warning("Redis warmup failed: %s", exc)
        return False

    if redis is None:
        logger.info("Redis warmup skipped (connection unavailable)")
        return False

    elapsed = (time.perf_counter() - start) * 1000
    logger.info("Redis connection warmed up (%.0fms)", elapsed)
    return True


async def warmup_all(
    resolve_engine: Callable[[], AsyncEngine] = get_engine,
) -> None:
    logger.info("Starting warmup")
    start = time.perf_counter()
    await warmup_database(resolve_engine)
    await warmup_redis()
    elapsed = (time.perf_counter() - start) * 1000
    logger.info("Warmup complete (%.0fms)", elapsed)
