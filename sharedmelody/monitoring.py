"""Slow-query logging hooked into SQLAlchemy engine events.

Statements slower than ``SLOW_QUERY_THRESHOLD`` are logged at WARNING with the
id of the request that issued them, which is usually enough to tell a cold
ranking aggregate from a personal list page that lost its index.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

from sharedmelody.utils.request_context import get_request_id

logger = logging.getLogger(__name__)

_START_KEY = "sharedmelody_query_start"
MAX_LOGGED_STATEMENT = 500


def _shorten(statement: str) -> str:
    flattened = " ".join(statement.split())
    if len(flattened) > MAX_LOGGED_STATEMENT:
        return flattened[:MAX_LOGGED_STATEMENT] + "..."
    return flattened


def setup_query_monitoring(
    engine: AsyncEngine,
    *,
    slow_query_threshold: float,
    log_pool_checkouts: bool = False,
) -> None:
    """Attach timing listeners to ``engine``'s underlying sync engine."""

    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn: Any, *_: Any) -> None:
        conn.info.setdefault(_START_KEY, []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _log_if_slow(
        conn: Any, cursor: Any, statement: str, *_: Any
    ) -> None:
        started = conn.info.get(_START_KEY)
        if not started:
            return
        elapsed = time.perf_counter() - started.pop()
        if elapsed > slow_query_threshold:
            logger.warning(
                "Slow query (%.0fms) for request %s: %s",
                elapsed * 1000,
                get_request_id() or "-",
                _shorten(statement),
            )

    if log_pool_checkouts:

        @event.listens_for(sync_engine.pool, "checkout")
        def _log_checkout(*_: Any) -> None:
            logger.debug("Connection checked out (%s)", sync_engine.pool.status())

    logger.debug(
        "Query monitoring enabled (threshold %.0fms)", slow_query_threshold * 1000
    )
