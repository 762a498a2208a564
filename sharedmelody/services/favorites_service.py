"""Business logic powering the favorites API endpoints.

Persistence-oriented operations delegated to :class:`FavoritesPersistence`:
* ``add_edge``/``remove_edge`` – single-statement idempotent mutations whose
  return value says whether a row was actually created or deleted.
* ``edge_exists`` – the read behind ``is_song_favorite``.
* ``list_user_favorites``/``count_user_favorites`` – the paginated personal list.
* ``most_favorited``/``song_stats`` – aggregates over the edge table.
* ``refresh_like_count`` – keeps ``songs.like_count`` in step with the edges.

Row conversion lives in :class:`FavoritesAnalytics` and the Redis-backed
ranking/stats cache in :class:`FavoritesCache`.

``toggle_favorite`` never reads before writing. It deletes first and inserts
only when nothing was deleted, and every result reports the state the
database is left in. Two concurrent toggles for the same pair can still both
land on "added", because this is a best-effort toggle and not a
compare-and-swap.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sharedmelody.cache import CacheClient, get_cache_client
from sharedmelody.db.connection import get_db
from sharedmelody.db.models import INTEGER_KEY_MAX
from sharedmelody.errors import internal_error, not_found_error, validation_error
from sharedmelody.schemas.favorites import (
    FavoriteSong,
    FavoriteStats,
    FavoriteToggleResult,
    MostFavoritedSong,
)
from sharedmelody.services.favorites import (
    FavoritesAnalytics,
    FavoritesCache,
    FavoritesPersistence,
)

logger = logging.getLogger(__name__)

USER_FAVORITES_MAX_LIMIT = 100
MOST_FAVORITED_MAX_LIMIT = 50
DEFAULT_USER_FAVORITES_LIMIT = 50
DEFAULT_MOST_FAVORITED_LIMIT = 10


@contextmanager
def _storage_errors(message: str) -> Iterator[None]:
    """Re-raise database failures as an internal :class:`ApiError`."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Favorites storage failure: %s", message)
        raise internal_error(message) from exc


def _require_positive_id(value: int, message: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise validation_error(message)
    if not 1 <= value <= INTEGER_KEY_MAX:
        raise validation_error(message)


def _require_limit(limit: int, maximum: int) -> None:
    if limit < 1 or limit > maximum:
        raise validation_error(f"Límite debe estar entre 1 y {maximum}")


def _require_offset(offset: int) -> None:
    if offset < 0:
        raise validation_error("Offset debe ser mayor o igual a 0")
    if offset > INTEGER_KEY_MAX:
        raise validation_error("Offset fuera de rango")


class FavoritesService:
    """Orchestrates persistence, analytics, and caching dependencies."""

    def __init__(
        self,
        *,
        persistence: FavoritesPersistence,
        analytics: FavoritesAnalytics,
        cache: FavoritesCache,
    ) -> None:
        self._persistence = persistence
        self._analytics = analytics
        self._cache = cache

    async def add_to_favorites(self, user_id: int, song_id: int) -> bool:
        """Create the favorite edge; ``False`` if it already existed."""

        self._validate_pair(user_id, song_id)
        with _storage_errors("Error al agregar canción a favoritos"):
            was_added = await self._insert_edge(user_id, song_id)
            if was_added:
                await self._after_mutation(song_id)

        if was_added:
            logger.info("Song %s added to favorites of user %s", song_id, user_id)
        else:
            logger.info("Song %s was already a favorite of user %s", song_id, user_id)
        return was_added

    async def remove_from_favorites(self, user_id: int, song_id: int) -> bool:
        """Delete the favorite edge; ``False`` if there was none."""

        self._validate_pair(user_id, song_id)
        with _storage_errors("Error al remover canción de favoritos"):
            was_removed = await self._persistence.remove_edge(user_id, song_id)
            if was_removed:
                await self._after_mutation(song_id)

        if was_removed:
            logger.info("Song %s removed from favorites of user %s", song_id, user_id)
        else:
            logger.info("Song %s was not a favorite of user %s", song_id, user_id)
        return was_removed

    async def is_song_favorite(self, user_id: int, song_id: int) -> bool:
        self._validate_pair(user_id, song_id)
        with _storage_errors("Error al verificar si la canción está en favoritos"):
            return await self._persistence.edge_exists(user_id, song_id)

    async def toggle_favorite(self, user_id: int, song_id: int) -> FavoriteToggleResult:
        """Invert the favorite state of ``song_id`` for ``user_id``."""

        self._validate_pair(user_id, song_id)
        with _storage_errors("Error al alternar estado de favorito"):
            if await self._persistence.remove_edge(user_id, song_id):
                await self._after_mutation(song_id)
                logger.info("Toggle removed song %s for user %s", song_id, user_id)
                return FavoriteToggleResult(is_favorite=False, action="removed")

            # A concurrent add may win the insert; the edge exists either way.
            if await self._insert_edge(user_id, song_id):
                await self._after_mutation(song_id)
            logger.info("Toggle added song %s for user %s", song_id, user_id)
            return FavoriteToggleResult(is_favorite=True, action="added")

    async def get_user_favorites(
        self,
        user_id: int,
        limit: int = DEFAULT_USER_FAVORITES_LIMIT,
        offset: int = 0,
    ) -> list[FavoriteSong]:
        _require_positive_id(user_id, "Usuario inválido")
        _require_limit(limit, USER_FAVORITES_MAX_LIMIT)
        _require_offset(offset)
        with _storage_errors("Error al obtener favoritos del usuario"):
            rows = await self._persistence.list_user_favorites(
                user_id, limit=limit, offset=offset
            )
        return self._analytics.favorite_songs(rows)

    async def get_user_favorites_count(self, user_id: int) -> int:
        _require_positive_id(user_id, "Usuario inválido")
        with _storage_errors("Error al obtener conteo de favoritos"):
            return await self._persistence.count_user_favorites(user_id)

    async def get_most_favorited_songs(
        self, limit: int = DEFAULT_MOST_FAVORITED_LIMIT
    ) -> list[MostFavoritedSong]:
        _require_limit(limit, MOST_FAVORITED_MAX_LIMIT)

        cached = await self._cache.read_ranking(limit=limit)
        if cached is not None:
            return cached

        with _storage_errors("Error al obtener canciones más favoritas"):
            rows = await self._persistence.most_favorited(limit=limit)
        songs = self._analytics.ranking(rows)
        await self._cache.write_ranking(limit=limit, songs=songs)
        return songs

    async def get_song_favorite_stats(self, song_id: int) -> FavoriteStats:
        """Aggregate stats for ``song_id``; zeroed when nobody favorited it."""

        _require_positive_id(song_id, "ID de canción inválido")

        cached = await self._cache.read_song_stats(song_id=song_id)
        if cached is not None:
            return cached

        with _storage_errors("Error al obtener estadísticas de favoritos"):
            row = await self._persistence.song_stats(song_id)
        stats = self._analytics.song_stats(row)
        await self._cache.write_song_stats(song_id=song_id, stats=stats)
        return stats

    async def _insert_edge(self, user_id: int, song_id: int) -> bool:
        try:
            return await self._persistence.add_edge(user_id, song_id)
        except IntegrityError as exc:
            logger.warning(
                "Rejected favorite for missing song %s (user %s): %s",
                song_id,
                user_id,
                exc.orig,
            )
            raise not_found_error("Canción no encontrada") from exc

    async def _after_mutation(self, song_id: int) -> None:
        await self._persistence.refresh_like_count(song_id)

        # Evicting before the commit would let a concurrent read re-cache the
        # pre-mutation state.
        async def _invalidate() -> None:
            await self._cache.invalidate(song_id=song_id)

        self._persistence.after_commit(_invalidate)

    @staticmethod
    def _validate_pair(user_id: int, song_id: int) -> None:
        _require_positive_id(user_id, "Usuario inválido")
        _require_positive_id(song_id, "ID de canción inválido")


async def get_favorites_service(
    session: AsyncSession = Depends(get_db),
    cache_client: CacheClient = Depends(get_cache_client),
) -> FavoritesService:
    """FastAPI dependency that wires the orchestrator together."""

    return FavoritesService(
        persistence=FavoritesPersistence(session),
        analytics=FavoritesAnalytics(),
        cache=FavoritesCache(cache_client),
    )
