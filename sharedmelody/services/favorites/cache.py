"""Caching helpers dedicated to favorites orchestration."""

from __future__ import annotations

from sharedmelody.cache import (
    CacheClient,
    favorites_stats_key,
    favorites_top_key,
    favorites_top_pattern,
)
from sharedmelody.schemas.favorites import FavoriteStats, MostFavoritedSong


class FavoritesCache:
    """Typed read/write helpers for the cached favorites payloads.

    Only the global ranking and per-song stats are cached: both are shared by
    every user and change only when an edge is added or removed, at which
    point :meth:`invalidate` drops them.
    """

    def __init__(self, client: CacheClient) -> None:
        self._client = client

    async def read_ranking(self, *, limit: int) -> list[MostFavoritedSong] | None:
        cached = await self._client.get_json(favorites_top_key(limit))
        if cached is None:
            return None
        return [MostFavoritedSong(**item) for item in cached]

    async def write_ranking(
        self, *, limit: int, songs: list[MostFavoritedSong]
    ) -> None:
        await self._client.set_json(
            favorites_top_key(limit), [song.model_dump(mode="json") for song in songs]
        )

    async def read_song_stats(self, *, song_id: int) -> FavoriteStats | None:
        cached = await self._client.get_json(favorites_stats_key(song_id))
        return FavoriteStats(**cached) if cached is not None else None

    async def write_song_stats(self, *, song_id: int, stats: FavoriteStats) -> None:
        await self._client.set_json(
            favorites_stats_key(song_id), stats.model_dump(mode="json")
        )

    async def invalidate(self, *, song_id: int) -> None:
        """Delete cached artifacts made stale by a change to ``song_id``'s edges."""

        await self._client.delete(favorites_stats_key(song_id))
        await self._client.delete_pattern(favorites_top_pattern())
