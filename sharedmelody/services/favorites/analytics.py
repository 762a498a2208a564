"""Conversions from aggregate rows into favorites schemas."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sharedmelody.schemas.favorites import (
    UNKNOWN_ARTIST,
    UNKNOWN_GENRE,
    FavoriteSong,
    FavoriteStats,
    MostFavoritedSong,
)


def _as_int(value: Any) -> int:
    """Counters arrive as ``int`` from SQLite and ``int``/``Decimal`` from psycopg."""

    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class FavoritesAnalytics:
    """Pure routines decoupled from persistence and caching layers."""

    def favorite_song(self, row: Mapping[str, Any]) -> FavoriteSong:
        return FavoriteSong(
            song_id=row["song_id"],
            title=row["title"],
            artist_name=row["artist_name"] or UNKNOWN_ARTIST,
            genre_name=row["genre_name"] or UNKNOWN_GENRE,
            upload_date=row["upload_date"],
            like_count=_as_int(row["like_count"]),
            plays_count=_as_int(row["plays_count"]),
            favorited_at=row["favorited_at"],
        )

    def favorite_songs(self, rows: Iterable[Mapping[str, Any]]) -> list[FavoriteSong]:
        return [self.favorite_song(row) for row in rows]

    def most_favorited_song(self, row: Mapping[str, Any]) -> MostFavoritedSong:
        return MostFavoritedSong(
            song_id=row["song_id"],
            title=row["title"],
            artist_name=row["artist_name"] or UNKNOWN_ARTIST,
            genre_name=row["genre_name"] or UNKNOWN_GENRE,
            like_count=_as_int(row["like_count"]),
            plays_count=_as_int(row["plays_count"]),
            upload_date=row["upload_date"],
            favorites_count=_as_int(row["favorites_count"]),
        )

    def ranking(self, rows: Iterable[Mapping[str, Any]]) -> list[MostFavoritedSong]:
        return [self.most_favorited_song(row) for row in rows]

    def song_stats(self, row: Mapping[str, Any] | None) -> FavoriteStats:
        """Build stats for a song, zeroed when it has never been favorited."""

        if row is None:
            return FavoriteStats.empty()

        return FavoriteStats(
            total_favorites=_as_int(row["total_favorites"]),
            unique_users_favorited=_as_int(row["unique_users_favorited"]),
            first_favorited=row["first_favorited"],
            last_favorited=row["last_favorited"],
        )
