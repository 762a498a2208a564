"""Database-oriented helpers for the favorites edge table.

Every mutation is a single statement so its outcome (row created, row
deleted, nothing happened) comes back from the database itself instead of a
separate existence check.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from sqlalchemy import RowMapping, delete, distinct, exists, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from sharedmelody.db.connection import run_after_commit
from sharedmelody.db.models import Artist, Genre, Song, UserFavorite, utcnow


class FavoritesPersistence:
    """Encapsulates SQLAlchemy operations required by the favorites domain."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def after_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        run_after_commit(self._session, callback)

    def _insert(self) -> Any:
        """Return the dialect-specific ``insert`` supporting ``ON CONFLICT``."""

        dialect = self._session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert
        if dialect == "sqlite":
            return sqlite_insert
        raise RuntimeError(f"Unsupported database dialect for favorites: {dialect}")

    @staticmethod
    def _visible_song_filters() -> tuple[Any, ...]:
        return (Song.is_public.is_(True), Song.is_approved.is_(True))

    async def add_edge(self, user_id: int, song_id: int) -> bool:
        """Insert the favorite edge; ``False`` when the pair already existed.

        Raises :class:`sqlalchemy.exc.IntegrityError` when the user or song
        does not exist.
        """

        statement = (
            self._insert()(UserFavorite)
            .values(user_id=user_id, song_id=song_id, favorited_at=utcnow())
            .on_conflict_do_nothing(index_elements=["user_id", "song_id"])
            .returning(UserFavorite.song_id)
        )
        result = await self._session.execute(statement)
        return result.scalar_one_or_none() is not None

    async def remove_edge(self, user_id: int, song_id: int) -> bool:
        """Delete the favorite edge; ``False`` when there was nothing to delete."""

        statement = (
            delete(UserFavorite)
            .where(UserFavorite.user_id == user_id, UserFavorite.song_id == song_id)
            .returning(UserFavorite.song_id)
        )
        result = await self._session.execute(statement)
        return result.scalar_one_or_none() is not None

    async def edge_exists(self, user_id: int, song_id: int) -> bool:
        query = select(
            exists().where(
                UserFavorite.user_id == user_id, UserFavorite.song_id == song_id
            )
        )
        return bool(await self._session.scalar(query))

    async def refresh_like_count(self, song_id: int) -> None:
        """Recompute ``songs.like_count`` from the edge table."""

        favorites_count = (
            select(func.count())
            .select_from(UserFavorite)
            .where(UserFavorite.song_id == song_id)
            .scalar_subquery()
        )
        statement = (
            update(Song)
            .where(Song.song_id == song_id)
            .values(like_count=favorites_count)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(statement)

    async def list_user_favorites(
        self, user_id: int, *, limit: int, offset: int
    ) -> Sequence[RowMapping]:
        """Return visible favorited songs, most recently favorited first."""

        query = (
            select(
                Song.song_id,
                Song.title,
                Artist.name.label("artist_name"),
                Genre.name.label("genre_name"),
                Song.upload_date,
                Song.like_count,
                Song.plays_count,
                UserFavorite.favorited_at,
            )
            .select_from(UserFavorite)
            .join(Song, Song.song_id == UserFavorite.song_id)
            .outerjoin(Artist, Artist.artist_id == Song.artist_id)
            .outerjoin(Genre, Genre.genre_id == Song.genre_id)
            .where(UserFavorite.user_id == user_id, *self._visible_song_filters())
            .order_by(UserFavorite.favorited_at.desc(), Song.song_id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(query)
        return result.mappings().all()

    async def count_user_favorites(self, user_id: int) -> int:
        query = (
            select(func.count())
            .select_from(UserFavorite)
            .join(Song, Song.song_id == UserFavorite.song_id)
            .where(UserFavorite.user_id == user_id, *self._visible_song_filters())
        )
        return int(await self._session.scalar(query) or 0)

    async def most_favorited(self, *, limit: int) -> Sequence[RowMapping]:
        """Rank visible songs by favorite count, ties by ascending song id."""

        favorites_count = func.count(UserFavorite.user_id).label("favorites_count")
        query = (
            select(
                Song.song_id,
                Song.title,
                Artist.name.label("artist_name"),
                Genre.name.label("genre_name"),
                Song.like_count,
                Song.plays_count,
                Song.upload_date,
                favorites_count,
            )
            .select_from(Song)
            .join(UserFavorite, UserFavorite.song_id == Song.song_id)
            .outerjoin(Artist, Artist.artist_id == Song.artist_id)
            .outerjoin(Genre, Genre.genre_id == Song.genre_id)
            .where(*self._visible_song_filters())
            .group_by(
                Song.song_id,
                Song.title,
                Artist.name,
                Genre.name,
                Song.like_count,
                Song.plays_count,
                Song.upload_date,
            )
            .order_by(favorites_count.desc(), Song.song_id.asc())
            .limit(limit)
        )
        result = await self._session.execute(query)
        return result.mappings().all()

    async def song_stats(self, song_id: int) -> RowMapping | None:
        """Aggregate the edge rows of one song; ``None`` when it has none."""

        query = select(
            func.count().label("total_favorites"),
            func.count(distinct(UserFavorite.user_id)).label("unique_users_favorited"),
            func.min(UserFavorite.favorited_at).label("first_favorited"),
            func.max(UserFavorite.favorited_at).label("last_favorited"),
        ).where(UserFavorite.song_id == song_id)
        result = await self._session.execute(query)
        row = result.mappings().one()
        if not row["total_favorites"]:
            return None
        return row
