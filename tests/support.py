"""Shared doubles and seed helpers for the favorites test-suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from sharedmelody.db.models import Artist, Genre, Song, User, UserFavorite
from sharedmelody.services.favorites import (
    FavoritesAnalytics,
    FavoritesCache,
    FavoritesPersistence,
)
from sharedmelody.services.favorites_service import FavoritesService

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class MemoryCache:
    """In-memory cache double that mimics :class:`sharedmelody.cache.CacheClient`."""

    def __init__(self) -> None:
        self.store: dict[str, object] = {}
        self.deleted: list[str] = []

    async def get_json(self, key: str) -> object | None:
        return self.store.get(key)

    async def set_json(self, key: str, value: object, ttl: int | None = None) -> None:
        self.store[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.store.pop(key, None)
            self.deleted.append(key)

    async def delete_pattern(self, pattern: str) -> None:
        prefix = pattern.rstrip("*")
        for key in [key for key in self.store if key.startswith(prefix)]:
            await self.delete(key)


def build_service(session: AsyncSession, cache: MemoryCache | None = None) -> FavoritesService:
    return FavoritesService(
        persistence=FavoritesPersistence(session),
        analytics=FavoritesAnalytics(),
        cache=FavoritesCache(cache if cache is not None else MemoryCache()),
    )


def make_user(user_id: int, *, is_active: bool = True) -> User:
    return User(
        user_id=user_id,
        username=f"listener{user_id}",
        email=f"listener{user_id}@sharedmelody.test",
        is_active=is_active,
    )


def make_song(
    song_id: int,
    *,
    title: str | None = None,
    artist_id: int | None = 1,
    genre_id: int | None = 1,
    is_public: bool = True,
    is_approved: bool = True,
    plays_count: int = 0,
) -> Song:
    return Song(
        song_id=song_id,
        title=title or f"Canción {song_id}",
        artist_id=artist_id,
        genre_id=genre_id,
        plays_count=plays_count,
        upload_date=BASE_TIME - timedelta(days=song_id),
        is_public=is_public,
        is_approved=is_approved,
    )


async def seed_catalog(session: AsyncSession) -> None:
    """Three active users, one inactive user and four songs.

    Songs 1 and 2 are visible. Song 3 is private and song 4 awaits approval.
    """

    session.add_all([Artist(artist_id=1, name="Los Ecos"), Genre(genre_id=1, name="Rock")])
    session.add_all([make_user(1), make_user(2), make_user(3), make_user(4, is_active=False)])
    await session.flush()
    session.add_all(
        [
            make_song(1, title="Luz de Mayo", plays_count=12),
            make_song(2, title="Río Lento", artist_id=None, genre_id=None),
            make_song(3, title="Demo Privada", is_public=False),
            make_song(4, title="En Revisión", is_approved=False),
        ]
    )
    await session.flush()


def favorite(user_id: int, song_id: int, *, minutes: int = 0) -> UserFavorite:
    """Edge with a deterministic timestamp ``minutes`` after ``BASE_TIME``."""

    return UserFavorite(
        user_id=user_id,
        song_id=song_id,
        favorited_at=BASE_TIME + timedelta(minutes=minutes),
    )
