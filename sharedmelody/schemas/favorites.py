"""Pydantic schemas that power the favorites API surface.

Field names are snake_case in Python and camelCase on the wire, matching the
payloads the SharedMelody frontend already consumes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FavoriteAction = Literal["added", "removed"]

UNKNOWN_ARTIST = "Artista desconocido"
UNKNOWN_GENRE = "Sin género"


class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FavoriteSong(CamelModel):
    """A song in a user's favorites list."""

    song_id: int
    title: str
    artist_name: str = Field(UNKNOWN_ARTIST)
    genre_name: str = Field(UNKNOWN_GENRE)
    upload_date: datetime | None = None
    like_count: int = Field(0, ge=0)
    plays_count: int = Field(0, ge=0)
    favorited_at: datetime = Field(
        ..., description="Timestamp when the user favorited the song."
    )


class MostFavoritedSong(CamelModel):
    """Entry in the global favorites ranking."""

    song_id: int
    title: str
    artist_name: str = Field(UNKNOWN_ARTIST)
    genre_name: str = Field(UNKNOWN_GENRE)
    like_count: int = Field(0, ge=0)
    plays_count: int = Field(0, ge=0)
    upload_date: datetime | None = None
    favorites_count: int = Field(..., ge=0)


class FavoriteStats(CamelModel):
    """Per-song aggregate derived from the favorites edge table."""

    total_favorites: int = Field(0, ge=0)
    unique_users_favorited: int = Field(0, ge=0)
    first_favorited: datetime | None = None
    last_favorited: datetime | None = None

    @classmethod
    def empty(cls) -> FavoriteStats:
        """Zeroed stats returned for songs nobody has favorited."""

        return cls(
            total_favorites=0,
            unique_users_favorited=0,
            first_favorited=None,
            last_favorited=None,
        )


class FavoriteToggleResult(CamelModel):
    """Outcome of a toggle: the post-toggle state and what changed."""

    is_favorite: bool
    action: FavoriteAction


# -- Response payloads -----------------------------------------------------------


class FavoriteStatusData(CamelModel):
    song_id: int
    is_favorite: bool


class AddFavoriteData(FavoriteStatusData):
    was_added: bool
    favorites_count: int = Field(
        ..., ge=0, description="Total favorites of the caller after the add."
    )


class RemoveFavoriteData(FavoriteStatusData):
    was_removed: bool


class ToggleFavoriteData(FavoriteStatusData):
    action: FavoriteAction


class Pagination(CamelModel):
    total: int = Field(..., ge=0)
    limit: int
    offset: int
    has_more: bool


class UserFavoritesData(CamelModel):
    favorites: list[FavoriteSong]
    pagination: Pagination


class MostFavoritedData(CamelModel):
    songs: list[MostFavoritedSong]
    count: int


class SongFavoriteStatsData(CamelModel):
    song_id: int
    stats: FavoriteStats
