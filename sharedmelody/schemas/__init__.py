"""Pydantic schemas for API responses."""

from sharedmelody.schemas.envelope import ApiResponse  # noqa: F401
from sharedmelody.schemas.favorites import (  # noqa: F401
    AddFavoriteData,
    FavoriteSong,
    FavoriteStats,
    FavoriteStatusData,
    FavoriteToggleResult,
    MostFavoritedData,
    MostFavoritedSong,
    Pagination,
    RemoveFavoriteData,
    SongFavoriteStatsData,
    ToggleFavoriteData,
    UserFavoritesData,
)
