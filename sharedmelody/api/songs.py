"""Song-scoped like endpoints mounted under ``/api/songs``."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sharedmelody.api.deps import AuthenticatedUser, get_current_user
from sharedmelody.api.favorites import add_song, remove_song, song_status, toggle_song
from sharedmelody.api.params import parse_song_id
from sharedmelody.schemas.envelope import ApiResponse
from sharedmelody.schemas.favorites import (
    AddFavoriteData,
    FavoriteStatusData,
    RemoveFavoriteData,
    ToggleFavoriteData,
)
from sharedmelody.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)

router = APIRouter()


@router.put(
    "/{song_id}/like",
    response_model=ApiResponse[ToggleFavoriteData],
    response_model_exclude_unset=True,
)
async def like_song(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[ToggleFavoriteData]:
    """Toggle the caller's like on a song."""

    return await toggle_song(parse_song_id(song_id), user, service)


@router.post(
    "/{song_id}/like",
    response_model=ApiResponse[AddFavoriteData],
    response_model_exclude_unset=True,
)
async def add_song_like(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[AddFavoriteData]:
    """Like a song; liking it twice keeps a single like."""

    return await add_song(parse_song_id(song_id), user, service)


@router.delete(
    "/{song_id}/like",
    response_model=ApiResponse[RemoveFavoriteData],
    response_model_exclude_unset=True,
)
async def remove_song_like(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[RemoveFavoriteData]:
    return await remove_song(parse_song_id(song_id), user, service)


@router.get(
    "/{song_id}/is-liked",
    response_model=ApiResponse[FavoriteStatusData],
    response_model_exclude_unset=True,
)
async def is_song_liked(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[FavoriteStatusData]:
    return await song_status(parse_song_id(song_id), user, service)
