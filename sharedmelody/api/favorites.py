"""FastAPI router exposing the favorites endpoints under ``/api/favorites``."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from sharedmelody.api.deps import AuthenticatedUser, get_current_user
from sharedmelody.api.params import parse_int_query, parse_song_id
from sharedmelody.schemas.envelope import ApiResponse
from sharedmelody.schemas.favorites import (
    AddFavoriteData,
    FavoriteStatusData,
    MostFavoritedData,
    Pagination,
    RemoveFavoriteData,
    SongFavoriteStatsData,
    ToggleFavoriteData,
    UserFavoritesData,
)
from sharedmelody.services.favorites_service import (
    DEFAULT_MOST_FAVORITED_LIMIT,
    DEFAULT_USER_FAVORITES_LIMIT,
    FavoritesService,
    get_favorites_service,
)

router = APIRouter()

ADDED_MESSAGE = "Canción agregada a favoritos"
ALREADY_ADDED_MESSAGE = "La canción ya estaba en favoritos"
REMOVED_MESSAGE = "Canción removida de favoritos"
NOT_PRESENT_MESSAGE = "La canción no estaba en favoritos"


async def toggle_song(
    song_id: int, user: AuthenticatedUser, service: FavoritesService
) -> ApiResponse[ToggleFavoriteData]:
    """Shared body of both toggle routes."""

    result = await service.toggle_favorite(user.user_id, song_id)
    return ApiResponse(
        success=True,
        message=ADDED_MESSAGE if result.action == "added" else REMOVED_MESSAGE,
        data=ToggleFavoriteData(
            song_id=song_id, is_favorite=result.is_favorite, action=result.action
        ),
    )


async def add_song(
    song_id: int, user: AuthenticatedUser, service: FavoritesService
) -> ApiResponse[AddFavoriteData]:
    was_added = await service.add_to_favorites(user.user_id, song_id)
    favorites_count = await service.get_user_favorites_count(user.user_id)
    return ApiResponse(
        success=True,
        message=ADDED_MESSAGE if was_added else ALREADY_ADDED_MESSAGE,
        data=AddFavoriteData(
            song_id=song_id,
            is_favorite=True,
            was_added=was_added,
            favorites_count=favorites_count,
        ),
    )


async def remove_song(
    song_id: int, user: AuthenticatedUser, service: FavoritesService
) -> ApiResponse[RemoveFavoriteData]:
    was_removed = await service.remove_from_favorites(user.user_id, song_id)
    return ApiResponse(
        success=True,
        message=REMOVED_MESSAGE if was_removed else NOT_PRESENT_MESSAGE,
        data=RemoveFavoriteData(song_id=song_id, is_favorite=False, was_removed=was_removed),
    )


async def song_status(
    song_id: int, user: AuthenticatedUser, service: FavoritesService
) -> ApiResponse[FavoriteStatusData]:
    is_favorite = await service.is_song_favorite(user.user_id, song_id)
    return ApiResponse(
        success=True,
        data=FavoriteStatusData(song_id=song_id, is_favorite=is_favorite),
    )


@router.get(
    "",
    response_model=ApiResponse[UserFavoritesData],
    response_model_exclude_unset=True,
)
async def list_favorites(
    limit: str | None = Query(None, description="Page size, 1 to 100"),
    offset: str | None = Query(None, description="Rows to skip"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[UserFavoritesData]:
    """Return the caller's favorites, newest first, with pagination metadata."""

    page_limit = parse_int_query(limit, name="limit", default=DEFAULT_USER_FAVORITES_LIMIT)
    page_offset = parse_int_query(offset, name="offset", default=0)

    favorites = await service.get_user_favorites(
        user.user_id, limit=page_limit, offset=page_offset
    )
    total = await service.get_user_favorites_count(user.user_id)

    return ApiResponse(
        success=True,
        data=UserFavoritesData(
            favorites=favorites,
            pagination=Pagination(
                total=total,
                limit=page_limit,
                offset=page_offset,
                has_more=page_offset + len(favorites) < total,
            ),
        ),
    )


@router.get(
    "/top",
    response_model=ApiResponse[MostFavoritedData],
    response_model_exclude_unset=True,
)
async def most_favorited(
    limit: str | None = Query(None, description="Ranking size, 1 to 50"),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[MostFavoritedData]:
    """Public ranking of the most favorited songs."""

    ranking_limit = parse_int_query(limit, name="limit", default=DEFAULT_MOST_FAVORITED_LIMIT)
    songs = await service.get_most_favorited_songs(limit=ranking_limit)
    return ApiResponse(
        success=True,
        data=MostFavoritedData(songs=songs, count=len(songs)),
    )


@router.post(
    "/{song_id}",
    response_model=ApiResponse[AddFavoriteData],
    response_model_exclude_unset=True,
)
async def add_favorite(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[AddFavoriteData]:
    return await add_song(parse_song_id(song_id), user, service)


@router.delete(
    "/{song_id}",
    response_model=ApiResponse[RemoveFavoriteData],
    response_model_exclude_unset=True,
)
async def remove_favorite(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[RemoveFavoriteData]:
    return await remove_song(parse_song_id(song_id), user, service)


@router.put(
    "/{song_id}/toggle",
    response_model=ApiResponse[ToggleFavoriteData],
    response_model_exclude_unset=True,
)
async def toggle_favorite(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[ToggleFavoriteData]:
    return await toggle_song(parse_song_id(song_id), user, service)


@router.get(
    "/{song_id}/check",
    response_model=ApiResponse[FavoriteStatusData],
    response_model_exclude_unset=True,
)
async def check_favorite(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[FavoriteStatusData]:
    return await song_status(parse_song_id(song_id), user, service)


@router.get(
    "/{song_id}/stats",
    response_model=ApiResponse[SongFavoriteStatsData],
    response_model_exclude_unset=True,
)
async def song_stats(
    song_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> ApiResponse[SongFavoriteStatsData]:
    """Aggregate favorite stats for one song; zeroed when it has none."""

    parsed_id = parse_song_id(song_id)
    stats = await service.get_song_favorite_stats(parsed_id)
    return ApiResponse(
        success=True,
        data=SongFavoriteStatsData(song_id=parsed_id, stats=stats),
    )
