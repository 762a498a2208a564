"""Async HTTP client for the favorites API.

Unwraps the ``{success, message?, data?}`` envelope and raises
:class:`FavoritesClientError` whenever a call does not succeed, whether the
server rejected it or the request never completed.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from sharedmelody.schemas.favorites import (
    AddFavoriteData,
    FavoriteStatusData,
    MostFavoritedData,
    RemoveFavoriteData,
    SongFavoriteStatsData,
    ToggleFavoriteData,
    UserFavoritesData,
)

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "No se pudo conectar con el servidor"
INVALID_RESPONSE_MESSAGE = "Respuesta inválida del servidor"
DEFAULT_TIMEOUT = 10.0


class FavoritesClientError(Exception):
    """Failed favorites call; ``status_code`` is ``None`` for transport failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FavoritesApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def set_token(self, token: str | None) -> None:
        self._token = token

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> FavoritesApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def toggle_like(self, song_id: int) -> ToggleFavoriteData:
        data = await self._request("PUT", f"/api/songs/{song_id}/like")
        return self._parse(ToggleFavoriteData, data)

    async def is_liked(self, song_id: int) -> bool:
        data = await self._request("GET", f"/api/songs/{song_id}/is-liked")
        return self._parse(FavoriteStatusData, data).is_favorite

    async def add_favorite(self, song_id: int) -> AddFavoriteData:
        data = await self._request("POST", f"/api/favorites/{song_id}")
        return self._parse(AddFavoriteData, data)

    async def remove_favorite(self, song_id: int) -> RemoveFavoriteData:
        data = await self._request("DELETE", f"/api/favorites/{song_id}")
        return self._parse(RemoveFavoriteData, data)

    async def list_favorites(self, *, limit: int = 50, offset: int = 0) -> UserFavoritesData:
        data = await self._request(
            "GET", "/api/favorites", params={"limit": limit, "offset": offset}
        )
        return self._parse(UserFavoritesData, data)

    async def most_favorited(self, *, limit: int = 10) -> MostFavoritedData:
        data = await self._request(
            "GET", "/api/favorites/top", params={"limit": limit}, authenticated=False
        )
        return self._parse(MostFavoritedData, data)

    async def song_stats(self, song_id: int) -> SongFavoriteStatsData:
        data = await self._request("GET", f"/api/favorites/{song_id}/stats")
        return self._parse(SongFavoriteStatsData, data)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers: dict[str, str] = {}
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = await self._client.request(method, path, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Favorites request %s %s failed: %s", method, path, exc)
            raise FavoritesClientError(CONNECTION_ERROR_MESSAGE) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise FavoritesClientError(INVALID_RESPONSE_MESSAGE, response.status_code) from exc

        if not isinstance(body, dict) or not body.get("success") or response.is_error:
            message = INVALID_RESPONSE_MESSAGE
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            raise FavoritesClientError(message, response.status_code)

        return body.get("data")

    @staticmethod
    def _parse(model: type, data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise FavoritesClientError(INVALID_RESPONSE_MESSAGE) from exc
