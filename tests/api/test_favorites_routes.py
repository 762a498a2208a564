"""Route tests exercising the favorites HTTP surface end to end."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sharedmelody.cache import favorites_stats_key
from tests.support import MemoryCache, favorite

Headers = Callable[..., dict[str, str]]


@pytest.mark.asyncio
async def test_like_route_toggles_and_reports_action(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    first = await api_client.put("/api/songs/1/like", headers=auth_headers())
    second = await api_client.put("/api/songs/1/like", headers=auth_headers())

    assert first.status_code == 200
    assert first.json() == {
        "success": True,
        "message": "Canción agregada a favoritos",
        "data": {"songId": 1, "isFavorite": True, "action": "added"},
    }
    assert second.json() == {
        "success": True,
        "message": "Canción removida de favoritos",
        "data": {"songId": 1, "isFavorite": False, "action": "removed"},
    }


@pytest.mark.asyncio
async def test_is_liked_route_has_no_message(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    await api_client.put("/api/songs/2/like", headers=auth_headers())

    response = await api_client.get("/api/songs/2/is-liked", headers=auth_headers())

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"songId": 2, "isFavorite": True}}


@pytest.mark.asyncio
async def test_add_route_is_idempotent_and_returns_count(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    created = await api_client.post("/api/favorites/1", headers=auth_headers())
    repeated = await api_client.post("/api/favorites/1", headers=auth_headers())

    assert created.status_code == 200
    assert created.json()["message"] == "Canción agregada a favoritos"
    assert created.json()["data"] == {
        "songId": 1,
        "isFavorite": True,
        "wasAdded": True,
        "favoritesCount": 1,
    }
    assert repeated.json()["message"] == "La canción ya estaba en favoritos"
    assert repeated.json()["data"]["wasAdded"] is False
    assert repeated.json()["data"]["favoritesCount"] == 1


@pytest.mark.asyncio
async def test_remove_route_reports_whether_edge_existed(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    await api_client.post("/api/favorites/2", headers=auth_headers())

    removed = await api_client.delete("/api/favorites/2", headers=auth_headers())
    missing = await api_client.delete("/api/favorites/2", headers=auth_headers())

    assert removed.json() == {
        "success": True,
        "message": "Canción removida de favoritos",
        "data": {"songId": 2, "isFavorite": False, "wasRemoved": True},
    }
    assert missing.json()["message"] == "La canción no estaba en favoritos"
    assert missing.json()["data"]["wasRemoved"] is False


@pytest.mark.asyncio
async def test_toggle_and_check_routes(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    toggled = await api_client.put("/api/favorites/1/toggle", headers=auth_headers(2))
    checked = await api_client.get("/api/favorites/1/check", headers=auth_headers(2))
    other_user = await api_client.get("/api/favorites/1/check", headers=auth_headers(3))

    assert toggled.json()["data"]["action"] == "added"
    assert checked.json()["data"] == {"songId": 1, "isFavorite": True}
    assert other_user.json()["data"]["isFavorite"] is False


@pytest.mark.asyncio
async def test_list_route_paginates(
    api_client: AsyncClient, catalog: AsyncSession, auth_headers: Headers
) -> None:
    catalog.add_all([favorite(1, 1, minutes=1), favorite(1, 2, minutes=2)])
    await catalog.flush()

    first_page = await api_client.get(
        "/api/favorites", params={"limit": 1}, headers=auth_headers()
    )
    last_page = await api_client.get(
        "/api/favorites", params={"limit": 1, "offset": 1}, headers=auth_headers()
    )

    body = first_page.json()
    assert first_page.status_code == 200
    assert [song["songId"] for song in body["data"]["favorites"]] == [2]
    assert body["data"]["pagination"] == {
        "total": 2,
        "limit": 1,
        "offset": 0,
        "hasMore": True,
    }
    assert last_page.json()["data"]["pagination"]["hasMore"] is False

    song = body["data"]["favorites"][0]
    assert {"title", "artistName", "genreName", "likeCount", "playsCount", "favoritedAt"} <= set(song)


@pytest.mark.asyncio
async def test_list_route_uses_defaults(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    response = await api_client.get("/api/favorites", headers=auth_headers())

    assert response.json()["data"]["pagination"] == {
        "total": 0,
        "limit": 50,
        "offset": 0,
        "hasMore": False,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params,message",
    [
        ({"limit": 0}, "Límite debe estar entre 1 y 100"),
        ({"limit": 101}, "Límite debe estar entre 1 y 100"),
        ({"offset": -1}, "Offset debe ser mayor o igual a 0"),
        ({"limit": "diez"}, "El parámetro limit debe ser un número entero"),
        ({"limit": "1_0"}, "El parámetro limit debe ser un número entero"),
        ({"limit": "+5"}, "El parámetro limit debe ser un número entero"),
        ({"limit": "\u0661\u0660"}, "El parámetro limit debe ser un número entero"),
        ({"offset": "99999999999999999999"}, "El parámetro offset está fuera de rango"),
    ],
)
async def test_list_route_rejects_bad_pagination(
    api_client: AsyncClient,
    auth_headers: Headers,
    params: dict[str, object],
    message: str,
) -> None:
    response = await api_client.get("/api/favorites", params=params, headers=auth_headers())

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": message}


@pytest.mark.asyncio
async def test_top_route_is_public(
    api_client: AsyncClient, catalog: AsyncSession
) -> None:
    catalog.add_all([favorite(1, 2), favorite(2, 2), favorite(3, 1)])
    await catalog.flush()

    response = await api_client.get("/api/favorites/top", params={"limit": 5})

    body = response.json()
    assert response.status_code == 200
    assert body["data"]["count"] == 2
    assert [song["songId"] for song in body["data"]["songs"]] == [2, 1]
    assert [song["favoritesCount"] for song in body["data"]["songs"]] == [2, 1]


@pytest.mark.asyncio
async def test_top_route_rejects_limit_above_fifty(api_client: AsyncClient) -> None:
    response = await api_client.get("/api/favorites/top", params={"limit": 51})

    assert response.status_code == 400
    assert response.json()["message"] == "Límite debe estar entre 1 y 50"


@pytest.mark.asyncio
async def test_stats_route(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    await api_client.post("/api/favorites/1", headers=auth_headers(1))
    await api_client.post("/api/favorites/1", headers=auth_headers(2))

    response = await api_client.get("/api/favorites/1/stats", headers=auth_headers())
    empty = await api_client.get("/api/favorites/2/stats", headers=auth_headers())

    stats = response.json()["data"]["stats"]
    assert response.json()["data"]["songId"] == 1
    assert stats["totalFavorites"] == 2
    assert stats["uniqueUsersFavorited"] == 2
    assert empty.json()["data"]["stats"] == {
        "totalFavorites": 0,
        "uniqueUsersFavorited": 0,
        "firstFavorited": None,
        "lastFavorited": None,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "song_id", ["abc", "0", "-4", "1.5", "1_0", "+5", "2147483648", "99999999999999999999"]
)
async def test_invalid_song_id_is_rejected(
    api_client: AsyncClient, auth_headers: Headers, song_id: str
) -> None:
    response = await api_client.put(f"/api/songs/{song_id}/like", headers=auth_headers())

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "ID de canción inválido"}


@pytest.mark.asyncio
async def test_unknown_song_returns_not_found(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    response = await api_client.post("/api/favorites/999999", headers=auth_headers())

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Canción no encontrada"}


@pytest.mark.asyncio
async def test_responses_carry_request_id(api_client: AsyncClient) -> None:
    response = await api_client.get("/health")

    assert response.json() == {"status": "ok"}
    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(api_client: AsyncClient) -> None:
    response = await api_client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/favorites/99999999999999999999/stats"),
        ("GET", "/api/favorites/99999999999999999999/check"),
        ("POST", "/api/favorites/99999999999999999999"),
        ("DELETE", "/api/favorites/99999999999999999999"),
        ("GET", "/api/songs/99999999999999999999/is-liked"),
        ("PUT", "/api/songs/99999999999999999999/like"),
        ("POST", "/api/songs/99999999999999999999/like"),
    ],
)
async def test_song_id_beyond_key_range_is_rejected(
    api_client: AsyncClient, auth_headers: Headers, method: str, path: str
) -> None:
    response = await api_client.request(method, path, headers=auth_headers())

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "ID de canción inválido"}


@pytest.mark.asyncio
async def test_largest_key_is_accepted_and_reads_as_empty(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    response = await api_client.get("/api/favorites/2147483647/stats", headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["data"]["stats"]["totalFavorites"] == 0


@pytest.mark.asyncio
async def test_song_like_routes_add_and_remove(
    api_client: AsyncClient, auth_headers: Headers
) -> None:
    liked = await api_client.post("/api/songs/1/like", headers=auth_headers())
    liked_again = await api_client.post("/api/songs/1/like", headers=auth_headers())
    status = await api_client.get("/api/songs/1/is-liked", headers=auth_headers())
    unliked = await api_client.delete("/api/songs/1/like", headers=auth_headers())
    unliked_again = await api_client.delete("/api/songs/1/like", headers=auth_headers())

    assert liked.status_code == 200
    assert liked.json() == {
        "success": True,
        "message": "Canción agregada a favoritos",
        "data": {"songId": 1, "isFavorite": True, "wasAdded": True, "favoritesCount": 1},
    }
    assert liked_again.json()["data"]["wasAdded"] is False
    assert status.json()["data"]["isFavorite"] is True
    assert unliked.json() == {
        "success": True,
        "message": "Canción removida de favoritos",
        "data": {"songId": 1, "isFavorite": False, "wasRemoved": True},
    }
    assert unliked_again.json()["message"] == "La canción no estaba en favoritos"


@pytest.mark.asyncio
async def test_song_like_routes_require_authentication(api_client: AsyncClient) -> None:
    liked = await api_client.post("/api/songs/1/like")
    unliked = await api_client.delete("/api/songs/1/like")

    assert liked.status_code == 401
    assert unliked.json() == {"success": False, "message": "Usuario no autenticado"}


@pytest.mark.asyncio
async def test_like_route_refreshes_cached_stats_after_commit(
    api_client: AsyncClient, auth_headers: Headers, memory_cache: MemoryCache
) -> None:
    before = await api_client.get("/api/favorites/1/stats", headers=auth_headers())
    assert favorites_stats_key(1) in memory_cache.store

    await api_client.post("/api/songs/1/like", headers=auth_headers())
    after = await api_client.get("/api/favorites/1/stats", headers=auth_headers())

    assert before.json()["data"]["stats"]["totalFavorites"] == 0
    assert after.json()["data"]["stats"]["totalFavorites"] == 1
