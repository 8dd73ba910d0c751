# tests/test_api_errors.py

"""Tests for HTTP error responses across all API endpoints."""

import pytest
from httpx import AsyncClient

# =============================================================================
# 404 Not Found Errors
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, url",
    [
        ("get", "/games/999999"),
        ("put", "/games/999999"),
        ("delete", "/games/999999"),
        ("get", "/games/999999/leaderboard"),
        ("get", "/players/999999"),
        ("put", "/players/999999"),
        ("delete", "/players/999999"),
        ("get", "/players/999999/badges"),
        ("get", "/players/999999/sessions"),
        ("get", "/sessions/999999"),
        ("put", "/sessions/999999"),
        ("delete", "/sessions/999999"),
        ("get", "/stats/player/999999"),
        ("get", "/game-nights/999999"),
        ("delete", "/game-nights/999999"),
        ("get", "/feedback/999999"),
        ("delete", "/feedback/999999"),
    ],
)
async def test_missing_resource_returns_404(
    async_client: AsyncClient, method: str, url: str
):
    """Every lookup of an unknown ID answers 404 with a readable message."""
    kwargs = {"json": {}} if method == "put" else {}

    response = await getattr(async_client, method)(url, **kwargs)

    assert response.status_code == 404
    data = response.json()
    assert "detail" in data
    assert "not found" in data["detail"].lower()


@pytest.mark.asyncio
async def test_domain_404_includes_error_type(async_client: AsyncClient):
    """Errors raised by services carry the exception name."""
    response = await async_client.get("/sessions/999999")

    assert response.json() == {
        "detail": "Game session with ID 999999 not found",
        "error_type": "SessionNotFoundError",
    }


@pytest.mark.asyncio
async def test_record_session_for_unknown_game_returns_404(
    async_client: AsyncClient, create_player
):
    player = await create_player("Lonely")

    response = await async_client.post(
        "/sessions/",
        json={"game_id": 999999, "results": [{"player_id": player["id"], "rank": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["error_type"] == "GameNotFoundError"


@pytest.mark.asyncio
async def test_record_session_for_unknown_player_returns_404(
    async_client: AsyncClient, create_game
):
    game = await create_game("Azul")

    response = await async_client.post(
        "/sessions/",
        json={"game_id": game["id"], "results": [{"player_id": 999999, "rank": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["error_type"] == "PlayerNotFoundError"


# =============================================================================
# 422 Validation Errors - Request Bodies
# =============================================================================


@pytest.mark.asyncio
async def test_create_game_with_empty_name_returns_422(async_client: AsyncClient):
    response = await async_client.post("/games/", json={"name": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_game_with_too_long_name_returns_422(async_client: AsyncClient):
    response = await async_client.post("/games/", json={"name": "x" * 201})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_game_without_required_fields_returns_422(
    async_client: AsyncClient,
):
    response = await async_client.post("/games/", json={"description": "No name"})

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)


@pytest.mark.asyncio
async def test_create_player_with_too_long_name_returns_422(async_client: AsyncClient):
    response = await async_client.post("/players/", json={"name": "x" * 101})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_player_with_too_long_bio_returns_422(
    async_client: AsyncClient, create_player
):
    player = await create_player("Chatty")

    response = await async_client.put(
        f"/players/{player['id']}", json={"bio": "x" * 501}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_session_validation_error_body(async_client: AsyncClient, create_game):
    """Result validation answers with the domain error's message and type."""
    game = await create_game("Azul")

    response = await async_client.post(
        "/sessions/", json={"game_id": game["id"], "results": []}
    )

    assert response.status_code == 422
    assert response.json() == {
        "detail": "Session requires at least 1 result",
        "error_type": "EmptyResultsError",
    }


@pytest.mark.asyncio
async def test_session_rank_below_one_returns_422(
    async_client: AsyncClient, create_game, create_player
):
    game = await create_game("Azul")
    player = await create_player("Zero")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "results": [{"player_id": player["id"], "rank": 0}],
        },
    )

    assert response.status_code == 422


# =============================================================================
# Path and Query Parameter Validation Errors
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url", ["/games/abc", "/players/abc", "/sessions/abc", "/game-nights/abc"]
)
async def test_non_integer_id_returns_422(async_client: AsyncClient, url: str):
    response = await async_client.get(url)

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url, params",
    [
        ("/games/", {"skip": -1}),
        ("/games/", {"limit": 0}),
        ("/games/", {"limit": 101}),
        ("/games/", {"sort_by": "rating"}),
        ("/games/", {"sort_order": "sideways"}),
        ("/players/", {"sort_by": "elo"}),
        ("/sessions/", {"played_after": "not-a-date"}),
        ("/feedback/", {"status": "Lost"}),
        ("/stats/leaderboard/overall", {"limit": 0}),
        ("/stats/leaderboard/monthly", {"year": 1900}),
        ("/stats/best-per-game", {"min_games": 0}),
    ],
)
async def test_invalid_query_params_return_422(
    async_client: AsyncClient, url: str, params: dict
):
    response = await async_client.get(url, params=params)

    assert response.status_code == 422


# =============================================================================
# 409 Conflict Errors - Duplicate Names
# =============================================================================


@pytest.mark.asyncio
async def test_create_duplicate_player_name_returns_409(async_client: AsyncClient):
    """The conflict check comes last: its rollback discards this test's data."""
    payload = {"name": "Duplicate Dana"}
    assert (await async_client.post("/players/", json=payload)).status_code == 201

    response = await async_client.post("/players/", json=payload)

    assert response.status_code == 409
    assert response.json()["detail"] == (
        "Player with name 'Duplicate Dana' already exists"
    )


@pytest.mark.asyncio
async def test_update_game_to_duplicate_name_returns_409(
    async_client: AsyncClient, create_game
):
    await create_game("Taken")
    other = await create_game("Other")

    response = await async_client.put(f"/games/{other['id']}", json={"name": "Taken"})

    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]
