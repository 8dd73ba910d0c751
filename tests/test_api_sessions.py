# tests/test_api_sessions.py

"""Tests for the Session API endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_record_pointing_session(async_client, create_game, create_player):
    """Recording a 4 player session of a pointing game awards 14/4/2/0."""
    # 1. SETUP: A pointing game with the default 5 points per player.
    game = await create_game("Wingspan")
    players = [await create_player(n) for n in ("Alice", "Bob", "Cara", "Dev")]

    # 2. ACT: Submit the results in finishing order.
    payload = {
        "game_id": game["id"],
        "results": [
            {"player_id": p["id"], "rank": rank, "score": 100 - rank}
            for rank, p in enumerate(players, start=1)
        ],
    }
    response = await async_client.post("/sessions/", json=payload)

    # 3. ASSERT
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["game_name"] == "Wingspan"
    assert data["scoring_mode"] == "pointing"
    assert data["player_count"] == 4
    assert data["total_points_pool"] == 20
    assert [r["points_earned"] for r in data["results"]] == [14, 4, 2, 0]
    assert [r["player_name"] for r in data["results"]] == [
        "Alice",
        "Bob",
        "Cara",
        "Dev",
    ]
    assert data["results"][0]["score"] == 99


@pytest.mark.asyncio
async def test_record_session_updates_stats_in_background(
    async_client, create_game, create_player, record_session
):
    game = await create_game("Cascadia")
    alice = await create_player("Alice")
    bob = await create_player("Bob")

    await record_session(game["id"], [(alice["id"], 1), (bob["id"], 2)])

    response = await async_client.get(f"/stats/player/{alice['id']}")
    assert response.status_code == 200
    overall = response.json()["overall"]
    assert overall["total_games"] == 1
    assert overall["total_points"] == 7
    assert overall["wins"] == 1
    assert overall["win_rate"] == 1.0

    badges = await async_client.get(f"/players/{alice['id']}/badges")
    assert {b["badge_id"] for b in badges.json()} == {"first-game", "first-win"}


@pytest.mark.asyncio
async def test_record_session_sets_last_played_at(
    async_client, create_game, create_player, record_session
):
    game = await create_game("Root")
    alice = await create_player("Alice")
    bob = await create_player("Bob")

    await record_session(
        game["id"],
        [(alice["id"], 1), (bob["id"], 2)],
        played_at="2025-05-01T19:30:00Z",
    )

    response = await async_client.get(f"/players/{alice['id']}")
    assert response.json()["last_played_at"].startswith("2025-05-01T19:30:00")


@pytest.mark.asyncio
async def test_record_winner_takes_all_session(
    async_client, create_game, create_player, record_session
):
    game = await create_game("Coup", scoring_mode="winner-takes-all")
    assert game["points_per_player"] == 3
    players = [await create_player(n) for n in ("Alice", "Bob", "Cara")]

    data = await record_session(
        game["id"], [(p["id"], rank) for p, rank in zip(players, (2, 1, 3))]
    )

    assert data["total_points_pool"] == 9
    points = {r["player_id"]: r["points_earned"] for r in data["results"]}
    assert points == {players[0]["id"]: 0, players[1]["id"]: 9, players[2]["id"]: 0}


@pytest.mark.asyncio
async def test_winner_takes_all_declared_player_count(
    async_client, create_game, create_player, record_session
):
    """Only the winner needs a result; the pool still counts every seat."""
    game = await create_game("Love Letter", scoring_mode="winner-takes-all")
    alice = await create_player("Alice")

    data = await record_session(game["id"], [(alice["id"], 1)], player_count=5)

    assert data["player_count"] == 5
    assert data["total_points_pool"] == 15
    assert data["results"][0]["points_earned"] == 15


@pytest.mark.asyncio
async def test_session_ties_split_points(
    async_client, create_game, create_player, record_session
):
    game = await create_game("Ticket to Ride")
    players = [await create_player(n) for n in ("Alice", "Bob", "Cara", "Dev")]

    data = await record_session(
        game["id"], [(p["id"], rank) for p, rank in zip(players, (1, 1, 2, 3))]
    )

    assert [r["points_earned"] for r in data["results"]] == [9, 9, 2, 0]


@pytest.mark.asyncio
async def test_read_session(async_client, create_game, create_player, record_session):
    game = await create_game("Azul")
    alice = await create_player("Alice")
    bob = await create_player("Bob")
    created = await record_session(game["id"], [(alice["id"], 1), (bob["id"], 2)])

    response = await async_client.get(f"/sessions/{created['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert len(response.json()["results"]) == 2


@pytest.mark.asyncio
async def test_list_sessions_filters(
    async_client, create_game, create_player, record_session
):
    azul = await create_game("Azul")
    hive = await create_game("Hive")
    alice = await create_player("Alice")
    bob = await create_player("Bob")
    cara = await create_player("Cara")
    await record_session(azul["id"], [(alice["id"], 1), (bob["id"], 2)])
    await record_session(hive["id"], [(bob["id"], 1), (cara["id"], 2)])
    await record_session(azul["id"], [(cara["id"], 1), (alice["id"], 2)])

    by_game = await async_client.get("/sessions/", params={"game_id": azul["id"]})
    assert by_game.json()["total"] == 2

    by_player = await async_client.get("/sessions/", params={"player_id": cara["id"]})
    assert by_player.json()["total"] == 2

    # Newest first by default
    everything = (await async_client.get("/sessions/")).json()
    assert everything["items"][0]["results"][0]["player_id"] == cara["id"]

    page = (await async_client.get("/sessions/", params={"limit": 2})).json()
    assert len(page["items"]) == 2
    assert page["has_more"] is True


@pytest.mark.asyncio
async def test_update_session_rescores_and_recalculates(
    async_client, create_game, create_player, record_session
):
    # 1. SETUP: Alice beats Bob.
    game = await create_game("Splendor")
    alice = await create_player("Alice")
    bob = await create_player("Bob")
    cara = await create_player("Cara")
    created = await record_session(game["id"], [(alice["id"], 1), (bob["id"], 2)])

    # 2. ACT: The result was wrong; it was Cara who beat Alice, Bob wasn't there.
    response = await async_client.put(
        f"/sessions/{created['id']}",
        json={
            "results": [
                {"player_id": cara["id"], "rank": 1},
                {"player_id": alice["id"], "rank": 2},
            ]
        },
    )

    # 3. ASSERT
    assert response.status_code == 200, response.text
    data = response.json()
    assert [r["player_id"] for r in data["results"]] == [cara["id"], alice["id"]]
    assert [r["points_earned"] for r in data["results"]] == [7, 2]

    # Bob no longer has any sessions, so Bob's stats row is gone
    assert (await async_client.get(f"/stats/player/{bob['id']}")).status_code == 404
    cara_stats = (await async_client.get(f"/stats/player/{cara['id']}")).json()
    assert cara_stats["overall"]["wins"] == 1
    alice_stats = (await async_client.get(f"/stats/player/{alice['id']}")).json()
    assert alice_stats["overall"]["total_points"] == 2


@pytest.mark.asyncio
async def test_update_session_played_at_only(
    async_client, create_game, create_player, record_session
):
    game = await create_game("Azul")
    alice = await create_player("Alice")
    bob = await create_player("Bob")
    created = await record_session(game["id"], [(alice["id"], 1), (bob["id"], 2)])

    response = await async_client.put(
        f"/sessions/{created['id']}", json={"played_at": "2024-01-02T03:04:05Z"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["played_at"].startswith("2024-01-02T03:04:05")
    assert [r["points_earned"] for r in data["results"]] == [7, 2]


@pytest.mark.asyncio
async def test_delete_session(async_client, create_game, create_player, record_session):
    game = await create_game("Azul")
    alice = await create_player("Alice")
    bob = await create_player("Bob")
    first = await record_session(game["id"], [(alice["id"], 1), (bob["id"], 2)])
    await record_session(game["id"], [(bob["id"], 1), (alice["id"], 2)])

    response = await async_client.delete(f"/sessions/{first['id']}")

    assert response.status_code == 204
    assert (await async_client.get(f"/sessions/{first['id']}")).status_code == 404
    alice_stats = (await async_client.get(f"/stats/player/{alice['id']}")).json()
    assert alice_stats["overall"]["total_games"] == 1
    assert alice_stats["overall"]["wins"] == 0


# ===============================================
# Validation failures
# ===============================================


@pytest.mark.asyncio
async def test_record_session_empty_results(async_client, create_game):
    game = await create_game("Azul")

    response = await async_client.post(
        "/sessions/", json={"game_id": game["id"], "results": []}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "EmptyResultsError"


@pytest.mark.asyncio
async def test_record_session_duplicate_player(
    async_client, create_game, create_player
):
    game = await create_game("Azul")
    alice = await create_player("Alice")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "results": [
                {"player_id": alice["id"], "rank": 1},
                {"player_id": alice["id"], "rank": 2},
            ],
        },
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "DuplicatePlayerError"


@pytest.mark.asyncio
async def test_record_session_missing_rank(async_client, create_game, create_player):
    game = await create_game("Azul")
    alice = await create_player("Alice")
    bob = await create_player("Bob")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "results": [
                {"player_id": alice["id"], "rank": 1},
                {"player_id": bob["id"], "rank": 3},
            ],
        },
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Invalid rankings: Missing rank 2"


@pytest.mark.asyncio
async def test_winner_takes_all_needs_one_winner(
    async_client, create_game, create_player
):
    game = await create_game("Coup", scoring_mode="winner-takes-all")
    alice = await create_player("Alice")
    bob = await create_player("Bob")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "results": [
                {"player_id": alice["id"], "rank": 1},
                {"player_id": bob["id"], "rank": 1},
            ],
        },
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "WinnerCountError"


@pytest.mark.asyncio
async def test_pointing_rejects_larger_player_count(
    async_client, create_game, create_player
):
    game = await create_game("Azul")
    alice = await create_player("Alice")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "player_count": 3,
            "results": [{"player_id": alice["id"], "rank": 1}],
        },
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "PlayerCountError"


@pytest.mark.asyncio
async def test_record_session_unknown_game(async_client: AsyncClient, create_player):
    alice = await create_player("Alice")

    response = await async_client.post(
        "/sessions/",
        json={"game_id": 99999, "results": [{"player_id": alice["id"], "rank": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["error_type"] == "GameNotFoundError"


@pytest.mark.asyncio
async def test_record_session_unknown_player(async_client, create_game, create_player):
    game = await create_game("Azul")
    alice = await create_player("Alice")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "results": [
                {"player_id": alice["id"], "rank": 1},
                {"player_id": 99999, "rank": 2},
            ],
        },
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Player with ID 99999 not found"


@pytest.mark.asyncio
async def test_rank_must_be_positive(async_client, create_game, create_player):
    game = await create_game("Azul")
    alice = await create_player("Alice")

    response = await async_client.post(
        "/sessions/",
        json={
            "game_id": game["id"],
            "results": [{"player_id": alice["id"], "rank": 0}],
        },
    )

    # Rejected by request validation before reaching the service
    assert response.status_code == 422
    assert "error_type" not in response.json()


@pytest.mark.asyncio
async def test_session_not_found(async_client: AsyncClient):
    response = await async_client.get("/sessions/99999")

    assert response.status_code == 404
    assert response.json()["error_type"] == "SessionNotFoundError"
