# tests/test_api_game_nights.py
"""Tests for the Game Night API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient


def _in_days(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def create_night(async_client: AsyncClient):
    async def _create(created_by: int, **fields) -> dict:
        payload = {
            "title": "Friday Night Meeples",
            "scheduled_date": _in_days(7),
            "created_by": created_by,
            **fields,
        }
        response = await async_client.post("/game-nights/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.mark.asyncio
async def test_create_game_night(async_client: AsyncClient, create_player):
    host = await create_player("Host")

    response = await async_client.post(
        "/game-nights/",
        json={
            "title": "Board Game Bash",
            "scheduled_date": _in_days(3),
            "location": "Community Hall",
            "created_by": host["id"],
            "max_attendees": 6,
        },
    )

    # The host is RSVP'd as going automatically
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "scheduled"
    assert data["created_by_name"] == "Host"
    assert data["going_count"] == 1
    assert data["attendees"][0]["player_id"] == host["id"]
    assert data["attendees"][0]["rsvp_status"] == "going"


@pytest.mark.asyncio
async def test_create_game_night_in_past_rejected(
    async_client: AsyncClient, create_player
):
    host = await create_player("Host")

    response = await async_client.post(
        "/game-nights/",
        json={
            "title": "Yesterday",
            "scheduled_date": _in_days(-1),
            "created_by": host["id"],
        },
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Scheduled date must be in the future"


@pytest.mark.asyncio
async def test_create_game_night_unknown_creator(async_client: AsyncClient):
    response = await async_client.post(
        "/game-nights/",
        json={"title": "Ghost", "scheduled_date": _in_days(1), "created_by": 99999},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_rsvp_and_change(async_client: AsyncClient, create_player, create_night):
    host = await create_player("Host")
    guest = await create_player("Guest")
    night = await create_night(host["id"])

    maybe = await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": guest["id"], "status": "maybe"},
    )
    assert maybe.status_code == 200
    assert maybe.json()["maybe_count"] == 1

    going = await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": guest["id"], "status": "going"},
    )
    data = going.json()
    # The existing RSVP is updated rather than duplicated
    assert len(data["attendees"]) == 2
    assert data["going_count"] == 2
    assert data["maybe_count"] == 0


@pytest.mark.asyncio
async def test_rsvp_capacity(async_client: AsyncClient, create_player, create_night):
    host = await create_player("Host")
    first = await create_player("First")
    late = await create_player("Late")
    night = await create_night(host["id"], max_attendees=2)

    await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": first["id"], "status": "going"},
    )
    full = await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": late["id"], "status": "going"},
    )
    maybe = await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": late["id"], "status": "maybe"},
    )

    assert full.status_code == 422
    assert full.json()["detail"] == "This game night has reached maximum capacity"
    # A maybe does not take a seat
    assert maybe.status_code == 200


@pytest.mark.asyncio
async def test_cancel_game_night(
    async_client: AsyncClient, create_player, create_night
):
    host = await create_player("Host")
    guest = await create_player("Guest")
    night = await create_night(host["id"])

    response = await async_client.delete(f"/game-nights/{night['id']}")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    rsvp = await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": guest["id"], "status": "going"},
    )
    assert rsvp.status_code == 422
    assert rsvp.json()["detail"] == "Cannot RSVP to a cancelled game night"


@pytest.mark.asyncio
async def test_leave_game_night(async_client: AsyncClient, create_player, create_night):
    host = await create_player("Host")
    guest = await create_player("Guest")
    night = await create_night(host["id"])
    await async_client.post(
        f"/game-nights/{night['id']}/rsvp",
        json={"player_id": guest["id"], "status": "going"},
    )

    left = await async_client.delete(f"/game-nights/{night['id']}/rsvp/{guest['id']}")
    assert left.status_code == 200
    assert [a["player_id"] for a in left.json()["attendees"]] == [host["id"]]

    host_leaves = await async_client.delete(
        f"/game-nights/{night['id']}/rsvp/{host['id']}"
    )
    assert host_leaves.status_code == 422


@pytest.mark.asyncio
async def test_update_game_night(
    async_client: AsyncClient, create_player, create_night
):
    host = await create_player("Host")
    night = await create_night(host["id"])

    response = await async_client.put(
        f"/game-nights/{night['id']}",
        json={"location": "Alice's Place", "status": "in-progress"},
    )

    assert response.status_code == 200
    assert response.json()["location"] == "Alice's Place"
    assert response.json()["status"] == "in-progress"


@pytest.mark.asyncio
async def test_update_scheduled_night_into_past_rejected(
    async_client: AsyncClient, create_player, create_night
):
    host = await create_player("Host")
    night = await create_night(host["id"])

    response = await async_client.put(
        f"/game-nights/{night['id']}", json={"scheduled_date": _in_days(-2)}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_game_nights(async_client: AsyncClient, create_player, create_night):
    host = await create_player("Host")
    guest = await create_player("Guest")
    later = await create_night(host["id"], title="Later", scheduled_date=_in_days(10))
    sooner = await create_night(host["id"], title="Sooner", scheduled_date=_in_days(2))
    await create_night(host["id"], title="Secret", is_private=True)
    cancelled = await create_night(host["id"], title="Off")
    await async_client.delete(f"/game-nights/{cancelled['id']}")
    await async_client.post(
        f"/game-nights/{sooner['id']}/rsvp",
        json={"player_id": guest["id"], "status": "going"},
    )

    upcoming = (
        await async_client.get("/game-nights/", params={"upcoming": True})
    ).json()
    assert [n["id"] for n in upcoming["items"]] == [sooner["id"], later["id"]]

    with_private = (
        await async_client.get("/game-nights/", params={"include_private": True})
    ).json()
    assert with_private["total"] == 4

    by_status = (
        await async_client.get("/game-nights/", params={"status": "cancelled"})
    ).json()
    assert [n["id"] for n in by_status["items"]] == [cancelled["id"]]

    by_player = (
        await async_client.get("/game-nights/", params={"player_id": guest["id"]})
    ).json()
    assert [n["id"] for n in by_player["items"]] == [sooner["id"]]


@pytest.mark.asyncio
async def test_game_night_not_found(async_client: AsyncClient):
    response = await async_client.get("/game-nights/99999")

    assert response.status_code == 404
    assert response.json()["error_type"] == "GameNightNotFoundError"
