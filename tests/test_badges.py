# tests/test_badges.py

"""Tests for badge evaluation and awarding."""

import pytest
from meeplescore.badges.definitions import (
    BADGE_DEFINITIONS,
    TIERS,
    get_badge_definition,
)
from meeplescore.db.models import Game, GameResult, GameSession, Player, PlayerStats
from meeplescore.schemas.session import GameResultCreate, GameSessionCreate
from meeplescore.services import badge_service, session_service, stats_service
from sqlalchemy.ext.asyncio import AsyncSession


def _stats(games=0, wins=0, podiums=0, points=0, variety=0) -> PlayerStats:
    return PlayerStats(
        player_id=1,
        player_name="P1",
        overall={
            "total_games": games,
            "total_points": points,
            "average_points": points / games if games else 0.0,
            "wins": wins,
            "podiums": podiums,
            "win_rate": wins / games if games else 0.0,
        },
        game_stats=[{"game_id": i} for i in range(variety)],
    )


def _won(player_id: int, won: bool) -> GameSession:
    return GameSession(
        game_id=1,
        game_name="G",
        scoring_mode="pointing",
        player_count=2,
        total_points_pool=10,
        results=[
            GameResult(player_id=player_id, player_name="P", rank=1 if won else 2),
            GameResult(player_id=99, player_name="Q", rank=2 if won else 1),
        ],
    )


# ===============================================
# Catalogue
# ===============================================


def test_badge_ids_are_unique():
    ids = [b.id for b in BADGE_DEFINITIONS]
    assert len(ids) == len(set(ids))


def test_badge_tiers_are_known():
    assert all((b.tier or "none") in TIERS for b in BADGE_DEFINITIONS)


def test_get_badge_definition():
    assert get_badge_definition("first-win").name == "First Blood"
    assert get_badge_definition("no-such-badge") is None


def test_badge_stats_by_tier():
    stats = badge_service.get_badge_stats()

    assert stats["total_badges_available"] == len(BADGE_DEFINITIONS)
    assert sum(stats["badges_by_tier"].values()) == len(BADGE_DEFINITIONS)
    assert stats["badges_by_tier"]["none"] == 2


# ===============================================
# Criteria
# ===============================================


def test_longest_win_streak():
    pattern = [True, True, False, True, True, True, False, True]
    sessions = [_won(1, won) for won in pattern]

    assert badge_service.longest_win_streak(1, sessions) == 3


def test_longest_win_streak_counts_sessions_without_player_as_breaks():
    sessions = [_won(1, True), _won(2, True), _won(1, True)]

    assert badge_service.longest_win_streak(1, sessions) == 1


@pytest.mark.parametrize(
    "badge_id, stats, streak, expected",
    [
        ("first-game", _stats(games=1), 0, True),
        ("10-games", _stats(games=9), 0, False),
        ("3-wins", _stats(games=5, wins=3), 0, True),
        ("10-podiums", _stats(games=10, podiums=10), 0, True),
        ("100-points", _stats(games=5, points=99), 0, False),
        ("3-streak", _stats(games=3, wins=3), 3, True),
        ("5-streak", _stats(games=5, wins=5), 4, False),
        ("3-variety", _stats(games=3, variety=3), 0, True),
    ],
)
def test_meets_criteria(badge_id, stats, streak, expected):
    badge = get_badge_definition(badge_id)

    assert badge_service.meets_criteria(badge, stats, streak) is expected


def test_win_rate_badge_is_a_fraction_with_minimum_games():
    """Half of ten games won earns the 50% badge; nine games is too few."""
    badge = get_badge_definition("50-winrate")

    assert badge_service.meets_criteria(badge, _stats(games=10, wins=5), 0)
    assert not badge_service.meets_criteria(badge, _stats(games=10, wins=4), 0)
    assert not badge_service.meets_criteria(badge, _stats(games=9, wins=9), 0)


# ===============================================
# Awarding
# ===============================================


async def _play(db: AsyncSession, game: Game, winner: Player, loser: Player) -> None:
    await session_service.record_session(
        db,
        GameSessionCreate(
            game_id=game.id,
            results=[
                GameResultCreate(player_id=winner.id, rank=1),
                GameResultCreate(player_id=loser.id, rank=2),
            ],
        ),
    )


@pytest.mark.asyncio
async def test_update_player_badges_awards_once(db_session: AsyncSession):
    # 1. ARRANGE: Ann wins three in a row.
    game = Game(name="Patchwork")
    ann, ben = Player(name="Ann"), Player(name="Ben")
    db_session.add_all([game, ann, ben])
    await db_session.commit()
    for _ in range(3):
        await _play(db_session, game, ann, ben)
    await stats_service.recalculate_player_stats(db_session, ann.id)

    # 2. ACT
    awarded = await badge_service.update_player_badges(db_session, ann.id)
    again = await badge_service.update_player_badges(db_session, ann.id)

    # 3. ASSERT
    assert {b.badge_id for b in awarded} == {
        "first-game",
        "first-win",
        "3-wins",
        "3-streak",
    }
    assert again == []


@pytest.mark.asyncio
async def test_badges_are_never_revoked(db_session: AsyncSession):
    game = Game(name="Jaipur")
    ann, ben = Player(name="Ann"), Player(name="Ben")
    db_session.add_all([game, ann, ben])
    await db_session.commit()
    await _play(db_session, game, ann, ben)
    await stats_service.recalculate_player_stats(db_session, ann.id)
    await badge_service.update_player_badges(db_session, ann.id)

    # Ann's only win is deleted; the stats row disappears
    (session,) = await GameSession.find_for_player(db_session, ann.id)
    await session_service.delete_session(db_session, session.id)
    await stats_service.recalculate_player_stats(db_session, ann.id)
    await badge_service.update_player_badges(db_session, ann.id)

    held = await badge_service.calculate_badges_for_player(db_session, ann.id)
    assert held == []
    player = await db_session.get(Player, ann.id)
    await db_session.refresh(player, ["badges"])
    assert {b.badge_id for b in player.badges} == {"first-game", "first-win"}


@pytest.mark.asyncio
async def test_update_badges_for_player_without_stats(db_session: AsyncSession):
    newcomer = Player(name="Newcomer")
    db_session.add(newcomer)
    await db_session.commit()

    assert await badge_service.update_player_badges(db_session, newcomer.id) == []


@pytest.mark.asyncio
async def test_migrate_all_player_badges(db_session: AsyncSession):
    game = Game(name="Hive")
    ann, ben = Player(name="Ann"), Player(name="Ben")
    archived = Player(name="Gone", is_active=False)
    db_session.add_all([game, ann, ben, archived])
    await db_session.commit()
    await _play(db_session, game, ann, ben)
    await stats_service.recalculate_all_stats(db_session)

    result = await badge_service.migrate_all_player_badges(db_session)

    assert result["total_players"] == 2
    by_player = {r["player_id"]: r for r in result["results"]}
    assert by_player[ann.id]["badges_awarded"] == 2
    assert set(by_player[ann.id]["badges"]) == {"First Game", "First Blood"}
    assert by_player[ben.id]["badges"] == ["First Game"]
