# src/meeplescore/services/stats_service.py

"""
Player statistics: the materialized `PlayerStats` projection and the
leaderboard reads built on top of it.

`PlayerStats` is never edited in place. Whenever a player's set of sessions
changes, the whole row is rebuilt from the `game_sessions` history, so
running a recalculation twice (or concurrently) always converges to the same
result.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db import models
from meeplescore.db.session import SessionFactory
from meeplescore.exceptions import (
    PlayerNotFoundError,
    PlayerStatsNotFoundError,
    StatsRecalculationError,
)
from meeplescore.services import badge_service

logger = logging.getLogger(__name__)

# Minimum plays of a game before a player can be its champion
MIN_GAMES_FOR_CHAMPION = 2

# How many players each award period reports
AWARD_PODIUM_SIZE = 3


# ===============================================
# Projection
# ===============================================


def _empty_game_entry(session: models.GameSession) -> dict[str, Any]:
    return {
        "game_id": session.game_id,
        "game_name": session.game_name,
        "total_games": 0,
        "total_points": 0,
        "average_points": 0.0,
        "wins": 0,
        "podiums": 0,
        "by_player_count": {},
    }


def build_player_stats(
    player_id: int, sessions: Sequence[models.GameSession]
) -> dict[str, Any] | None:
    """
    Folds a player's session history into the `PlayerStats` shape.

    Args:
        player_id: The player whose results are counted.
        sessions: Every session the player took part in, most recent first.

    Returns:
        ``None`` for an empty history, otherwise a dict with ``player_name``,
        ``overall`` (see `OverallStatsInfo`) and ``game_stats`` (a list of
        `GameStatsInfo`, in order of each game's most recent play).
    """
    player_name: str | None = None
    total_games = 0
    total_points = 0
    wins = 0
    podiums = 0
    games: dict[int, dict[str, Any]] = {}

    for session in sessions:
        result = next((r for r in session.results if r.player_id == player_id), None)
        if result is None:
            continue

        if player_name is None:
            player_name = result.player_name

        won = result.rank == 1
        on_podium = result.rank <= 3

        total_games += 1
        total_points += result.points_earned
        wins += won
        podiums += on_podium

        entry = games.setdefault(session.game_id, _empty_game_entry(session))
        entry["total_games"] += 1
        entry["total_points"] += result.points_earned
        entry["wins"] += won
        entry["podiums"] += on_podium
        entry["average_points"] = entry["total_points"] / entry["total_games"]

        bucket = entry["by_player_count"].setdefault(
            str(session.player_count),
            {"total_games": 0, "total_points": 0, "average_points": 0.0, "wins": 0},
        )
        bucket["total_games"] += 1
        bucket["total_points"] += result.points_earned
        bucket["wins"] += won
        bucket["average_points"] = bucket["total_points"] / bucket["total_games"]

    if total_games == 0:
        return None

    overall: models.OverallStatsInfo = {
        "total_games": total_games,
        "total_points": total_points,
        "average_points": total_points / total_games,
        "wins": wins,
        "podiums": podiums,
        "win_rate": wins / total_games,
    }

    return {
        "player_name": player_name,
        "overall": overall,
        "game_stats": list(games.values()),
    }


# ===============================================
# Recalculation
# ===============================================


async def recalculate_player_stats(
    db: AsyncSession, player_id: int
) -> models.PlayerStats | None:
    """
    Rebuilds one player's stats row from their full session history.

    When the player has no sessions left, the row is deleted and ``None`` is
    returned. The change is committed.

    Raises StatsRecalculationError when a session holds more than one result
    for the player.
    """
    sessions = await models.GameSession.find_for_player(db, player_id)
    for session in sessions:
        owned = [r for r in session.results if r.player_id == player_id]
        if len(owned) > 1:
            raise StatsRecalculationError(
                f"Player {player_id} has multiple results in session {session.id}",
                player_id=player_id,
            )

    projection = build_player_stats(player_id, sessions)

    if projection is None:
        await db.execute(
            delete(models.PlayerStats).where(models.PlayerStats.player_id == player_id)
        )
        await db.commit()
        logger.info(
            "Removed stats for player without sessions",
            extra={"player_id": player_id},
        )
        return None

    stats = await models.PlayerStats.find_by_player(db, player_id)
    if stats is None:
        stats = models.PlayerStats(player_id=player_id)
        db.add(stats)

    stats.player_name = projection["player_name"]
    stats.overall = projection["overall"]
    stats.game_stats = projection["game_stats"]
    stats.total_points = projection["overall"]["total_points"]
    stats.last_updated = models.utcnow()

    await db.commit()
    logger.debug(
        "Recalculated player stats",
        extra={
            "player_id": player_id,
            "total_games": projection["overall"]["total_games"],
        },
    )
    return stats


async def recalculate_all_stats(db: AsyncSession) -> dict[str, int]:
    """Recalculates stats for every player that appears in any result."""
    query = (
        select(models.GameResult.player_id)
        .where(models.GameResult.player_id.is_not(None))
        .distinct()
    )
    player_ids = list((await db.execute(query)).scalars().all())

    for player_id in player_ids:
        await recalculate_player_stats(db, player_id)

    logger.info(
        "Recalculated all player stats",
        extra={"updated_players": len(player_ids)},
    )
    return {"updated_players": len(player_ids)}


async def recalculate_in_background(
    session_factory: SessionFactory, player_ids: Iterable[int]
) -> None:
    """
    Recalculates stats and badges for the given players in a fresh session.

    Scheduled after a session write has been committed and the response has
    been sent. Failures are logged and swallowed; the next write touching the
    same players rebuilds their stats from scratch anyway.
    """
    ids = sorted(set(player_ids))
    try:
        async with session_factory() as db:
            for player_id in ids:
                await recalculate_player_stats(db, player_id)
            for player_id in ids:
                await badge_service.update_player_badges(db, player_id)
    except Exception:
        logger.error(
            "Background stats recalculation failed",
            extra={"player_ids": ids},
            exc_info=True,
        )


# ===============================================
# Reads
# ===============================================


async def get_player_stats(db: AsyncSession, player_id: int) -> models.PlayerStats:
    """Returns the stats row for a player, or raises if they have none."""
    stats = await models.PlayerStats.find_by_player(db, player_id)
    if stats is None:
        raise PlayerStatsNotFoundError(player_id)
    return stats


async def get_overall_leaderboard(
    db: AsyncSession, limit: int | None = 10
) -> list[models.PlayerStats]:
    """Stats rows ordered by overall total points, highest first.

    A `limit` of None returns every row.
    """
    query = (
        select(models.PlayerStats)
        .order_by(models.PlayerStats.total_points.desc(), models.PlayerStats.id)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_game_leaderboard(
    db: AsyncSession,
    game_id: int,
    player_count: int | None = None,
    limit: int = 10,
) -> list[dict[str, Any]]:
    """
    Per-game standings built from each player's game stats entry.

    When `player_count` is given and a player has played the game at that
    table size, their points for that bucket are used instead of the game
    total. Players without the bucket keep their game total.
    """
    query = select(models.PlayerStats).order_by(models.PlayerStats.id)
    result = await db.execute(query)

    entries = []
    for stats in result.scalars().all():
        game_stat = next(
            (gs for gs in stats.game_stats if gs["game_id"] == game_id), None
        )
        if game_stat is None:
            continue

        total_points = game_stat["total_points"]
        if player_count is not None:
            bucket = game_stat["by_player_count"].get(str(player_count))
            if bucket is not None:
                total_points = bucket["total_points"]

        entries.append(
            {
                "player_id": stats.player_id,
                "player_name": stats.player_name,
                "total_games": game_stat["total_games"],
                "total_points": total_points,
                "average_points": game_stat["average_points"],
                "wins": game_stat["wins"],
                "podiums": game_stat["podiums"],
            }
        )

    entries.sort(key=lambda e: e["total_points"], reverse=True)
    return entries[:limit]


async def _sessions_between(
    db: AsyncSession, start: datetime, end: datetime | None = None
) -> list[models.GameSession]:
    query = (
        select(models.GameSession)
        .where(models.GameSession.played_at >= start)
        .options(selectinload(models.GameSession.results))
    )
    if end is not None:
        query = query.where(models.GameSession.played_at < end)
    result = await db.execute(query)
    return list(result.scalars().all())


def _tally_results(
    sessions: Iterable[models.GameSession],
) -> dict[int, dict[str, Any]]:
    """Points, games and wins per player over a set of sessions."""
    tally: dict[int, dict[str, Any]] = {}
    for session in sessions:
        for result in session.results:
            # Results of permanently deleted players are anonymous
            if result.player_id is None:
                continue
            entry = tally.setdefault(
                result.player_id,
                {
                    "player_id": result.player_id,
                    "player_name": result.player_name,
                    "total_points": 0,
                    "total_games": 0,
                    "wins": 0,
                },
            )
            entry["player_name"] = result.player_name
            entry["total_points"] += result.points_earned
            entry["total_games"] += 1
            entry["wins"] += result.rank == 1
    return tally


async def _photo_urls(
    db: AsyncSession, player_ids: list[int]
) -> dict[int, str | None]:
    if not player_ids:
        return {}
    query = select(models.Player.id, models.Player.photo_url).where(
        models.Player.id.in_(player_ids)
    )
    result = await db.execute(query)
    return {row.id: row.photo_url for row in result}


async def get_monthly_leaderboard(
    db: AsyncSession, year: int, month: int, limit: int = 10
) -> list[dict[str, Any]]:
    """Points, games, wins and win rate per player for one calendar month (UTC)."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)

    tally = _tally_results(await _sessions_between(db, start, end))
    board = sorted(tally.values(), key=lambda e: e["total_points"], reverse=True)
    board = board[:limit]

    photos = await _photo_urls(db, [e["player_id"] for e in board])
    for entry in board:
        entry["win_rate"] = entry["wins"] / entry["total_games"]
        entry["photo_url"] = photos.get(entry["player_id"])
    return board


async def get_player_awards(
    db: AsyncSession, now: datetime | None = None
) -> dict[str, list[dict[str, Any]] | None]:
    """
    Top players by points over the last 7 and the last 30 days.

    Both windows end at `now`. Each period is ``None`` when nobody played
    in it.
    """
    now = models.as_utc(now) if now else models.utcnow()
    periods = {
        "player_of_week": now - timedelta(days=7),
        "player_of_month": now - timedelta(days=30),
    }

    awards: dict[str, list[dict[str, Any]] | None] = {}
    for period, since in periods.items():
        tally = _tally_results(await _sessions_between(db, since, now))
        top = sorted(tally.values(), key=lambda e: e["total_points"], reverse=True)
        top = top[:AWARD_PODIUM_SIZE]

        photos = await _photo_urls(db, [e["player_id"] for e in top])
        for entry in top:
            entry.pop("wins")
            entry["photo_url"] = photos.get(entry["player_id"])
        awards[period] = top or None

    return awards


async def get_best_player_per_game(
    db: AsyncSession, min_games: int = MIN_GAMES_FOR_CHAMPION
) -> list[dict[str, Any]]:
    """
    The highest scoring player of every active game.

    Only players with at least `min_games` plays of a game qualify, and games
    without a qualified player are left out.
    """
    games_query = (
        select(models.Game)
        .where(models.Game.is_active.is_(True))
        .order_by(models.Game.id)
    )
    games = (await db.execute(games_query)).scalars().all()
    if not games:
        return []

    all_stats = (
        await db.execute(select(models.PlayerStats).order_by(models.PlayerStats.id))
    ).scalars().all()

    champions = []
    for game in games:
        best: dict[str, Any] | None = None
        for stats in all_stats:
            game_stat = next(
                (gs for gs in stats.game_stats if gs["game_id"] == game.id), None
            )
            if game_stat is None or game_stat["total_games"] < min_games:
                continue
            if best is None or game_stat["total_points"] > best["total_points"]:
                best = {
                    "player_id": stats.player_id,
                    "player_name": stats.player_name,
                    "total_points": game_stat["total_points"],
                    "total_games": game_stat["total_games"],
                }

        if best is not None:
            photos = await _photo_urls(db, [best["player_id"]])
            best["photo_url"] = photos.get(best["player_id"])
            champions.append(
                {"game_id": game.id, "game_name": game.name, "best_player": best}
            )

    return champions


async def get_player_summary(db: AsyncSession, player_id: int) -> dict[str, Any]:
    """Headline numbers for a player's profile, including their most played game."""
    player = await db.get(models.Player, player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)

    stats = await get_player_stats(db, player_id)
    overall = stats.overall

    favorite_game = None
    if stats.game_stats:
        # First entry wins ties, like a left fold
        most_played = stats.game_stats[0]
        for game_stat in stats.game_stats[1:]:
            if game_stat["total_games"] > most_played["total_games"]:
                most_played = game_stat
        favorite_game = {
            "game_id": most_played["game_id"],
            "name": most_played["game_name"],
            "times_played": most_played["total_games"],
        }

    return {
        "player_id": player_id,
        "player_name": stats.player_name,
        "total_games_played": overall["total_games"],
        "total_wins": overall["wins"],
        "win_rate": overall["win_rate"],
        "total_points": overall["total_points"],
        "average_points_per_game": overall["average_points"],
        "favorite_game": favorite_game,
    }
