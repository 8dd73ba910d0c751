# src/meeplescore/services/badge_service.py

"""Badge evaluation and awarding."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meeplescore.badges.definitions import (
    BADGE_DEFINITIONS,
    TIERS,
    BadgeDefinition,
)
from meeplescore.db import models

logger = logging.getLogger(__name__)

# Used when a win-rate badge does not declare its own minimum
DEFAULT_WIN_RATE_MIN_GAMES = 10


def longest_win_streak(player_id: int, sessions: list[models.GameSession]) -> int:
    """
    Longest run of consecutive wins, with `sessions` in chronological order.
    """
    best = 0
    current = 0
    for session in sessions:
        result = next((r for r in session.results if r.player_id == player_id), None)
        if result is not None and result.rank == 1:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def meets_criteria(
    badge: BadgeDefinition, stats: models.PlayerStats, max_streak: int
) -> bool:
    """Checks a single badge against a player's stats and best win streak."""
    criteria = badge.criteria
    overall = stats.overall

    if criteria.kind == "games":
        return overall["total_games"] >= criteria.threshold
    if criteria.kind == "wins":
        return overall["wins"] >= criteria.threshold
    if criteria.kind == "podiums":
        return overall["podiums"] >= criteria.threshold
    if criteria.kind == "points":
        return overall["total_points"] >= criteria.threshold
    if criteria.kind == "win_rate":
        min_games = criteria.min_games or DEFAULT_WIN_RATE_MIN_GAMES
        return (
            overall["total_games"] >= min_games
            and overall["win_rate"] >= criteria.threshold
        )
    if criteria.kind == "streak":
        return max_streak >= criteria.threshold
    if criteria.kind == "variety":
        return len(stats.game_stats) >= criteria.threshold
    return False


async def calculate_badges_for_player(
    db: AsyncSession, player_id: int
) -> list[BadgeDefinition]:
    """Every badge the player currently qualifies for."""
    stats = await models.PlayerStats.find_by_player(db, player_id)
    if stats is None:
        return []

    sessions = await models.GameSession.find_for_player(db, player_id)
    # find_for_player returns newest first; streaks are counted oldest first
    max_streak = longest_win_streak(player_id, list(reversed(sessions)))

    return [b for b in BADGE_DEFINITIONS if meets_criteria(b, stats, max_streak)]


async def update_player_badges(
    db: AsyncSession, player_id: int
) -> list[models.PlayerBadge]:
    """
    Awards badges the player qualifies for but does not hold yet.

    Existing badges are never removed or re-dated. Returns the new badges.
    """
    player = await db.get(models.Player, player_id)
    if player is None:
        return []

    earned = await calculate_badges_for_player(db, player_id)

    query = select(models.PlayerBadge.badge_id).where(
        models.PlayerBadge.player_id == player_id
    )
    held = set((await db.execute(query)).scalars().all())

    new_badges = [
        models.PlayerBadge(
            player_id=player_id,
            badge_id=badge.id,
            name=badge.name,
            description=badge.description,
            icon=badge.icon,
            tier=badge.tier,
        )
        for badge in earned
        if badge.id not in held
    ]

    if new_badges:
        db.add_all(new_badges)
        await db.commit()
        logger.info(
            "Awarded badges",
            extra={
                "player_id": player_id,
                "badge_ids": [b.badge_id for b in new_badges],
            },
        )

    return new_badges


async def migrate_all_player_badges(db: AsyncSession) -> dict[str, Any]:
    """Runs `update_player_badges` for every active player."""
    query = (
        select(models.Player)
        .where(models.Player.is_active.is_(True))
        .order_by(models.Player.id)
    )
    players = list((await db.execute(query)).scalars().all())

    results = []
    for player in players:
        new_badges = await update_player_badges(db, player.id)
        results.append(
            {
                "player_id": player.id,
                "player_name": player.name,
                "badges_awarded": len(new_badges),
                "badges": [b.name for b in new_badges],
            }
        )

    logger.info("Badge migration finished", extra={"total_players": len(players)})
    return {"total_players": len(players), "results": results}


def get_badge_stats() -> dict[str, Any]:
    """Size of the badge catalogue, broken down by tier."""
    by_tier = dict.fromkeys(TIERS, 0)
    for badge in BADGE_DEFINITIONS:
        by_tier[badge.tier or "none"] += 1
    return {
        "total_badges_available": len(BADGE_DEFINITIONS),
        "badges_by_tier": by_tier,
    }
