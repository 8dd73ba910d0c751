# src/meeplescore/api/admin.py

"""Administrative endpoints: dashboard numbers, roles, badges and stats."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from meeplescore.db.models import Game, GameSession, Player
from meeplescore.db.session import get_db
from meeplescore.exceptions import RoleChangeError
from meeplescore.schemas import admin as admin_schema
from meeplescore.schemas import badge as badge_schema
from meeplescore.schemas import player as player_schema
from meeplescore.schemas.stats import RecalculateAllResult
from meeplescore.services import badge_service, stats_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

# Number of entries in the dashboard's recent and popular lists
DASHBOARD_LIST_SIZE = 5


async def _count(db: AsyncSession, query) -> int:
    count_query = select(func.count()).select_from(query.subquery())
    return (await db.execute(count_query)).scalar_one()


@router.get("/stats", response_model=admin_schema.SystemStats)
async def system_stats(db: AsyncSession = Depends(get_db)) -> dict:
    """Counts of players, games and sessions, plus recent and popular lists."""
    recent_query = (
        select(GameSession)
        .order_by(GameSession.played_at.desc(), GameSession.id.desc())
        .limit(DASHBOARD_LIST_SIZE)
    )
    recent = list((await db.execute(recent_query)).scalars().all())

    times_played = func.count(GameSession.id).label("times_played")
    popular_query = (
        select(GameSession.game_id, Game.name, times_played)
        .join(Game, Game.id == GameSession.game_id)
        .group_by(GameSession.game_id, Game.name)
        .order_by(times_played.desc(), GameSession.game_id)
        .limit(DASHBOARD_LIST_SIZE)
    )
    popular = [
        {
            "game_id": row.game_id,
            "game_name": row.name,
            "times_played": row.times_played,
        }
        for row in await db.execute(popular_query)
    ]

    return {
        "total_players": await _count(db, select(Player)),
        "active_players": await _count(
            db, select(Player).where(Player.is_active.is_(True))
        ),
        "claimed_players": await _count(
            db, select(Player).where(Player.profile_claimed.is_(True))
        ),
        "admin_count": await _count(db, select(Player).where(Player.role == "admin")),
        "total_games": await _count(db, select(Game)),
        "active_games": await _count(db, select(Game).where(Game.is_active.is_(True))),
        "total_sessions": await _count(db, select(GameSession)),
        "recent_sessions": recent,
        "popular_games": popular,
    }


@router.put("/players/{player_id}/role", response_model=player_schema.PlayerRead)
async def update_role(
    player_id: int,
    role_in: admin_schema.RoleUpdate,
    db: AsyncSession = Depends(get_db),
) -> Player:
    """
    Change a player's role (admin, user or guest).

    Raises:
        404 Not Found: If the player doesn't exist.
        422: If the profile has not been claimed.
    """
    player = await db.get(Player, player_id)
    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player with id {player_id} not found",
        )

    if not player.profile_claimed:
        raise RoleChangeError(player_id, "Cannot change role of unclaimed profile")

    player.role = role_in.role.value
    await db.commit()
    await db.refresh(player)

    logger.info(
        "Player role changed", extra={"player_id": player_id, "role": player.role}
    )
    return player


@router.post("/badges/migrate", response_model=badge_schema.BadgeMigrationResult)
async def migrate_badges(db: AsyncSession = Depends(get_db)) -> dict:
    """Award every active player the badges they qualify for but lack."""
    return await badge_service.migrate_all_player_badges(db)


@router.get("/badges/stats", response_model=badge_schema.BadgeStats)
async def badge_stats() -> dict:
    """The size of the badge catalogue by tier."""
    return badge_service.get_badge_stats()


@router.post("/stats/recalculate", response_model=RecalculateAllResult)
async def recalculate_all_stats(db: AsyncSession = Depends(get_db)) -> dict:
    """Rebuild every player's stats, then award any badges they now qualify for."""
    result = await stats_service.recalculate_all_stats(db)
    await badge_service.migrate_all_player_badges(db)
    return {"message": "All player stats recalculated successfully", **result}
