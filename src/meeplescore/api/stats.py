# src/meeplescore/api/stats.py

"""API endpoints for leaderboards, awards and player statistics."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from meeplescore.db.models import Game, Player, PlayerStats, utcnow
from meeplescore.db.session import get_db
from meeplescore.schemas import stats as stats_schema
from meeplescore.services import badge_service, stats_service

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/", response_model=list[stats_schema.PlayerStatsRead])
async def read_all_stats(db: AsyncSession = Depends(get_db)) -> list[PlayerStats]:
    """Every player's stats row, highest total points first."""
    return await stats_service.get_overall_leaderboard(db, limit=None)


@router.post("/recalculate", response_model=stats_schema.RecalculateAllResult)
async def recalculate_all(db: AsyncSession = Depends(get_db)) -> dict:
    """
    Rebuild every player's stats from the full session history.

    Runs in the request, unlike the recalculation that follows a session
    write, so the response reflects the finished rebuild.
    """
    result = await stats_service.recalculate_all_stats(db)
    return {"message": "All player stats recalculated successfully", **result}


@router.post(
    "/recalculate/{player_id}",
    response_model=stats_schema.PlayerStatsRead | None,
)
async def recalculate_player(
    player_id: int, db: AsyncSession = Depends(get_db)
) -> PlayerStats | None:
    """
    Rebuild one player's stats and award any newly earned badges.

    Returns null when the player has no sessions.
    """
    player = await db.get(Player, player_id)
    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player with id {player_id} not found",
        )

    stats = await stats_service.recalculate_player_stats(db, player_id)
    await badge_service.update_player_badges(db, player_id)
    return stats


@router.get("/player/{player_id}", response_model=stats_schema.PlayerStatsRead)
async def read_player_stats(
    player_id: int, db: AsyncSession = Depends(get_db)
) -> PlayerStats:
    """
    The full stats row for a player, including per-game breakdowns.

    Raises:
        404 Not Found: If the player has no stats (no sessions played).
    """
    return await stats_service.get_player_stats(db, player_id)


@router.get(
    "/leaderboard/overall",
    response_model=list[stats_schema.LeaderboardEntry],
)
async def overall_leaderboard(
    limit: int = Query(10, ge=1, le=100, description="Max entries to return"),
    db: AsyncSession = Depends(get_db),
) -> list[stats_schema.LeaderboardEntry]:
    """Players ranked by total points across all games."""
    rows = await stats_service.get_overall_leaderboard(db, limit=limit)
    return [
        stats_schema.LeaderboardEntry(
            rank=i + 1,
            player_id=row.player_id,
            player_name=row.player_name,
            overall=row.overall,
        )
        for i, row in enumerate(rows)
    ]


@router.get(
    "/leaderboard/game/{game_id}",
    response_model=list[stats_schema.GameLeaderboardEntry],
)
async def game_leaderboard(
    game_id: int,
    player_count: int | None = Query(None, ge=1, description="Table size"),
    limit: int = Query(10, ge=1, le=100, description="Max entries to return"),
    db: AsyncSession = Depends(get_db),
) -> list[stats_schema.GameLeaderboardEntry]:
    """
    Players ranked by points in one game.

    - **player_count**: Rank by points earned at this table size, for
      players who have played at it
    """
    game = await db.get(Game, game_id)
    if not game:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Game with id {game_id} not found",
        )

    entries = await stats_service.get_game_leaderboard(
        db, game_id, player_count=player_count, limit=limit
    )
    return [
        stats_schema.GameLeaderboardEntry(rank=i + 1, **entry)
        for i, entry in enumerate(entries)
    ]


@router.get(
    "/leaderboard/monthly",
    response_model=list[stats_schema.MonthlyLeaderboardEntry],
)
async def monthly_leaderboard(
    year: int | None = Query(None, ge=1970, le=9999, description="Defaults to now"),
    month: int | None = Query(None, ge=1, le=12, description="Defaults to now"),
    limit: int = Query(10, ge=1, le=100, description="Max entries to return"),
    db: AsyncSession = Depends(get_db),
) -> list[stats_schema.MonthlyLeaderboardEntry]:
    """Players ranked by points earned in one calendar month (UTC)."""
    now = utcnow()
    entries = await stats_service.get_monthly_leaderboard(
        db, year or now.year, month or now.month, limit=limit
    )
    return [
        stats_schema.MonthlyLeaderboardEntry(rank=i + 1, **entry)
        for i, entry in enumerate(entries)
    ]


@router.get("/awards", response_model=stats_schema.PlayerAwards)
async def player_awards(
    now: datetime | None = Query(None, description="Reference time, defaults to now"),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Top 3 players by points over the last 7 days and the last 30 days."""
    return await stats_service.get_player_awards(db, now=now)


@router.get("/best-per-game", response_model=list[stats_schema.GameChampion])
async def best_per_game(
    min_games: int = Query(
        stats_service.MIN_GAMES_FOR_CHAMPION, ge=1, description="Plays to qualify"
    ),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    """The highest scoring qualified player of every active game."""
    return await stats_service.get_best_player_per_game(db, min_games=min_games)
