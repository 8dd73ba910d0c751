# src/meeplescore/api/player.py

"""API endpoints for managing players."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db.models import GameResult, GameSession, Player
from meeplescore.db.session import get_db
from meeplescore.schemas import player as player_schema
from meeplescore.schemas import session as session_schema
from meeplescore.schemas.badge import PlayerBadgeRead
from meeplescore.schemas.pagination import PaginatedResponse, PlayerSortField, SortOrder
from meeplescore.schemas.stats import PlayerSummary
from meeplescore.services import player_service, stats_service

# Create an APIRouter instance for players
# - prefix="/players": All routes here will be prefixed with /players
# - tags=["Players"]: Groups these endpoints under "Players" in the API docs
router = APIRouter(prefix="/players", tags=["Players"])


async def _get_player_or_404(
    db: AsyncSession, player_id: int, with_badges: bool = False
) -> Player:
    query = select(Player).where(Player.id == player_id)
    if with_badges:
        query = query.options(selectinload(Player.badges)).execution_options(
            populate_existing=True
        )
    player = (await db.execute(query)).scalar_one_or_none()
    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player with id {player_id} not found",
        )
    return player


@router.post(
    "/",
    response_model=player_schema.PlayerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_player(
    player_in: player_schema.PlayerCreate, db: AsyncSession = Depends(get_db)
) -> Player:
    """
    Create a new player.

    - **name**: The unique name for the player.
    - **email**: Optional, unique when given.

    Raises:
        409 Conflict: If a player with the same name or email already exists.
    """
    # Create a new SQLAlchemy Player model instance
    new_player = Player(**player_in.model_dump())

    # Add, commit, and refresh to save to the database and get the new ID
    try:
        db.add(new_player)
        await db.commit()
        await db.refresh(new_player)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Player with name '{player_in.name}' already exists",
        )

    # Return the newly created player object
    return new_player


@router.get("/", response_model=PaginatedResponse[player_schema.PlayerRead])
async def read_players(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sort_by: PlayerSortField = Query(PlayerSortField.NAME, description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.ASC, description="Sort direction"),
    include_archived: bool = Query(False, description="Include archived players"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[player_schema.PlayerRead]:
    """
    Retrieve a paginated list of players.

    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return (1-100)
    - **sort_by**: Field to sort by (id, name, created_at, last_played_at)
    - **sort_order**: Sort direction (asc, desc)
    - **include_archived**: Whether to include archived players (default: false)
    """
    base_query = select(Player)

    # Filter archived players unless explicitly requested
    if not include_archived:
        base_query = base_query.where(Player.is_active.is_(True))

    # Get total count
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    # Apply sorting
    sort_column = getattr(Player, sort_by.value)
    if sort_order == SortOrder.DESC:
        sort_column = sort_column.desc()

    # Apply pagination
    query = base_query.order_by(sort_column, Player.id).offset(skip).limit(limit)
    result = await db.execute(query)
    items = list(result.scalars().all())

    return PaginatedResponse(
        items=items,  # type: ignore[arg-type]
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(items)) < total,
    )


@router.get("/{player_id}", response_model=player_schema.PlayerProfileRead)
async def read_player(player_id: int, db: AsyncSession = Depends(get_db)) -> Player:
    """
    Retrieve a single player by their ID, with their badges.
    """
    return await _get_player_or_404(db, player_id, with_badges=True)


@router.put("/{player_id}", response_model=player_schema.PlayerRead)
async def update_player(
    player_id: int,
    player_in: player_schema.PlayerUpdate,
    db: AsyncSession = Depends(get_db),
) -> Player:
    """
    Update a player's profile.

    Renaming a player does not rewrite names stored on past results; they
    are refreshed from the results on the next stats recalculation.

    Raises:
        404 Not Found: If the player doesn't exist.
        409 Conflict: If the new name or email conflicts with another player.
    """
    player_to_update = await _get_player_or_404(db, player_id)

    # Get the update data, excluding fields that were not sent
    update_data = player_in.model_dump(exclude_unset=True)

    # Update the model instance with the new data
    for key, value in update_data.items():
        setattr(player_to_update, key, value)

    # Add, commit, and refresh
    try:
        db.add(player_to_update)
        await db.commit()
        await db.refresh(player_to_update)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Player with name '{player_in.name}' already exists",
        )

    return player_to_update


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(
    player_id: int,
    permanent: bool = Query(False, description="Delete instead of archiving"),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Archive a player, or delete them permanently.

    - **permanent**: When true the player is deleted and their past results
      are kept under an anonymous name.
    """
    player = await _get_player_or_404(db, player_id)

    if permanent:
        await player_service.delete_player_permanently(db, player)
    else:
        await player_service.archive_player(db, player)

    # Return None for the 204 No Content response
    return None


@router.get("/{player_id}/stats", response_model=PlayerSummary)
async def get_player_stats(
    player_id: int,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Get a player's headline numbers and most played game.

    Raises:
        404 Not Found: If the player doesn't exist or has no sessions yet.
    """
    return await stats_service.get_player_summary(db, player_id)


@router.get("/{player_id}/badges", response_model=list[PlayerBadgeRead])
async def get_player_badges(
    player_id: int,
    db: AsyncSession = Depends(get_db),
) -> list:
    """List the badges a player has earned, oldest first."""
    player = await _get_player_or_404(db, player_id, with_badges=True)
    return list(player.badges)


@router.get(
    "/{player_id}/sessions",
    response_model=PaginatedResponse[session_schema.GameSessionRead],
)
async def get_player_sessions(
    player_id: int,
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    game_id: int | None = Query(None, description="Filter by game ID"),
    played_after: datetime | None = Query(None, description="After this date"),
    played_before: datetime | None = Query(None, description="Before this date"),
    sort_order: SortOrder = Query(SortOrder.DESC, description="Sort by played_at"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[session_schema.GameSessionRead]:
    """
    Get session history for a specific player.

    - **player_id**: The ID of the player
    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return (1-100)
    - **game_id**: Filter by game ID
    - **played_after**: Filter sessions played after this datetime
    - **played_before**: Filter sessions played before this datetime
    - **sort_order**: Sort direction for played_at (asc, desc)
    """
    await _get_player_or_404(db, player_id)

    # Sessions in which this player has a result
    base_query = select(GameSession).where(
        GameSession.results.any(GameResult.player_id == player_id)
    )

    # Apply filters
    if game_id is not None:
        base_query = base_query.where(GameSession.game_id == game_id)

    if played_after is not None:
        base_query = base_query.where(GameSession.played_at >= played_after)

    if played_before is not None:
        base_query = base_query.where(GameSession.played_at <= played_before)

    # Get total count
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    # Apply sorting
    if sort_order == SortOrder.DESC:
        order_col = GameSession.played_at.desc()
    else:
        order_col = GameSession.played_at.asc()

    # Apply pagination and eager load results
    query = (
        base_query.order_by(order_col, GameSession.id)
        .offset(skip)
        .limit(limit)
        .options(selectinload(GameSession.results))
    )
    result = await db.execute(query)
    items = list(result.scalars().unique().all())

    return PaginatedResponse(
        items=items,  # type: ignore[arg-type]
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(items)) < total,
    )
