# src/meeplescore/api/game.py

"""API endpoints for managing games."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meeplescore.db.models import Game
from meeplescore.db.session import get_db
from meeplescore.schemas import game as game_schema
from meeplescore.schemas.pagination import GameSortField, PaginatedResponse, SortOrder
from meeplescore.schemas.stats import GameLeaderboardEntry
from meeplescore.services import stats_service

# Creates an APIRouter instance
# - prefix="/games": All routes defined here will be prefixed with /games
# - tags=["Games"]: Groups these endpoints under "Games" in the API docs
router = APIRouter(prefix="/games", tags=["Games"])


async def _get_game_or_404(db: AsyncSession, game_id: int) -> Game:
    game = await db.get(Game, game_id)
    if not game:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Game with id {game_id} not found",
        )
    return game


@router.post(
    "/",
    response_model=game_schema.GameRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_game(
    game_in: game_schema.GameCreate,
    db: AsyncSession = Depends(get_db),
) -> Game:
    """
    Create a new game.

    - **name**: The unique name of the game.
    - **scoring_mode**: `pointing` (default) or `winner-takes-all`.
    - **points_per_player**: Pool contribution per player; defaults to 5
      for pointing and 3 for winner-takes-all.

    Raises:
        409 Conflict: If a game with the same name already exists.
    """
    # Create a new SQLAlchemy Game model instance from the Pydantic schema data
    new_game = Game(**game_in.model_dump(mode="json"))

    # Add the new instance to the database session, commit and refresh
    try:
        db.add(new_game)
        await db.commit()
        await db.refresh(new_game)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Game with name '{game_in.name}' already exists",
        )

    return new_game


@router.get("/", response_model=PaginatedResponse[game_schema.GameRead])
async def read_games(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sort_by: GameSortField = Query(GameSortField.NAME, description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.ASC, description="Sort direction"),
    active_only: bool = Query(True, description="Hide deactivated games"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[game_schema.GameRead]:
    """
    Retrieve a paginated list of games.

    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return (1-100)
    - **sort_by**: Field to sort by (id, name, created_at)
    - **sort_order**: Sort direction (asc, desc)
    - **active_only**: Whether to hide deactivated games (default: true)
    """
    base_query = select(Game)
    if active_only:
        base_query = base_query.where(Game.is_active.is_(True))

    # Get total count
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    # Apply sorting
    sort_column = getattr(Game, sort_by.value)
    if sort_order == SortOrder.DESC:
        sort_column = sort_column.desc()

    # Apply pagination
    query = base_query.order_by(sort_column, Game.id).offset(skip).limit(limit)
    result = await db.execute(query)
    items = list(result.scalars().all())

    return PaginatedResponse(
        items=items,  # type: ignore[arg-type]
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(items)) < total,
    )


@router.get("/{game_id}", response_model=game_schema.GameRead)
async def read_game(game_id: int, db: AsyncSession = Depends(get_db)) -> Game:
    """
    Retrieve a single game by its ID.
    """
    return await _get_game_or_404(db, game_id)


@router.put("/{game_id}", response_model=game_schema.GameRead)
async def update_game(
    game_id: int,
    game_in: game_schema.GameUpdate,
    db: AsyncSession = Depends(get_db),
) -> Game:
    """
    Update a game by its ID.

    Changing the scoring configuration only affects sessions recorded (or
    edited) afterwards; stored points are never rescored.

    Raises:
        404 Not Found: If the game doesn't exist.
        409 Conflict: If the new name conflicts with an existing game.
    """
    game_to_update = await _get_game_or_404(db, game_id)

    # Get the update data, excluding fields that were not sent.
    update_data = game_in.model_dump(mode="json", exclude_unset=True)

    # Update the model instance with the new data
    for key, value in update_data.items():
        setattr(game_to_update, key, value)

    # Add, commit, and refresh
    try:
        db.add(game_to_update)
        await db.commit()
        await db.refresh(game_to_update)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Game with name '{game_in.name}' already exists",
        )

    return game_to_update


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(game_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """
    Deactivate a game by its ID.

    Games are never removed, since recorded sessions reference them.
    """
    game_to_delete = await _get_game_or_404(db, game_id)

    game_to_delete.is_active = False
    await db.commit()

    # A 204 response has no body, so return None.
    return None


@router.get("/{game_id}/leaderboard", response_model=list[GameLeaderboardEntry])
async def get_leaderboard(
    game_id: int,
    player_count: int | None = Query(None, ge=1, description="Table size"),
    limit: int = Query(10, ge=1, le=100, description="Max entries to return"),
    db: AsyncSession = Depends(get_db),
) -> list[GameLeaderboardEntry]:
    """
    Get player rankings for a specific game, highest points first.

    - **player_count**: Rank by points earned at this table size, for
      players who have played at it
    """
    await _get_game_or_404(db, game_id)

    entries = await stats_service.get_game_leaderboard(
        db, game_id, player_count=player_count, limit=limit
    )
    return [
        GameLeaderboardEntry(rank=i + 1, **entry) for i, entry in enumerate(entries)
    ]
