# src/meeplescore/api/game_night.py

"""API endpoints for scheduling game nights and RSVPs."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from meeplescore.db.models import GameNight
from meeplescore.db.session import get_db
from meeplescore.schemas import game_night as game_night_schema
from meeplescore.schemas.pagination import PaginatedResponse
from meeplescore.services import game_night_service

router = APIRouter(prefix="/game-nights", tags=["Game Nights"])


@router.post(
    "/",
    response_model=game_night_schema.GameNightRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_game_night(
    night_in: game_night_schema.GameNightCreate,
    db: AsyncSession = Depends(get_db),
) -> GameNight:
    """
    Schedule a game night.

    - **scheduled_date**: Must be in the future.
    - **created_by**: The hosting player, who is RSVP'd as going.
    """
    return await game_night_service.create_game_night(db, night_in)


@router.get("/", response_model=PaginatedResponse[game_night_schema.GameNightRead])
async def read_game_nights(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    status_filter: game_night_schema.GameNightStatus | None = Query(
        None, alias="status", description="Filter by status"
    ),
    upcoming: bool = Query(False, description="Only future, active nights"),
    player_id: int | None = Query(None, description="Nights this player RSVP'd to"),
    include_private: bool = Query(False, description="Include private nights"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[game_night_schema.GameNightRead]:
    """
    Retrieve game nights.

    Upcoming nights are listed soonest first; otherwise the most recently
    scheduled come first.
    """
    items, total = await game_night_service.list_game_nights(
        db,
        status=status_filter.value if status_filter else None,
        upcoming=upcoming,
        player_id=player_id,
        include_private=include_private,
        skip=skip,
        limit=limit,
    )
    return PaginatedResponse(
        items=items,  # type: ignore[arg-type]
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(items)) < total,
    )


@router.get("/{game_night_id}", response_model=game_night_schema.GameNightRead)
async def read_game_night(
    game_night_id: int, db: AsyncSession = Depends(get_db)
) -> GameNight:
    """Retrieve a single game night with its attendees."""
    return await game_night_service.get_game_night(db, game_night_id)


@router.put("/{game_night_id}", response_model=game_night_schema.GameNightRead)
async def update_game_night(
    game_night_id: int,
    night_in: game_night_schema.GameNightUpdate,
    db: AsyncSession = Depends(get_db),
) -> GameNight:
    """Update a game night's details or status."""
    return await game_night_service.update_game_night(db, game_night_id, night_in)


@router.delete("/{game_night_id}", response_model=game_night_schema.GameNightRead)
async def cancel_game_night(
    game_night_id: int, db: AsyncSession = Depends(get_db)
) -> GameNight:
    """Cancel a game night. It stays visible with status `cancelled`."""
    return await game_night_service.cancel_game_night(db, game_night_id)


@router.post(
    "/{game_night_id}/rsvp", response_model=game_night_schema.GameNightRead
)
async def rsvp(
    game_night_id: int,
    rsvp_in: game_night_schema.RSVPRequest,
    db: AsyncSession = Depends(get_db),
) -> GameNight:
    """
    RSVP to a game night, or change an existing RSVP.

    Raises:
        422: If the night is cancelled or already full
    """
    return await game_night_service.rsvp(db, game_night_id, rsvp_in)


@router.delete(
    "/{game_night_id}/rsvp/{player_id}",
    response_model=game_night_schema.GameNightRead,
)
async def leave_game_night(
    game_night_id: int, player_id: int, db: AsyncSession = Depends(get_db)
) -> GameNight:
    """Withdraw a player's RSVP. The creator cannot leave."""
    return await game_night_service.leave(db, game_night_id, player_id)
