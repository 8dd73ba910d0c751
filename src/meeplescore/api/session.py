# src/meeplescore/api/session.py

"""API endpoints for recording and browsing game sessions."""

from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db.models import GameResult, GameSession
from meeplescore.db.session import SessionFactory, get_db, get_session_factory
from meeplescore.schemas import session as session_schema
from meeplescore.schemas.pagination import PaginatedResponse, SortOrder
from meeplescore.services import session_service, stats_service

# Create an APIRouter instance for sessions
router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("/", response_model=PaginatedResponse[session_schema.GameSessionRead])
async def read_sessions(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sort_order: SortOrder = Query(SortOrder.DESC, description="Sort by played_at"),
    game_id: int | None = Query(None, description="Filter by game ID"),
    player_id: int | None = Query(None, description="Filter by player"),
    played_after: datetime | None = Query(None, description="After this date"),
    played_before: datetime | None = Query(None, description="Before this date"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[session_schema.GameSessionRead]:
    """
    Retrieve a paginated list of sessions with filtering options.

    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return (1-100)
    - **sort_order**: Sort direction for played_at (asc, desc)
    - **game_id**: Filter by game ID
    - **player_id**: Filter by player participation
    - **played_after**: Filter sessions played after this datetime
    - **played_before**: Filter sessions played before this datetime
    """
    base_query = select(GameSession)

    # Apply filters
    if game_id is not None:
        base_query = base_query.where(GameSession.game_id == game_id)

    if player_id is not None:
        base_query = base_query.where(
            GameSession.results.any(GameResult.player_id == player_id)
        )

    if played_after is not None:
        base_query = base_query.where(GameSession.played_at >= played_after)

    if played_before is not None:
        base_query = base_query.where(GameSession.played_at <= played_before)

    # Get total count
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    # Apply sorting; id breaks ties between sessions played at the same time
    if sort_order == SortOrder.DESC:
        order_cols = (GameSession.played_at.desc(), GameSession.id.desc())
    else:
        order_cols = (GameSession.played_at.asc(), GameSession.id.asc())

    # Apply pagination and eager load results
    query = (
        base_query.order_by(*order_cols)
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


@router.post(
    "/",
    response_model=session_schema.GameSessionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    session_in: session_schema.GameSessionCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> GameSession:
    """
    Record a finished game session and return it with computed points.

    Stats and badges of the participants are recalculated after the
    response has been sent.

    Raises:
        404: If game_id or a player_id doesn't exist
        422: If the results are empty, contain duplicates or have invalid ranks
    """
    new_session, affected = await session_service.record_session(db, session_in)
    background_tasks.add_task(
        stats_service.recalculate_in_background, session_factory, affected
    )
    return new_session


@router.get("/{session_id}", response_model=session_schema.GameSessionRead)
async def read_session(
    session_id: int, db: AsyncSession = Depends(get_db)
) -> GameSession:
    """
    Retrieve a single session by its ID, including its results.
    """
    return await session_service.get_session(db, session_id)


@router.put("/{session_id}", response_model=session_schema.GameSessionRead)
async def update_session(
    session_id: int,
    session_in: session_schema.GameSessionUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> GameSession:
    """
    Edit a session's date and/or replace its results.

    New results are rescored with the game's current settings. Players
    removed from the session are recalculated as well as the new ones.
    """
    updated, affected = await session_service.update_session(
        db, session_id, session_in
    )
    background_tasks.add_task(
        stats_service.recalculate_in_background, session_factory, affected
    )
    return updated


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: int,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> None:
    """
    Delete a session by its ID.

    Results go with it; the participants' stats are rebuilt afterwards.
    """
    affected = await session_service.delete_session(db, session_id)
    background_tasks.add_task(
        stats_service.recalculate_in_background, session_factory, affected
    )
    return None
