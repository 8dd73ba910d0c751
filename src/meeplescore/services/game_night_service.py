# src/meeplescore/services/game_night_service.py

"""Business logic for game nights and RSVPs."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db import models
from meeplescore.exceptions import (
    GameNightNotFoundError,
    GameNightValidationError,
    PlayerNotFoundError,
)
from meeplescore.schemas import game_night as game_night_schema

logger = logging.getLogger(__name__)

STATUS_SCHEDULED = "scheduled"
STATUS_IN_PROGRESS = "in-progress"
STATUS_CANCELLED = "cancelled"
RSVP_GOING = "going"


async def get_game_night(db: AsyncSession, game_night_id: int) -> models.GameNight:
    """Loads a game night with its attendees, or raises GameNightNotFoundError."""
    query = (
        select(models.GameNight)
        .where(models.GameNight.id == game_night_id)
        .options(selectinload(models.GameNight.attendees))
        .execution_options(populate_existing=True)
    )
    game_night = (await db.execute(query)).scalar_one_or_none()
    if game_night is None:
        raise GameNightNotFoundError(game_night_id)
    return game_night


async def _get_player(db: AsyncSession, player_id: int) -> models.Player:
    player = await db.get(models.Player, player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)
    return player


async def create_game_night(
    db: AsyncSession, night_in: game_night_schema.GameNightCreate
) -> models.GameNight:
    """
    Schedules a new game night. The creator is RSVP'd as going.

    Raises:
        GameNightValidationError: If the date is not in the future
        PlayerNotFoundError: If the creator does not exist
    """
    scheduled_date = models.as_utc(night_in.scheduled_date)
    if scheduled_date < models.utcnow():
        raise GameNightValidationError(None, "Scheduled date must be in the future")

    creator = await _get_player(db, night_in.created_by)

    game_night = models.GameNight(
        **night_in.model_dump(exclude={"scheduled_date"}),
        scheduled_date=scheduled_date,
        created_by_name=creator.name,
    )
    game_night.attendees = [
        models.GameNightAttendee(
            player_id=creator.id,
            player_name=creator.name,
            rsvp_status=RSVP_GOING,
        )
    ]
    db.add(game_night)
    await db.commit()

    logger.info(
        "Game night created",
        extra={"game_night_id": game_night.id, "created_by": creator.id},
    )
    return await get_game_night(db, game_night.id)


async def list_game_nights(
    db: AsyncSession,
    *,
    status: str | None = None,
    upcoming: bool = False,
    player_id: int | None = None,
    include_private: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[models.GameNight], int]:
    """
    Lists game nights with optional filters.

    Upcoming nights (scheduled or in progress, not yet past) are ordered
    soonest first; everything else most recent first.

    Returns:
        The page of game nights and the total number matching the filters.
    """
    base_query = select(models.GameNight)

    if status is not None:
        base_query = base_query.where(models.GameNight.status == status)

    if upcoming:
        base_query = base_query.where(
            models.GameNight.scheduled_date >= models.utcnow(),
            models.GameNight.status.in_([STATUS_SCHEDULED, STATUS_IN_PROGRESS]),
        )

    if player_id is not None:
        base_query = base_query.where(
            models.GameNight.attendees.any(
                models.GameNightAttendee.player_id == player_id
            )
        )

    if not include_private:
        base_query = base_query.where(models.GameNight.is_private.is_(False))

    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    order = models.GameNight.scheduled_date
    order_col = order.asc() if upcoming else order.desc()
    query = (
        base_query.order_by(order_col, models.GameNight.id)
        .offset(skip)
        .limit(limit)
        .options(selectinload(models.GameNight.attendees))
    )
    items = list((await db.execute(query)).scalars().unique().all())
    return items, total


async def update_game_night(
    db: AsyncSession,
    game_night_id: int,
    night_in: game_night_schema.GameNightUpdate,
) -> models.GameNight:
    """Updates a game night. A scheduled night cannot be moved into the past."""
    game_night = await get_game_night(db, game_night_id)
    update_data = night_in.model_dump(exclude_unset=True)

    if update_data.get("scheduled_date") is not None:
        scheduled_date = models.as_utc(update_data["scheduled_date"])
        if (
            scheduled_date < models.utcnow()
            and game_night.status == STATUS_SCHEDULED
        ):
            raise GameNightValidationError(
                game_night_id,
                "Scheduled date must be in the future for scheduled events",
            )
        update_data["scheduled_date"] = scheduled_date

    if "status" in update_data and update_data["status"] is not None:
        update_data["status"] = game_night_schema.GameNightStatus(
            update_data["status"]
        ).value

    for key, value in update_data.items():
        setattr(game_night, key, value)

    await db.commit()
    logger.info(
        "Game night updated",
        extra={"game_night_id": game_night_id, "fields": sorted(update_data)},
    )
    return await get_game_night(db, game_night_id)


async def cancel_game_night(db: AsyncSession, game_night_id: int) -> models.GameNight:
    """Marks a game night as cancelled. Its RSVPs are kept."""
    game_night = await get_game_night(db, game_night_id)
    game_night.status = STATUS_CANCELLED
    await db.commit()
    logger.info("Game night cancelled", extra={"game_night_id": game_night_id})
    return await get_game_night(db, game_night_id)


async def rsvp(
    db: AsyncSession, game_night_id: int, rsvp_in: game_night_schema.RSVPRequest
) -> models.GameNight:
    """
    Records or changes a player's RSVP.

    An existing RSVP is updated in place. A new "going" RSVP is rejected
    once the night has reached `max_attendees`.

    Raises:
        GameNightNotFoundError: If the game night does not exist
        GameNightValidationError: If the night is cancelled or full
        PlayerNotFoundError: If the player does not exist
    """
    game_night = await get_game_night(db, game_night_id)

    if game_night.status == STATUS_CANCELLED:
        raise GameNightValidationError(
            game_night_id, "Cannot RSVP to a cancelled game night"
        )

    player = await _get_player(db, rsvp_in.player_id)
    rsvp_status = rsvp_in.status.value

    existing = next(
        (a for a in game_night.attendees if a.player_id == player.id), None
    )
    if existing is not None:
        existing.rsvp_status = rsvp_status
        existing.rsvp_at = models.utcnow()
    else:
        if (
            rsvp_status == RSVP_GOING
            and game_night.max_attendees
            and game_night.going_count >= game_night.max_attendees
        ):
            raise GameNightValidationError(
                game_night_id, "This game night has reached maximum capacity"
            )
        game_night.attendees.append(
            models.GameNightAttendee(
                player_id=player.id,
                player_name=player.name,
                rsvp_status=rsvp_status,
            )
        )

    await db.commit()
    logger.info(
        "RSVP recorded",
        extra={
            "game_night_id": game_night_id,
            "player_id": player.id,
            "rsvp_status": rsvp_status,
        },
    )
    return await get_game_night(db, game_night_id)


async def leave(
    db: AsyncSession, game_night_id: int, player_id: int
) -> models.GameNight:
    """Removes a player's RSVP. The creator cannot leave their own night."""
    game_night = await get_game_night(db, game_night_id)

    if game_night.created_by == player_id:
        raise GameNightValidationError(
            game_night_id,
            "Creator cannot leave their own game night. Cancel the event instead.",
        )

    # delete-orphan removes the attendee row
    game_night.attendees = [
        a for a in game_night.attendees if a.player_id != player_id
    ]
    await db.commit()
    logger.info(
        "RSVP removed",
        extra={"game_night_id": game_night_id, "player_id": player_id},
    )
    return await get_game_night(db, game_night_id)
