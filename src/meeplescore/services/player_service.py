# src/meeplescore/services/player_service.py

"""Business logic for removing players."""

from __future__ import annotations

import logging

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from meeplescore.db import models

logger = logging.getLogger(__name__)


async def archive_player(db: AsyncSession, player: models.Player) -> None:
    """Hides a player from lists while keeping their history and stats."""
    player.is_active = False
    await db.commit()
    logger.info("Player archived", extra={"player_id": player.id})


async def delete_player_permanently(db: AsyncSession, player: models.Player) -> None:
    """
    Deletes a player and anonymizes everything that pointed at them.

    Session results are kept so other players' stats do not change, but
    they lose the player's id and show `DELETED_PLAYER_NAME` instead. The
    player's stats, badges and RSVPs are removed.
    """
    player_id = player.id

    try:
        await db.execute(
            update(models.GameResult)
            .where(models.GameResult.player_id == player_id)
            .values(player_id=None, player_name=models.DELETED_PLAYER_NAME)
        )
        await db.execute(
            delete(models.PlayerStats).where(models.PlayerStats.player_id == player_id)
        )
        await db.execute(
            delete(models.GameNightAttendee).where(
                models.GameNightAttendee.player_id == player_id
            )
        )
        await db.execute(
            update(models.GameNight)
            .where(models.GameNight.created_by == player_id)
            .values(created_by=None)
        )
        await db.execute(
            update(models.Feedback)
            .where(models.Feedback.user_id == player_id)
            .values(user_id=None)
        )
        await db.execute(
            update(models.FeedbackComment)
            .where(models.FeedbackComment.author_id == player_id)
            .values(author_id=None)
        )

        # Badges go with the player through the relationship cascade
        await db.delete(player)
        await db.commit()

    except Exception as e:
        logger.error(
            "Failed to delete player",
            extra={"player_id": player_id, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise

    logger.info("Player permanently deleted", extra={"player_id": player_id})
