# src/meeplescore/services/feedback_service.py

"""Business logic for feedback and its comment thread."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db import models
from meeplescore.exceptions import (
    CommentNotAllowedError,
    FeedbackClosedError,
    FeedbackNotFoundError,
    PlayerNotFoundError,
)
from meeplescore.schemas import feedback as feedback_schema

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


async def get_feedback(db: AsyncSession, feedback_id: int) -> models.Feedback:
    """Loads feedback with its comments, or raises FeedbackNotFoundError."""
    query = (
        select(models.Feedback)
        .where(models.Feedback.id == feedback_id)
        .options(selectinload(models.Feedback.comments))
        .execution_options(populate_existing=True)
    )
    feedback = (await db.execute(query)).scalar_one_or_none()
    if feedback is None:
        raise FeedbackNotFoundError(feedback_id)
    return feedback


async def submit_feedback(
    db: AsyncSession, feedback_in: feedback_schema.FeedbackCreate
) -> models.Feedback:
    """
    Stores new feedback with status New.

    When a `user_id` is given, the player's own name and email are recorded
    instead of any that were submitted.
    """
    data = feedback_in.model_dump(mode="json")
    data["message"] = data["message"].strip()

    if feedback_in.user_id is not None:
        player = await db.get(models.Player, feedback_in.user_id)
        if player is None:
            raise PlayerNotFoundError(feedback_in.user_id)
        data["user_name"] = player.name
        data["user_email"] = player.email

    feedback = models.Feedback(**data, status=feedback_schema.FeedbackStatus.NEW.value)
    db.add(feedback)
    await db.commit()

    logger.info(
        "Feedback submitted",
        extra={"feedback_id": feedback.id, "category": feedback.category},
    )
    return await get_feedback(db, feedback.id)


async def add_comment(
    db: AsyncSession,
    feedback_id: int,
    comment_in: feedback_schema.FeedbackCommentCreate,
) -> models.FeedbackComment:
    """
    Appends a comment to a feedback thread.

    Raises:
        FeedbackNotFoundError: If the feedback does not exist
        PlayerNotFoundError: If the author does not exist
        FeedbackClosedError: If the feedback is Completed or Dismissed
        CommentNotAllowedError: If a non-admin comments on someone else's
            feedback
    """
    feedback = await get_feedback(db, feedback_id)

    author = await db.get(models.Player, comment_in.author_id)
    if author is None:
        raise PlayerNotFoundError(comment_in.author_id)

    if feedback.status in feedback_schema.CLOSED_STATUSES:
        raise FeedbackClosedError(feedback_id, feedback.status)

    is_admin = author.role == ADMIN_ROLE
    if not is_admin and feedback.user_id != author.id:
        raise CommentNotAllowedError(feedback_id, author.id)

    comment = models.FeedbackComment(
        text=comment_in.text.strip(),
        author_id=author.id,
        author_name=author.name,
        author_role=ADMIN_ROLE if is_admin else "user",
    )
    feedback.comments.append(comment)
    await db.commit()

    logger.info(
        "Feedback comment added",
        extra={"feedback_id": feedback_id, "author_id": author.id},
    )
    return comment
