# src/meeplescore/api/feedback.py

"""API endpoints for user feedback."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db.models import Feedback, FeedbackComment
from meeplescore.db.session import get_db
from meeplescore.schemas import feedback as feedback_schema
from meeplescore.schemas.pagination import PaginatedResponse
from meeplescore.services import feedback_service

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.post(
    "/",
    response_model=feedback_schema.FeedbackRead,
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    feedback_in: feedback_schema.FeedbackCreate,
    db: AsyncSession = Depends(get_db),
) -> Feedback:
    """Submit a bug report, feature request or general feedback."""
    return await feedback_service.submit_feedback(db, feedback_in)


@router.get("/", response_model=PaginatedResponse[feedback_schema.FeedbackRead])
async def read_feedback(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    status_filter: feedback_schema.FeedbackStatus | None = Query(
        None, alias="status", description="Filter by status"
    ),
    category: feedback_schema.FeedbackCategory | None = Query(
        None, description="Filter by category"
    ),
    priority: feedback_schema.FeedbackPriority | None = Query(
        None, description="Filter by priority"
    ),
    search: str | None = Query(None, description="Case-insensitive message search"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[feedback_schema.FeedbackRead]:
    """
    Retrieve feedback, newest first.

    - **status**: Filter by status
    - **category**: Filter by category
    - **priority**: Filter by priority
    - **search**: Only feedback whose message contains this text
    """
    base_query = select(Feedback)

    # Apply filters
    if status_filter is not None:
        base_query = base_query.where(Feedback.status == status_filter.value)

    if category is not None:
        base_query = base_query.where(Feedback.category == category.value)

    if priority is not None:
        base_query = base_query.where(Feedback.priority == priority.value)

    if search:
        base_query = base_query.where(Feedback.message.ilike(f"%{search}%"))

    # Get total count
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    query = (
        base_query.order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .offset(skip)
        .limit(limit)
        .options(selectinload(Feedback.comments))
    )
    items = list((await db.execute(query)).scalars().unique().all())

    return PaginatedResponse(
        items=items,  # type: ignore[arg-type]
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(items)) < total,
    )


@router.get("/by-user/{user_id}", response_model=list[feedback_schema.FeedbackRead])
async def read_user_feedback(
    user_id: int, db: AsyncSession = Depends(get_db)
) -> list[Feedback]:
    """All feedback submitted by one player, newest first."""
    query = (
        select(Feedback)
        .where(Feedback.user_id == user_id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .options(selectinload(Feedback.comments))
    )
    return list((await db.execute(query)).scalars().unique().all())


@router.get("/{feedback_id}", response_model=feedback_schema.FeedbackRead)
async def read_feedback_item(
    feedback_id: int, db: AsyncSession = Depends(get_db)
) -> Feedback:
    """Retrieve a single feedback item with its comments."""
    return await feedback_service.get_feedback(db, feedback_id)


@router.patch("/{feedback_id}", response_model=feedback_schema.FeedbackRead)
async def update_feedback_status(
    feedback_id: int,
    update_in: feedback_schema.FeedbackStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> Feedback:
    """Move feedback through New, In Progress, Completed or Dismissed."""
    feedback = await feedback_service.get_feedback(db, feedback_id)
    feedback.status = update_in.status.value
    await db.commit()
    return await feedback_service.get_feedback(db, feedback_id)


@router.delete("/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feedback(feedback_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a feedback item and its comments."""
    feedback = await feedback_service.get_feedback(db, feedback_id)
    await db.delete(feedback)
    await db.commit()
    return None


@router.post(
    "/{feedback_id}/comments",
    response_model=feedback_schema.FeedbackCommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    feedback_id: int,
    comment_in: feedback_schema.FeedbackCommentCreate,
    db: AsyncSession = Depends(get_db),
) -> FeedbackComment:
    """
    Comment on a feedback item.

    Raises:
        403 Forbidden: If the feedback is closed, or a non-admin comments on
            feedback that is not their own.
    """
    return await feedback_service.add_comment(db, feedback_id, comment_in)
