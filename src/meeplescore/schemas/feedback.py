# src/meeplescore/schemas/feedback.py

"""Pydantic schemas for feedback and its comment thread."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FeedbackCategory(str, Enum):
    BUG_REPORT = "Bug Report"
    FEATURE_REQUEST = "Feature Request"
    IMPROVEMENT = "Improvement"
    GENERAL = "General Feedback"


class FeedbackPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class FeedbackStatus(str, Enum):
    NEW = "New"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    DISMISSED = "Dismissed"


# Feedback in these states no longer accepts comments
CLOSED_STATUSES = {FeedbackStatus.COMPLETED.value, FeedbackStatus.DISMISSED.value}


class CommentAuthorRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class FeedbackCommentCreate(BaseModel):
    """A comment; the author's role is taken from their player record."""

    text: str = Field(..., min_length=1, max_length=1000)
    author_id: int


class FeedbackCommentRead(BaseModel):
    id: int
    text: str
    author_id: int | None
    author_name: str
    author_role: CommentAuthorRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeedbackCreate(BaseModel):
    """Properties to receive via API on create.

    `user_id` links the feedback to a player; anonymous feedback may give
    an email and name instead.
    """

    message: str = Field(..., min_length=1, max_length=5000)
    category: FeedbackCategory = FeedbackCategory.GENERAL
    priority: FeedbackPriority = FeedbackPriority.MEDIUM
    user_id: int | None = None
    user_email: str | None = None
    user_name: str | None = None


class FeedbackStatusUpdate(BaseModel):
    status: FeedbackStatus


class FeedbackRead(BaseModel):
    id: int
    message: str
    category: FeedbackCategory
    priority: FeedbackPriority
    status: FeedbackStatus
    user_id: int | None = None
    user_email: str | None = None
    user_name: str | None = None
    comments: list[FeedbackCommentRead]
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
