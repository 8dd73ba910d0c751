# src/meeplescore/schemas/game_night.py

"""Pydantic schemas for game nights and RSVPs."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GameNightStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RSVPStatus(str, Enum):
    GOING = "going"
    MAYBE = "maybe"
    NOT_GOING = "not-going"


class AttendeeRead(BaseModel):
    player_id: int
    player_name: str
    rsvp_status: RSVPStatus
    rsvp_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GameNightCreate(BaseModel):
    """Properties to receive via API on create.

    `created_by` is the player hosting the night; they are RSVP'd as going.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    scheduled_date: datetime = Field(..., description="Must be in the future")
    location: str | None = Field(default=None, max_length=200)
    created_by: int
    max_attendees: int | None = Field(default=None, ge=2)
    is_private: bool = False
    notes: str | None = Field(default=None, max_length=2000)
    suggested_game_ids: list[int] = Field(default_factory=list)


class GameNightUpdate(BaseModel):
    """Properties to receive via API on update, all optional."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    scheduled_date: datetime | None = None
    location: str | None = Field(default=None, max_length=200)
    status: GameNightStatus | None = None
    max_attendees: int | None = Field(default=None, ge=2)
    is_private: bool | None = None
    notes: str | None = Field(default=None, max_length=2000)
    suggested_game_ids: list[int] | None = None


class GameNightRead(BaseModel):
    """Properties to return to the client."""

    id: int
    title: str
    description: str | None = None
    scheduled_date: datetime
    location: str | None = None
    created_by: int | None
    created_by_name: str
    status: GameNightStatus
    max_attendees: int | None = None
    is_private: bool
    notes: str | None = None
    suggested_game_ids: list[int]
    attendees: list[AttendeeRead]
    going_count: int
    maybe_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RSVPRequest(BaseModel):
    player_id: int
    status: RSVPStatus
