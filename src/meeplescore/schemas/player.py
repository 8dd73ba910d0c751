# src/meeplescore/schemas/player.py

"""Pydantic schemas for the Player resource."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .badge import PlayerBadgeRead


class PlayerRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


# ===============================================
# Base Schema: Defines shared attributes for creation
# ===============================================
class PlayerBase(BaseModel):
    """Shared properties for a player."""

    name: str = Field(..., min_length=1, max_length=100)


# ===============================================
# Create Schema: Inherits the base properties
# ===============================================
class PlayerCreate(PlayerBase):
    """Properties to receive via API on create."""

    email: str | None = None
    photo_url: str | None = None


# ===============================================
# Update Schema: Defines all fields as optional
# ===============================================
class PlayerUpdate(BaseModel):
    """Properties to receive via API on update, all optional."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = None
    photo_url: str | None = None
    bio: str | None = Field(default=None, max_length=500)
    play_style: str | None = Field(default=None, max_length=100)
    profile_claimed: bool | None = None
    is_active: bool | None = None


# ===============================================
# Read Schema: Defines attributes for returning data
# ===============================================
class PlayerRead(PlayerBase):
    """Properties to return to the client."""

    id: int
    email: str | None = None
    photo_url: str | None = None
    bio: str | None = None
    play_style: str | None = None
    role: PlayerRole
    profile_claimed: bool
    is_active: bool
    last_played_at: datetime | None = None
    created_at: datetime

    # Enable ORM mode for this schema
    model_config = ConfigDict(from_attributes=True)


class PlayerProfileRead(PlayerRead):
    """A player together with the badges they have earned."""

    badges: list[PlayerBadgeRead] = []
