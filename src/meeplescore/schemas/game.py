# src/meeplescore/schemas/game.py

"""Pydantic schemas for the Game resource."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ScoringMode(str, Enum):
    """How a game's prize pool is distributed."""

    POINTING = "pointing"
    WINNER_TAKES_ALL = "winner-takes-all"


# ===============================================
# Base Schema: Defines shared attributes for creation
# ===============================================
class GameBase(BaseModel):
    """Shared properties for a game."""

    name: str = Field(..., min_length=1, max_length=200)
    scoring_mode: ScoringMode = ScoringMode.POINTING
    description: str | None = None
    min_players: int | None = Field(default=None, ge=1)
    max_players: int | None = Field(default=None, ge=1)
    playing_time: int | None = Field(default=None, ge=1, description="Minutes")


class GameCreate(GameBase):
    """Properties to receive via API on create.

    `points_per_player` defaults to 5 for pointing games and 3 for
    winner-takes-all games.
    """

    points_per_player: int | None = Field(default=None, gt=0)


class GameUpdate(BaseModel):
    """Properties to receive via API on update, all optional."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    scoring_mode: ScoringMode | None = None
    points_per_player: int | None = Field(default=None, gt=0)
    description: str | None = None
    min_players: int | None = Field(default=None, ge=1)
    max_players: int | None = Field(default=None, ge=1)
    playing_time: int | None = Field(default=None, ge=1)
    is_active: bool | None = None


class GameRead(GameBase):
    """Properties to return to the client."""

    id: int
    points_per_player: int
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
