# src/meeplescore/schemas/session.py

"""Pydantic schemas for the GameSession resource."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .game import ScoringMode

# ===============================================
# == Result Schemas
# ===============================================


class GameResultCreate(BaseModel):
    """A player's placement as submitted by the client.

    The player's name is looked up from the player table, and points are
    computed by the server.
    """

    player_id: int
    rank: int = Field(..., ge=1, description="Placement (1 = first place)")
    score: float | None = Field(default=None, description="In-game score, if any")


class GameResultRead(BaseModel):
    """A scored placement."""

    id: int
    # None once the player has been permanently deleted
    player_id: int | None
    player_name: str
    rank: int
    score: float | None = None
    points_earned: int

    model_config = ConfigDict(from_attributes=True)


# ===============================================
# == Session Schemas
# ===============================================


class GameSessionCreate(BaseModel):
    """
    Properties to receive via API on create.
    This is the main payload for recording a finished game.
    """

    game_id: int

    # Defaults to the current time; useful for importing past sessions
    played_at: datetime | None = Field(
        default=None,
        description="When the session was played (ISO format). Defaults to now.",
    )

    # Defaults to the number of results. Winner-takes-all games may declare
    # a larger table than the number of results submitted.
    player_count: int | None = Field(default=None, ge=1)

    results: list[GameResultCreate]


class GameSessionUpdate(BaseModel):
    """Properties to receive via API on update, all optional.

    Submitting `results` replaces every result and rescores the session.
    """

    played_at: datetime | None = None
    results: list[GameResultCreate] | None = None


class GameSessionRead(BaseModel):
    """Properties to return to the client for a session."""

    id: int
    game_id: int
    game_name: str
    scoring_mode: ScoringMode
    player_count: int
    played_at: datetime
    total_points_pool: int
    results: list[GameResultRead]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
