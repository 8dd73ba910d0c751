# src/meeplescore/schemas/badge.py

"""Badge schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PlayerBadgeRead(BaseModel):
    """A badge held by a player."""

    badge_id: str
    name: str
    description: str
    icon: str
    tier: str | None = None
    earned_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BadgeStats(BaseModel):
    total_badges_available: int
    badges_by_tier: dict[str, int]


class PlayerBadgeMigration(BaseModel):
    player_id: int
    player_name: str
    badges_awarded: int
    badges: list[str]


class BadgeMigrationResult(BaseModel):
    """Outcome of awarding missing badges to every active player."""

    total_players: int
    results: list[PlayerBadgeMigration]
