# src/meeplescore/schemas/admin.py

"""Schemas for the admin endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .player import PlayerRole


class RecentSession(BaseModel):
    id: int
    game_name: str
    player_count: int
    played_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PopularGame(BaseModel):
    game_id: int
    game_name: str
    times_played: int


class SystemStats(BaseModel):
    """Headline numbers for the admin dashboard."""

    total_players: int
    active_players: int
    claimed_players: int
    admin_count: int
    total_games: int
    active_games: int
    total_sessions: int
    recent_sessions: list[RecentSession]
    popular_games: list[PopularGame]


class RoleUpdate(BaseModel):
    role: PlayerRole
