# src/meeplescore/schemas/stats.py

"""Player statistics and leaderboard schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class OverallStats(BaseModel):
    """A player's totals across every game.

    Attributes:
        win_rate: Fraction of sessions won (0.0 - 1.0)
    """

    total_games: int = Field(0, ge=0)
    total_points: int = Field(0, ge=0)
    average_points: float = 0.0
    wins: int = Field(0, ge=0)
    podiums: int = Field(0, ge=0)
    win_rate: float = Field(0.0, ge=0.0, le=1.0)


class PlayerCountStats(BaseModel):
    """Totals for one game at one table size."""

    total_games: int
    total_points: int
    average_points: float
    wins: int


class GameStats(BaseModel):
    """A player's totals for a single game.

    `by_player_count` is keyed by the number of players at the table.
    """

    game_id: int
    game_name: str
    total_games: int
    total_points: int
    average_points: float
    wins: int
    podiums: int
    by_player_count: dict[str, PlayerCountStats] = Field(default_factory=dict)


class PlayerStatsRead(BaseModel):
    """The materialized stats row for a player."""

    player_id: int
    player_name: str
    overall: OverallStats
    game_stats: list[GameStats]
    last_updated: datetime

    model_config = ConfigDict(from_attributes=True)


class FavoriteGame(BaseModel):
    game_id: int
    name: str
    times_played: int


class PlayerSummary(BaseModel):
    """Headline numbers shown on a player's profile."""

    player_id: int
    player_name: str
    total_games_played: int
    total_wins: int
    win_rate: float
    total_points: int
    average_points_per_game: float
    favorite_game: FavoriteGame | None = None


# ===============================================
# == Leaderboards
# ===============================================


class LeaderboardEntry(BaseModel):
    """One player's standing on the overall leaderboard."""

    rank: int = Field(..., ge=1, description="Position in leaderboard (1-indexed)")
    player_id: int
    player_name: str
    overall: OverallStats


class GameLeaderboardEntry(BaseModel):
    """One player's standing in a single game."""

    rank: int = Field(..., ge=1, description="Position in leaderboard (1-indexed)")
    player_id: int
    player_name: str
    total_games: int
    total_points: int
    average_points: float
    wins: int
    podiums: int


class MonthlyLeaderboardEntry(BaseModel):
    rank: int = Field(..., ge=1)
    player_id: int
    player_name: str
    photo_url: str | None = None
    total_games: int
    total_points: int
    wins: int
    win_rate: float


class AwardEntry(BaseModel):
    player_id: int
    player_name: str
    photo_url: str | None = None
    total_points: int
    total_games: int


class PlayerAwards(BaseModel):
    """Top players over the last 7 and 30 days; None when nobody played."""

    player_of_week: list[AwardEntry] | None = None
    player_of_month: list[AwardEntry] | None = None


class GameChampion(BaseModel):
    game_id: int
    game_name: str
    best_player: AwardEntry


class RecalculateAllResult(BaseModel):
    message: str
    updated_players: int
