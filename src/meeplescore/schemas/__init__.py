# src/meeplescore/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .badge import BadgeMigrationResult, BadgeStats, PlayerBadgeRead
from .game import GameBase, GameCreate, GameRead, GameUpdate, ScoringMode
from .player import (
    PlayerBase,
    PlayerCreate,
    PlayerProfileRead,
    PlayerRead,
    PlayerRole,
    PlayerUpdate,
)
from .session import (
    GameResultCreate,
    GameResultRead,
    GameSessionCreate,
    GameSessionRead,
    GameSessionUpdate,
)
from .stats import (
    GameLeaderboardEntry,
    GameStats,
    LeaderboardEntry,
    OverallStats,
    PlayerStatsRead,
    PlayerSummary,
)

__all__ = [
    # Badge
    "BadgeMigrationResult",
    "BadgeStats",
    "PlayerBadgeRead",
    # Game
    "GameBase",
    "GameCreate",
    "GameRead",
    "GameUpdate",
    "ScoringMode",
    # Player
    "PlayerBase",
    "PlayerCreate",
    "PlayerProfileRead",
    "PlayerRead",
    "PlayerRole",
    "PlayerUpdate",
    # Session
    "GameResultCreate",
    "GameResultRead",
    "GameSessionCreate",
    "GameSessionRead",
    "GameSessionUpdate",
    # Stats
    "GameLeaderboardEntry",
    "GameStats",
    "LeaderboardEntry",
    "OverallStats",
    "PlayerStatsRead",
    "PlayerSummary",
]
