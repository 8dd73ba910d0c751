# src/meeplescore/db/models.py

"""Database models for the MeepleScore application."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, TypedDict

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
    selectinload,
)

Base = declarative_base()

SCORING_MODE_POINTING = "pointing"
SCORING_MODE_WINNER_TAKES_ALL = "winner-takes-all"

# Default points per player when a game is created without one
DEFAULT_POINTS_PER_PLAYER = {
    SCORING_MODE_POINTING: 5,
    SCORING_MODE_WINNER_TAKES_ALL: 3,
}

# Shown in history in place of a permanently deleted player's name
DELETED_PLAYER_NAME = "[Deleted Player]"


def utcnow() -> datetime:
    """Timezone-aware current time used for all timestamp defaults."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treats naive datetimes (as SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ===============================================
# Type Definitions for JSON Fields
# ===============================================


class OverallStatsInfo(TypedDict):
    """Structure of the `PlayerStats.overall` JSON column."""

    total_games: int
    total_points: int
    average_points: float
    wins: int
    podiums: int
    win_rate: float


class PlayerCountStatsInfo(TypedDict):
    """Per player-count bucket inside a game stats entry."""

    total_games: int
    total_points: int
    average_points: float
    wins: int


class GameStatsInfo(TypedDict):
    """One entry of the `PlayerStats.game_stats` JSON column.

    `by_player_count` is keyed by the player count as a string, since JSON
    object keys are always strings.
    """

    game_id: int
    game_name: str
    total_games: int
    total_points: int
    average_points: float
    wins: int
    podiums: int
    by_player_count: dict[str, PlayerCountStatsInfo]


# ===============================================
# Mixins for Common Columns
# ===============================================


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        default=None,
        onupdate=utcnow,
        nullable=True,
    )


# ===============================================
# Core Tables: Player and Game
# ===============================================


class Player(Base, TimestampMixin):
    """Represents a participant identity.

    Attributes:
        is_active: False once the player has been archived. Archived players
            keep their history and stats.
        profile_claimed: True once a person has taken ownership of the
            profile; only claimed profiles can change role.
    """

    __tablename__ = "players"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    bio: Mapped[str | None] = mapped_column(String(500), nullable=True)
    play_style: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String, default="user", index=True)
    profile_claimed: Mapped[bool] = mapped_column(default=False)
    is_active: Mapped[bool] = mapped_column(default=True, index=True)
    last_played_at: Mapped[datetime | None] = mapped_column(
        default=None, nullable=True, index=True
    )

    results: Mapped[List["GameResult"]] = relationship(
        back_populates="player", passive_deletes=True
    )
    badges: Mapped[List["PlayerBadge"]] = relationship(
        back_populates="player",
        cascade="all, delete-orphan",
        order_by="PlayerBadge.id",
    )

    def __init__(self, name: str, **kw: Any):
        super().__init__(**kw)
        self.name = name


class Game(Base, TimestampMixin):
    """A game definition and its scoring configuration."""

    __tablename__ = "games"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    # 'pointing' or 'winner-takes-all'
    scoring_mode: Mapped[str] = mapped_column(
        String, nullable=False, default=SCORING_MODE_POINTING
    )
    points_per_player: Mapped[int] = mapped_column(nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    min_players: Mapped[int | None] = mapped_column(nullable=True)
    max_players: Mapped[int | None] = mapped_column(nullable=True)
    playing_time: Mapped[int | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True, index=True)

    sessions: Mapped[List["GameSession"]] = relationship(back_populates="game")

    __table_args__ = (
        CheckConstraint("points_per_player > 0", name="ck_games_points_positive"),
    )

    def __init__(self, **kw: Any):
        if kw.get("points_per_player") is None:
            mode = kw.get("scoring_mode") or SCORING_MODE_POINTING
            kw["points_per_player"] = DEFAULT_POINTS_PER_PLAYER.get(mode, 5)
        super().__init__(**kw)


# ===============================================
# Session and Results Tables
# ===============================================


class GameSession(Base, TimestampMixin):
    """One completed play of a game.

    `game_name` and `scoring_mode` are snapshots taken at write time, and
    `total_points_pool` is `player_count * points_per_player` as configured
    when the session was recorded (or last edited).
    """

    __tablename__ = "game_sessions"
    id: Mapped[int] = mapped_column(primary_key=True)
    game_id: Mapped[int] = mapped_column(
        ForeignKey("games.id"), nullable=False, index=True
    )
    game_name: Mapped[str] = mapped_column(String, nullable=False)
    scoring_mode: Mapped[str] = mapped_column(String, nullable=False)
    player_count: Mapped[int] = mapped_column(nullable=False, index=True)
    played_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)
    total_points_pool: Mapped[int] = mapped_column(nullable=False)

    game: Mapped["Game"] = relationship(back_populates="sessions")
    results: Mapped[List["GameResult"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="GameResult.position",
    )

    __table_args__ = (
        CheckConstraint("player_count >= 1", name="ck_sessions_player_count"),
    )

    @classmethod
    async def find_for_player(
        cls, db: AsyncSession, player_id: int
    ) -> "list[GameSession]":
        """All sessions containing a result for the player, most recent first."""
        query = (
            select(cls)
            .where(cls.results.any(GameResult.player_id == player_id))
            .order_by(cls.played_at.desc(), cls.id.desc())
            .options(selectinload(cls.results))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().unique().all())


class GameResult(Base):
    """A single player's placement inside a GameSession."""

    __tablename__ = "game_results"
    id: Mapped[int] = mapped_column(primary_key=True)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Null once the player has been permanently deleted
    player_id: Mapped[int | None] = mapped_column(
        ForeignKey("players.id", ondelete="SET NULL"), nullable=True, index=True
    )
    player_name: Mapped[str] = mapped_column(String, nullable=False)
    # Order of the result as submitted
    position: Mapped[int] = mapped_column(default=0, nullable=False)

    # 1 = best; ties share a rank
    rank: Mapped[int] = mapped_column(nullable=False)
    score: Mapped[float | None] = mapped_column(nullable=True)
    points_earned: Mapped[int] = mapped_column(default=0, nullable=False)

    session: Mapped["GameSession"] = relationship(back_populates="results")
    player: Mapped["Player"] = relationship(back_populates="results")

    __table_args__ = (CheckConstraint("rank >= 1", name="ck_results_rank"),)


# ===============================================
# Derived Tables
# ===============================================


class PlayerStats(Base, TimestampMixin):
    """Materialized summary of a player's session history.

    Never the source of truth: the row is rebuilt from `game_sessions`
    whenever the player's session set changes, and deleted when the player
    has no sessions left.
    """

    __tablename__ = "player_stats"
    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    player_name: Mapped[str] = mapped_column(String, nullable=False)

    # See OverallStatsInfo for structure documentation
    overall: Mapped[dict] = mapped_column(JSON, nullable=False)
    # List of GameStatsInfo, most recently played game first
    game_stats: Mapped[list] = mapped_column(JSON, default=lambda: [])
    # Denormalized from overall['total_points'] for leaderboard ordering
    total_points: Mapped[int] = mapped_column(default=0, index=True)
    last_updated: Mapped[datetime] = mapped_column(default=utcnow)

    @classmethod
    async def find_by_player(
        cls, db: AsyncSession, player_id: int
    ) -> "PlayerStats | None":
        """Find the stats row for a player."""
        query = select(cls).where(cls.player_id == player_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()


class PlayerBadge(Base):
    """A badge awarded to a player. Badges are never revoked."""

    __tablename__ = "player_badges"
    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True
    )
    badge_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    icon: Mapped[str] = mapped_column(String, nullable=False)
    tier: Mapped[str | None] = mapped_column(String, nullable=True)
    earned_at: Mapped[datetime] = mapped_column(default=utcnow)

    player: Mapped["Player"] = relationship(back_populates="badges")

    __table_args__ = (
        UniqueConstraint("player_id", "badge_id", name="_player_badge_uc"),
    )


# ===============================================
# Game Nights
# ===============================================


class GameNight(Base, TimestampMixin):
    """A scheduled gathering players can RSVP to."""

    __tablename__ = "game_nights"
    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    scheduled_date: Mapped[datetime] = mapped_column(nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    # Null once the creator has been permanently deleted
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("players.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_by_name: Mapped[str] = mapped_column(String, nullable=False)
    # scheduled, in-progress, completed, cancelled
    status: Mapped[str] = mapped_column(String, default="scheduled", index=True)
    max_attendees: Mapped[int | None] = mapped_column(nullable=True)
    is_private: Mapped[bool] = mapped_column(default=False)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    suggested_game_ids: Mapped[list] = mapped_column(JSON, default=lambda: [])

    attendees: Mapped[List["GameNightAttendee"]] = relationship(
        back_populates="game_night",
        cascade="all, delete-orphan",
        order_by="GameNightAttendee.id",
    )

    @property
    def going_count(self) -> int:
        return sum(1 for a in self.attendees if a.rsvp_status == "going")

    @property
    def maybe_count(self) -> int:
        return sum(1 for a in self.attendees if a.rsvp_status == "maybe")


class GameNightAttendee(Base):
    """A player's RSVP to a game night."""

    __tablename__ = "game_night_attendees"
    id: Mapped[int] = mapped_column(primary_key=True)
    game_night_id: Mapped[int] = mapped_column(
        ForeignKey("game_nights.id", ondelete="CASCADE"), nullable=False, index=True
    )
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True
    )
    player_name: Mapped[str] = mapped_column(String, nullable=False)
    # going, maybe, not-going
    rsvp_status: Mapped[str] = mapped_column(String, default="going")
    rsvp_at: Mapped[datetime] = mapped_column(default=utcnow)

    game_night: Mapped["GameNight"] = relationship(back_populates="attendees")

    __table_args__ = (
        UniqueConstraint("game_night_id", "player_id", name="_night_player_uc"),
    )


# ===============================================
# Feedback
# ===============================================


class Feedback(Base, TimestampMixin):
    """User-submitted feedback tracked by admins."""

    __tablename__ = "feedback"
    id: Mapped[int] = mapped_column(primary_key=True)
    message: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(
        String, default="General Feedback", index=True
    )
    priority: Mapped[str] = mapped_column(String, default="Medium")
    status: Mapped[str] = mapped_column(String, default="New", index=True)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("players.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_email: Mapped[str | None] = mapped_column(String, nullable=True)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)

    comments: Mapped[List["FeedbackComment"]] = relationship(
        back_populates="feedback",
        cascade="all, delete-orphan",
        order_by="FeedbackComment.id",
    )


class FeedbackComment(Base):
    """A comment thread entry on a feedback item."""

    __tablename__ = "feedback_comments"
    id: Mapped[int] = mapped_column(primary_key=True)
    feedback_id: Mapped[int] = mapped_column(
        ForeignKey("feedback.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(String(1000), nullable=False)
    author_id: Mapped[int | None] = mapped_column(
        ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )
    author_name: Mapped[str] = mapped_column(String, nullable=False)
    # 'user' or 'admin'
    author_role: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    feedback: Mapped["Feedback"] = relationship(back_populates="comments")
