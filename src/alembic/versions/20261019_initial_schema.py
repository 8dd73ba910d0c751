"""Initial schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration creates:
- players and games
- game_sessions and their game_results
- derived player_stats and player_badges
- game_nights with attendees
- feedback with comments
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables and their indexes."""
    # === PLAYERS ===
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("email", sa.String(), nullable=True, unique=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("play_style", sa.String(100), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="user"),
        sa.Column(
            "profile_claimed", sa.Boolean(), nullable=False, server_default="0"
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("last_played_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_players_role", "players", ["role"])
    op.create_index("ix_players_is_active", "players", ["is_active"])
    op.create_index("ix_players_last_played_at", "players", ["last_played_at"])

    # === GAMES ===
    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column(
            "scoring_mode", sa.String(), nullable=False, server_default="pointing"
        ),
        sa.Column("points_per_player", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("min_players", sa.Integer(), nullable=True),
        sa.Column("max_players", sa.Integer(), nullable=True),
        sa.Column("playing_time", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint("points_per_player > 0", name="ck_games_points_positive"),
    )
    op.create_index("ix_games_is_active", "games", ["is_active"])

    # === GAME_SESSIONS ===
    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False
        ),
        sa.Column("game_name", sa.String(), nullable=False),
        sa.Column("scoring_mode", sa.String(), nullable=False),
        sa.Column("player_count", sa.Integer(), nullable=False),
        sa.Column("played_at", sa.DateTime(), nullable=False),
        sa.Column("total_points_pool", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("player_count >= 1", name="ck_sessions_player_count"),
    )
    op.create_index("ix_game_sessions_game_id", "game_sessions", ["game_id"])
    op.create_index(
        "ix_game_sessions_player_count", "game_sessions", ["player_count"]
    )
    op.create_index("ix_game_sessions_played_at", "game_sessions", ["played_at"])

    # === GAME_RESULTS ===
    op.create_table(
        "game_results",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "session_id",
            sa.Integer(),
            sa.ForeignKey("game_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "player_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint("rank >= 1", name="ck_results_rank"),
    )
    op.create_index("ix_game_results_session_id", "game_results", ["session_id"])
    op.create_index("ix_game_results_player_id", "game_results", ["player_id"])

    # === PLAYER_STATS ===
    op.create_table(
        "player_stats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "player_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("overall", sa.JSON(), nullable=False),
        sa.Column("game_stats", sa.JSON(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_player_stats_total_points", "player_stats", ["total_points"]
    )

    # === PLAYER_BADGES ===
    op.create_table(
        "player_badges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "player_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("badge_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("icon", sa.String(), nullable=False),
        sa.Column("tier", sa.String(), nullable=True),
        sa.Column("earned_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("player_id", "badge_id", name="_player_badge_uc"),
    )
    op.create_index("ix_player_badges_player_id", "player_badges", ["player_id"])

    # === GAME_NIGHTS ===
    op.create_table(
        "game_nights",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(), nullable=False),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_by_name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("max_attendees", sa.Integer(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("notes", sa.String(2000), nullable=True),
        sa.Column("suggested_game_ids", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_game_nights_scheduled_date", "game_nights", ["scheduled_date"]
    )
    op.create_index("ix_game_nights_created_by", "game_nights", ["created_by"])
    op.create_index("ix_game_nights_status", "game_nights", ["status"])

    # === GAME_NIGHT_ATTENDEES ===
    op.create_table(
        "game_night_attendees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "game_night_id",
            sa.Integer(),
            sa.ForeignKey("game_nights.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "player_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("rsvp_status", sa.String(), nullable=False, server_default="going"),
        sa.Column("rsvp_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("game_night_id", "player_id", name="_night_player_uc"),
    )
    op.create_index(
        "ix_game_night_attendees_game_night_id",
        "game_night_attendees",
        ["game_night_id"],
    )
    op.create_index(
        "ix_game_night_attendees_player_id", "game_night_attendees", ["player_id"]
    )

    # === FEEDBACK ===
    op.create_table(
        "feedback",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column(
            "category",
            sa.String(),
            nullable=False,
            server_default="General Feedback",
        ),
        sa.Column("priority", sa.String(), nullable=False, server_default="Medium"),
        sa.Column("status", sa.String(), nullable=False, server_default="New"),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("user_email", sa.String(), nullable=True),
        sa.Column("user_name", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_feedback_category", "feedback", ["category"])
    op.create_index("ix_feedback_status", "feedback", ["status"])
    op.create_index("ix_feedback_user_id", "feedback", ["user_id"])

    # === FEEDBACK_COMMENTS ===
    op.create_table(
        "feedback_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "feedback_id",
            sa.Integer(),
            sa.ForeignKey("feedback.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("text", sa.String(1000), nullable=False),
        sa.Column(
            "author_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("author_name", sa.String(), nullable=False),
        sa.Column("author_role", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_feedback_comments_feedback_id", "feedback_comments", ["feedback_id"]
    )


def downgrade() -> None:
    """Drop all tables, children first."""
    op.drop_table("feedback_comments")
    op.drop_table("feedback")
    op.drop_table("game_night_attendees")
    op.drop_table("game_nights")
    op.drop_table("player_badges")
    op.drop_table("player_stats")
    op.drop_table("game_results")
    op.drop_table("game_sessions")
    op.drop_table("games")
    op.drop_table("players")
