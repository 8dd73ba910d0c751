# src/meeplescore/exceptions.py

"""Custom exception hierarchy for MeepleScore.

This module provides a structured exception hierarchy that enables:
1. Proper HTTP status code mapping in API endpoints
2. Detailed error context for logging and debugging
3. Clear distinction between different error categories
"""

from __future__ import annotations


class MeepleScoreError(Exception):
    """Base exception for all MeepleScore errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(MeepleScoreError):
    """Base class for resource not found errors."""

    pass


class GameNotFoundError(ResourceNotFoundError):
    """Raised when a game ID does not exist."""

    def __init__(self, game_id: int) -> None:
        super().__init__(
            message=f"Game with ID {game_id} not found",
            details={"game_id": game_id},
        )


class PlayerNotFoundError(ResourceNotFoundError):
    """Raised when a player ID does not exist."""

    def __init__(self, player_id: int) -> None:
        super().__init__(
            message=f"Player with ID {player_id} not found",
            details={"player_id": player_id},
        )


class SessionNotFoundError(ResourceNotFoundError):
    """Raised when a game session ID does not exist."""

    def __init__(self, session_id: int) -> None:
        super().__init__(
            message=f"Game session with ID {session_id} not found",
            details={"session_id": session_id},
        )


class PlayerStatsNotFoundError(ResourceNotFoundError):
    """Raised when a player has no stats record (no games played)."""

    def __init__(self, player_id: int) -> None:
        super().__init__(
            message=f"Stats for player {player_id} not found",
            details={"player_id": player_id},
        )


class GameNightNotFoundError(ResourceNotFoundError):
    """Raised when a game night ID does not exist."""

    def __init__(self, game_night_id: int) -> None:
        super().__init__(
            message=f"Game night with ID {game_night_id} not found",
            details={"game_night_id": game_night_id},
        )


class FeedbackNotFoundError(ResourceNotFoundError):
    """Raised when a feedback ID does not exist."""

    def __init__(self, feedback_id: int) -> None:
        super().__init__(
            message=f"Feedback with ID {feedback_id} not found",
            details={"feedback_id": feedback_id},
        )


# =============================================================================
# Validation Errors (HTTP 422)
# =============================================================================


class ValidationError(MeepleScoreError):
    """Base class for validation errors."""

    pass


class ResultValidationError(ValidationError):
    """Base class for session result validation errors."""

    pass


class EmptyResultsError(ResultValidationError):
    """Raised when a session is submitted without any results."""

    def __init__(self) -> None:
        super().__init__(message="Session requires at least 1 result")


class DuplicatePlayerError(ResultValidationError):
    """Raised when the same player appears multiple times in a session."""

    def __init__(self, player_ids: list[int]) -> None:
        super().__init__(
            message=f"Duplicate player(s) in session: {player_ids}",
            details={"duplicate_player_ids": player_ids},
        )


class InvalidRankingsError(ResultValidationError):
    """Raised when ranks do not form a contiguous sequence starting at 1."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, details={"reason": reason})


class WinnerCountError(ResultValidationError):
    """Raised when a winner-takes-all session does not have exactly 1 winner."""

    def __init__(self, winners: int) -> None:
        super().__init__(
            message="Winner Takes All mode requires exactly 1 player with rank 1, "
            f"got {winners}",
            details={"winner_count": winners},
        )


class PlayerCountError(ResultValidationError):
    """Raised when a declared player count does not fit the result list."""

    def __init__(self, player_count: int, result_count: int) -> None:
        super().__init__(
            message=f"Player count {player_count} does not match the "
            f"{result_count} submitted results",
            details={"player_count": player_count, "result_count": result_count},
        )


class GameNightValidationError(ValidationError):
    """Raised when a game night or RSVP request is not acceptable."""

    def __init__(self, game_night_id: int | None, reason: str) -> None:
        super().__init__(
            message=reason,
            details={"game_night_id": game_night_id, "reason": reason},
        )


class RoleChangeError(ValidationError):
    """Raised when a player's role cannot be changed."""

    def __init__(self, player_id: int, reason: str) -> None:
        super().__init__(
            message=reason,
            details={"player_id": player_id, "reason": reason},
        )


# =============================================================================
# Permission Errors (HTTP 403)
# =============================================================================


class PermissionDeniedError(MeepleScoreError):
    """Base class for actions that are not allowed on a resource."""

    pass


class FeedbackClosedError(PermissionDeniedError):
    """Raised when commenting on feedback that has been closed."""

    def __init__(self, feedback_id: int, status: str) -> None:
        super().__init__(
            message="Cannot comment on closed feedback. "
            f"This feedback has been {status.lower()}.",
            details={"feedback_id": feedback_id, "status": status},
        )


class CommentNotAllowedError(PermissionDeniedError):
    """Raised when a non-admin comments on someone else's feedback."""

    def __init__(self, feedback_id: int, author_id: int) -> None:
        super().__init__(
            message="You can only comment on your own feedback",
            details={"feedback_id": feedback_id, "author_id": author_id},
        )


# =============================================================================
# Stats Errors (HTTP 500)
# =============================================================================


class StatsError(MeepleScoreError):
    """Base class for stats recalculation errors."""

    pass


class StatsRecalculationError(StatsError):
    """Raised when recalculating a player's stats fails on inconsistent data."""

    def __init__(self, message: str, player_id: int | None = None) -> None:
        details = {"player_id": player_id} if player_id else {}
        super().__init__(message=message, details=details)
