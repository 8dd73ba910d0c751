# src/meeplescore/scoring/engine.py

"""
Point awards for a finished game session.

Both scoring modes distribute a prize pool of
``player_count * points_per_player`` points:

- pointing: 1st place takes 2/3 of the pool (rounded up), 2nd place takes
  2/3 of what is left (rounded up), 3rd place takes the rest, 4th and below
  get nothing.
- winner-takes-all: rank 1 takes the whole pool.

Players sharing a rank split the awards of the positions they occupy
(rounded down), so ties never hand out more than the pool.

Everything here is pure. Malformed input produces degenerate output rather
than an exception; callers run `validate_rankings` first.
"""

from dataclasses import dataclass
from itertools import groupby

from meeplescore.db.models import SCORING_MODE_WINNER_TAKES_ALL


@dataclass(frozen=True)
class PlayerResult:
    """A player's placement in a session, before scoring."""

    player_id: int
    player_name: str
    rank: int
    score: float | None = None


@dataclass(frozen=True)
class ScoredResult(PlayerResult):
    """A placement with its point award."""

    points_earned: int = 0


@dataclass(frozen=True)
class RankingValidation:
    """Outcome of `validate_rankings`; `error` is set when not valid."""

    valid: bool
    error: str | None = None


def get_total_points_pool(player_count: int, points_per_player: int) -> int:
    """Total points handed out by one session."""
    return player_count * points_per_player


def _two_thirds_up(points: int) -> int:
    """ceil(points * 2 / 3) in integer arithmetic."""
    return -(-points * 2 // 3)


def _position_awards(player_count: int, points_per_player: int) -> list[int]:
    """Points for each finishing position as if nobody tied."""
    remaining = get_total_points_pool(player_count, points_per_player)
    awards = []

    for position in range(player_count):
        if position < 2:
            points = _two_thirds_up(remaining)
        elif position == 2:
            points = remaining
        else:
            points = 0
        remaining -= points
        awards.append(points)

    return awards


def validate_rankings(results: list[PlayerResult]) -> RankingValidation:
    """
    Checks that ranks start at 1 and have no gaps.

    Duplicate ranks (ties) are allowed, but the distinct rank values must
    still be 1, 2, ..., n.
    """
    if not results:
        return RankingValidation(valid=False, error="No results provided")

    unique_ranks = sorted({r.rank for r in results})

    if unique_ranks[0] != 1:
        return RankingValidation(valid=False, error="Rankings must start at 1")

    for expected, rank in enumerate(unique_ranks, start=1):
        if rank != expected:
            return RankingValidation(
                valid=False, error=f"Invalid rankings: Missing rank {expected}"
            )

    return RankingValidation(valid=True)


def calculate_pointing_scores(
    player_count: int, points_per_player: int, results: list[PlayerResult]
) -> list[ScoredResult]:
    """
    Scores a session under the pointing system.

    Results come back sorted by rank (input order is kept within a rank).
    A group of k players tied at one rank occupies the next k positions and
    each receives floor(sum of those positions' awards / k).
    """
    awards = _position_awards(player_count, points_per_player)
    sorted_results = sorted(results, key=lambda r: r.rank)

    scored: list[ScoredResult] = []
    position = 0
    for _, group in groupby(sorted_results, key=lambda r: r.rank):
        tied = list(group)
        occupied = awards[position : position + len(tied)]
        share = sum(occupied) // len(tied)

        for result in tied:
            scored.append(ScoredResult(**vars(result), points_earned=share))
        position += len(tied)

    return scored


def calculate_winner_takes_all_scores(
    player_count: int, points_per_player: int, results: list[PlayerResult]
) -> list[ScoredResult]:
    """
    Scores a session where rank 1 takes the whole pool.

    Tied winners split the pool, rounded down. Input order is kept.
    """
    pool = get_total_points_pool(player_count, points_per_player)
    winners = sum(1 for r in results if r.rank == 1)
    per_winner = pool // winners if winners else 0

    return [
        ScoredResult(
            **vars(result), points_earned=per_winner if result.rank == 1 else 0
        )
        for result in results
    ]


def calculate_scores(
    scoring_mode: str,
    player_count: int,
    points_per_player: int,
    results: list[PlayerResult],
) -> list[ScoredResult]:
    """Dispatches to the scorer for the game's scoring mode."""
    if scoring_mode == SCORING_MODE_WINNER_TAKES_ALL:
        return calculate_winner_takes_all_scores(
            player_count, points_per_player, results
        )
    return calculate_pointing_scores(player_count, points_per_player, results)
