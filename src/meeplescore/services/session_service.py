# src/meeplescore/services/session_service.py

"""Business logic for recording, editing and deleting game sessions."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meeplescore.db import models
from meeplescore.exceptions import (
    DuplicatePlayerError,
    EmptyResultsError,
    GameNotFoundError,
    InvalidRankingsError,
    PlayerCountError,
    PlayerNotFoundError,
    SessionNotFoundError,
    WinnerCountError,
)
from meeplescore.schemas import session as session_schema
from meeplescore.scoring import engine

logger = logging.getLogger(__name__)


async def get_session(db: AsyncSession, session_id: int) -> models.GameSession:
    """Loads a session with its results, or raises SessionNotFoundError."""
    query = (
        select(models.GameSession)
        .where(models.GameSession.id == session_id)
        .options(selectinload(models.GameSession.results))
        .execution_options(populate_existing=True)
    )
    session = (await db.execute(query)).scalar_one_or_none()
    if session is None:
        raise SessionNotFoundError(session_id)
    return session


async def _validate_results(
    db: AsyncSession,
    results: list[session_schema.GameResultCreate],
) -> dict[int, models.Player]:
    """
    Validates the submitted results against the player table.

    Returns:
        The participating players keyed by id.

    Raises:
        EmptyResultsError: If no results were submitted
        DuplicatePlayerError: If a player_id appears more than once
        PlayerNotFoundError: If any player_id does not exist
    """
    if not results:
        raise EmptyResultsError()

    seen: set[int] = set()
    duplicates: set[int] = set()
    for result in results:
        if result.player_id in seen:
            duplicates.add(result.player_id)
        seen.add(result.player_id)

    if duplicates:
        raise DuplicatePlayerError(sorted(duplicates))

    # Single query for all participants
    query = select(models.Player).where(models.Player.id.in_(seen))
    players = {p.id: p for p in (await db.execute(query)).scalars().all()}

    missing_ids = seen - players.keys()
    if missing_ids:
        # Report the lowest missing id so the error is deterministic
        raise PlayerNotFoundError(min(missing_ids))

    logger.debug("Result validation passed", extra={"player_ids": sorted(seen)})
    return players


def _check_rankings(scoring_mode: str, placements: list[engine.PlayerResult]) -> None:
    """Winner-takes-all needs exactly one winner; pointing needs 1..n ranks."""
    if scoring_mode == models.SCORING_MODE_WINNER_TAKES_ALL:
        winners = sum(1 for p in placements if p.rank == 1)
        if winners != 1:
            raise WinnerCountError(winners)
        return

    validation = engine.validate_rankings(placements)
    if not validation.valid:
        raise InvalidRankingsError(validation.error or "Invalid rankings")


def _to_placements(
    results: list[session_schema.GameResultCreate],
    players: dict[int, models.Player],
) -> list[engine.PlayerResult]:
    """Pairs submitted results with the players' current names."""
    return [
        engine.PlayerResult(
            player_id=r.player_id,
            player_name=players[r.player_id].name,
            rank=r.rank,
            score=r.score,
        )
        for r in results
    ]


def _score(
    game: models.Game, player_count: int, placements: list[engine.PlayerResult]
) -> list[models.GameResult]:
    """Runs the scoring engine and builds the result rows."""
    scored = engine.calculate_scores(
        game.scoring_mode, player_count, game.points_per_player, placements
    )
    return [
        models.GameResult(
            player_id=s.player_id,
            player_name=s.player_name,
            position=position,
            rank=s.rank,
            score=s.score,
            points_earned=s.points_earned,
        )
        for position, s in enumerate(scored)
    ]


def _touch_players(
    players: dict[int, models.Player], played_at: datetime
) -> None:
    """Moves each player's last_played_at forward to `played_at`."""
    for player in players.values():
        last = player.last_played_at
        if last is None or models.as_utc(last) < played_at:
            player.last_played_at = played_at


def _participants(session: models.GameSession) -> set[int]:
    return {r.player_id for r in session.results if r.player_id is not None}


async def record_session(
    db: AsyncSession, session_in: session_schema.GameSessionCreate
) -> tuple[models.GameSession, set[int]]:
    """
    Records a finished game session.

    This service is responsible for:
    1. Validating the game, the results and the participating players
    2. Checking the rankings against the game's scoring mode
    3. Running the scoring engine to compute every player's points
    4. Persisting the session and its results in a single transaction

    Stats are NOT recalculated here; the caller schedules that for the
    returned player ids once the response has been sent.

    Returns:
        The stored session and the ids of every participating player.

    Raises:
        GameNotFoundError: If the game_id doesn't exist
        EmptyResultsError: If no results were submitted
        DuplicatePlayerError: If same player appears multiple times
        PlayerNotFoundError: If a player_id doesn't exist
        WinnerCountError: If a winner-takes-all session has 0 or 2+ winners
        InvalidRankingsError: If pointing ranks are not 1..n
        PlayerCountError: If player_count does not fit the results
    """
    logger.info(
        "Recording new session",
        extra={
            "game_id": session_in.game_id,
            "result_count": len(session_in.results),
        },
    )

    # 1. Validate everything before touching the database
    game = await db.get(models.Game, session_in.game_id)
    if not game:
        raise GameNotFoundError(session_in.game_id)

    players = await _validate_results(db, session_in.results)
    placements = _to_placements(session_in.results, players)
    _check_rankings(game.scoring_mode, placements)

    result_count = len(placements)
    player_count = session_in.player_count or result_count
    # Only winner-takes-all may count players that have no result
    if player_count < result_count or (
        player_count > result_count
        and game.scoring_mode != models.SCORING_MODE_WINNER_TAKES_ALL
    ):
        raise PlayerCountError(player_count, result_count)

    played_at = models.as_utc(session_in.played_at or models.utcnow())

    try:
        # 2. Build the session with its scored results
        new_session = models.GameSession(
            game_id=game.id,
            game_name=game.name,
            scoring_mode=game.scoring_mode,
            player_count=player_count,
            played_at=played_at,
            total_points_pool=engine.get_total_points_pool(
                player_count, game.points_per_player
            ),
        )
        new_session.results = _score(game, player_count, placements)
        db.add(new_session)

        _touch_players(players, played_at)

        # 3. COMMIT the session and its results atomically
        await db.commit()
        logger.info(
            "Session recorded",
            extra={
                "session_id": new_session.id,
                "total_points_pool": new_session.total_points_pool,
            },
        )

        # 4. Re-query to eager load the results for the response
        stored = await get_session(db, new_session.id)
        return stored, set(players)

    except Exception as e:
        logger.error(
            "Failed to record session",
            extra={"game_id": session_in.game_id, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise


async def update_session(
    db: AsyncSession,
    session_id: int,
    session_in: session_schema.GameSessionUpdate,
) -> tuple[models.GameSession, set[int]]:
    """
    Edits a session's date and/or replaces its results.

    New results are rescored with the game's current configuration, using
    the number of submitted results as the player count.

    Returns:
        The updated session and the ids of every player who was in the
        session before or after the edit.
    """
    session = await get_session(db, session_id)
    affected = _participants(session)

    players: dict[int, models.Player] = {}
    placements: list[engine.PlayerResult] = []
    game: models.Game | None = None

    if session_in.results is not None:
        game = await db.get(models.Game, session.game_id)
        if not game:
            raise GameNotFoundError(session.game_id)

        players = await _validate_results(db, session_in.results)
        placements = _to_placements(session_in.results, players)
        validation = engine.validate_rankings(placements)
        if not validation.valid:
            raise InvalidRankingsError(validation.error or "Invalid rankings")

    try:
        if session_in.played_at is not None:
            session.played_at = models.as_utc(session_in.played_at)

        if game is not None:
            player_count = len(placements)
            session.game_name = game.name
            session.scoring_mode = game.scoring_mode
            session.player_count = player_count
            session.total_points_pool = engine.get_total_points_pool(
                player_count, game.points_per_player
            )
            # delete-orphan removes the replaced rows
            session.results = _score(game, player_count, placements)
            _touch_players(players, models.as_utc(session.played_at))
            affected |= set(players)

        await db.commit()
        logger.info(
            "Session updated",
            extra={"session_id": session_id, "affected_players": sorted(affected)},
        )

        return await get_session(db, session_id), affected

    except Exception as e:
        logger.error(
            "Failed to update session",
            extra={"session_id": session_id, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise


async def delete_session(db: AsyncSession, session_id: int) -> set[int]:
    """
    Permanently deletes a session and its results.

    Returns:
        The ids of the players whose stats need recalculating.
    """
    session = await get_session(db, session_id)
    affected = _participants(session)

    await db.delete(session)
    await db.commit()
    logger.info(
        "Session deleted",
        extra={"session_id": session_id, "affected_players": sorted(affected)},
    )
    return affected
