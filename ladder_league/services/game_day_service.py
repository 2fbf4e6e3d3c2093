"""
Game day lifecycle.

A game day moves pending -> in_progress -> completed and never goes back.
Rotation generation and score entry advance a pending day; finalizing is the
only way to complete one, and it hands the standings recompute to the stats
queue.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import select, delete, and_
from sqlalchemy.ext.asyncio import AsyncSession

from ladder_league.database.models import CourtRotation, GameDay, GameDayStatus
from ladder_league.services import data_service
from ladder_league.services.errors import NotFoundError, PreconditionFailedError
from ladder_league.services.rotation_service import build_game_day_rotations
from ladder_league.services.stats_queue import get_stats_queue
from ladder_league.utils.constants import DEFAULT_GAMES_PER_MATCH, DEFAULT_GAMES_PER_ROTATION

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    GameDayStatus.PENDING.value: {GameDayStatus.IN_PROGRESS.value},
    GameDayStatus.IN_PROGRESS.value: {GameDayStatus.COMPLETED.value},
    GameDayStatus.COMPLETED.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    """Whether a game day in ``current`` status may move to ``target``."""
    return target in ALLOWED_TRANSITIONS.get(current, set())


def advance_status(game_day: GameDay, target: str) -> None:
    """
    Move a game day to ``target`` status.

    Raises:
        PreconditionFailedError: If the transition is not allowed
    """
    if not can_transition(game_day.status, target):
        raise PreconditionFailedError(
            f"Game day {game_day.id} cannot move from {game_day.status} to {target}"
        )
    logger.info(f"Game day {game_day.id}: {game_day.status} -> {target}")
    game_day.status = target


def ensure_not_completed(game_day: GameDay) -> None:
    if game_day.status == GameDayStatus.COMPLETED.value:
        raise PreconditionFailedError(f"Game day {game_day.id} is already finalized")


def score_problem(
    team1_score: Optional[int],
    team2_score: Optional[int],
    points_to_win: int,
    win_by_margin: int
) -> Optional[str]:
    """
    Check a complete score against the league's scoring rule.

    Returns:
        A description of what is wrong, or None if the score is valid or not
        yet complete
    """
    if team1_score is None or team2_score is None:
        return None

    high, low = max(team1_score, team2_score), min(team1_score, team2_score)
    if high == low:
        return f"Game cannot end in a tie ({team1_score}-{team2_score})"
    if high < points_to_win:
        return f"Winning score {high} is below {points_to_win}"
    if high - low < win_by_margin:
        return f"Winning margin {high - low} is below {win_by_margin}"
    if high > points_to_win and high - low != win_by_margin:
        return f"Extended game must be won by exactly {win_by_margin} ({team1_score}-{team2_score})"
    return None


async def generate_rotations_async(session: AsyncSession, league_id: int, game_day_id: int) -> Dict:
    """
    Generate the rotations for every court of a game day.

    Each court with exactly 4 players has its existing rotations replaced;
    other courts are reported as skipped and left untouched. A pending game
    day moves to in_progress once any court has games.

    Raises:
        NotFoundError: If the league or game day does not exist
        PreconditionFailedError: If the game day is completed
    """
    league = await data_service.load_league(session, league_id)
    game_day = await data_service.load_game_day(session, league_id, game_day_id)
    ensure_not_completed(game_day)

    games_per_match = league.games_per_match
    if games_per_match is None:
        games_per_match = DEFAULT_GAMES_PER_MATCH
    games_per_rotation = league.games_per_rotation
    if games_per_rotation is None:
        games_per_rotation = DEFAULT_GAMES_PER_ROTATION

    assignments = await data_service.load_court_assignments(session, league_id, game_day_id)
    rotations_by_court, skipped = build_game_day_rotations(
        league_id,
        game_day_id,
        assignments,
        games_per_match,
        games_per_rotation,
    )

    for court_number, rotations in rotations_by_court.items():
        await session.execute(
            delete(CourtRotation).where(and_(
                CourtRotation.league_id == league_id,
                CourtRotation.game_day_id == game_day_id,
                CourtRotation.court_number == court_number,
            ))
        )
        session.add_all(rotations)

    has_games = any(rotations_by_court.values())
    if has_games and game_day.status == GameDayStatus.PENDING.value:
        advance_status(game_day, GameDayStatus.IN_PROGRESS.value)

    await session.commit()

    for skip in skipped:
        logger.warning(
            f"Skipped court {skip.court_number} on game day {game_day_id}: "
            f"{skip.player_count} players assigned"
        )

    return {
        "game_day_id": game_day_id,
        "status": game_day.status,
        "courts": {
            court_number: len(rotations)
            for court_number, rotations in rotations_by_court.items()
        },
        "skipped_courts": [
            {"court_number": s.court_number, "player_count": s.player_count}
            for s in skipped
        ],
    }


async def record_rotation_score(
    session: AsyncSession,
    rotation_id: int,
    team1_score: Optional[int],
    team2_score: Optional[int]
) -> Dict:
    """
    Store the scores of one game.

    Either score may be None (unset). Entering any score on a pending game day
    moves it to in_progress. Scores that break the league's scoring rule are
    stored anyway and logged.

    Raises:
        NotFoundError: If the rotation does not exist
        PreconditionFailedError: If the game day is completed
        ValueError: If a score is negative
    """
    for score in (team1_score, team2_score):
        if score is not None and score < 0:
            raise ValueError("Scores cannot be negative")

    result = await session.execute(select(CourtRotation).where(CourtRotation.id == rotation_id))
    rotation = result.scalar_one_or_none()
    if not rotation:
        raise NotFoundError(f"Rotation {rotation_id} not found")

    league = await data_service.load_league(session, rotation.league_id)
    game_day = await data_service.load_game_day(session, rotation.league_id, rotation.game_day_id)
    ensure_not_completed(game_day)

    problem = score_problem(team1_score, team2_score, league.points_to_win, league.win_by_margin)
    if problem:
        logger.warning(f"Rotation {rotation_id}: {problem}")

    rotation.team1_score = team1_score
    rotation.team2_score = team2_score

    game_day_updated = False
    has_score = team1_score is not None or team2_score is not None
    if has_score and game_day.status == GameDayStatus.PENDING.value:
        advance_status(game_day, GameDayStatus.IN_PROGRESS.value)
        game_day_updated = True

    await session.commit()

    return {
        "success": True,
        "game_day_updated": game_day_updated,
        "game_day_status": game_day.status,
        "message": "Score updated and game day started" if game_day_updated else "Score updated",
    }


async def count_incomplete_rotations(session: AsyncSession, league_id: int, game_day_id: int) -> int:
    """Number of games on a game day missing at least one score."""
    rotations = await data_service.load_court_rotations(session, league_id, game_day_id)
    return sum(1 for r in rotations if not r.is_complete)


async def finalize_game_day(session: AsyncSession, league_id: int, game_day_id: int) -> Dict:
    """
    Complete a game day and queue its standings recompute.

    Raises:
        NotFoundError: If the league or game day does not exist
        PreconditionFailedError: If the day is not in progress, or any game is
            missing a score (``incomplete_count`` holds how many)
    """
    game_day = await data_service.load_game_day(session, league_id, game_day_id)
    ensure_not_completed(game_day)
    if game_day.status == GameDayStatus.PENDING.value:
        raise PreconditionFailedError(f"Game day {game_day_id} has not started")

    incomplete = await count_incomplete_rotations(session, league_id, game_day_id)
    if incomplete:
        logger.warning(f"Finalize rejected for game day {game_day_id}: {incomplete} games incomplete")
        raise PreconditionFailedError(
            f"Cannot finalize: {incomplete} games are incomplete",
            incomplete_count=incomplete,
        )

    advance_status(game_day, GameDayStatus.COMPLETED.value)
    game_day.is_finalized = True
    await session.commit()

    # Queued after the commit so the recompute sees the completed day
    job_id = await get_stats_queue().enqueue_calculation(session, league_id, game_day_id)
    logger.info(f"Game day {game_day_id} finalized, standings job {job_id}")

    return {
        "game_day_id": game_day_id,
        "status": game_day.status,
        "is_finalized": True,
        "job_id": job_id,
    }
