"""Game day, court assignment, rotation and scoring route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ladder_league.database.db import get_db_session
from ladder_league.services import data_service, game_day_service
from ladder_league.api.routes import to_http_exception
from ladder_league.models.schemas import (
    GameDayResponse,
    GenerateGameDaysRequest,
    CourtSizeRequest,
    CourtConfigurationResponse,
    SaveCourtAssignmentsRequest,
    CourtAssignmentResponse,
    GenerateRotationsResponse,
    RotationResponse,
    UpdateScoreRequest,
    UpdateScoreResponse,
    FinalizeResponse,
    AttendanceRequest,
    AttendanceResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/leagues/{league_id}/game-days/generate", response_model=List[GameDayResponse])
async def generate_game_days(
    league_id: int,
    payload: GenerateGameDaysRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create weekly game days between two dates.

    Dates that already have a game day are skipped.
    """
    try:
        return await data_service.generate_game_days(
            session,
            league_id,
            payload.start_date,
            payload.end_date,
            payload.play_day,
        )
    except Exception as e:
        raise to_http_exception(e, "generating game days")


@router.get("/api/leagues/{league_id}/game-days", response_model=List[GameDayResponse])
async def list_game_days(league_id: int, session: AsyncSession = Depends(get_db_session)):
    """List a league's game days in date order."""
    try:
        return await data_service.list_game_days(session, league_id)
    except Exception as e:
        raise to_http_exception(e, "listing game days")


@router.put(
    "/api/leagues/{league_id}/courts/{court_number}/size",
    response_model=CourtConfigurationResponse,
)
async def update_court_size(
    league_id: int,
    court_number: int,
    payload: CourtSizeRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Set the number of players a court holds."""
    try:
        return await data_service.update_court_size(
            session, league_id, court_number, payload.size, payload.display_name
        )
    except Exception as e:
        raise to_http_exception(e, "updating court size")


@router.put(
    "/api/leagues/{league_id}/game-days/{game_day_id}/assignments",
    response_model=List[CourtAssignmentResponse],
)
async def save_court_assignments(
    league_id: int,
    game_day_id: int,
    payload: SaveCourtAssignmentsRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Replace a game day's court assignments.

    Rejected with 409 once rotations have been generated.
    """
    try:
        courts = {
            court_number: [entry.model_dump() for entry in entries]
            for court_number, entries in payload.courts.items()
        }
        return await data_service.save_court_assignments(session, league_id, game_day_id, courts)
    except Exception as e:
        raise to_http_exception(e, "saving court assignments")


@router.post(
    "/api/leagues/{league_id}/game-days/{game_day_id}/rotations",
    response_model=GenerateRotationsResponse,
)
async def generate_rotations(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Generate (or regenerate) the games for every full court.

    Courts without exactly 4 players are listed in skipped_courts.
    """
    try:
        return await game_day_service.generate_rotations_async(session, league_id, game_day_id)
    except Exception as e:
        raise to_http_exception(e, "generating rotations")


@router.get(
    "/api/leagues/{league_id}/game-days/{game_day_id}/courts/{court_number}/rotations",
    response_model=List[RotationResponse],
)
async def get_court_rotations(
    league_id: int,
    game_day_id: int,
    court_number: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Games of one court, in game order."""
    try:
        return await data_service.get_court_rotations(session, league_id, game_day_id, court_number)
    except Exception as e:
        raise to_http_exception(e, "getting court rotations")


@router.put("/api/rotations/{rotation_id}/score", response_model=UpdateScoreResponse)
async def update_rotation_score(
    rotation_id: int,
    payload: UpdateScoreRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Record the scores of a game."""
    try:
        return await game_day_service.record_rotation_score(
            session, rotation_id, payload.team1_score, payload.team2_score
        )
    except Exception as e:
        raise to_http_exception(e, "updating score")


@router.post(
    "/api/leagues/{league_id}/game-days/{game_day_id}/finalize",
    response_model=FinalizeResponse,
)
async def finalize_game_day(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Complete a game day and queue its standings calculation.

    Returns 409 with incomplete_count when games are missing scores.
    """
    try:
        return await game_day_service.finalize_game_day(session, league_id, game_day_id)
    except Exception as e:
        raise to_http_exception(e, "finalizing game day")


@router.get(
    "/api/leagues/{league_id}/game-days/{game_day_id}/attendance",
    response_model=List[AttendanceResponse],
)
async def get_game_day_attendance(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Attendance of every assigned player. Unrecorded players count as present."""
    try:
        return await data_service.get_game_day_attendance(session, league_id, game_day_id)
    except Exception as e:
        raise to_http_exception(e, "getting attendance")


@router.put(
    "/api/leagues/{league_id}/game-days/{game_day_id}/attendance/{player_id}",
    response_model=AttendanceResponse,
)
async def mark_attendance(
    league_id: int,
    game_day_id: int,
    player_id: int,
    payload: AttendanceRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Record whether a player is present on a game day."""
    try:
        return await data_service.mark_attendance(
            session, league_id, game_day_id, player_id, payload.is_present
        )
    except Exception as e:
        raise to_http_exception(e, "marking attendance")
