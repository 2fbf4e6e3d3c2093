"""Standings, rankings and next-week assignment route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ladder_league.database.db import get_db_session
from ladder_league.services import data_service
from ladder_league.services.stats_queue import get_stats_queue
from ladder_league.api.routes import to_http_exception
from ladder_league.models.schemas import (
    StandingResponse,
    GameDayRankingResponse,
    NextWeekAssignmentResponse,
    SeasonRankingResponse,
    CalculateResponse,
    MarkAbsentResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/api/leagues/{league_id}/game-days/{game_day_id}/standings",
    response_model=List[StandingResponse],
)
async def get_standings(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Stored standings for a game day, by court then rank."""
    try:
        return await data_service.get_game_day_standings(session, league_id, game_day_id)
    except Exception as e:
        raise to_http_exception(e, "getting standings")


@router.get(
    "/api/leagues/{league_id}/game-days/{game_day_id}/rankings",
    response_model=List[GameDayRankingResponse],
)
async def get_game_day_rankings(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Standings with player names and per-game scores."""
    try:
        return await data_service.get_game_day_rankings(session, league_id, game_day_id)
    except Exception as e:
        raise to_http_exception(e, "getting game day rankings")


@router.get(
    "/api/leagues/{league_id}/game-days/{game_day_id}/next-week",
    response_model=List[NextWeekAssignmentResponse],
)
async def get_next_week_court_assignments(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Court each player moves to for the next game day."""
    try:
        return await data_service.get_next_week_court_assignments(session, league_id, game_day_id)
    except Exception as e:
        raise to_http_exception(e, "getting next week assignments")


@router.get("/api/leagues/{league_id}/season-rankings", response_model=List[SeasonRankingResponse])
async def get_season_rankings(league_id: int, session: AsyncSession = Depends(get_db_session)):
    """Cumulative rankings across every game day of the league."""
    try:
        return await data_service.get_season_rankings(session, league_id)
    except Exception as e:
        raise to_http_exception(e, "getting season rankings")


@router.post(
    "/api/leagues/{league_id}/game-days/{game_day_id}/standings/recalculate",
    response_model=CalculateResponse,
)
async def recalculate_standings(
    league_id: int,
    game_day_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Queue a standings recalculation for a game day.

    Returns:
        dict: Job ID and status
    """
    try:
        await data_service.load_game_day(session, league_id, game_day_id)
        job_id = await get_stats_queue().enqueue_calculation(session, league_id, game_day_id)
        return {
            "job_id": job_id,
            "status": "queued",
            "league_id": league_id,
            "game_day_id": game_day_id,
        }
    except Exception as e:
        raise to_http_exception(e, "queueing standings calculation")


@router.post(
    "/api/leagues/{league_id}/game-days/{game_day_id}/players/{player_id}/absent",
    response_model=MarkAbsentResponse,
)
async def mark_player_absent(
    league_id: int,
    game_day_id: int,
    player_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Mark a player absent and flag their standing as an absent substitute."""
    try:
        return await data_service.mark_player_absent(session, league_id, game_day_id, player_id)
    except Exception as e:
        raise to_http_exception(e, "marking player absent")
