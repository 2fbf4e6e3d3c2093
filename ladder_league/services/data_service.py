"""
Data service layer for database operations.
Loads and stores leagues, game days, court assignments, rotations and standings.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

from sqlalchemy import select, delete, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from ladder_league.database.models import (
    League, Player, CourtConfiguration, GameDay, GameDayStatus,
    CourtAssignment, CourtRotation, GameDayAttendance, Standing, Movement, WinType
)
from ladder_league.services import calculation_service
from ladder_league.services.errors import NotFoundError, PreconditionFailedError
from ladder_league.utils.constants import (
    ABSENT_SUBSTITUTE_NAME,
    DEFAULT_GAMES_PER_MATCH,
    DEFAULT_GAMES_PER_ROTATION,
    DEFAULT_PLAYERS_MOVING_UP,
    DEFAULT_PLAYERS_MOVING_DOWN,
    DEFAULT_POINTS_TO_WIN,
    DEFAULT_WIN_BY_MARGIN,
    DEFAULT_GAME_DAY_START_TIME,
    DEFAULT_GAME_DAY_END_TIME,
    PLAYERS_PER_COURT,
)
from ladder_league.utils.datetime_utils import parse_date, weekly_dates

logger = logging.getLogger(__name__)


#
# Serialization helpers
#

def _league_to_dict(league: League) -> Dict:
    return {
        "id": league.id,
        "name": league.name,
        "description": league.description,
        "start_date": league.start_date.isoformat() if league.start_date else None,
        "end_date": league.end_date.isoformat() if league.end_date else None,
        "play_day": league.play_day,
        "win_type": league.win_type,
        "points_to_win": league.points_to_win,
        "win_by_margin": league.win_by_margin,
        "courts": league.courts,
        "players_per_court": league.players_per_court,
        "games_per_match": league.games_per_match,
        "games_per_rotation": league.games_per_rotation,
    }


def _game_day_to_dict(game_day: GameDay) -> Dict:
    return {
        "id": game_day.id,
        "league_id": game_day.league_id,
        "date": game_day.date.isoformat() if game_day.date else None,
        "start_time": game_day.start_time,
        "end_time": game_day.end_time,
        "status": game_day.status,
        "is_finalized": bool(game_day.is_finalized),
    }


def _court_config_to_dict(config: CourtConfiguration) -> Dict:
    return {
        "id": config.id,
        "league_id": config.league_id,
        "court_number": config.court_number,
        "display_name": config.display_name,
        "players_moving_up": config.players_moving_up,
        "players_moving_down": config.players_moving_down,
        "players_count": config.players_count,
    }


def _assignment_to_dict(assignment: CourtAssignment) -> Dict:
    return {
        "id": assignment.id,
        "court_number": assignment.court_number,
        "slot_number": assignment.slot_number,
        "player_id": assignment.player_id,
        "is_substitute": bool(assignment.is_substitute),
        "substitute_name": assignment.substitute_name,
        "regular_player_id": assignment.regular_player_id,
    }


def rotation_to_dict(rotation: CourtRotation) -> Dict:
    return {
        "id": rotation.id,
        "league_id": rotation.league_id,
        "game_day_id": rotation.game_day_id,
        "court_number": rotation.court_number,
        "rotation_number": rotation.rotation_number,
        "game_number": rotation.game_number,
        "team1_player1_id": rotation.team1_player1_id,
        "team1_player2_id": rotation.team1_player2_id,
        "team2_player1_id": rotation.team2_player1_id,
        "team2_player2_id": rotation.team2_player2_id,
        "team1_score": rotation.team1_score,
        "team2_score": rotation.team2_score,
    }


def standing_to_dict(standing: Standing) -> Dict:
    return {
        "player_id": standing.player_id,
        "court_number": standing.court_number,
        "is_substitute": bool(standing.is_substitute),
        "substitute_name": standing.substitute_name,
        "games_played": standing.games_played,
        "games_won": standing.games_won,
        "total_points": standing.total_points,
        "win_pct": standing.win_pct,
        "points_per_game": standing.points_per_game,
        "court_rank": standing.court_rank,
        "move_up": standing.move_up,
        "move_down": standing.move_down,
        "movement": standing.movement,
        "display_name": standing.display_name,
    }


#
# Loaders
#

async def load_league(session: AsyncSession, league_id: int) -> League:
    """Get a league by ID, raising NotFoundError if it does not exist."""
    result = await session.execute(select(League).where(League.id == league_id))
    league = result.scalar_one_or_none()
    if not league:
        raise NotFoundError(f"League {league_id} not found")
    return league


async def load_game_day(session: AsyncSession, league_id: int, game_day_id: int) -> GameDay:
    """Get a game day of a league, raising NotFoundError if it does not exist."""
    result = await session.execute(
        select(GameDay).where(
            and_(GameDay.id == game_day_id, GameDay.league_id == league_id)
        )
    )
    game_day = result.scalar_one_or_none()
    if not game_day:
        raise NotFoundError(f"Game day {game_day_id} not found in league {league_id}")
    return game_day


async def load_court_configurations(session: AsyncSession, league_id: int) -> List[CourtConfiguration]:
    result = await session.execute(
        select(CourtConfiguration)
        .where(CourtConfiguration.league_id == league_id)
        .order_by(CourtConfiguration.court_number)
    )
    return list(result.scalars().all())


async def load_court_assignments(
    session: AsyncSession,
    league_id: int,
    game_day_id: int
) -> List[CourtAssignment]:
    result = await session.execute(
        select(CourtAssignment)
        .where(and_(
            CourtAssignment.league_id == league_id,
            CourtAssignment.game_day_id == game_day_id,
        ))
        .order_by(CourtAssignment.court_number, CourtAssignment.slot_number)
    )
    return list(result.scalars().all())


async def load_court_rotations(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    court_number: Optional[int] = None
) -> List[CourtRotation]:
    """Load rotations for a game day, optionally restricted to one court."""
    conditions = [
        CourtRotation.league_id == league_id,
        CourtRotation.game_day_id == game_day_id,
    ]
    if court_number is not None:
        conditions.append(CourtRotation.court_number == court_number)

    result = await session.execute(
        select(CourtRotation)
        .where(and_(*conditions))
        .order_by(CourtRotation.court_number, CourtRotation.game_number)
    )
    return list(result.scalars().all())


async def load_standings(
    session: AsyncSession,
    league_id: int,
    game_day_id: Optional[int] = None
) -> List[Standing]:
    """Load standings for a league, or for one of its game days."""
    conditions = [Standing.league_id == league_id]
    if game_day_id is not None:
        conditions.append(Standing.game_day_id == game_day_id)

    result = await session.execute(
        select(Standing)
        .where(and_(*conditions))
        .order_by(Standing.player_id, Standing.game_day_id)
    )
    return list(result.scalars().all())


async def get_players_by_ids(session: AsyncSession, player_ids) -> Dict[int, Player]:
    ids = set(player_ids)
    if not ids:
        return {}
    result = await session.execute(select(Player).where(Player.id.in_(ids)))
    return {p.id: p for p in result.scalars().all()}


#
# League, player and game day records
#

async def create_league(
    session: AsyncSession,
    name: str,
    description: Optional[str] = None,
    start_date: Optional[Union[str, date]] = None,
    end_date: Optional[Union[str, date]] = None,
    play_day: Optional[int] = None,
    win_type: str = WinType.POINTS.value,
    points_to_win: int = DEFAULT_POINTS_TO_WIN,
    win_by_margin: int = DEFAULT_WIN_BY_MARGIN,
    courts: int = 1,
    games_per_match: int = DEFAULT_GAMES_PER_MATCH,
    games_per_rotation: int = DEFAULT_GAMES_PER_ROTATION
) -> League:
    """Create a league with its match settings."""
    if win_type not in (WinType.POINTS.value, WinType.WINS.value):
        raise ValueError(f"Invalid win_type: {win_type}")
    if games_per_match < 0:
        raise ValueError(f"games_per_match cannot be negative, got {games_per_match}")
    if games_per_rotation < 1:
        raise ValueError(f"games_per_rotation must be at least 1, got {games_per_rotation}")

    league = League(
        name=name,
        description=description,
        start_date=parse_date(start_date) if start_date else None,
        end_date=parse_date(end_date) if end_date else None,
        play_day=play_day,
        win_type=win_type,
        points_to_win=points_to_win,
        win_by_margin=win_by_margin,
        courts=courts,
        players_per_court=PLAYERS_PER_COURT,
        games_per_match=games_per_match,
        games_per_rotation=games_per_rotation,
    )
    session.add(league)
    await session.commit()
    await session.refresh(league)
    return league


async def list_leagues(session: AsyncSession) -> List[Dict]:
    """List all leagues ordered by name."""
    result = await session.execute(select(League).order_by(League.name, League.id))
    return [_league_to_dict(league) for league in result.scalars().all()]


async def create_player(session: AsyncSession, full_name: str) -> Player:
    """Create a player profile."""
    if not full_name or not full_name.strip():
        raise ValueError("Player name is required")
    player = Player(full_name=full_name.strip())
    session.add(player)
    await session.commit()
    await session.refresh(player)
    return player


async def create_game_day(
    session: AsyncSession,
    league_id: int,
    game_day_date: Union[str, date],
    start_time: str = DEFAULT_GAME_DAY_START_TIME,
    end_time: str = DEFAULT_GAME_DAY_END_TIME
) -> GameDay:
    """Create a single pending game day."""
    await load_league(session, league_id)
    game_day = GameDay(
        league_id=league_id,
        date=parse_date(game_day_date),
        start_time=start_time,
        end_time=end_time,
        status=GameDayStatus.PENDING.value,
        is_finalized=False,
    )
    session.add(game_day)
    await session.commit()
    await session.refresh(game_day)
    return game_day


async def list_game_days(session: AsyncSession, league_id: int) -> List[Dict]:
    """List a league's game days in date order."""
    await load_league(session, league_id)
    result = await session.execute(
        select(GameDay).where(GameDay.league_id == league_id).order_by(GameDay.date)
    )
    return [_game_day_to_dict(gd) for gd in result.scalars().all()]


async def generate_game_days(
    session: AsyncSession,
    league_id: int,
    start_date: Union[str, date],
    end_date: Union[str, date],
    play_day: Optional[int] = None
) -> List[Dict]:
    """
    Create weekly pending game days for a league.

    Dates fall on ``play_day`` (defaults to the league's play day) and stop at
    the league's end date when it is earlier than ``end_date``. Dates that
    already have a game day are skipped.

    Returns:
        The newly created game days
    """
    league = await load_league(session, league_id)
    if play_day is None:
        play_day = league.play_day
    if play_day is None:
        raise ValueError("play_day is required when the league has no play day")

    start = parse_date(start_date)
    end = parse_date(end_date)
    if league.end_date and league.end_date < end:
        end = league.end_date
    if start > end:
        raise ValueError("start_date must be on or before end_date")

    result = await session.execute(
        select(GameDay.date).where(GameDay.league_id == league_id)
    )
    existing_dates = set(result.scalars().all())

    created = []
    for game_date in weekly_dates(start, end, play_day):
        if game_date in existing_dates:
            continue
        game_day = GameDay(
            league_id=league_id,
            date=game_date,
            start_time=DEFAULT_GAME_DAY_START_TIME,
            end_time=DEFAULT_GAME_DAY_END_TIME,
            status=GameDayStatus.PENDING.value,
            is_finalized=False,
        )
        session.add(game_day)
        created.append(game_day)

    await session.commit()
    for game_day in created:
        await session.refresh(game_day)

    logger.info(f"Generated {len(created)} game days for league {league_id}")
    return [_game_day_to_dict(gd) for gd in created]


#
# Court configuration and assignments
#

async def update_court_size(
    session: AsyncSession,
    league_id: int,
    court_number: int,
    size: int,
    display_name: Optional[str] = None
) -> Dict:
    """Set a court's expected player count, creating its configuration if needed."""
    await load_league(session, league_id)
    if court_number < 1:
        raise ValueError("court_number must be at least 1")
    if size < 1:
        raise ValueError("Court size must be at least 1")

    result = await session.execute(
        select(CourtConfiguration).where(and_(
            CourtConfiguration.league_id == league_id,
            CourtConfiguration.court_number == court_number,
        ))
    )
    config = result.scalar_one_or_none()
    if config:
        config.players_count = size
        if display_name:
            config.display_name = display_name
    else:
        config = CourtConfiguration(
            league_id=league_id,
            court_number=court_number,
            display_name=display_name or f"Court {court_number}",
            players_moving_up=DEFAULT_PLAYERS_MOVING_UP,
            players_moving_down=DEFAULT_PLAYERS_MOVING_DOWN,
            players_count=size,
        )
        session.add(config)

    await session.commit()
    await session.refresh(config)
    return _court_config_to_dict(config)


async def save_court_assignments(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    courts: Dict[int, Sequence[Dict]]
) -> List[Dict]:
    """
    Replace the court assignments of a game day.

    Args:
        courts: Mapping of court number to player entries, in slot order. Each
            entry has ``player_id`` and optionally ``is_substitute``,
            ``substitute_name`` and ``regular_player_id``.

    Raises:
        NotFoundError: If the league or game day does not exist
        PreconditionFailedError: If rotations were already generated
        ValueError: If a player is listed more than once
    """
    game_day = await load_game_day(session, league_id, game_day_id)
    if game_day.status == GameDayStatus.COMPLETED.value:
        raise PreconditionFailedError("Game day is already finalized")

    rotation_count = await session.scalar(
        select(func.count(CourtRotation.id)).where(and_(
            CourtRotation.league_id == league_id,
            CourtRotation.game_day_id == game_day_id,
        ))
    )
    if rotation_count:
        raise PreconditionFailedError("Cannot change court assignments after rotations are generated")

    seen = set()
    new_assignments = []
    for court_number in sorted(courts):
        if court_number < 1:
            raise ValueError("court_number must be at least 1")
        for idx, entry in enumerate(courts[court_number]):
            player_id = entry["player_id"]
            if player_id in seen:
                raise ValueError(f"Player {player_id} is assigned more than once")
            seen.add(player_id)
            new_assignments.append(CourtAssignment(
                league_id=league_id,
                game_day_id=game_day_id,
                court_number=court_number,
                slot_number=idx + 1,
                player_id=player_id,
                is_substitute=bool(entry.get("is_substitute", False)),
                substitute_name=entry.get("substitute_name"),
                regular_player_id=entry.get("regular_player_id"),
            ))

    await session.execute(
        delete(CourtAssignment).where(and_(
            CourtAssignment.league_id == league_id,
            CourtAssignment.game_day_id == game_day_id,
        ))
    )
    session.add_all(new_assignments)
    await session.commit()

    logger.info(
        f"Saved {len(new_assignments)} court assignments for game day {game_day_id} "
        f"across {len(courts)} courts"
    )
    return [_assignment_to_dict(a) for a in await load_court_assignments(session, league_id, game_day_id)]


#
# Attendance
#

async def load_attendance(session: AsyncSession, league_id: int, game_day_id: int) -> Dict[int, bool]:
    """Recorded attendance for a game day as player_id -> is_present."""
    result = await session.execute(
        select(GameDayAttendance).where(and_(
            GameDayAttendance.league_id == league_id,
            GameDayAttendance.game_day_id == game_day_id,
        ))
    )
    return {a.player_id: bool(a.is_present) for a in result.scalars().all()}


async def _set_attendance(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    player_id: int,
    is_present: bool
) -> None:
    result = await session.execute(
        select(GameDayAttendance).where(and_(
            GameDayAttendance.game_day_id == game_day_id,
            GameDayAttendance.player_id == player_id,
        ))
    )
    attendance = result.scalar_one_or_none()
    if attendance:
        attendance.is_present = is_present
    else:
        session.add(GameDayAttendance(
            league_id=league_id,
            game_day_id=game_day_id,
            player_id=player_id,
            is_present=is_present,
        ))


async def mark_attendance(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    player_id: int,
    is_present: bool
) -> Dict:
    """
    Record whether a player is present on a game day.

    Raises:
        NotFoundError: If the game day or player does not exist
    """
    await load_game_day(session, league_id, game_day_id)
    players = await get_players_by_ids(session, [player_id])
    if player_id not in players:
        raise NotFoundError(f"Player {player_id} not found")

    await _set_attendance(session, league_id, game_day_id, player_id, is_present)
    await session.commit()

    logger.info(
        f"Player {player_id} marked {'present' if is_present else 'absent'} "
        f"for game day {game_day_id}"
    )
    return {
        "player_id": player_id,
        "game_day_id": game_day_id,
        "is_present": is_present,
        **_player_names(players[player_id]),
    }


async def get_game_day_attendance(session: AsyncSession, league_id: int, game_day_id: int) -> List[Dict]:
    """
    Attendance of every player assigned to a game day, by court and slot.

    Players with no recorded attendance are reported present.
    """
    await load_game_day(session, league_id, game_day_id)
    assignments = await load_court_assignments(session, league_id, game_day_id)
    attendance = await load_attendance(session, league_id, game_day_id)
    players = await get_players_by_ids(session, (a.player_id for a in assignments))

    return [
        {
            "player_id": a.player_id,
            "game_day_id": game_day_id,
            "court_number": a.court_number,
            "is_present": attendance.get(a.player_id, True),
            **_player_names(players.get(a.player_id)),
        }
        for a in assignments
    ]


async def mark_player_absent(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    player_id: int
) -> Dict:
    """
    Mark a player absent and flag their stored standing as an absent substitute.

    The flag is re-applied whenever the game day's standings are recalculated.

    Raises:
        NotFoundError: If the game day or player does not exist
    """
    await load_game_day(session, league_id, game_day_id)
    players = await get_players_by_ids(session, [player_id])
    if player_id not in players:
        raise NotFoundError(f"Player {player_id} not found")

    await _set_attendance(session, league_id, game_day_id, player_id, False)

    result = await session.execute(
        select(Standing).where(and_(
            Standing.league_id == league_id,
            Standing.game_day_id == game_day_id,
            Standing.player_id == player_id,
        ))
    )
    standing = result.scalar_one_or_none()
    if standing:
        standing.is_substitute = True
        standing.substitute_name = ABSENT_SUBSTITUTE_NAME
    await session.commit()

    logger.info(f"Player {player_id} marked absent for game day {game_day_id}")
    return {
        "player_id": player_id,
        "game_day_id": game_day_id,
        "is_present": False,
        "standing_updated": standing is not None,
    }


#
# Standings
#

async def replace_standings(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    standings: Sequence[Standing]
) -> None:
    """Delete every standing of a game day and insert ``standings`` in its place (no commit)."""
    await session.execute(
        delete(Standing).where(and_(
            Standing.league_id == league_id,
            Standing.game_day_id == game_day_id,
        ))
    )
    session.add_all(standings)
    await session.flush()


async def calculate_game_day_standings_async(
    session: AsyncSession,
    league_id: int,
    game_day_id: int
) -> Dict:
    """
    Recompute and store the standings for one game day.

    Inputs are read in this session, the standings are computed in memory,
    then the old rows are replaced in a single transaction. If the calculation
    fails, the old standings remain visible.

    Raises:
        NotFoundError: If the league or game day does not exist (nothing is written)
    """
    league = await load_league(session, league_id)
    await load_game_day(session, league_id, game_day_id)

    court_configs = await load_court_configurations(session, league_id)
    assignments = await load_court_assignments(session, league_id, game_day_id)
    rotations = await load_court_rotations(session, league_id, game_day_id)

    standings = calculation_service.calculate_standings(
        league, game_day_id, court_configs, assignments, rotations
    )
    attendance = await load_attendance(session, league_id, game_day_id)
    for standing in standings:
        if attendance.get(standing.player_id) is False:
            standing.is_substitute = True
            standing.substitute_name = ABSENT_SUBSTITUTE_NAME

    try:
        await replace_standings(session, league_id, game_day_id, standings)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        f"Calculated standings for game day {game_day_id}: "
        f"{len(standings)} players, {len(rotations)} games"
    )
    return {
        "league_id": league_id,
        "game_day_id": game_day_id,
        "player_count": len(standings),
        "game_count": len(rotations),
    }


async def get_game_day_standings(session: AsyncSession, league_id: int, game_day_id: int) -> List[Dict]:
    """Stored standings for a game day, ordered by court then rank."""
    await load_game_day(session, league_id, game_day_id)
    standings = await load_standings(session, league_id, game_day_id)
    standings.sort(key=lambda s: (s.court_number, s.court_rank))
    return [standing_to_dict(s) for s in standings]


#
# Read models
#

async def get_court_rotations(
    session: AsyncSession,
    league_id: int,
    game_day_id: int,
    court_number: int
) -> List[Dict]:
    """Rotations for one court, ordered by game number."""
    await load_game_day(session, league_id, game_day_id)
    rotations = await load_court_rotations(session, league_id, game_day_id, court_number)
    return [rotation_to_dict(r) for r in rotations]


def _player_names(player: Optional[Player]) -> Dict:
    if player is None:
        return {"player_name": None, "first_name": "", "last_name": ""}
    return {
        "player_name": player.full_name,
        "first_name": player.first_name,
        "last_name": player.last_name,
    }


async def get_game_day_rankings(session: AsyncSession, league_id: int, game_day_id: int) -> List[Dict]:
    """
    Standings of a game day with player names and per-game team scores.

    ``game_scores`` lists the player's team score for each game they played
    on their court in game order, with None for games not yet scored.
    Sorted by court ascending, then total points descending.
    """
    await load_game_day(session, league_id, game_day_id)
    standings = await load_standings(session, league_id, game_day_id)
    players = await get_players_by_ids(session, (s.player_id for s in standings))
    rotations = await load_court_rotations(session, league_id, game_day_id)

    rotations_by_court: Dict[int, List[CourtRotation]] = defaultdict(list)
    for rotation in rotations:
        rotations_by_court[rotation.court_number].append(rotation)

    rankings = []
    for standing in standings:
        game_scores = []
        for rotation in rotations_by_court.get(standing.court_number, []):
            team = rotation.team_of(standing.player_id)
            if team == 1:
                game_scores.append(rotation.team1_score)
            elif team == 2:
                game_scores.append(rotation.team2_score)

        rankings.append({
            **standing_to_dict(standing),
            **_player_names(players.get(standing.player_id)),
            "game_scores": game_scores,
        })

    rankings.sort(key=lambda r: (r["court_number"], -r["total_points"]))
    return rankings


async def get_next_week_court_assignments(
    session: AsyncSession,
    league_id: int,
    game_day_id: int
) -> List[Dict]:
    """
    Where each player plays next game day, based on stored movement.

    Promotion never goes above court 1 and relegation never goes below the
    lowest court used on this game day. Sorted by next court, last name,
    first name.
    """
    await load_game_day(session, league_id, game_day_id)
    assignments = await load_court_assignments(session, league_id, game_day_id)
    max_court = max((a.court_number for a in assignments), default=0)

    standings = await load_standings(session, league_id, game_day_id)
    players = await get_players_by_ids(session, (s.player_id for s in standings))

    next_week = []
    for standing in standings:
        next_court_number = standing.court_number
        if standing.movement == Movement.UP.value and standing.court_number > 1:
            next_court_number = standing.court_number - 1
        elif standing.movement == Movement.DOWN.value and standing.court_number < max_court:
            next_court_number = standing.court_number + 1

        next_week.append({
            "player_id": standing.player_id,
            "current_court_number": standing.court_number,
            "next_court_number": next_court_number,
            "movement": standing.movement,
            "is_substitute": bool(standing.is_substitute),
            **_player_names(players.get(standing.player_id)),
        })

    next_week.sort(key=lambda a: (a["next_court_number"], a["last_name"], a["first_name"]))
    return next_week


async def get_season_rankings(session: AsyncSession, league_id: int) -> List[Dict]:
    """Season rankings for a league with player names."""
    league = await load_league(session, league_id)
    standings = await load_standings(session, league_id)

    rankings = calculation_service.calculate_season_rankings(league.win_type, standings)

    players = await get_players_by_ids(session, (s.player_id for s in standings))
    for ranking in rankings:
        ranking.update(_player_names(players.get(ranking["player_id"])))
    return rankings


def register_stats_queue_callbacks() -> None:
    """
    Register the standings calculation with the stats queue.

    Called during application startup, before the queue worker is started.
    Keeps stats_queue free of a direct import of this module.
    """
    from ladder_league.services.stats_queue import get_stats_queue
    queue = get_stats_queue()
    queue.register_calculation_callback(calculate_game_day_standings_async)
