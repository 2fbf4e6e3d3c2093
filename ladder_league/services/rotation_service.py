"""
Rotation generation service.
Builds the partnership schedule for 4-player courts.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ladder_league.database.models import CourtAssignment, CourtRotation
from ladder_league.services.errors import SkippedCourt
from ladder_league.utils.constants import PARTNERSHIP_PATTERNS, PLAYERS_PER_COURT

logger = logging.getLogger(__name__)


def player_sort_key(player_id) -> str:
    """Lexicographic ordering key for player identifiers."""
    return str(player_id)


@dataclass(frozen=True)
class ScheduledGame:
    """One game of a court schedule, before it is tied to a game day."""

    rotation_number: int
    game_number: int
    team1: Tuple[int, int]
    team2: Tuple[int, int]


def order_court_players(assignments: Iterable[CourtAssignment]) -> List[int]:
    """
    Order a court's players by slot number, then player identifier.

    Args:
        assignments: Court assignments for a single court

    Returns:
        Player IDs in rotation order
    """
    ordered = sorted(
        assignments,
        key=lambda a: (a.slot_number, player_sort_key(a.player_id))
    )
    return [a.player_id for a in ordered]


def generate_court_games(
    player_ids: Sequence[int],
    games_per_match: int,
    games_per_rotation: int
) -> List[ScheduledGame]:
    """
    Generate the partnership schedule for a 4-player court.

    Patterns are cycled starting from the first one. Each pattern is played
    for ``games_per_rotation`` consecutive games (one rotation), until
    ``games_per_match`` games have been produced. A full cycle of the three
    patterns partners every pair once and opposes every pair twice.

    Args:
        player_ids: Exactly 4 player IDs in rotation order
        games_per_match: Total number of games to schedule
        games_per_rotation: Consecutive games played with the same partners

    Returns:
        List of scheduled games, numbered from 1

    Raises:
        ValueError: If there are not exactly 4 players or games_per_rotation < 1
    """
    if len(player_ids) != PLAYERS_PER_COURT:
        raise ValueError(
            f"Rotation generation needs exactly {PLAYERS_PER_COURT} players, got {len(player_ids)}"
        )
    if games_per_rotation < 1:
        raise ValueError("games_per_rotation must be at least 1")

    games: List[ScheduledGame] = []
    pattern_idx = 0
    rotation_number = 1

    while len(games) < games_per_match:
        a, b, c, d = PARTNERSHIP_PATTERNS[pattern_idx]
        for _ in range(games_per_rotation):
            if len(games) >= games_per_match:
                break
            games.append(ScheduledGame(
                rotation_number=rotation_number,
                game_number=len(games) + 1,
                team1=(player_ids[a], player_ids[b]),
                team2=(player_ids[c], player_ids[d]),
            ))

        pattern_idx = (pattern_idx + 1) % len(PARTNERSHIP_PATTERNS)
        rotation_number += 1

    return games


def build_court_rotations(
    league_id: int,
    game_day_id: int,
    court_number: int,
    assignments: Sequence[CourtAssignment],
    games_per_match: int,
    games_per_rotation: int
) -> Tuple[List[CourtRotation], Optional[SkippedCourt]]:
    """
    Build unscored CourtRotation rows for one court.

    Returns:
        Tuple of (rotations, skipped). ``skipped`` is set, and ``rotations``
        empty, when the court does not have exactly 4 players.
    """
    player_ids = order_court_players(assignments)
    if len(player_ids) != PLAYERS_PER_COURT:
        logger.info(
            f"Court {court_number} has {len(player_ids)} players "
            f"(need exactly {PLAYERS_PER_COURT}), skipping rotation generation"
        )
        return [], SkippedCourt(court_number=court_number, player_count=len(player_ids))

    rotations = [
        CourtRotation(
            league_id=league_id,
            game_day_id=game_day_id,
            court_number=court_number,
            rotation_number=game.rotation_number,
            game_number=game.game_number,
            team1_player1_id=game.team1[0],
            team1_player2_id=game.team1[1],
            team2_player1_id=game.team2[0],
            team2_player2_id=game.team2[1],
            team1_score=None,
            team2_score=None,
        )
        for game in generate_court_games(player_ids, games_per_match, games_per_rotation)
    ]
    logger.info(f"Generated {len(rotations)} games for court {court_number}")
    return rotations, None


def build_game_day_rotations(
    league_id: int,
    game_day_id: int,
    assignments: Iterable[CourtAssignment],
    games_per_match: int,
    games_per_rotation: int
) -> Tuple[Dict[int, List[CourtRotation]], List[SkippedCourt]]:
    """
    Build rotations for every court with assignments on a game day.

    Returns:
        Tuple of (rotations keyed by court number, skipped courts). Skipped
        courts are absent from the mapping.
    """
    by_court: Dict[int, List[CourtAssignment]] = defaultdict(list)
    for assignment in assignments:
        by_court[assignment.court_number].append(assignment)

    rotations_by_court: Dict[int, List[CourtRotation]] = {}
    skipped: List[SkippedCourt] = []
    for court_number in sorted(by_court):
        rotations, skip = build_court_rotations(
            league_id,
            game_day_id,
            court_number,
            by_court[court_number],
            games_per_match,
            games_per_rotation,
        )
        if skip:
            skipped.append(skip)
        else:
            rotations_by_court[court_number] = rotations

    return rotations_by_court, skipped
