"""
Standings calculation service.
Ranks players within each court, decides promotion/relegation and rolls
game day standings up into season rankings.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ladder_league.database.models import (
    CourtAssignment, CourtConfiguration, CourtRotation, League, Movement, Standing, WinType
)
from ladder_league.services.rotation_service import player_sort_key

logger = logging.getLogger(__name__)


# ============================================================================
# Helper Functions
# ============================================================================

def round2(value: float) -> float:
    """Round half up to 2 decimal places."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def calculate_winner(team1_score: Optional[int], team2_score: Optional[int]) -> int:
    """
    Determine winner: 1 = team1, 2 = team2, -1 = tie or not yet scored.

    Missing scores count as 0, so a half-entered game can still produce a
    winner while a completely unscored game is a tie.
    """
    score1 = team1_score or 0
    score2 = team2_score or 0
    if score1 > score2:
        return 1
    elif score2 > score1:
        return 2
    else:
        return -1


def is_points_mode(win_type) -> bool:
    """Whether players are ranked primarily by total points."""
    return win_type == WinType.POINTS.value


# ============================================================================
# PlayerCourtStats Class
# ============================================================================

class PlayerCourtStats:
    """Accumulates one player's results on one court for a game day."""

    def __init__(
        self,
        player_id: int,
        court_number: int,
        is_substitute: bool = False,
        substitute_name: Optional[str] = None
    ):
        self.player_id = player_id
        self.court_number = court_number
        self.is_substitute = bool(is_substitute)
        self.substitute_name = substitute_name
        self.games_played = 0
        self.games_won = 0
        self.total_points = 0
        self.h2h_wins = 0
        self.court_rank = 0

    @property
    def win_pct(self) -> float:
        """Win percentage (0-100), rounded to 2 places."""
        if self.games_played == 0:
            return 0.0
        return round2(self.games_won / self.games_played * 100)

    @property
    def points_per_game(self) -> float:
        """Average team points per game, rounded to 2 places."""
        if self.games_played == 0:
            return 0.0
        return round2(self.total_points / self.games_played)

    def record_game(self, own_score: Optional[int], other_score: Optional[int]) -> None:
        """Record a game the player took part in."""
        self.games_played += 1
        self.total_points += own_score or 0
        if (own_score or 0) > (other_score or 0):
            self.games_won += 1


# ============================================================================
# CourtLedger Class
# ============================================================================

class CourtLedger:
    """
    Score ledger for a single court.

    Built once per court from that court's assignments and rotations, then
    discarded after ranking so nothing leaks between courts.
    """

    def __init__(
        self,
        court_number: int,
        assignments: Sequence[CourtAssignment],
        rotations: Sequence[CourtRotation]
    ):
        self.court_number = court_number
        self.rotations = [r for r in rotations if r.court_number == court_number]
        self.players: Dict[int, PlayerCourtStats] = {}
        # (winner_id, loser_id) -> games where winner's team beat loser's team
        self.head_to_head: Dict[Tuple[int, int], int] = {}

        for assignment in assignments:
            if assignment.player_id in self.players:
                continue
            self.players[assignment.player_id] = PlayerCourtStats(
                player_id=assignment.player_id,
                court_number=court_number,
                is_substitute=assignment.is_substitute,
                substitute_name=assignment.substitute_name,
            )

        self._aggregate()
        self._tally_head_to_head()

    @property
    def is_all_sub(self) -> bool:
        """Every assigned player is a substitute (and someone is assigned)."""
        return bool(self.players) and all(p.is_substitute for p in self.players.values())

    @property
    def regular_count(self) -> int:
        """Number of non-substitute players on the court."""
        return sum(1 for p in self.players.values() if not p.is_substitute)

    def _aggregate(self) -> None:
        """Record games played, points and wins for every assigned player."""
        for player in self.players.values():
            for rotation in self.rotations:
                team = rotation.team_of(player.player_id)
                if team == 1:
                    player.record_game(rotation.team1_score, rotation.team2_score)
                elif team == 2:
                    player.record_game(rotation.team2_score, rotation.team1_score)

    def _tally_head_to_head(self) -> None:
        """Count directional wins between every ordered pair of opponents."""
        player_ids = list(self.players)
        for rotation in self.rotations:
            winner = calculate_winner(rotation.team1_score, rotation.team2_score)
            if winner == -1:
                continue
            for player_a in player_ids:
                for player_b in player_ids:
                    team_a = rotation.team_of(player_a)
                    team_b = rotation.team_of(player_b)
                    if team_a is None or team_b is None or team_a == team_b:
                        continue
                    if team_a == winner:
                        key = (player_a, player_b)
                        self.head_to_head[key] = self.head_to_head.get(key, 0) + 1

        for player in self.players.values():
            player.h2h_wins = sum(
                wins for (winner_id, _), wins in self.head_to_head.items()
                if winner_id == player.player_id
            )

    def ranked(self, win_type) -> List[PlayerCourtStats]:
        """
        Rank the court's players and assign court_rank 1..N.

        Order: primary metric desc (points or wins depending on win_type),
        the other metric desc, head-to-head wins desc, then player identifier.
        """
        points_mode = is_points_mode(win_type)

        def sort_key(p: PlayerCourtStats):
            primary = p.total_points if points_mode else p.games_won
            secondary = p.games_won if points_mode else p.total_points
            return (-primary, -secondary, -p.h2h_wins, player_sort_key(p.player_id))

        ranked = sorted(self.players.values(), key=sort_key)
        for idx, player in enumerate(ranked):
            player.court_rank = idx + 1
        return ranked


# ============================================================================
# Movement Rules
# ============================================================================

def should_move_up(
    court_rank: int,
    is_substitute: bool,
    is_all_sub_court: bool,
    regular_count: int,
    players_moving_up: int
) -> bool:
    """
    Decide promotion.

    Substitutes only take a promotion spot when there are not enough regular
    players to fill it, unless the whole court is substitutes.
    """
    if is_all_sub_court:
        return court_rank <= players_moving_up

    if regular_count >= players_moving_up:
        return not is_substitute and court_rank <= players_moving_up

    return (not is_substitute) or (
        court_rank <= players_moving_up and court_rank > regular_count
    )


def should_move_down(
    court_rank: int,
    is_substitute: bool,
    court_number: int,
    max_court: int,
    players_count: int,
    players_moving_down: int
) -> bool:
    """Decide relegation."""
    if is_substitute and court_rank == players_count and court_number != max_court:
        return True
    return court_rank > players_count - players_moving_down


def decide_movement(move_up: bool, move_down: bool) -> Movement:
    """Promotion wins over relegation when both apply."""
    if move_up:
        return Movement.UP
    if move_down:
        return Movement.DOWN
    return Movement.STAY


def _default_court_config(league_id: int, court_number: int, player_count: int) -> CourtConfiguration:
    """Stand-in configuration for a court with assignments but no configuration row."""
    return CourtConfiguration(
        league_id=league_id,
        court_number=court_number,
        display_name=f"Court {court_number}",
        players_moving_up=0,
        players_moving_down=0,
        players_count=player_count,
    )


# ============================================================================
# Main Processing Function
# ============================================================================

def calculate_standings(
    league: League,
    game_day_id: int,
    court_configs: Iterable[CourtConfiguration],
    assignments: Iterable[CourtAssignment],
    rotations: Iterable[CourtRotation]
) -> List[Standing]:
    """
    Compute the standings for one game day.

    Pure function: nothing is read from or written to the database. The
    returned Standing instances are transient and meant to replace every
    existing standing for (league.id, game_day_id).

    Args:
        league: League (only id and win_type are used)
        game_day_id: Game day the standings belong to
        court_configs: Court configurations for the league
        assignments: All court assignments for the game day
        rotations: All rotations (with scores) for the game day

    Returns:
        One Standing per distinct assigned player, ordered by court then rank
    """
    assignments = list(assignments)
    rotations = list(rotations)
    config_by_court = {c.court_number: c for c in court_configs}

    assignments_by_court: Dict[int, List[CourtAssignment]] = {}
    for assignment in assignments:
        assignments_by_court.setdefault(assignment.court_number, []).append(assignment)

    max_court = max(assignments_by_court, default=0)

    final_standings: List[Standing] = []
    for court_number in sorted(assignments_by_court):
        ledger = CourtLedger(court_number, assignments_by_court[court_number], rotations)
        ranked = ledger.ranked(league.win_type)

        config = config_by_court.get(court_number)
        if config is None:
            logger.warning(
                f"No court configuration for court {court_number} in league {league.id}, "
                "using no movement"
            )
            config = _default_court_config(league.id, court_number, len(ranked))

        players_moving_up = config.players_moving_up or 0
        players_moving_down = config.players_moving_down or 0
        is_all_sub = ledger.is_all_sub
        regular_count = ledger.regular_count

        for player in ranked:
            move_up = should_move_up(
                player.court_rank,
                player.is_substitute,
                is_all_sub,
                regular_count,
                players_moving_up,
            )
            move_down = should_move_down(
                player.court_rank,
                player.is_substitute,
                court_number,
                max_court,
                config.players_count,
                players_moving_down,
            )
            final_standings.append(Standing(
                league_id=league.id,
                game_day_id=game_day_id,
                player_id=player.player_id,
                court_number=court_number,
                is_substitute=player.is_substitute,
                substitute_name=player.substitute_name,
                games_played=player.games_played,
                games_won=player.games_won,
                total_points=player.total_points,
                win_pct=player.win_pct,
                points_per_game=player.points_per_game,
                court_rank=player.court_rank,
                move_up=1 if move_up else 0,
                move_down=1 if move_down else 0,
                movement=decide_movement(move_up, move_down).value,
                display_name=config.display_name,
            ))

    return deduplicate_standings(final_standings)


def deduplicate_standings(standings: Iterable[Standing]) -> List[Standing]:
    """
    Keep one standing per player: the one with the lowest court_rank.

    On equal ranks the first one seen (lowest court number) is kept.
    """
    best: Dict[int, Standing] = {}
    for standing in standings:
        existing = best.get(standing.player_id)
        if existing is None or standing.court_rank < existing.court_rank:
            best[standing.player_id] = standing
    return list(best.values())


# ============================================================================
# Season Aggregation
# ============================================================================

class SeasonTotals:
    """Cumulative season statistics for a single player."""

    def __init__(self, player_id: int):
        self.player_id = player_id
        self.total_points = 0
        self.total_games_won = 0
        self.total_games_played = 0
        self.game_days = set()

    @property
    def weeks_played(self) -> int:
        return len(self.game_days)

    @property
    def weekly_avg_points(self) -> float:
        if self.weeks_played == 0:
            return 0.0
        return round2(self.total_points / self.weeks_played)

    @property
    def avg_points_per_game(self) -> float:
        if self.total_games_played == 0:
            return 0.0
        return round2(self.total_points / self.total_games_played)

    def add(self, standing: Standing) -> None:
        self.total_points += standing.total_points or 0
        self.total_games_won += standing.games_won or 0
        self.total_games_played += standing.games_played or 0
        self.game_days.add(standing.game_day_id)

    def to_dict(self) -> Dict:
        return {
            "player_id": self.player_id,
            "total_points": self.total_points,
            "total_games_won": self.total_games_won,
            "total_games_played": self.total_games_played,
            "weeks_played": self.weeks_played,
            "weekly_avg_points": self.weekly_avg_points,
            "avg_points_per_game": self.avg_points_per_game,
        }


def calculate_season_rankings(win_type, standings: Iterable[Standing]) -> List[Dict]:
    """
    Roll per-game-day standings up into season rankings.

    Sorted by (total_points, total_games_won) desc in points mode, otherwise
    (total_games_won, total_points) desc. Remaining ties keep the order in
    which players first appear in ``standings``.
    """
    totals: Dict[int, SeasonTotals] = {}
    for standing in standings:
        if standing.player_id not in totals:
            totals[standing.player_id] = SeasonTotals(standing.player_id)
        totals[standing.player_id].add(standing)

    if is_points_mode(win_type):
        def sort_key(t: SeasonTotals):
            return (-t.total_points, -t.total_games_won)
    else:
        def sort_key(t: SeasonTotals):
            return (-t.total_games_won, -t.total_points)

    return [t.to_dict() for t in sorted(totals.values(), key=sort_key)]
