"""
Pydantic models for API request/response validation.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str


class GameDayResponse(BaseModel):
    """Game day data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    league_id: int
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: str
    is_finalized: bool


class GenerateGameDaysRequest(BaseModel):
    """Request to create weekly game days for a league."""

    start_date: str  # YYYY-MM-DD
    end_date: str  # YYYY-MM-DD
    play_day: Optional[int] = Field(None, ge=0, le=6)  # 0 = Monday ... 6 = Sunday

    @model_validator(mode="after")
    def validate_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class CourtSizeRequest(BaseModel):
    """Request to set how many players a court holds."""

    size: int = Field(..., ge=1)
    display_name: Optional[str] = None


class CourtConfigurationResponse(BaseModel):
    """Court configuration data."""

    id: int
    league_id: int
    court_number: int
    display_name: str
    players_moving_up: int
    players_moving_down: int
    players_count: int


class CourtAssignmentEntry(BaseModel):
    """A player placed on a court. Slot order follows list order."""

    player_id: int
    is_substitute: bool = False
    substitute_name: Optional[str] = None
    regular_player_id: Optional[int] = None


class SaveCourtAssignmentsRequest(BaseModel):
    """Court number -> players on that court."""

    courts: Dict[int, List[CourtAssignmentEntry]]


class CourtAssignmentResponse(BaseModel):
    """Stored court assignment."""

    id: int
    court_number: int
    slot_number: int
    player_id: int
    is_substitute: bool
    substitute_name: Optional[str] = None
    regular_player_id: Optional[int] = None


class SkippedCourtResponse(BaseModel):
    court_number: int
    player_count: int


class GenerateRotationsResponse(BaseModel):
    """Outcome of rotation generation for a game day."""

    game_day_id: int
    status: str
    courts: Dict[int, int]  # court number -> games generated
    skipped_courts: List[SkippedCourtResponse]


class RotationResponse(BaseModel):
    """A scheduled game."""

    id: int
    league_id: int
    game_day_id: int
    court_number: int
    rotation_number: int
    game_number: int
    team1_player1_id: int
    team1_player2_id: int
    team2_player1_id: int
    team2_player2_id: int
    team1_score: Optional[int] = None
    team2_score: Optional[int] = None


class UpdateScoreRequest(BaseModel):
    """Scores for a game. Either may be left unset."""

    team1_score: Optional[int] = Field(None, ge=0)
    team2_score: Optional[int] = Field(None, ge=0)


class UpdateScoreResponse(BaseModel):
    success: bool
    game_day_updated: bool
    game_day_status: str
    message: str


class FinalizeResponse(BaseModel):
    """Outcome of finalizing a game day."""

    game_day_id: int
    status: str
    is_finalized: bool
    job_id: int


class StandingResponse(BaseModel):
    """A player's ranked result for a game day."""

    player_id: int
    court_number: int
    is_substitute: bool
    substitute_name: Optional[str] = None
    games_played: int
    games_won: int
    total_points: int
    win_pct: float
    points_per_game: float
    court_rank: int
    move_up: int
    move_down: int
    movement: str
    display_name: str


class GameDayRankingResponse(StandingResponse):
    """Standing with player names and per-game team scores."""

    player_name: Optional[str] = None
    first_name: str
    last_name: str
    game_scores: List[Optional[int]]


class NextWeekAssignmentResponse(BaseModel):
    """Where a player plays on the next game day."""

    player_id: int
    current_court_number: int
    next_court_number: int
    movement: str
    is_substitute: bool
    player_name: Optional[str] = None
    first_name: str
    last_name: str


class SeasonRankingResponse(BaseModel):
    """Cumulative season statistics for a player."""

    player_id: int
    player_name: Optional[str] = None
    first_name: str
    last_name: str
    total_points: int
    total_games_won: int
    total_games_played: int
    weeks_played: int
    weekly_avg_points: float
    avg_points_per_game: float


class CalculateResponse(BaseModel):
    """Queued standings calculation."""

    job_id: int
    status: str
    league_id: int
    game_day_id: int


class AttendanceRequest(BaseModel):
    is_present: bool


class AttendanceResponse(BaseModel):
    """A player's attendance on a game day."""

    player_id: int
    game_day_id: int
    court_number: Optional[int] = None
    is_present: bool
    player_name: Optional[str] = None
    first_name: str = ""
    last_name: str = ""


class MarkAbsentResponse(BaseModel):
    """Outcome of marking a player absent."""

    player_id: int
    game_day_id: int
    is_present: bool
    standing_updated: bool
