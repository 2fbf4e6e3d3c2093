"""
SQLAlchemy ORM models for the pickleball ladder league.
"""

from typing import List, Optional
import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Float,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ladder_league.database.db import Base


class WinType(str, enum.Enum):
    """How players are ranked within a court."""

    POINTS = "points"
    WINS = "wins"


class GameDayStatus(str, enum.Enum):
    """Game day status enum."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Movement(str, enum.Enum):
    """Court movement decision for the next game day."""

    UP = "up"
    DOWN = "down"
    STAY = "stay"


class Player(Base):
    """Player profiles."""

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def first_name(self) -> str:
        """First word of the full name."""
        parts = (self.full_name or "").split()
        return parts[0] if parts else ""

    @property
    def last_name(self) -> str:
        """Everything after the first word of the full name."""
        parts = (self.full_name or "").split()
        return " ".join(parts[1:])

    __table_args__ = (Index("idx_players_name", "full_name"),)


class League(Base):
    """Ladder leagues and their match settings."""

    __tablename__ = "leagues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    play_day = Column(Integer, nullable=True)  # 0 = Monday ... 6 = Sunday
    win_type = Column(
        String(20),
        default=WinType.POINTS.value,
        nullable=False,
        server_default=WinType.POINTS.value,
    )
    points_to_win = Column(Integer, default=11, nullable=False)
    win_by_margin = Column(Integer, default=2, nullable=False)
    courts = Column(Integer, default=1, nullable=False)
    players_per_court = Column(Integer, default=4, nullable=False)
    games_per_match = Column(Integer, default=3, nullable=False)
    games_per_rotation = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    game_days = relationship("GameDay", back_populates="league", cascade="all, delete-orphan")
    court_configurations = relationship(
        "CourtConfiguration", back_populates="league", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            f"win_type IN ({', '.join(repr(e.value) for e in WinType)})",
            name="check_win_type_valid",
        ),
    )


class CourtConfiguration(Base):
    """Per-court movement rules and expected occupancy."""

    __tablename__ = "court_configurations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    court_number = Column(Integer, nullable=False)  # 1 = top court
    display_name = Column(String, nullable=False)
    players_moving_up = Column(Integer, default=1, nullable=False)
    players_moving_down = Column(Integer, default=1, nullable=False)
    players_count = Column(Integer, default=4, nullable=False)  # Expected occupancy

    # Relationships
    league = relationship("League", back_populates="court_configurations")

    __table_args__ = (
        UniqueConstraint("league_id", "court_number"),
        Index("idx_court_configurations_league", "league_id"),
    )


class GameDay(Base):
    """A single date of play within a league."""

    __tablename__ = "game_days"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String, nullable=True)  # HH:MM local
    end_time = Column(String, nullable=True)  # HH:MM local
    status = Column(
        String(20),
        default=GameDayStatus.PENDING.value,
        nullable=False,
        server_default=GameDayStatus.PENDING.value,
    )
    is_finalized = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    league = relationship("League", back_populates="game_days")

    __table_args__ = (
        UniqueConstraint("league_id", "date"),
        CheckConstraint(
            f"status IN ({', '.join(repr(e.value) for e in GameDayStatus)})",
            name="check_game_day_status_valid",
        ),
        Index("idx_game_days_league", "league_id"),
        Index("idx_game_days_status", "status"),
    )


class CourtAssignment(Base):
    """One occupied slot on a court for a game day."""

    __tablename__ = "court_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    game_day_id = Column(Integer, ForeignKey("game_days.id"), nullable=False)
    court_number = Column(Integer, nullable=False)
    slot_number = Column(Integer, nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    is_substitute = Column(Boolean, default=False, nullable=False)
    substitute_name = Column(String, nullable=True)
    regular_player_id = Column(
        Integer, ForeignKey("players.id"), nullable=True
    )  # Regular player this substitute is filling in for

    __table_args__ = (
        UniqueConstraint("league_id", "game_day_id", "player_id"),
        Index("idx_court_assignments_game_day", "league_id", "game_day_id"),
        Index("idx_court_assignments_court", "game_day_id", "court_number"),
    )


class GameDayAttendance(Base):
    """Whether a player showed up for a game day. Players without a row count as present."""

    __tablename__ = "game_day_attendance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    game_day_id = Column(Integer, ForeignKey("game_days.id"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    is_present = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("game_day_id", "player_id"),
        Index("idx_game_day_attendance_game_day", "league_id", "game_day_id"),
    )


class CourtRotation(Base):
    """A single scheduled doubles game on a court."""

    __tablename__ = "court_rotations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    game_day_id = Column(Integer, ForeignKey("game_days.id"), nullable=False)
    court_number = Column(Integer, nullable=False)
    rotation_number = Column(Integer, nullable=False)
    game_number = Column(Integer, nullable=False)
    team1_player1_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    team1_player2_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    team2_player1_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    team2_player2_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    team1_score = Column(Integer, nullable=True)  # NULL until scored
    team2_score = Column(Integer, nullable=True)  # NULL until scored

    @property
    def player_ids(self) -> List[List[int]]:
        """Get player IDs as list of teams (for calculation service)."""
        return [
            [self.team1_player1_id, self.team1_player2_id],
            [self.team2_player1_id, self.team2_player2_id],
        ]

    @property
    def is_complete(self) -> bool:
        """Both team scores have been entered."""
        return self.team1_score is not None and self.team2_score is not None

    def team_of(self, player_id: int) -> Optional[int]:
        """Return 1 or 2 for the team the player is on, or None if not playing."""
        if player_id in (self.team1_player1_id, self.team1_player2_id):
            return 1
        if player_id in (self.team2_player1_id, self.team2_player2_id):
            return 2
        return None

    __table_args__ = (
        UniqueConstraint("league_id", "game_day_id", "court_number", "game_number"),
        Index("idx_court_rotations_game_day", "league_id", "game_day_id"),
        Index("idx_court_rotations_court", "game_day_id", "court_number"),
    )


class Standing(Base):
    """Ranked, movement-annotated result for one player on one game day."""

    __tablename__ = "standings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    game_day_id = Column(Integer, ForeignKey("game_days.id"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    court_number = Column(Integer, nullable=False)
    is_substitute = Column(Boolean, default=False, nullable=False)
    substitute_name = Column(String, nullable=True)
    games_played = Column(Integer, default=0, nullable=False)
    games_won = Column(Integer, default=0, nullable=False)
    total_points = Column(Integer, default=0, nullable=False)
    win_pct = Column(Float, default=0.0, nullable=False)
    points_per_game = Column(Float, default=0.0, nullable=False)
    court_rank = Column(Integer, nullable=False)
    move_up = Column(Integer, default=0, nullable=False)  # 0 or 1
    move_down = Column(Integer, default=0, nullable=False)  # 0 or 1
    movement = Column(String(10), default=Movement.STAY.value, nullable=False)
    display_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("league_id", "game_day_id", "player_id"),
        CheckConstraint(
            f"movement IN ({', '.join(repr(e.value) for e in Movement)})",
            name="check_movement_valid",
        ),
        Index("idx_standings_game_day", "league_id", "game_day_id"),
        Index("idx_standings_league_player", "league_id", "player_id"),
    )


class StatsCalculationJobStatus(str, enum.Enum):
    """Stats calculation job status enum."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StatsCalculationJob(Base):
    """Queue for standings calculation jobs."""

    __tablename__ = "stats_calculation_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    calc_type = Column(String, nullable=False)  # 'game_day'
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=True)
    game_day_id = Column(Integer, ForeignKey("game_days.id"), nullable=True)
    status = Column(
        Enum(StatsCalculationJobStatus), default=StatsCalculationJobStatus.PENDING, nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(Text, nullable=True)

    # Relationships
    league = relationship("League", foreign_keys=[league_id])
    game_day = relationship("GameDay", foreign_keys=[game_day_id])

    __table_args__ = (
        Index("idx_stats_calculation_jobs_status", "status"),
        Index("idx_stats_calculation_jobs_type_game_day", "calc_type", "league_id", "game_day_id"),
        Index("idx_stats_calculation_jobs_created_at", "created_at"),
    )
