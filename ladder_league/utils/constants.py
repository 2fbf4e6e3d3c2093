"""
Constants used across the ladder league engine.
"""

# Rotation defaults (used when a league leaves these unset)
DEFAULT_GAMES_PER_MATCH = 3
DEFAULT_GAMES_PER_ROTATION = 1
PLAYERS_PER_COURT = 4

# Court configuration defaults for newly sized courts
DEFAULT_PLAYERS_MOVING_UP = 1
DEFAULT_PLAYERS_MOVING_DOWN = 1

# Default rally scoring for a pickleball game
DEFAULT_POINTS_TO_WIN = 11
DEFAULT_WIN_BY_MARGIN = 2

# Partnership patterns for a 4-player court.
# [a, b, c, d] -> team 1 = players[a] & players[b], team 2 = players[c] & players[d]
PARTNERSHIP_PATTERNS = (
    (0, 3, 1, 2),  # 1&4 vs 2&3
    (0, 1, 2, 3),  # 1&2 vs 3&4
    (0, 2, 1, 3),  # 1&3 vs 2&4
)

# Default game day times (local)
DEFAULT_GAME_DAY_START_TIME = "07:00"
DEFAULT_GAME_DAY_END_TIME = "10:00"

# Substitute name stored on the standing of a player marked absent
ABSENT_SUBSTITUTE_NAME = "ABSENT"
