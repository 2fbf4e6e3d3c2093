"""
Error types raised by the ladder league services.

Both subclass ValueError so callers that already catch ValueError for bad
input keep working.
"""

from dataclasses import dataclass


class NotFoundError(ValueError):
    """A league, game day or rotation does not exist."""


class PreconditionFailedError(ValueError):
    """The requested state change is not allowed right now."""

    def __init__(self, message: str, incomplete_count: int = 0):
        super().__init__(message)
        self.incomplete_count = incomplete_count


@dataclass(frozen=True)
class SkippedCourt:
    """A court that did not get rotations because it lacks exactly 4 players."""

    court_number: int
    player_count: int
