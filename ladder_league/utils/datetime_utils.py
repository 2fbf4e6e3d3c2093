"""
Datetime utility functions.
Provides replacements for deprecated datetime functions and game day date helpers.
"""

from datetime import date, datetime, timedelta
from typing import List, Union
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def parse_date(date_input: Union[str, date]) -> date:
    """
    Parse an ISO date string (YYYY-MM-DD) into a date.

    Args:
        date_input: ISO date string, date or datetime

    Returns:
        The parsed date

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if isinstance(date_input, datetime):
        return date_input.date()
    if isinstance(date_input, date):
        return date_input
    if not isinstance(date_input, str):
        raise ValueError(f"Expected string or date, got {type(date_input)}")
    return datetime.strptime(date_input.strip(), "%Y-%m-%d").date()


def weekly_dates(start: date, end: date, play_day: int) -> List[date]:
    """
    List every date falling on ``play_day`` between ``start`` and ``end`` (inclusive).

    Args:
        start: First candidate date
        end: Last candidate date
        play_day: Weekday number (0 = Monday ... 6 = Sunday)

    Returns:
        Dates spaced 7 days apart, starting at the first ``play_day`` on or after ``start``

    Examples:
        >>> weekly_dates(date(2025, 6, 2), date(2025, 6, 20), 2)
        [datetime.date(2025, 6, 4), datetime.date(2025, 6, 11), datetime.date(2025, 6, 18)]
    """
    if not 0 <= play_day <= 6:
        raise ValueError(f"play_day must be between 0 and 6, got {play_day}")

    current = start + timedelta(days=(play_day - start.weekday()) % 7)
    result = []
    while current <= end:
        result.append(current)
        current += timedelta(days=7)
    return result
