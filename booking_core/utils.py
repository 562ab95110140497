"""Naive time-of-day helpers shared across the scheduling modules.

All times are provider-local ``HH:MM`` strings with no timezone. Arithmetic
is done in minutes since midnight so comparisons never depend on string
ordering.
"""

import re
from datetime import date, datetime

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
DATE_FORMAT = "%Y-%m-%d"
MINUTES_PER_DAY = 24 * 60


def to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight.

    Examples:
        >>> to_minutes("09:30")
        570
        >>> to_minutes("00:00")
        0
    """
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    """Format minutes since midnight as ``HH:MM``.

    Values past midnight are rejected rather than wrapped to the next day.

    Examples:
        >>> from_minutes(570)
        '09:30'
    """
    if not 0 <= total < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of day range: {total}")
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    """Shift an ``HH:MM`` string forward without crossing midnight."""
    return from_minutes(to_minutes(value) + minutes)


def is_valid_time(value: str) -> bool:
    return bool(TIME_PATTERN.match(value.strip()))


def parse_date(value: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` calendar date."""
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def is_valid_date(value: str) -> bool:
    """Validate date is in YYYY-MM-DD format."""
    try:
        parse_date(value)
        return True
    except ValueError:
        return False


def normalize_date(value: str) -> str:
    """Return the canonical zero-padded ISO form of a calendar date.

    Examples:
        >>> normalize_date("2025-3-7")
        '2025-03-07'
    """
    return parse_date(value).isoformat()
