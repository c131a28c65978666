"""Utilities to round, bound and parse activity timestamps."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

from .errors import InvalidArgumentError

ROUNDING_INTERVALS: tuple[int, ...] = (0, 1, 5, 10, 15, 30, 60)

DAY_FMT = "%Y%m%d"
CLOCK_FMT = "%H:%M"

DayLike = Union[date, datetime]


def truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def round_up_to_interval(value: datetime, interval_minutes: int) -> datetime:
    """Round ``value`` up to the next multiple of ``interval_minutes``.

    Seconds are dropped first. Intervals of 0 and 1 only truncate. The result
    is never earlier than the truncated input and may roll into the next
    hour or day.
    """
    if interval_minutes not in ROUNDING_INTERVALS:
        raise InvalidArgumentError(
            f"Rounding must be one of {_format_intervals()} minutes, "
            f"got {interval_minutes}"
        )
    truncated = truncate_to_minute(value)
    if interval_minutes <= 1:
        return truncated
    remainder = truncated.minute % interval_minutes
    if remainder == 0:
        return truncated
    return truncated + timedelta(minutes=interval_minutes - remainder)


def as_day(value: DayLike) -> date:
    """Calendar date of ``value``; the time of day is discarded."""
    if isinstance(value, datetime):
        return value.date()
    return value


def at_time(day: DayLike, clock: time) -> datetime:
    return datetime.combine(as_day(day), clock)


def parse_day(value: str) -> date:
    """Parse a ``yyyyMMdd`` date such as ``20251027``."""
    try:
        return datetime.strptime(value.strip(), DAY_FMT).date()
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid date {value!r}. Use yyyyMMdd (e.g., 20251027)."
        ) from None


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` wall-clock time such as ``09:30``."""
    text = value.strip()
    try:
        parsed = datetime.strptime(text, CLOCK_FMT).time()
    except ValueError:
        parsed = None
    # strptime also accepts single digit fields like "9:5".
    if parsed is None or len(text) != 5:
        raise InvalidArgumentError(
            f"Invalid time {value!r}. Use HH:MM (e.g., 09:30)."
        )
    return parsed


def is_valid_clock(value: str) -> bool:
    try:
        parse_clock(value)
    except InvalidArgumentError:
        return False
    return True


def _format_intervals() -> str:
    return ", ".join(str(interval) for interval in ROUNDING_INTERVALS)
