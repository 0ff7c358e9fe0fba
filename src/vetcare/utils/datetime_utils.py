"""
DateTime utilities for clinic operations.

This module provides UTC normalization, calendar-day boundaries, the
canonical appointment slots of a clinic day and pet age calculation.
All comparisons use UTC calendar days; the clinic runs in a single zone.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Tuple

# Bookable hourly slots of a clinic day, in chronological order.
CLINIC_TIME_SLOTS: Tuple[str, ...] = (
    "09:00",
    "10:00",
    "11:00",
    "12:00",
    "13:00",
    "14:00",
    "15:00",
    "16:00",
    "17:00",
)


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(timezone.utc)


def get_current_date() -> date:
    """Get today's UTC calendar date."""
    return get_current_utc().date()


def to_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC (this is how SQLite
    hands stored timestamps back).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value: Any) -> datetime:
    """
    Coerce a date, datetime or ISO-8601 string into an aware UTC datetime.

    Args:
        value: ``datetime``, ``date`` or ISO string such as ``2025-04-10``
            or ``2025-04-10T11:00:00Z``

    Returns:
        Aware UTC datetime; bare dates map to midnight UTC

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Date value is empty")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    raise ValueError(f"Unsupported date value: {value!r}")


def day_bounds(value: Any) -> Tuple[datetime, datetime]:
    """
    Get the first and last instant of the UTC calendar day containing value.

    Returns:
        Tuple of (00:00:00.000000, 23:59:59.999999) as aware UTC datetimes
    """
    moment = parse_datetime(value)
    start = datetime.combine(moment.date(), time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


def format_calendar_date(value: Optional[Any]) -> Optional[str]:
    """
    Format a date or datetime as ``YYYY-MM-DD`` on the UTC calendar.

    Returns:
        Formatted date, or None when value is None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value).date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return parse_datetime(value).date().isoformat()


def calculate_age_years(
    birth_date: Optional[date], reference_date: Optional[date] = None
) -> Optional[int]:
    """
    Calculate a pet's age in whole years.

    The year difference is reduced by one when the reference month/day
    precedes the birth month/day. Birth dates after the reference date
    yield 0.

    Args:
        birth_date: The pet's birth date
        reference_date: The date to calculate age from (defaults to today)

    Returns:
        Age in whole years, or None when the birth date is unknown
    """
    if birth_date is None:
        return None
    if isinstance(birth_date, datetime):
        birth_date = to_utc(birth_date).date()
    if reference_date is None:
        reference_date = get_current_date()

    years = reference_date.year - birth_date.year
    if (reference_date.month, reference_date.day) < (
        birth_date.month,
        birth_date.day,
    ):
        years -= 1
    return max(years, 0)


def is_valid_time_slot(value: Any) -> bool:
    """Check whether value is one of the canonical clinic slots."""
    return value in CLINIC_TIME_SLOTS
