"""
DateTime utilities for pet record operations.

This module provides timezone-aware datetime handling, calendar window
arithmetic and age calculation helpers. All instants handled by the core
are UTC; naive datetimes are interpreted as UTC.
"""

import calendar
from datetime import date, datetime, time
from typing import Dict, Optional, Tuple
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime, treating naive values as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def combine_utc(day: date, time_of_day: time) -> datetime:
    """Combine a calendar date and a time-of-day into a UTC instant."""
    return datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=UTC)


def add_months(dt: datetime, months: int) -> datetime:
    """
    Add calendar months to a datetime, clamping the day to the target month.

    Args:
        dt: The starting datetime
        months: Number of months to add (may be negative)

    Returns:
        Shifted datetime with the same time-of-day and tzinfo

    Example:
        >>> add_months(datetime(2024, 1, 31), 1)
        datetime.datetime(2024, 2, 29, 0, 0)
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def date_window(start: datetime, end: datetime) -> Tuple[date, date]:
    """Return the inclusive calendar-date bounds of an instant window."""
    return ensure_utc(start).date(), ensure_utc(end).date()


def format_time_of_day(value: Optional[time]) -> str:
    """Format a time-of-day as ``H:MM`` (hours not zero padded)."""
    if value is None:
        return ""
    return f"{value.hour}:{value.minute:02d}"


def calculate_pet_age(
    birth_date: date, reference_date: Optional[date] = None
) -> Dict[str, int]:
    """
    Calculate a pet's age in years, months, and days.

    Args:
        birth_date: The pet's birth date
        reference_date: The date to calculate age from (defaults to today UTC)

    Returns:
        Dictionary with 'years', 'months', and 'days' keys
    """
    if reference_date is None:
        reference_date = get_current_utc().date()

    if birth_date > reference_date:
        raise ValueError("Birth date cannot be in the future")

    years = reference_date.year - birth_date.year
    months = reference_date.month - birth_date.month
    days = reference_date.day - birth_date.day

    if days < 0:
        months -= 1
        if reference_date.month == 1:
            prev_month_last_day = calendar.monthrange(reference_date.year - 1, 12)[1]
        else:
            prev_month_last_day = calendar.monthrange(
                reference_date.year, reference_date.month - 1
            )[1]
        days += prev_month_last_day

    if months < 0:
        years -= 1
        months += 12

    return {"years": years, "months": months, "days": days}


def format_pet_age(age_dict: Dict[str, int]) -> str:
    """Format a pet's age dictionary into a human-readable string."""
    years = age_dict["years"]
    months = age_dict["months"]
    days = age_dict["days"]

    parts = []
    if years > 0:
        parts.append(f"{years} year{'s' if years != 1 else ''}")
    if months > 0:
        parts.append(f"{months} month{'s' if months != 1 else ''}")
    if days > 0 and years == 0:
        parts.append(f"{days} day{'s' if days != 1 else ''}")

    if not parts:
        return "0 days"

    return ", ".join(parts)

