"""Calendar helpers for period windows and month keys."""

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Tuple


def parse_as_of(value: Optional[str]) -> date:
    """Parse an as_of_date query value, defaulting to today.

    Args:
        value: Date string (YYYY-MM-DD) or None

    Returns:
        Parsed date, or today's local date if missing or invalid
    """
    if value:
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except ValueError:
            pass
    return date.today()


def is_month_key(value: str) -> bool:
    """Check a string is a valid YYYY-MM month key."""
    try:
        datetime.strptime(value, '%Y-%m')
        return len(value) == 7
    except (TypeError, ValueError):
        return False


def month_key(day: date) -> str:
    """Format the YYYY-MM key of a date."""
    return day.strftime('%Y-%m')


def add_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Shift a (year, month) pair by delta calendar months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def previous_month_key(key: str) -> str:
    """Get the month key before the given one (2025-01 -> 2024-12)."""
    year, month = add_months(int(key[:4]), int(key[5:7]), -1)
    return f'{year:04d}-{month:02d}'


def last_day_of_month(day: date) -> date:
    """Last calendar day of the month containing day."""
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def week_bounds(day: date) -> Tuple[date, date]:
    """Monday..Sunday week containing day."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def iso_week_key(day: date) -> str:
    """ISO week key, e.g. 2025-W07."""
    year, week, _ = day.isocalendar()
    return f'{year}-W{week:02d}'
