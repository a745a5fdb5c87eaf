"""Date and occurrence math for moments.

Dates are stored as ``YYYY-MM-DD`` strings. The year segment may be the
sentinel ``0000`` when the year is unknown (common for birthdays), so the
helpers here work on ``DateParts`` rather than ``datetime.date`` until a
concrete occurrence year is known.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from shared_types import TimelineCategory

UNKNOWN_YEAR = "0000"

NOTABLE_BIRTHDAYS = frozenset({5, 10, 13, 16, 18, 21})

_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")


@dataclass(frozen=True)
class DateParts:
    year: Optional[int]  # None when the year is the unknown sentinel
    month: int
    day: int


@dataclass(frozen=True)
class Occurrence:
    target: date
    days_until: int
    year: int


def to_day(value: date | datetime) -> date:
    """Truncate a datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_date_parts(value: Optional[str]) -> Optional[DateParts]:
    """Split ``YYYY-MM-DD`` into parts. Returns None for anything unparseable."""
    if not value or not isinstance(value, str):
        return None
    match = _DATE_RE.match(value)
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return DateParts(year=year if year > 0 else None, month=month, day=day)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_calendar_date(value: Optional[str]) -> Optional[date]:
    """Parse a literal calendar date. Unknown-year dates have no literal day."""
    parts = parse_date_parts(value)
    if not parts or parts.year is None:
        return None
    return _safe_date(parts.year, parts.month, parts.day)


def days_between(target: date | datetime, base: date | datetime) -> int:
    """Whole days from ``base`` to ``target`` (negative when target is earlier)."""
    return (to_day(target) - to_day(base)).days


def next_occurrence(
    value: Optional[str],
    today: date | datetime,
    horizon_days: int,
    recurring: bool = True,
) -> Optional[Occurrence]:
    """Next occurrence of a dated moment within ``[0, horizon_days]`` of today.

    Recurring dates use this year's month/day, rolling forward one year when
    already past. A month/day that does not exist in the target year (Feb 29)
    yields no occurrence rather than being clamped.
    """
    parts = parse_date_parts(value)
    if not parts:
        return None
    today = to_day(today)

    if recurring:
        this_year = _safe_date(today.year, parts.month, parts.day)
        if this_year is None:
            return None
        target = this_year
        if this_year < today:
            target = _safe_date(today.year + 1, parts.month, parts.day)
            if target is None:
                return None
    else:
        if parts.year is None:
            return None
        target = _safe_date(parts.year, parts.month, parts.day)
        if target is None:
            return None

    days_until = days_between(target, today)
    if days_until < 0 or days_until > horizon_days:
        return None
    return Occurrence(target=target, days_until=days_until, year=target.year)


def years_since(value: Optional[str], occurrence_year: int) -> Optional[int]:
    """Age or years elapsed at ``occurrence_year``; None when the start year is unknown."""
    parts = parse_date_parts(value)
    if not parts or parts.year is None:
        return None
    elapsed = occurrence_year - parts.year
    return elapsed if elapsed > 0 else None


def is_decade_milestone(years: Optional[int]) -> bool:
    return bool(years) and years > 0 and years % 10 == 0


def is_notable_birthday(years: Optional[int]) -> bool:
    return years in NOTABLE_BIRTHDAYS


def matches_yesterday(value: Optional[str], today: date | datetime, recurring: bool = True) -> bool:
    """Whether a moment fell on the day before ``today``."""
    parts = parse_date_parts(value)
    if not parts:
        return False
    yesterday = to_day(today) - timedelta(days=1)
    if recurring:
        return parts.month == yesterday.month and parts.day == yesterday.day
    return parse_calendar_date(value) == yesterday


def format_in_days(days_until: int) -> str:
    if days_until == 0:
        return "today"
    if days_until == 1:
        return "tomorrow"
    return f"in {days_until} days"


def format_month_day(value: date) -> str:
    return f"{value.strftime('%B')} {value.day}"


def timeline_category(days_until: int) -> Optional[TimelineCategory]:
    if 0 <= days_until <= 7:
        return TimelineCategory.SOON
    if 8 <= days_until <= 30:
        return TimelineCategory.UPCOMING
    if 31 <= days_until <= 90:
        return TimelineCategory.LATER
    return None
