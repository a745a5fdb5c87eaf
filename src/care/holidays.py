"""Holiday dates: fixed-rule, Easter and lunar calendar holidays."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import structlog
from convertdate import hebrew, islamic

from care.dates import days_between, to_day
from shared_types import HolidayId

logger = structlog.get_logger()

DEFAULT_SCAN_DAYS = 370

# convertdate numbering: Nisan = 1, so Tishri (new year) is 7
HEBREW_MONTHS = {
    1: "Nisan",
    2: "Iyyar",
    3: "Sivan",
    4: "Tammuz",
    5: "Av",
    6: "Elul",
    7: "Tishri",
    8: "Heshvan",
    9: "Kislev",
    10: "Teveth",
    11: "Shevat",
    12: "Adar",
    13: "Adar II",
}

ISLAMIC_MONTHS = {
    1: "Muharram",
    2: "Safar",
    3: "Rabi al-Awwal",
    4: "Rabi al-Thani",
    5: "Jumada al-Awwal",
    6: "Jumada al-Thani",
    7: "Rajab",
    8: "Shaban",
    9: "Ramadan",
    10: "Shawwal",
    11: "Dhu al-Qadah",
    12: "Dhu al-Hijjah",
}

HOLIDAY_LABELS = {
    HolidayId.MOTHERS_DAY: "Mother's Day",
    HolidayId.FATHERS_DAY: "Father's Day",
    HolidayId.EASTER_WESTERN: "Easter",
    HolidayId.EASTER_ORTHODOX: "Greek Easter",
    HolidayId.HANUKKAH: "Hanukkah",
    HolidayId.RAMADAN: "Ramadan",
    HolidayId.EID_AL_FITR: "Eid al-Fitr",
}


class CalendarError(Exception):
    """Calendar conversion unavailable or failed."""


class CalendarConverter(ABC):
    """Gregorian → (month name, day) in another calendar system."""

    @abstractmethod
    def month_day(self, value: date, calendar: str) -> tuple[str, int]:
        """Return the month name and day number of ``value`` in ``calendar``.

        Args:
            value: Gregorian date
            calendar: "hebrew" or "islamic"
        """
        ...


class ConvertdateConverter(CalendarConverter):
    """Arithmetic Hebrew/Islamic calendars from the convertdate package."""

    def month_day(self, value: date, calendar: str) -> tuple[str, int]:
        if calendar == "hebrew":
            _, month, day = hebrew.from_gregorian(value.year, value.month, value.day)
            return HEBREW_MONTHS.get(month, ""), day
        if calendar == "islamic":
            _, month, day = islamic.from_gregorian(value.year, value.month, value.day)
            return ISLAMIC_MONTHS.get(month, ""), day
        raise CalendarError(f"Unsupported calendar: {calendar}")


@dataclass(frozen=True)
class HolidayOccurrence:
    id: HolidayId
    label: str
    date: date


def nth_weekday_of_month(year: int, month: int, weekday: int, nth: int) -> date:
    """Date of the ``nth`` ``weekday`` (Monday=0 … Sunday=6) in a month."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (nth - 1) * 7)


def mothers_day(year: int) -> date:
    # US: second Sunday in May
    return nth_weekday_of_month(year, 5, 6, 2)


def fathers_day(year: int) -> date:
    # US: third Sunday in June
    return nth_weekday_of_month(year, 6, 6, 3)


def western_easter(year: int) -> date:
    """Anonymous Gregorian algorithm (Meeus/Jones/Butcher)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def julian_to_gregorian_offset(year: int) -> int:
    if year >= 2100:
        return 14
    if year >= 1900:
        return 13
    return 12


def orthodox_easter(year: int) -> date:
    """Julian Easter (Meeus) shifted onto the Gregorian calendar."""
    a = year % 4
    b = year % 7
    c = year % 19
    d = (19 * c + 15) % 30
    e = (2 * a + 4 * b - d + 34) % 7
    month = (d + e + 114) // 31
    day = ((d + e + 114) % 31) + 1
    # Julian month/day read as a proleptic Gregorian date, then shifted
    return date(year, month, day) + timedelta(days=julian_to_gregorian_offset(year))


def find_next_calendar_match(
    calendar: str,
    base: date | datetime,
    scan_days: int,
    matcher: Callable[[str, int], bool],
    converter: Optional[CalendarConverter] = None,
) -> Optional[date]:
    """Scan forward day by day until ``matcher(month_name, day)`` is true.

    Raises CalendarError when the converter fails.
    """
    converter = converter or ConvertdateConverter()
    start = to_day(base)
    for offset in range(scan_days + 1):
        candidate = start + timedelta(days=offset)
        try:
            month, day = converter.month_day(candidate, calendar)
        except CalendarError:
            raise
        except Exception as e:
            raise CalendarError(f"{calendar} conversion failed for {candidate}: {e}") from e
        if matcher(month, day):
            return candidate
    return None


def next_hanukkah_start(
    base: date | datetime,
    converter: Optional[CalendarConverter] = None,
    scan_days: int = DEFAULT_SCAN_DAYS,
) -> Optional[date]:
    # 25 Kislev
    return find_next_calendar_match(
        "hebrew", base, scan_days, lambda month, day: "kislev" in month.lower() and day == 25, converter
    )


def next_ramadan_start(
    base: date | datetime,
    converter: Optional[CalendarConverter] = None,
    scan_days: int = DEFAULT_SCAN_DAYS,
) -> Optional[date]:
    # 1 Ramadan
    return find_next_calendar_match(
        "islamic", base, scan_days, lambda month, day: "ramadan" in month.lower() and day == 1, converter
    )


def next_eid_al_fitr(
    base: date | datetime,
    converter: Optional[CalendarConverter] = None,
    scan_days: int = DEFAULT_SCAN_DAYS,
) -> Optional[date]:
    # 1 Shawwal
    return find_next_calendar_match(
        "islamic", base, scan_days, lambda month, day: "shawwal" in month.lower() and day == 1, converter
    )


_LUNAR_FINDERS = (
    (HolidayId.HANUKKAH, next_hanukkah_start),
    (HolidayId.RAMADAN, next_ramadan_start),
    (HolidayId.EID_AL_FITR, next_eid_al_fitr),
)


def get_upcoming_holidays(
    today: date | datetime,
    horizon_days: int = 21,
    converter: Optional[CalendarConverter] = None,
    scan_days: int = DEFAULT_SCAN_DAYS,
) -> list[HolidayOccurrence]:
    """Holidays falling within ``[0, horizon_days]`` of today, soonest first.

    Fixed-rule holidays are computed for today's year only. Lunar holidays
    whose conversion fails are left out.
    """
    today = to_day(today)
    year = today.year
    converter = converter or ConvertdateConverter()

    candidates = [
        HolidayOccurrence(HolidayId.MOTHERS_DAY, HOLIDAY_LABELS[HolidayId.MOTHERS_DAY], mothers_day(year)),
        HolidayOccurrence(HolidayId.FATHERS_DAY, HOLIDAY_LABELS[HolidayId.FATHERS_DAY], fathers_day(year)),
        HolidayOccurrence(
            HolidayId.EASTER_WESTERN, HOLIDAY_LABELS[HolidayId.EASTER_WESTERN], western_easter(year)
        ),
        HolidayOccurrence(
            HolidayId.EASTER_ORTHODOX, HOLIDAY_LABELS[HolidayId.EASTER_ORTHODOX], orthodox_easter(year)
        ),
    ]

    for holiday_id, finder in _LUNAR_FINDERS:
        try:
            found = finder(today, converter=converter, scan_days=scan_days)
        except CalendarError as e:
            logger.warning("holiday_conversion_failed", holiday=str(holiday_id), error=str(e))
            continue
        if found:
            candidates.append(HolidayOccurrence(holiday_id, HOLIDAY_LABELS[holiday_id], found))

    upcoming = [h for h in candidates if 0 <= days_between(h.date, today) <= horizon_days]
    upcoming.sort(key=lambda h: h.date)
    return upcoming
