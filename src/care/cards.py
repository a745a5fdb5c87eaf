"""Compact care cards: a plain dated list of what is coming up for whom.

Unlike the suggestion feed, cards carry no actions, follow-ups or questions.
They are ordered by kind first (kids' birthdays, birthdays, holidays, school,
sensitive dates, anniversaries, other dates), then by how soon they are.
"""

from datetime import date, datetime
from typing import Iterable, Optional

import structlog

from care import dates
from care.generator import HOLIDAY_CULTURES, PARENTAL_HOLIDAYS, Horizons, resolve_culture, school_event_label
from care.holidays import CalendarConverter, HolidayOccurrence, get_upcoming_holidays
from care.suggestions import CareCard
from people.models import Person
from shared_types import CareCardType, HolidayId, MomentType

logger = structlog.get_logger()

CARD_PRIORITY = {
    CareCardType.CHILD_BIRTHDAY: 0,
    CareCardType.PERSON_BIRTHDAY: 1,
    CareCardType.HOLIDAY: 2,
    CareCardType.SCHOOL_MILESTONE: 3,
    CareCardType.SENSITIVE_DATE: 4,
    CareCardType.ANNIVERSARY: 5,
    CareCardType.IMPORTANT_DATE: 6,
}

# holiday -> (id segment, title name, message)
CARD_HOLIDAYS = {
    HolidayId.MOTHERS_DAY: ("mothersDay", "Mother's Day", "Send a kind note?"),
    HolidayId.FATHERS_DAY: ("fathersDay", "Father's Day", "Send a kind note?"),
    HolidayId.EASTER_ORTHODOX: ("orthodoxEaster", "Greek Easter", "Reach out?"),
    HolidayId.EASTER_WESTERN: ("easter", "Easter", "Reach out?"),
    HolidayId.HANUKKAH: ("hanukkah", "Hanukkah", "Send a kind note?"),
    HolidayId.RAMADAN: ("ramadan", "Ramadan", "Reach out?"),
    HolidayId.EID_AL_FITR: ("eid", "Eid", "Reach out?"),
}

# moment card type -> (id prefix, message)
MOMENT_CARDS = {
    CareCardType.SENSITIVE_DATE: ("sensitive", "Check in?"),
    CareCardType.ANNIVERSARY: ("anniversary", "Reach out?"),
    CareCardType.IMPORTANT_DATE: ("important", "Make a note?"),
}


def _card(
    card_type: CareCardType,
    card_id: str,
    person: Person,
    target: date,
    days_until: int,
    title: str,
    message: str,
    child_id: Optional[str] = None,
) -> CareCard:
    return CareCard(
        id=card_id,
        type=card_type,
        person_id=person.id,
        child_id=child_id,
        date=target.isoformat(),
        title=title,
        message=message,
        sort_days_until=days_until,
        sort_priority=CARD_PRIORITY[card_type],
    )


def child_birthday_cards(person: Person, today: date, horizon_days: int) -> list[CareCard]:
    out = []
    for child in person.children:
        birthday = child.effective_birthday
        occ = dates.next_occurrence(birthday, today, horizon_days, recurring=True)
        if not occ:
            continue
        who = person.child_label(child)
        when = f"{dates.format_in_days(occ.days_until)} · {dates.format_month_day(occ.target)}"
        turning = dates.years_since(birthday, occ.year)
        title = f"{who} turns {turning} {when}" if turning else f"{who}'s birthday is {when}"
        out.append(
            _card(
                CareCardType.CHILD_BIRTHDAY,
                f"care_childBirthday_{person.id}_{child.id}_{occ.target.isoformat()}",
                person, occ.target, occ.days_until, title, "Send a kind note?", child_id=child.id,
            )
        )
    return out


def person_birthday_card(person: Person, today: date, horizon_days: int) -> Optional[CareCard]:
    """Card for the person's first birthday moment, if it falls in the window."""
    moment = next((m for m in person.moments if m.type == MomentType.BIRTHDAY), None)
    if not moment:
        return None
    occ = dates.next_occurrence(moment.date, today, horizon_days, recurring=True)
    if not occ:
        return None

    who = person.first_name
    when = f"{dates.format_in_days(occ.days_until)} · {dates.format_month_day(occ.target)}"
    turning = dates.years_since(moment.date, occ.year)
    if turning:
        title = f"{who} turns {turning} {when}"
        if dates.is_decade_milestone(turning):
            title = f"{title} · Turning {turning}"
    else:
        title = f"{who}'s birthday is {when}"
    return _card(
        CareCardType.PERSON_BIRTHDAY,
        f"care_personBirthday_{person.id}_{moment.id}_{occ.target.isoformat()}",
        person, occ.target, occ.days_until, title, "Reach out?",
    )


def holiday_card_eligible(person: Person, holiday: HolidayOccurrence) -> bool:
    pref = PARENTAL_HOLIDAYS.get(holiday.id)
    if pref:
        return person.has_kids_or_children and getattr(person.holiday_prefs, pref) is True
    required = HOLIDAY_CULTURES.get(holiday.id)
    return required is not None and resolve_culture(person) == required


def holiday_cards(person: Person, today: date, holidays: list[HolidayOccurrence], horizon_days: int) -> list[CareCard]:
    out = []
    for holiday in holidays:
        days_until = dates.days_between(holiday.date, today)
        if days_until < 0 or days_until > horizon_days:
            continue
        if holiday.id not in CARD_HOLIDAYS or not holiday_card_eligible(person, holiday):
            continue
        segment, name, message = CARD_HOLIDAYS[holiday.id]
        out.append(
            _card(
                CareCardType.HOLIDAY,
                f"care_holiday_{segment}_{person.id}_{holiday.date.isoformat()}",
                person, holiday.date, days_until,
                f"{name} for {person.first_name} · {dates.format_month_day(holiday.date)}",
                message,
            )
        )
    return out


def school_cards(person: Person, today: date, horizon_days: int) -> list[CareCard]:
    out = []
    for child in person.children:
        for event in child.school_events:
            occ = dates.next_occurrence(event.date, today, horizon_days, recurring=False)
            if not occ:
                continue
            title = (
                f"{person.child_label(child)} · {school_event_label(event.type)} · "
                f"{dates.format_month_day(occ.target)}"
            )
            out.append(
                _card(
                    CareCardType.SCHOOL_MILESTONE,
                    f"care_school_{person.id}_{child.id}_{event.type}_{occ.target.isoformat()}",
                    person, occ.target, occ.days_until, title, "Want to plan ahead?", child_id=child.id,
                )
            )
    return out


def moment_cards(person: Person, today: date, horizon_days: int) -> list[CareCard]:
    """Sensitive dates, anniversaries and other custom dates. Birthdays have their own card."""
    who = person.first_name
    out = []
    for moment in person.moments:
        occ = dates.next_occurrence(moment.date, today, horizon_days, recurring=moment.recurring)
        if not occ:
            continue
        stamp = occ.target.isoformat()
        when = dates.format_month_day(occ.target)

        if moment.is_sensitive:
            card_type = CareCardType.SENSITIVE_DATE
        elif moment.type == MomentType.ANNIVERSARY:
            card_type = CareCardType.ANNIVERSARY
        elif moment.type == MomentType.CUSTOM:
            card_type = CareCardType.IMPORTANT_DATE
        else:
            continue
        prefix, message = MOMENT_CARDS[card_type]

        out.append(
            _card(
                card_type,
                f"care_{prefix}_{person.id}_{moment.id}_{stamp}",
                person, occ.target, occ.days_until, f"{who} · {moment.display_label} · {when}", message,
            )
        )
    return out


def generate_care_feed(
    people: Iterable[Person],
    reference_date: date | datetime,
    horizons: Optional[Horizons] = None,
    converter: Optional[CalendarConverter] = None,
) -> list[CareCard]:
    """Compact card list for ``people`` as of ``reference_date``.

    Cards with the same id collapse to the last one built. Like the
    suggestion feed, a person whose data breaks a builder is logged and left
    out rather than failing the whole list.
    """
    horizons = horizons or Horizons()
    people = list(people)
    today = dates.to_day(reference_date)
    holidays = get_upcoming_holidays(today, horizons.holidays, converter=converter, scan_days=horizons.calendar_scan)

    unique: dict[str, CareCard] = {}
    for person in people:
        try:
            cards = child_birthday_cards(person, today, horizons.kids)
            birthday = person_birthday_card(person, today, horizons.moments)
            if birthday:
                cards.append(birthday)
            cards.extend(holiday_cards(person, today, holidays, horizons.holidays))
            cards.extend(school_cards(person, today, horizons.school))
            cards.extend(moment_cards(person, today, horizons.moments))
        except Exception as e:
            logger.warning("care_cards_skipped", person_id=person.id, error=str(e))
            continue
        for card in cards:
            unique[card.id] = card

    feed = sorted(unique.values(), key=lambda c: c.sort_key())
    logger.debug("care_cards_generated", date=today.isoformat(), people=len(people), cards=len(feed))
    return feed
