"""Care suggestion generator: ranked, de-duplicated feed for a reference date."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

import structlog

from care import dates
from care.holidays import (
    DEFAULT_SCAN_DAYS,
    CalendarConverter,
    HolidayOccurrence,
    get_upcoming_holidays,
)
from care.suggestions import (
    CareSuggestion,
    PersonPatch,
    Question,
    QuestionOption,
    SuggestionAction,
)
from care.templates import get_templates, make_seed, render
from people.models import Child, Moment, Person
from shared_types import (
    AnswerKind,
    Cue,
    HolidayId,
    MomentType,
    ParentRole,
    PatchOp,
    ReligionCulture,
    SchoolEventType,
    SuggestionType,
)

logger = structlog.get_logger()

# Checked in order; the first culture whose keyword appears in the legacy tag wins
CULTURE_KEYWORDS = (
    (ReligionCulture.ORTHODOX, ("orthodox", "greek")),
    (ReligionCulture.CHRISTIAN, ("christian", "catholic")),
    (ReligionCulture.JEWISH, ("jew", "hebrew")),
    (ReligionCulture.MUSLIM, ("islam", "muslim")),
)

HOLIDAY_CULTURES = {
    HolidayId.EASTER_ORTHODOX: ReligionCulture.ORTHODOX,
    HolidayId.EASTER_WESTERN: ReligionCulture.CHRISTIAN,
    HolidayId.HANUKKAH: ReligionCulture.JEWISH,
    HolidayId.RAMADAN: ReligionCulture.MUSLIM,
    HolidayId.EID_AL_FITR: ReligionCulture.MUSLIM,
}

# Parental holiday → HolidayPrefs attribute
PARENTAL_HOLIDAYS = {
    HolidayId.MOTHERS_DAY: "mothers_day",
    HolidayId.FATHERS_DAY: "fathers_day",
}

SCHOOL_EVENT_LABELS = {
    SchoolEventType.FIRST_DAY: "first day of school",
    SchoolEventType.K_GRAD: "kindergarten graduation",
    SchoolEventType.FIFTH_MOVE_UP: "5th grade moving-up",
    SchoolEventType.EIGHTH_GRAD: "8th grade graduation",
    SchoolEventType.HS_GRAD: "high school graduation",
    SchoolEventType.COMMUNION: "communion",
    SchoolEventType.CONFIRMATION: "confirmation",
    SchoolEventType.BAR_MITZVAH: "bar mitzvah",
    SchoolEventType.BAT_MITZVAH: "bat mitzvah",
}

MILESTONE_INSIGHT = "A milestone birthday, worth remembering."


@dataclass(frozen=True)
class Horizons:
    """How many days ahead each kind of date is surfaced."""

    moments: int = 21
    kids: int = 21
    holidays: int = 21
    school: int = 60
    calendar_scan: int = DEFAULT_SCAN_DAYS


def resolve_culture(person: Person) -> Optional[ReligionCulture]:
    """Explicit culture wins; otherwise infer from the legacy free-text tag."""
    if person.religion_culture:
        return person.religion_culture
    tag = (person.religion_tag or "").strip().lower()
    if not tag:
        return None
    for culture, keywords in CULTURE_KEYWORDS:
        if any(keyword in tag for keyword in keywords):
            return culture
    return None


def school_event_label(event_type: str) -> str:
    return SCHOOL_EVENT_LABELS.get(event_type, "milestone")


def parent_insight(person: Person) -> Optional[str]:
    if not person.has_kids_or_children:
        return None
    if person.parent_role == ParentRole.MOTHER:
        return "Her kids have a big week ahead."
    if person.parent_role == ParentRole.FATHER:
        return "His family may appreciate a quick check-in."
    return "Their family may appreciate a quick check-in."


def anniversary_cue(years: Optional[int]) -> Optional[Cue]:
    if years in (20, 25):
        return Cue.BIG_ONE
    if years in (5, 10):
        return Cue.MEANINGFUL_YEAR
    return None


def dedupe(suggestions: Iterable[CareSuggestion]) -> list[CareSuggestion]:
    """Keep the first suggestion per id."""
    unique: dict[str, CareSuggestion] = {}
    for suggestion in suggestions:
        unique.setdefault(suggestion.id, suggestion)
    return list(unique.values())


def rank(suggestions: Iterable[CareSuggestion]) -> list[CareSuggestion]:
    """Type priority, then days until, then title (case-insensitive)."""
    return sorted(suggestions, key=lambda s: s.sort_key())


# ── Micro-questions ──


def has_kids_question(who: str) -> Question:
    return Question(
        id="hasKids",
        prompt=f"Does {who} have kids?",
        options=[
            QuestionOption("yes", "Yes", [PersonPatch(PatchOp.SET_HAS_KIDS, True)]),
            QuestionOption(
                "no",
                "No",
                [
                    PersonPatch(PatchOp.SET_HAS_KIDS, False),
                    PersonPatch(PatchOp.SET_HOLIDAY_PREF, False, pref="mothers_day"),
                    PersonPatch(PatchOp.SET_HOLIDAY_PREF, False, pref="fathers_day"),
                ],
            ),
        ],
    )


def add_child_question(who: str) -> Question:
    return Question(
        id="addChild",
        prompt=f"Want to add a child for {who}?",
        answer_kind=AnswerKind.TEXT,
    )


def add_child_birthday_question(person: Person, child: Child) -> Question:
    return Question(
        id="childBirthday",
        prompt=f"Want to add a birthday for {person.child_label(child)}?",
        answer_kind=AnswerKind.DATE,
        meta={"childId": child.id},
    )


def culture_question(who: str) -> Question:
    return Question(
        id="religionCulture",
        prompt=f"Which best fits for {who}?",
        options=[
            QuestionOption(culture.value, culture.value.capitalize(), [PersonPatch(PatchOp.SET_RELIGION_CULTURE, culture)])
            for culture in (
                ReligionCulture.CHRISTIAN,
                ReligionCulture.ORTHODOX,
                ReligionCulture.JEWISH,
                ReligionCulture.MUSLIM,
                ReligionCulture.NONE,
            )
        ],
    )


def holiday_pref_question(who: str, holiday: HolidayOccurrence) -> Question:
    pref = PARENTAL_HOLIDAYS[holiday.id]
    return Question(
        id=str(holiday.id),
        prompt=f"Should I include {holiday.label} for {who}?",
        options=[
            QuestionOption("yes", "Yes", [PersonPatch(PatchOp.SET_HOLIDAY_PREF, True, pref=pref)]),
            QuestionOption("no", "No", [PersonPatch(PatchOp.SET_HOLIDAY_PREF, False, pref=pref)]),
        ],
    )


class CareSuggestionGenerator:
    """Build the care feed for a set of people on a given day.

    Pure computation: no I/O, no shared state. Malformed dates are skipped
    and a person that fails unexpectedly is logged and left out, so
    ``generate`` always returns a list.
    """

    def __init__(
        self,
        horizons: Optional[Horizons] = None,
        converter: Optional[CalendarConverter] = None,
        custom_templates: Optional[dict] = None,
    ):
        self.horizons = horizons or Horizons()
        self.converter = converter
        self.custom_templates = custom_templates or {}

    def generate(self, people: Iterable[Person], reference_date: date | datetime) -> list[CareSuggestion]:
        people = list(people)
        today = dates.to_day(reference_date)
        holidays = get_upcoming_holidays(
            today,
            self.horizons.holidays,
            converter=self.converter,
            scan_days=self.horizons.calendar_scan,
        )

        suggestions: list[CareSuggestion] = []
        for person in people:
            try:
                suggestions.extend(self._follow_ups(person, today))
            except Exception as e:
                logger.warning("care_follow_up_skipped", person_id=person.id, error=str(e))

        for person in people:
            try:
                suggestions.extend(self._kid_birthdays(person, today))
                suggestions.extend(self._school_milestones(person, today))
                suggestions.extend(self._holidays(person, today, holidays))
                suggestions.extend(self._moments(person, today))
            except Exception as e:
                logger.warning("care_person_skipped", person_id=person.id, error=str(e))

        feed = rank(dedupe(suggestions))
        logger.debug("care_generated", date=today.isoformat(), people=len(people), suggestions=len(feed))
        return feed

    # ── helpers ──

    def _render(self, kind: str, seed: str, templates: Optional[list[str]] = None, **variables) -> str:
        if templates is None:
            templates = get_templates(kind, self.custom_templates)
        return render(kind, seed, templates=templates, **variables)

    @staticmethod
    def _reach_out(person: Person, body: str, phone_label: str) -> tuple[str, SuggestionAction]:
        """Text action when a phone number exists, otherwise open the person."""
        if person.phone:
            return phone_label, SuggestionAction.text(person.id, body)
        return f"View {person.first_name}", SuggestionAction.view(person.id)

    # ── follow-ups (yesterday) ──

    def _follow_ups(self, person: Person, today: date) -> list[CareSuggestion]:
        who = person.first_name
        yesterday = today - timedelta(days=1)
        stamp = yesterday.isoformat()
        out = []

        for child in person.children:
            birthday = child.effective_birthday
            if not birthday or not dates.matches_yesterday(birthday, today):
                continue
            child_label = person.child_label(child)
            turning = dates.years_since(birthday, yesterday.year)
            label, action = self._reach_out(
                person, f"Thinking of you. Hope {child_label} had a good birthday.", "Send a message"
            )
            out.append(
                CareSuggestion(
                    id=f"followUp_childBirthday_{person.id}_{child.id}_{stamp}",
                    type=SuggestionType.FOLLOW_UP,
                    person_id=person.id,
                    title=f"Yesterday was {child_label}'s birthday",
                    message="Want to send a quick follow-up?",
                    insight=parent_insight(person),
                    cue=Cue.MILESTONE if dates.is_notable_birthday(turning) else None,
                    action_label=label,
                    action=action,
                    sort_days_until=-1,
                )
            )

        anniversary = next((m for m in person.moments if m.type == MomentType.ANNIVERSARY), None)
        if anniversary and dates.matches_yesterday(anniversary.date, today):
            years = dates.years_since(anniversary.date, yesterday.year)
            label, action = self._reach_out(person, f"Thinking of you, {who}.", "Send a message")
            out.append(
                CareSuggestion(
                    id=f"followUp_anniversary_{person.id}_{anniversary.id}_{stamp}",
                    type=SuggestionType.FOLLOW_UP,
                    person_id=person.id,
                    title=f"{who}'s anniversary was yesterday",
                    message="A little check-in could mean a lot.",
                    cue=anniversary_cue(years),
                    action_label=label,
                    action=action,
                    sort_days_until=-1,
                )
            )

        for moment in person.moments:
            if not moment.is_sensitive:
                continue
            if not dates.matches_yesterday(moment.date, today, recurring=moment.recurring):
                continue
            label, action = self._reach_out(person, f"Thinking of you today, {who}.", "Send a message")
            out.append(
                CareSuggestion(
                    id=f"followUp_sensitive_{person.id}_{moment.id}_{stamp}",
                    type=SuggestionType.FOLLOW_UP,
                    person_id=person.id,
                    title=f"Yesterday may have been a difficult day for {who}",
                    message="Want to send a short note?",
                    action_label=label,
                    action=action,
                    sort_days_until=-1,
                )
            )

        return out

    # ── children ──

    def _kid_birthdays(self, person: Person, today: date) -> list[CareSuggestion]:
        seed_day = today.isoformat()
        out = []
        for child in person.children:
            birthday = child.effective_birthday
            occ = dates.next_occurrence(birthday, today, self.horizons.kids, recurring=True)
            if not occ:
                continue

            who = person.child_label(child)
            when = dates.format_in_days(occ.days_until)
            turning = dates.years_since(birthday, occ.year)
            title = f"{who} turns {turning} {when}" if turning else f"{who}'s birthday is {when}"

            out.append(
                CareSuggestion(
                    id=f"kidBirthday_{person.id}_{child.id}_{occ.target.isoformat()}",
                    type=SuggestionType.KID_BIRTHDAY,
                    person_id=person.id,
                    title=title,
                    message=self._render(
                        "kidBirthday",
                        make_seed("kidBirthday", person.id, child.id, seed_day),
                        childName=who,
                        parentName=person.first_name,
                    ),
                    insight=parent_insight(person),
                    timeline_category=dates.timeline_category(occ.days_until),
                    action_label="Plan a gift",
                    action=SuggestionAction.gift_ideas(person.id, person.name),
                    sort_days_until=occ.days_until,
                )
            )
        return out

    def _school_milestones(self, person: Person, today: date) -> list[CareSuggestion]:
        out = []
        for child in person.children:
            for event in child.school_events:
                occ = dates.next_occurrence(event.date, today, self.horizons.school, recurring=False)
                if not occ:
                    continue
                who = person.child_label(child)
                out.append(
                    CareSuggestion(
                        id=f"school_{person.id}_{child.id}_{event.type}_{occ.target.isoformat()}",
                        type=SuggestionType.SCHOOL_MILESTONE,
                        person_id=person.id,
                        title=f"{who}'s {school_event_label(event.type)} is {dates.format_in_days(occ.days_until)}",
                        message="Want to plan something small or set a reminder?",
                        insight=parent_insight(person),
                        timeline_category=dates.timeline_category(occ.days_until),
                        action_label="See details",
                        action=SuggestionAction.view(person.id),
                        sort_days_until=occ.days_until,
                    )
                )
        return out

    # ── holidays and micro-questions ──

    @staticmethod
    def holiday_eligible(person: Person, holiday: HolidayOccurrence, culture: Optional[ReligionCulture]) -> bool:
        pref = PARENTAL_HOLIDAYS.get(holiday.id)
        if pref:
            return person.has_kids is True and getattr(person.holiday_prefs, pref) is True
        required = HOLIDAY_CULTURES.get(holiday.id)
        return required is not None and culture == required

    @staticmethod
    def holiday_question(
        person: Person, holiday: HolidayOccurrence, culture: Optional[ReligionCulture]
    ) -> Optional[tuple[Question, str]]:
        """First missing piece of data this holiday depends on, as (question, message)."""
        who = person.first_name
        parental = holiday.id in PARENTAL_HOLIDAYS

        if holiday.id == HolidayId.MOTHERS_DAY and person.has_kids is None:
            return has_kids_question(who), "So this stays relevant."

        if parental and person.has_kids is True:
            if not person.children:
                return add_child_question(who), "So birthdays and milestones can show up naturally."
            missing = next((c for c in person.children if not c.effective_birthday), None)
            if missing:
                return (
                    add_child_birthday_question(person, missing),
                    "A birthday (even without a year) helps it show up in time.",
                )

        if holiday.id in HOLIDAY_CULTURES and culture is None:
            return culture_question(who), "So I can remember what matters."

        if parental and person.has_kids is True:
            if getattr(person.holiday_prefs, PARENTAL_HOLIDAYS[holiday.id]) is None:
                return holiday_pref_question(who, holiday), "So this stays personal, not generic."

        return None

    def _holidays(self, person: Person, today: date, holidays: list[HolidayOccurrence]) -> list[CareSuggestion]:
        seed_day = today.isoformat()
        who = person.first_name
        culture = resolve_culture(person)
        asked = False
        out = []

        for holiday in holidays:
            days_until = dates.days_between(holiday.date, today)
            if days_until < 0 or days_until > self.horizons.holidays:
                continue
            stamp = holiday.date.isoformat()

            if not asked:
                found = self.holiday_question(person, holiday, culture)
                if found:
                    question, message = found
                    out.append(
                        CareSuggestion(
                            id=f"question_{question.id}_{person.id}_{stamp}",
                            type=SuggestionType.QUESTION,
                            person_id=person.id,
                            title=f"Quick question about {who}",
                            message=message,
                            action_label="",
                            action=SuggestionAction.view(person.id),
                            sort_days_until=days_until,
                            question=question,
                        )
                    )
                    asked = True

            if not self.holiday_eligible(person, holiday, culture):
                continue

            parental = holiday.id in PARENTAL_HOLIDAYS
            if parental:
                message = f"Want to send {who} a short note?"
                insight = parent_insight(person)
            else:
                message = self._render(
                    "holiday",
                    make_seed("holiday", holiday.id, person.id, seed_day),
                    holiday=holiday.label,
                    name=who,
                )
                insight = f"{holiday.label} is often meaningful. A thoughtful message goes a long way."

            label, action = self._reach_out(person, f"Thinking of you, {who}.", f"Text {who}")
            out.append(
                CareSuggestion(
                    id=f"holiday_{holiday.id}_{person.id}_{stamp}",
                    type=SuggestionType.HOLIDAY,
                    person_id=person.id,
                    title=f"{holiday.label} is {dates.format_in_days(days_until)} for {who}",
                    message=message,
                    insight=insight,
                    timeline_category=dates.timeline_category(days_until),
                    action_label=label,
                    action=action,
                    sort_days_until=days_until,
                )
            )

        return out

    # ── birthdays, anniversaries, custom and sensitive dates ──

    def _moments(self, person: Person, today: date) -> list[CareSuggestion]:
        out = []
        for moment in person.moments:
            occ = dates.next_occurrence(moment.date, today, self.horizons.moments, recurring=moment.recurring)
            if not occ:
                continue
            if moment.is_sensitive:
                out.append(self._sensitive(person, moment, occ, today))
            elif moment.type == MomentType.BIRTHDAY:
                out.append(self._birthday(person, moment, occ, today))
            elif moment.type == MomentType.ANNIVERSARY:
                out.append(self._anniversary(person, moment, occ, today))
            elif moment.type == MomentType.CUSTOM:
                out.append(self._custom(person, moment, occ, today))
        return out

    def _sensitive(self, person: Person, moment: Moment, occ: dates.Occurrence, today: date) -> CareSuggestion:
        who = person.first_name
        label, action = self._reach_out(person, f"Thinking of you today, {who}.", f"Text {who}")
        return CareSuggestion(
            id=f"sensitive_{person.id}_{moment.id}_{occ.target.isoformat()}",
            type=SuggestionType.SENSITIVE,
            person_id=person.id,
            title=f"{moment.display_label or 'A date'} for {who} is {dates.format_in_days(occ.days_until)}",
            message=self._render("sensitive", make_seed("sensitive", person.id, moment.id, today.isoformat()), name=who),
            insight=parent_insight(person),
            timeline_category=dates.timeline_category(occ.days_until),
            action_label=label,
            action=action,
            sort_days_until=occ.days_until,
        )

    def _birthday(self, person: Person, moment: Moment, occ: dates.Occurrence, today: date) -> CareSuggestion:
        who = person.first_name
        when = dates.format_in_days(occ.days_until)
        turning = dates.years_since(moment.date, occ.year)

        title = f"{who} turns {turning} {when}" if turning else f"{who}'s birthday is {when}"
        if dates.is_decade_milestone(turning):
            title = f"{title} · Turning {turning}"

        templates = get_templates("birthday", self.custom_templates)
        if turning and occ.days_until <= 7:
            templates = get_templates("birthdayThisWeek", self.custom_templates) + templates

        notable = dates.is_notable_birthday(turning)
        return CareSuggestion(
            id=f"birthday_{person.id}_{moment.id}_{occ.target.isoformat()}",
            type=SuggestionType.BIRTHDAY,
            person_id=person.id,
            title=title,
            message=self._render(
                "birthday",
                make_seed("birthday", person.id, moment.id, today.isoformat()),
                templates=templates,
                name=who,
                age=turning,
            ),
            insight=MILESTONE_INSIGHT if notable else parent_insight(person),
            cue=Cue.MILESTONE if notable else None,
            timeline_category=dates.timeline_category(occ.days_until),
            action_label="See ideas",
            action=SuggestionAction.gift_ideas(person.id, person.name),
            sort_days_until=occ.days_until,
        )

    def _anniversary(self, person: Person, moment: Moment, occ: dates.Occurrence, today: date) -> CareSuggestion:
        who = person.first_name
        years = dates.years_since(moment.date, occ.year)
        title = f"{who}'s anniversary is {dates.format_in_days(occ.days_until)}"
        if years:
            title = f"{title} · {years} years"

        label, action = self._reach_out(person, f"Thinking of you today, {who}.", f"Text {who}")
        return CareSuggestion(
            id=f"anniversary_{person.id}_{moment.id}_{occ.target.isoformat()}",
            type=SuggestionType.ANNIVERSARY,
            person_id=person.id,
            title=title,
            message=self._render("anniversary", make_seed("anniversary", person.id, moment.id, today.isoformat()), name=who),
            insight=parent_insight(person),
            cue=anniversary_cue(years),
            timeline_category=dates.timeline_category(occ.days_until),
            action_label=label,
            action=action,
            sort_days_until=occ.days_until,
        )

    def _custom(self, person: Person, moment: Moment, occ: dates.Occurrence, today: date) -> CareSuggestion:
        who = person.first_name
        label, action = self._reach_out(person, f"Hey {who}, thinking of you.", f"Text {who}")
        return CareSuggestion(
            id=f"custom_{person.id}_{moment.id}_{occ.target.isoformat()}",
            type=SuggestionType.CUSTOM,
            person_id=person.id,
            title=f"{moment.display_label or 'A date'} for {who} is {dates.format_in_days(occ.days_until)}",
            message=self._render("custom", make_seed("custom", person.id, moment.id, today.isoformat()), name=who),
            insight=parent_insight(person),
            timeline_category=dates.timeline_category(occ.days_until),
            action_label=label,
            action=action,
            sort_days_until=occ.days_until,
        )


def generate_care_suggestions(
    people: Iterable[Person],
    reference_date: date | datetime,
    horizons: Optional[Horizons] = None,
    converter: Optional[CalendarConverter] = None,
) -> list[CareSuggestion]:
    """Ranked care feed for ``people`` as of ``reference_date``."""
    return CareSuggestionGenerator(horizons=horizons, converter=converter).generate(people, reference_date)
