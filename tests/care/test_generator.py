"""Tests for the care suggestion generator."""

from datetime import date

import pytest

from care.generator import (
    MILESTONE_INSIGHT,
    CareSuggestionGenerator,
    Horizons,
    generate_care_suggestions,
    resolve_culture,
)
from care.holidays import orthodox_easter, western_easter
from care.templates import MESSAGE_TEMPLATES
from shared_types import (
    ActionKind,
    AnswerKind,
    Cue,
    ReligionCulture,
    SuggestionType,
    TimelineCategory,
)


@pytest.fixture
def generate(no_lunar):
    def _generate(people, on, **kwargs):
        return generate_care_suggestions(people, on, converter=kwargs.pop("converter", no_lunar), **kwargs)

    return _generate


def by_type(feed, kind):
    return [s for s in feed if s.type == kind]


# ── worked examples ──


class TestExamples:
    def test_birthday_without_year(self, make_person, generate):
        ava = make_person(name="Ava", moments=[{"id": "b1", "type": "birthday", "date": "0000-07-04"}])
        feed = generate([ava], date(2026, 7, 1))

        assert len(feed) == 1
        s = feed[0]
        assert s.id == "birthday_p1_b1_2026-07-04"
        assert s.title == "Ava's birthday is in 3 days"
        assert s.action.kind == ActionKind.GIFT_IDEAS
        assert s.action.query == "gift ideas for Ava"
        assert s.action_label == "See ideas"
        assert s.timeline_category == TimelineCategory.SOON
        assert s.message in {t.replace("{name}", "Ava") for t in MESSAGE_TEMPLATES["birthday"]}

    def test_has_kids_question_before_mothers_day(self, make_person, generate):
        sam = make_person(id="sam", name="Sam")
        feed = generate([sam], date(2026, 5, 5))

        assert len(feed) == 1
        q = feed[0]
        assert q.type == SuggestionType.QUESTION
        assert q.question.id == "hasKids"
        assert q.id == "question_hasKids_sam_2026-05-10"
        assert q.question.prompt == "Does Sam have kids?"
        assert [o.id for o in q.question.options] == ["yes", "no"]
        assert not by_type(feed, SuggestionType.HOLIDAY)

    def test_hanukkah_ten_days_out(self, make_person):
        lee = make_person(id="lee", name="Lee", religionCulture="jewish")
        feed = generate_care_suggestions([lee], date(2026, 11, 25))

        holidays = by_type(feed, SuggestionType.HOLIDAY)
        assert len(holidays) == 1
        h = holidays[0]
        assert "hanukkah" in h.id
        assert h.id == "holiday_hanukkah_lee_2026-12-05"
        assert h.sort_days_until == 10
        assert h.timeline_category == TimelineCategory.UPCOMING
        assert h.title == "Hanukkah is in 10 days for Lee"
        assert not by_type(feed, SuggestionType.QUESTION)

    def test_child_birthday_follow_up_sorts_first(self, make_person, generate):
        parent = make_person(
            name="Jo Park",
            phone="555-0100",
            hasKids=True,
            moments=[{"id": "b1", "type": "birthday", "date": "0000-03-20"}],
            children=[{"id": "c1", "name": "Mia", "birthday": "2018-03-14"}],
        )
        feed = generate([parent], date(2026, 3, 15))

        first = feed[0]
        assert first.type == SuggestionType.FOLLOW_UP
        assert first.sort_days_until == -1
        assert first.id == "followUp_childBirthday_p1_c1_2026-03-14"
        assert first.title == "Yesterday was Mia's birthday"
        assert first.action.kind == ActionKind.TEXT
        assert first.action_label == "Send a message"
        assert {s.type for s in feed[1:]} <= {SuggestionType.BIRTHDAY, SuggestionType.QUESTION}
        assert len(feed) > 1

    def test_duplicate_moment_ids_across_legacy_lists(self, make_person, generate):
        moment = {"id": "m1", "type": "custom", "label": "Graduation", "date": "0000-06-01"}
        person = make_person(moments=[moment], importantDates=[dict(moment, label="Old label")])
        feed = generate([person], date(2026, 5, 25))

        customs = by_type(feed, SuggestionType.CUSTOM)
        assert len(customs) == 1
        assert customs[0].title == "Graduation for Ava is in 7 days"


# ── idempotence and ordering ──


class TestDeterminism:
    def test_same_input_same_output(self, make_person, generate):
        people = [
            make_person(id="a", name="Ava", moments=[{"id": "b", "type": "birthday", "date": "1990-07-04"}]),
            make_person(id="b", name="Ben", moments=[{"id": "x", "type": "anniversary", "date": "2016-07-10"}]),
        ]
        assert generate(people, date(2026, 7, 1)) == generate(people, date(2026, 7, 1))

    def test_input_is_not_mutated(self, make_person, generate):
        person = make_person(moments=[{"id": "b", "type": "birthday", "date": "1990-07-04"}])
        before = person.model_dump()
        generate([person], date(2026, 7, 1))
        assert person.model_dump() == before

    def test_ranking(self, make_person, generate):
        person = make_person(
            name="Ava",
            hasKids=True,
            holidayPrefs={"mothersDay": False, "fathersDay": False},
            religionCulture="none",
            moments=[
                {"id": "c", "type": "custom", "label": "Move-in day", "date": "0000-07-02"},
                {"id": "a", "type": "anniversary", "date": "0000-07-03"},
                {"id": "b", "type": "birthday", "date": "0000-07-10"},
            ],
            children=[{"id": "k", "name": "Mia", "birthday": "2020-07-20"}],
        )
        feed = generate([person], date(2026, 7, 1))
        assert [s.type for s in feed] == [
            SuggestionType.KID_BIRTHDAY,
            SuggestionType.BIRTHDAY,
            SuggestionType.ANNIVERSARY,
            SuggestionType.CUSTOM,
        ]

    def test_ties_broken_by_title(self, make_person, generate):
        people = [
            make_person(id="z", name="Zoe", moments=[{"id": "b", "type": "birthday", "date": "0000-07-04"}]),
            make_person(id="a", name="amy", moments=[{"id": "b", "type": "birthday", "date": "0000-07-04"}]),
        ]
        feed = generate(people, date(2026, 7, 1))
        assert [s.person_id for s in feed] == ["a", "z"]

    def test_empty_people(self, generate):
        assert generate([], date(2026, 7, 1)) == []


# ── birthdays, anniversaries, custom and sensitive moments ──


class TestMoments:
    def test_decade_birthday(self, make_person, generate):
        person = make_person(name="Ava", moments=[{"id": "b", "type": "birthday", "date": "1996-07-04"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.title == "Ava turns 30 in 3 days · Turning 30"
        assert s.cue is None
        possible = MESSAGE_TEMPLATES["birthdayThisWeek"] + MESSAGE_TEMPLATES["birthday"]
        assert s.message in {t.replace("{name}", "Ava").replace("{age}", "30") for t in possible}

    def test_notable_birthday(self, make_person, generate):
        person = make_person(name="Ava", moments=[{"id": "b", "type": "birthday", "date": "2008-07-20"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.title == "Ava turns 18 in 19 days"
        assert s.cue == Cue.MILESTONE
        assert s.insight == MILESTONE_INSIGHT
        assert s.timeline_category == TimelineCategory.UPCOMING

    def test_birthday_today(self, make_person, generate):
        person = make_person(name="Ava", moments=[{"id": "b", "type": "birthday", "date": "0000-07-01"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.title == "Ava's birthday is today"

    def test_anniversary_years_and_cue(self, make_person, generate):
        person = make_person(name="Ava", moments=[{"id": "a", "type": "anniversary", "date": "2016-07-10"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.type == SuggestionType.ANNIVERSARY
        assert s.title == "Ava's anniversary is in 9 days · 10 years"
        assert s.cue == Cue.MEANINGFUL_YEAR
        assert s.action.kind == ActionKind.VIEW
        assert s.action_label == "View Ava"

    def test_big_anniversary_with_phone(self, make_person, generate):
        person = make_person(
            name="Ava", phone="555-0100", moments=[{"id": "a", "type": "anniversary", "date": "2001-07-10"}]
        )
        s = generate([person], date(2026, 7, 1))[0]
        assert s.cue == Cue.BIG_ONE
        assert s.action.kind == ActionKind.TEXT
        assert s.action.body == "Thinking of you today, Ava."
        assert s.action_label == "Text Ava"

    def test_sensitive_moment(self, make_person, generate):
        person = make_person(
            name="Ava",
            moments=[
                {"id": "s", "type": "custom", "category": "sensitive", "label": "Dad's passing", "date": "2019-07-05"}
            ],
        )
        s = generate([person], date(2026, 7, 1))[0]
        assert s.type == SuggestionType.SENSITIVE
        assert s.title == "Dad's passing for Ava is in 4 days"
        assert s.id == "sensitive_p1_s_2026-07-05"

    def test_legacy_sensitive_list(self, make_person, generate):
        person = make_person(
            name="Ava",
            sensitiveMoments=[{"id": "s", "category": "sensitive", "label": "Surgery", "date": "2026-07-08", "recurring": False}],
        )
        feed = generate([person], date(2026, 7, 1))
        assert [s.type for s in feed] == [SuggestionType.SENSITIVE]

    def test_non_recurring_past_is_skipped(self, make_person, generate):
        person = make_person(
            moments=[{"id": "c", "type": "custom", "label": "Move", "date": "2025-07-04", "recurring": False}]
        )
        assert generate([person], date(2026, 7, 1)) == []

    def test_malformed_dates_are_skipped(self, make_person, generate):
        person = make_person(
            moments=[
                {"id": "x", "type": "birthday", "date": "someday"},
                {"id": "y", "type": "custom", "label": "Ok", "date": "0000-07-03"},
            ],
            children=[{"id": "k", "name": "Mia", "birthday": "2020-13-40"}],
        )
        feed = generate([person], date(2026, 7, 1))
        assert [s.id for s in feed] == ["custom_p1_y_2026-07-03"]

    def test_custom_templates(self, make_person, no_lunar):
        person = make_person(name="Ava", moments=[{"id": "b", "type": "birthday", "date": "0000-07-04"}])
        gen = CareSuggestionGenerator(converter=no_lunar, custom_templates={"birthday": ["Cake for {name}?"]})
        assert gen.generate([person], date(2026, 7, 1))[0].message == "Cake for Ava?"

    def test_horizons(self, make_person, no_lunar):
        person = make_person(moments=[{"id": "b", "type": "birthday", "date": "0000-07-10"}])
        gen = CareSuggestionGenerator(horizons=Horizons(moments=5), converter=no_lunar)
        assert gen.generate([person], date(2026, 7, 1)) == []


# ── children ──


class TestChildren:
    def test_kid_birthday(self, make_person, generate):
        person = make_person(
            name="Jo Park",
            parentRole="mother",
            hasKids=True,
            children=[{"id": "k", "name": "Mia", "birthday": "2020-07-04"}],
        )
        s = generate([person], date(2026, 7, 1))[0]
        assert s.type == SuggestionType.KID_BIRTHDAY
        assert s.id == "kidBirthday_p1_k_2026-07-04"
        assert s.title == "Mia turns 6 in 3 days"
        assert s.insight == "Her kids have a big week ahead."
        assert s.action_label == "Plan a gift"
        assert s.action.query == "gift ideas for Jo Park"
        assert "Mia" in s.message and "Jo" in s.message

    def test_unnamed_child_and_legacy_birthdate(self, make_person, generate):
        person = make_person(name="Jo", children=[{"id": "k", "birthdate": "0000-07-04"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.title == "A child in Jo's life's birthday is in 3 days"
        assert s.insight == "Their family may appreciate a quick check-in."

    def test_school_milestone(self, make_person, generate):
        person = make_person(
            name="Jo",
            parentRole="father",
            children=[{"id": "k", "name": "Mia", "schoolEvents": [{"type": "hsGrad", "date": "2026-08-15"}]}],
        )
        s = generate([person], date(2026, 7, 1))[0]
        assert s.type == SuggestionType.SCHOOL_MILESTONE
        assert s.id == "school_p1_k_hsGrad_2026-08-15"
        assert s.title == "Mia's high school graduation is in 45 days"
        assert s.timeline_category == TimelineCategory.LATER
        assert s.action.kind == ActionKind.VIEW
        assert s.insight == "His family may appreciate a quick check-in."

    def test_unknown_school_event_is_a_milestone(self, make_person, generate):
        person = make_person(children=[{"id": "k", "name": "Mia", "schoolEvents": [{"type": "graduation", "date": "2026-07-11"}]}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.id == "school_p1_k_graduation_2026-07-11"
        assert s.title == "Mia's milestone is in 10 days"

    def test_school_event_beyond_horizon(self, make_person, generate):
        person = make_person(children=[{"id": "k", "schoolEvents": [{"type": "firstDay", "date": "2026-09-05"}]}])
        assert generate([person], date(2026, 7, 1)) == []


# ── yesterday follow-ups ──


class TestFollowUps:
    def test_anniversary_yesterday(self, make_person, generate):
        person = make_person(name="Ava", moments=[{"id": "a", "type": "anniversary", "date": "2016-06-30"}])
        feed = generate([person], date(2026, 7, 1))
        s = feed[0]
        assert s.id == "followUp_anniversary_p1_a_2026-06-30"
        assert s.title == "Ava's anniversary was yesterday"
        assert s.cue == Cue.MEANINGFUL_YEAR

    def test_sensitive_yesterday_recurring(self, make_person, generate):
        person = make_person(
            name="Ava",
            moments=[{"id": "s", "category": "sensitive", "label": "Loss", "date": "2019-06-30"}],
        )
        s = generate([person], date(2026, 7, 1))[0]
        assert s.id == "followUp_sensitive_p1_s_2026-06-30"
        assert s.title == "Yesterday may have been a difficult day for Ava"

    def test_non_recurring_sensitive_needs_exact_date(self, make_person, generate):
        old = make_person(
            moments=[{"id": "s", "category": "sensitive", "label": "Surgery", "date": "2019-06-30", "recurring": False}]
        )
        assert generate([old], date(2026, 7, 1)) == []

        current = make_person(
            moments=[{"id": "s", "category": "sensitive", "label": "Surgery", "date": "2026-06-30", "recurring": False}]
        )
        assert [s.type for s in generate([current], date(2026, 7, 1))] == [SuggestionType.FOLLOW_UP]

    def test_notable_child_birthday_cue(self, make_person, generate):
        person = make_person(children=[{"id": "k", "name": "Mia", "birthday": "2016-06-30"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.type == SuggestionType.FOLLOW_UP
        assert s.cue == Cue.MILESTONE

    def test_no_phone_falls_back_to_view(self, make_person, generate):
        person = make_person(name="Ava", moments=[{"id": "a", "type": "anniversary", "date": "0000-06-30"}])
        s = generate([person], date(2026, 7, 1))[0]
        assert s.action.kind == ActionKind.VIEW
        assert s.action_label == "View Ava"


# ── holidays and micro-questions ──


class TestHolidays:
    def test_mothers_day_card(self, make_person, generate):
        sam = make_person(
            id="sam",
            name="Sam",
            phone="555-0100",
            hasKids=True,
            parentRole="mother",
            holidayPrefs={"mothersDay": True},
            children=[{"id": "k", "name": "Mia", "birthday": "2019-01-02"}],
        )
        feed = generate([sam], date(2026, 5, 5))
        assert len(feed) == 1
        s = feed[0]
        assert s.id == "holiday_mothersDay_sam_2026-05-10"
        assert s.title == "Mother's Day is in 5 days for Sam"
        assert s.message == "Want to send Sam a short note?"
        assert s.insight == "Her kids have a big week ahead."
        assert s.action_label == "Text Sam"

    def test_mothers_day_opt_out(self, make_person, generate):
        sam = make_person(
            name="Sam",
            hasKids=True,
            holidayPrefs={"mothersDay": False},
            children=[{"id": "k", "birthday": "2019-01-02"}],
        )
        assert generate([sam], date(2026, 5, 5)) == []

    def test_add_child_question(self, make_person, generate):
        sam = make_person(id="sam", name="Sam", hasKids=True)
        q = generate([sam], date(2026, 5, 5))[0]
        assert q.id == "question_addChild_sam_2026-05-10"
        assert q.question.id == "addChild"
        assert q.question.answer_kind == AnswerKind.TEXT

    def test_add_child_birthday_question(self, make_person, generate):
        sam = make_person(id="sam", name="Sam", hasKids=True, children=[{"id": "k", "name": "Mia"}])
        q = generate([sam], date(2026, 5, 5))[0]
        assert q.id == "question_childBirthday_sam_2026-05-10"
        assert q.question.id == "childBirthday"
        assert q.question.meta == {"childId": "k"}
        assert q.question.prompt == "Want to add a birthday for Mia?"

    def test_question_document_is_camel_case(self, make_person, generate):
        sam = make_person(id="sam", name="Sam", hasKids=True, children=[{"id": "k", "name": "Mia"}])
        doc = generate([sam], date(2026, 5, 5))[0].to_dict()
        assert doc["personId"] == "sam"
        assert doc["sortDaysUntil"] == 5
        assert doc["question"]["answerKind"] == "date"
        assert doc["question"]["meta"] == {"childId": "k"}
        assert "insight" not in doc

    def test_holiday_pref_question(self, make_person, generate):
        joe = make_person(
            id="joe", name="Joe", hasKids=True, children=[{"id": "k", "name": "Mia", "birthday": "2019-01-02"}]
        )
        q = generate([joe], date(2026, 6, 10))[0]
        assert q.id == "question_fathersDay_joe_2026-06-21"
        assert q.question.prompt == "Should I include Father's Day for Joe?"

    def test_culture_question_for_easter(self, make_person, generate):
        ava = make_person(name="Ava")
        feed = generate([ava], date(2026, 4, 1))
        questions = by_type(feed, SuggestionType.QUESTION)
        assert len(questions) == 1
        assert questions[0].question.id == "religionCulture"
        assert {o.id for o in questions[0].question.options} == {"christian", "orthodox", "jewish", "muslim", "none"}

    def test_one_question_per_person(self, make_person, generate):
        people = [make_person(id="a", name="Ava"), make_person(id="b", name="Ben")]
        feed = generate(people, date(2026, 4, 1))
        questions = by_type(feed, SuggestionType.QUESTION)
        assert sorted(q.person_id for q in questions) == ["a", "b"]
        assert feed[-2:] == questions

    def test_ramadan_with_stub_calendar(self, make_person, stub_converter):
        converter = stub_converter(islamic={date(2027, 2, 8): ("Ramadan", 1)})
        omar = make_person(id="omar", name="Omar", religionTag="Muslim")
        feed = generate_care_suggestions([omar], date(2027, 2, 1), converter=converter)
        assert [s.id for s in feed] == ["holiday_ramadan_omar_2027-02-08"]
        assert feed[0].insight == "Ramadan is often meaningful. A thoughtful message goes a long way."
        assert "Omar" in feed[0].message and "Ramadan" in feed[0].message

    def test_broken_calendar_still_generates(self, make_person, broken_converter):
        person = make_person(name="Ava", moments=[{"id": "b", "type": "birthday", "date": "0000-07-04"}])
        feed = generate_care_suggestions([person], date(2026, 7, 1), converter=broken_converter)
        assert [s.type for s in feed] == [SuggestionType.BIRTHDAY]

    @pytest.mark.parametrize("year", [2025, 2026, 2027])
    @pytest.mark.parametrize("culture", ["christian", "orthodox"])
    def test_single_easter_card(self, make_person, generate, year, culture):
        person = make_person(name="Ava", religionCulture=culture)
        easter = western_easter(year) if culture == "christian" else orthodox_easter(year)
        feed = generate([person], easter)
        easter_cards = [s for s in by_type(feed, SuggestionType.HOLIDAY) if "easter" in s.id.lower()]
        assert len(easter_cards) == 1
        assert easter_cards[0].title.endswith("is today for Ava")


class TestResolveCulture:
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("Greek Orthodox", ReligionCulture.ORTHODOX),
            ("Catholic", ReligionCulture.CHRISTIAN),
            ("Jewish", ReligionCulture.JEWISH),
            ("islam", ReligionCulture.MUSLIM),
            ("agnostic", None),
            ("", None),
        ],
    )
    def test_from_legacy_tag(self, make_person, tag, expected):
        assert resolve_culture(make_person(religionTag=tag)) == expected

    def test_explicit_wins(self, make_person):
        person = make_person(religionCulture="none", religionTag="Jewish")
        assert resolve_culture(person) == ReligionCulture.NONE
