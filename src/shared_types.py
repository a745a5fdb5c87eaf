"""Shared enums and types for carefeed."""

from enum import StrEnum


class MomentType(StrEnum):
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    CUSTOM = "custom"


class MomentCategory(StrEnum):
    SENSITIVE = "sensitive"


class ParentRole(StrEnum):
    MOTHER = "mother"
    FATHER = "father"
    PARENT = "parent"


class ReligionCulture(StrEnum):
    CHRISTIAN = "christian"
    ORTHODOX = "orthodox"
    JEWISH = "jewish"
    MUSLIM = "muslim"
    NONE = "none"


class SchoolEventType(StrEnum):
    FIRST_DAY = "firstDay"
    K_GRAD = "kGrad"
    FIFTH_MOVE_UP = "5thMoveUp"
    EIGHTH_GRAD = "8thGrad"
    HS_GRAD = "hsGrad"
    COMMUNION = "communion"
    CONFIRMATION = "confirmation"
    BAR_MITZVAH = "barMitzvah"
    BAT_MITZVAH = "batMitzvah"


class RelationshipType(StrEnum):
    PARTNER = "partner"
    CHILD = "child"
    PARENT = "parent"
    SIBLING = "sibling"
    FRIEND = "friend"
    OTHER = "other"


class HolidayId(StrEnum):
    MOTHERS_DAY = "mothersDay"
    FATHERS_DAY = "fathersDay"
    EASTER_WESTERN = "easterWestern"
    EASTER_ORTHODOX = "easterOrthodox"
    HANUKKAH = "hanukkah"
    RAMADAN = "ramadan"
    EID_AL_FITR = "eidAlFitr"


class SuggestionType(StrEnum):
    FOLLOW_UP = "followUp"
    KID_BIRTHDAY = "kidBirthday"
    BIRTHDAY = "birthday"
    HOLIDAY = "holiday"
    SCHOOL_MILESTONE = "schoolMilestone"
    SENSITIVE = "sensitive"
    ANNIVERSARY = "anniversary"
    CUSTOM = "custom"
    QUESTION = "question"


class TimelineCategory(StrEnum):
    SOON = "soon"
    UPCOMING = "upcoming"
    LATER = "later"


class Cue(StrEnum):
    MILESTONE = "Milestone"
    MEANINGFUL_YEAR = "Meaningful year"
    BIG_ONE = "Big one"


class ActionKind(StrEnum):
    TEXT = "text"
    VIEW = "view"
    GIFT_IDEAS = "giftIdeas"


class AnswerKind(StrEnum):
    CHOICE = "choice"
    TEXT = "text"
    DATE = "date"


class PatchOp(StrEnum):
    SET_HAS_KIDS = "set_has_kids"
    SET_RELIGION_CULTURE = "set_religion_culture"
    SET_HOLIDAY_PREF = "set_holiday_pref"
    ADD_CHILD = "add_child"
    SET_CHILD_BIRTHDAY = "set_child_birthday"


class SuppressionKind(StrEnum):
    CARD_SNOOZED = "card_snoozed"
    QUESTION_ANSWERED = "question_answered"
    QUESTION_SNOOZED = "question_snoozed"
    QUESTION_SEEN = "question_seen"
    PERSON_SEEN = "person_seen"


class CareCardType(StrEnum):
    CHILD_BIRTHDAY = "childBirthday"
    PERSON_BIRTHDAY = "personBirthday"
    HOLIDAY = "holiday"
    SCHOOL_MILESTONE = "schoolMilestone"
    SENSITIVE_DATE = "sensitiveDate"
    ANNIVERSARY = "anniversary"
    IMPORTANT_DATE = "importantDate"
