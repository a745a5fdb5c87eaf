"""Care suggestion records produced by the generator (never persisted)."""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Optional

from pydantic.alias_generators import to_camel

from shared_types import (
    ActionKind,
    AnswerKind,
    CareCardType,
    Cue,
    PatchOp,
    SuggestionType,
    TimelineCategory,
)

# Feed order by type; questions always last
TYPE_PRIORITY = {
    SuggestionType.FOLLOW_UP: -1,
    SuggestionType.KID_BIRTHDAY: 0,
    SuggestionType.BIRTHDAY: 1,
    SuggestionType.HOLIDAY: 2,
    SuggestionType.SCHOOL_MILESTONE: 3,
    SuggestionType.SENSITIVE: 4,
    SuggestionType.ANNIVERSARY: 5,
    SuggestionType.CUSTOM: 6,
    SuggestionType.QUESTION: 999,
}


@dataclass
class SuggestionAction:
    kind: ActionKind
    person_id: str
    body: Optional[str] = None  # prefilled text message
    query: Optional[str] = None  # gift search query

    @classmethod
    def text(cls, person_id: str, body: str) -> "SuggestionAction":
        return cls(kind=ActionKind.TEXT, person_id=person_id, body=body)

    @classmethod
    def view(cls, person_id: str) -> "SuggestionAction":
        return cls(kind=ActionKind.VIEW, person_id=person_id)

    @classmethod
    def gift_ideas(cls, person_id: str, person_name: str) -> "SuggestionAction":
        return cls(kind=ActionKind.GIFT_IDEAS, person_id=person_id, query=f"gift ideas for {person_name}".strip())


@dataclass
class PersonPatch:
    """One state transition applied to a Person when an answer is chosen."""

    op: PatchOp
    value: Any = None
    pref: Optional[str] = None  # holiday pref name for SET_HOLIDAY_PREF
    child_id: Optional[str] = None


@dataclass
class QuestionOption:
    id: str
    label: str
    patches: list[PersonPatch] = field(default_factory=list)


@dataclass
class Question:
    id: str
    prompt: str
    options: list[QuestionOption] = field(default_factory=list)
    answer_kind: AnswerKind = AnswerKind.CHOICE
    meta: dict[str, str] = field(default_factory=dict)

    def option(self, option_id: str) -> Optional[QuestionOption]:
        return next((o for o in self.options if o.id == option_id), None)


@dataclass
class CareSuggestion:
    id: str
    type: SuggestionType
    person_id: str
    title: str
    message: str
    action_label: str
    action: SuggestionAction
    sort_days_until: int
    insight: Optional[str] = None
    cue: Optional[Cue] = None
    timeline_category: Optional[TimelineCategory] = None
    question: Optional[Question] = None

    @property
    def is_question(self) -> bool:
        return self.type == SuggestionType.QUESTION and self.question is not None

    def sort_key(self) -> tuple:
        return (TYPE_PRIORITY.get(self.type, 999), self.sort_days_until, self.title.casefold())

    def to_dict(self) -> dict:
        """JSON-friendly dict with camelCase keys, dropping empty optionals."""
        return to_document(self)


@dataclass
class CareCard:
    """Compact dated card: who, what and when, without actions or questions."""

    id: str
    type: CareCardType
    person_id: str
    date: str  # YYYY-MM-DD of the occurrence
    title: str
    message: str
    child_id: Optional[str] = None
    sort_days_until: int = field(default=0, repr=False)
    sort_priority: int = field(default=0, repr=False)

    def sort_key(self) -> tuple:
        return (self.sort_priority, self.sort_days_until, self.title.casefold())

    def to_dict(self) -> dict:
        doc = to_document(self)
        doc.pop("sortDaysUntil", None)
        doc.pop("sortPriority", None)
        return doc


def to_document(value: Any) -> Any:
    """Recursively turn records into plain dicts keyed like the stored people documents.

    Only dataclass field names are converted; free-form dict keys (question
    meta) pass through unchanged.
    """
    if is_dataclass(value):
        doc = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if item is not None:
                doc[to_camel(f.name)] = to_document(item)
        return doc
    if isinstance(value, list):
        return [to_document(v) for v in value]
    if isinstance(value, dict):
        return {k: to_document(v) for k, v in value.items()}
    return value
