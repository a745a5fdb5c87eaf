"""Apply micro-question answers to a Person.

Options carry tagged ``PersonPatch`` operations rather than callables, so a
question can round-trip through JSON and still be applied later. Every
function returns an updated copy and leaves the input untouched; ``None``
means nothing applied.
"""

import uuid
from typing import Optional

import structlog

from care.dates import parse_date_parts
from care.suggestions import PersonPatch, Question
from people.models import Child, Person
from shared_types import AnswerKind, PatchOp, ReligionCulture

logger = structlog.get_logger()

HOLIDAY_PREF_NAMES = ("mothers_day", "fathers_day")


def make_id() -> str:
    return uuid.uuid4().hex[:12]


def apply_patch(person: Person, patch: PersonPatch) -> Person:
    """Apply one patch operation, returning a new Person."""
    if patch.op == PatchOp.SET_HAS_KIDS:
        return person.model_copy(update={"has_kids": bool(patch.value)})

    if patch.op == PatchOp.SET_RELIGION_CULTURE:
        return person.model_copy(update={"religion_culture": ReligionCulture(patch.value)})

    if patch.op == PatchOp.SET_HOLIDAY_PREF:
        if patch.pref not in HOLIDAY_PREF_NAMES:
            logger.debug("unknown_holiday_pref", pref=patch.pref)
            return person
        prefs = person.holiday_prefs.model_copy(update={patch.pref: patch.value})
        return person.model_copy(update={"holiday_prefs": prefs})

    if patch.op == PatchOp.ADD_CHILD:
        name = (patch.value or "").strip() or None
        child = Child(id=patch.child_id or make_id(), name=name)
        return person.model_copy(update={"has_kids": True, "children": [*person.children, child]})

    if patch.op == PatchOp.SET_CHILD_BIRTHDAY:
        if not any(c.id == patch.child_id for c in person.children):
            logger.debug("unknown_child", person_id=person.id, child_id=patch.child_id)
            return person
        children = [
            c.model_copy(update={"birthday": patch.value, "birthdate": None}) if c.id == patch.child_id else c
            for c in person.children
        ]
        return person.model_copy(update={"children": children})

    logger.debug("unknown_patch_op", op=str(patch.op))
    return person


def apply_patches(person: Person, patches: list[PersonPatch]) -> Person:
    for patch in patches:
        person = apply_patch(person, patch)
    return person


def apply_option(person: Person, question: Question, option_id: str) -> Optional[Person]:
    """Apply a multiple-choice answer. None when the option does not exist."""
    option = question.option(option_id)
    if option is None:
        logger.debug("unknown_question_option", question_id=question.id, option_id=option_id)
        return None
    return apply_patches(person, option.patches)


def answer_patches(question: Question, value: Optional[str]) -> list[PersonPatch]:
    """Patches for a free-form answer (child name or child birthday)."""
    if question.answer_kind == AnswerKind.TEXT and question.id == "addChild":
        return [PersonPatch(PatchOp.ADD_CHILD, value or "")]

    if question.answer_kind == AnswerKind.DATE and question.id == "childBirthday":
        iso = (value or "").strip()
        child_id = question.meta.get("childId", "")
        if not iso or not child_id or parse_date_parts(iso) is None:
            return []
        return [PersonPatch(PatchOp.SET_CHILD_BIRTHDAY, iso, child_id=child_id)]

    return []


def apply_answer(person: Person, question: Question, value: Optional[str]) -> Optional[Person]:
    """Apply a free-form answer. None when the answer does not fit the question."""
    patches = answer_patches(question, value)
    if not patches:
        logger.debug("answer_not_applied", question_id=question.id)
        return None
    return apply_patches(person, patches)
