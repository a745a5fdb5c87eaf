"""Apply suppression state to a generated care feed."""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from care.suggestions import CareSuggestion
from people.models import Person
from people.suppression import SuppressionState

DEFAULT_QUESTION_COOLDOWN_DAYS = 7


def is_snoozed(suggestion: CareSuggestion, state: SuppressionState, now: datetime) -> bool:
    until = state.snoozed_until(suggestion.person_id, suggestion.id)
    return until is not None and until > now


def question_is_fresh(
    state: SuppressionState,
    person_id: str,
    question_id: str,
    now: datetime,
    cooldown_days: int = DEFAULT_QUESTION_COOLDOWN_DAYS,
) -> bool:
    """No answer, dismissal or showing for this question (or person) within the cooldown."""
    cooldown = timedelta(days=cooldown_days)
    marks = state.question_marks(person_id, question_id)
    person_seen = state.person_seen_at(person_id)
    if person_seen is not None:
        marks.append(person_seen)
    return all(now - at >= cooldown for at in marks)


def visible_suggestions(
    suggestions: Iterable[CareSuggestion],
    state: Optional[SuppressionState] = None,
    now: Optional[datetime] = None,
    cooldown_days: int = DEFAULT_QUESTION_COOLDOWN_DAYS,
    session_has_question: bool = False,
) -> list[CareSuggestion]:
    """Drop snoozed cards and keep at most one fresh micro-question.

    Order is preserved. Questions are never hidden by card snoozes; they
    have their own answered/dismissed/seen markers.
    """
    state = state or SuppressionState()
    now = now or datetime.now()

    unsnoozed = [s for s in suggestions if s.is_question or not is_snoozed(s, state, now)]

    chosen = None
    if not session_has_question:
        chosen = next(
            (
                s
                for s in unsnoozed
                if s.is_question and question_is_fresh(state, s.person_id, s.question.id, now, cooldown_days)
            ),
            None,
        )

    return [s for s in unsnoozed if not s.is_question or (chosen is not None and s.id == chosen.id)]


def active_question(suggestions: Iterable[CareSuggestion]) -> Optional[CareSuggestion]:
    return next((s for s in suggestions if s.is_question), None)


def filter_people(people: Iterable[Person], query: Optional[str]) -> list[Person]:
    """People whose name contains every whitespace-separated token (case-insensitive)."""
    tokens = (query or "").strip().lower().split()
    people = list(people)
    if not tokens:
        return people
    return [p for p in people if all(token in p.name.strip().lower() for token in tokens)]
