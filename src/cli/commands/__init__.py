"""CLI command modules."""

from .feed import answer, cards, dismiss, feed, holidays, snooze
from .people import people

__all__ = [
    "feed",
    "cards",
    "holidays",
    "snooze",
    "answer",
    "dismiss",
    "people",
]
