from .feed import visible_suggestions
from .generator import CareSuggestionGenerator, Horizons, generate_care_suggestions
from .holidays import get_upcoming_holidays
from .suggestions import CareSuggestion

__all__ = [
    "CareSuggestion",
    "CareSuggestionGenerator",
    "Horizons",
    "generate_care_suggestions",
    "get_upcoming_holidays",
    "visible_suggestions",
]
