"""Message templates with stable, seed-based selection.

The same seed always picks the same template, so a feed regenerated on the
same day renders identical wording. Seeds include the day, so wording may
change from one day to the next.
"""

import re
from typing import Any, Mapping, Optional, Sequence

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

MESSAGE_TEMPLATES = {
    "kidBirthday": [
        "{childName} has a birthday soon. Might be a good moment to check in with {parentName}.",
        "{childName} is celebrating a birthday. A quick note could mean a lot to {parentName}.",
    ],
    "holiday": [
        "{holiday} is coming up. You may want to reach out to {name}.",
        "{name} may be celebrating {holiday} soon.",
    ],
    "sensitive": [
        "{name} has something important coming up.",
        "There's a meaningful date ahead for {name}.",
    ],
    "birthday": [
        "{name} has a birthday coming up.",
        "{name}'s birthday is almost here.",
    ],
    "birthdayThisWeek": [
        "{name} turns {age} this week. Want to reach out?",
    ],
    "anniversary": [
        "{name}'s anniversary is coming up.",
        "An anniversary is approaching for {name}.",
    ],
    "custom": [
        "{name} has something important coming up.",
        "There's a meaningful date ahead for {name}.",
    ],
}


def stable_hash(seed: str) -> int:
    """FNV-1a, 32-bit."""
    h = FNV_OFFSET_BASIS
    for ch in seed:
        h ^= ord(ch)
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def make_seed(*parts: Any) -> str:
    return "|".join(str(p) for p in parts)


def pick_template(templates: Sequence[str], seed: str) -> str:
    if not templates:
        return ""
    return templates[stable_hash(seed) % len(templates)]


def apply_template(template: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """Fill ``{name}`` placeholders. Missing or None values become empty strings."""
    variables = variables or {}

    def _sub(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER_RE.sub(_sub, template)


def get_templates(kind: str, custom_templates: dict | None = None) -> list[str]:
    """Template list for a suggestion kind. Custom templates override builtins."""
    all_templates = {**MESSAGE_TEMPLATES}
    if custom_templates:
        all_templates.update(custom_templates)
    return list(all_templates.get(kind, []))


def render(kind: str, seed: str, templates: Sequence[str] | None = None, **variables: Any) -> str:
    """Pick a template for ``kind`` by seed and fill it in."""
    choices = get_templates(kind) if templates is None else templates
    return apply_template(pick_template(choices, seed), variables)
