"""People, moments, children and relationships: Pydantic models.

Stored documents use camelCase keys (``hasKids``, ``holidayPrefs``); Python
code uses snake_case. Both spellings validate.
"""

import datetime
from typing import Annotated, Any, Optional, Type

import structlog
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from shared_types import (
    MomentCategory,
    MomentType,
    ParentRole,
    RelationshipType,
    ReligionCulture,
)

logger = structlog.get_logger()

# Older records kept extra dated items in these lists alongside ``moments``
LEGACY_MOMENT_KEYS = ("importantDates", "important_dates", "sensitiveMoments", "sensitive_moments")


def _date_to_str(value: Any) -> Any:
    """Unquoted YAML dates arrive as date objects; store them as YYYY-MM-DD."""
    if isinstance(value, datetime.date):
        return value.isoformat()[:10]
    return value


DateStr = Annotated[str, BeforeValidator(_date_to_str)]


def _valid_items(items: Any, model: Type[BaseModel], field_name: str) -> list:
    """Validate list items one by one, dropping the ones that fail.

    A single bad nested record must not take its parent record down with it.
    """
    if not isinstance(items, list):
        if items is not None:
            logger.warning("person_field_skipped", field=field_name, kind=type(items).__name__)
        return []

    kept = []
    for i, item in enumerate(items):
        if isinstance(item, model):
            kept.append(item)
            continue
        try:
            kept.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("person_item_skipped", field=field_name, index=i, errors=e.error_count())
    return kept


class CareModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Plain dict for YAML/JSON storage (camelCase, no empty optionals)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Moment(CareModel):
    id: str
    type: MomentType = MomentType.CUSTOM
    label: str = ""
    date: DateStr
    recurring: bool = True
    category: Optional[MomentCategory] = None

    @model_validator(mode="after")
    def normalize_fixed_types(self):
        """Birthdays and anniversaries always recur and carry a fixed label."""
        if self.type == MomentType.BIRTHDAY:
            self.recurring = True
            self.label = self.label or "Birthday"
        elif self.type == MomentType.ANNIVERSARY:
            self.recurring = True
            self.label = self.label or "Anniversary"
        return self

    @property
    def is_sensitive(self) -> bool:
        return self.type == MomentType.CUSTOM and self.category == MomentCategory.SENSITIVE

    @property
    def display_label(self) -> str:
        if self.type == MomentType.BIRTHDAY:
            return "Birthday"
        if self.type == MomentType.ANNIVERSARY:
            return "Anniversary"
        return self.label


class ChildSchoolEvent(CareModel):
    type: str  # a SchoolEventType value; unknown types show as a generic milestone
    date: DateStr


class Child(CareModel):
    id: str
    name: Optional[str] = None
    birthday: Optional[DateStr] = None  # YYYY-MM-DD, 0000-MM-DD if year unknown
    birthdate: Optional[DateStr] = None  # legacy spelling of birthday
    school_events: list[ChildSchoolEvent] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_invalid_events(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("schoolEvents", "school_events"):
            if key in data:
                data[key] = _valid_items(data[key], ChildSchoolEvent, "schoolEvents")
        return data

    @property
    def effective_birthday(self) -> Optional[str]:
        value = self.birthday if self.birthday is not None else self.birthdate
        value = (value or "").strip()
        return value or None


class HolidayPrefs(CareModel):
    mothers_day: Optional[bool] = None  # None = ask later
    fathers_day: Optional[bool] = None


class Person(CareModel):
    id: str
    name: str = ""
    phone: Optional[str] = None
    moments: list[Moment] = Field(default_factory=list)
    has_kids: Optional[bool] = None
    parent_role: Optional[ParentRole] = None
    religion_culture: Optional[ReligionCulture] = None
    religion_tag: Optional[str] = None  # legacy free text
    holiday_prefs: HolidayPrefs = Field(default_factory=HolidayPrefs)
    children: list[Child] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_moments(cls, data: Any) -> Any:
        """Fold legacy date lists into ``moments``, first occurrence of an id wins.

        Moments and children that fail validation are dropped on their own,
        so the rest of the person still loads.
        """
        if not isinstance(data, dict):
            return data

        data = dict(data)
        combined = []
        for key in ("moments",) + LEGACY_MOMENT_KEYS:
            items = data.pop(key, None) or []
            if isinstance(items, list):
                # No id means nothing to de-duplicate or suppress against
                combined.extend(i for i in items if isinstance(i, Moment) or (isinstance(i, dict) and i.get("id")))

        seen: set[str] = set()
        merged = []
        for moment in _valid_items(combined, Moment, "moments"):
            if moment.id in seen:
                continue
            seen.add(moment.id)
            merged.append(moment)
        data["moments"] = merged

        if "children" in data:
            data["children"] = _valid_items(data["children"], Child, "children")
        return data

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else "them"

    @property
    def has_kids_or_children(self) -> bool:
        return bool(self.has_kids or self.children)

    def child_label(self, child: Child) -> str:
        name = (child.name or "").strip()
        if name:
            return name
        return f"A child in {self.first_name}'s life"


class Relationship(CareModel):
    id: str
    from_id: str
    to_id: str
    type: RelationshipType = RelationshipType.OTHER

    def involves(self, person_id: str) -> bool:
        return person_id in (self.from_id, self.to_id)
