"""People and relationship storage: YAML lists at ~/carefeed/*.yaml."""

import uuid
from pathlib import Path
from typing import Optional, Type, TypeVar

import structlog
import yaml
from pydantic import ValidationError

from people.models import CareModel, Person, Relationship
from shared_types import RelationshipType

logger = structlog.get_logger()

M = TypeVar("M", bound=CareModel)


def make_id() -> str:
    return uuid.uuid4().hex[:12]


def _load_records(path: Path, model: Type[M]) -> list[M]:
    """Read a YAML list of records. Missing or corrupt data degrades to []."""
    if not path.exists():
        return []
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning("storage_load_failed", path=str(path), error=str(e))
        return []
    if not data:
        return []
    if not isinstance(data, list):
        logger.warning("storage_not_a_list", path=str(path), kind=type(data).__name__)
        return []

    records = []
    for i, item in enumerate(data):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("storage_record_skipped", path=str(path), index=i, error=str(e))
    return records


def _save_records(path: Path, records: list[CareModel]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [r.to_document() for r in records]
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return path


class PeopleStorage:
    """YAML-backed people storage."""

    def __init__(self, path: str | Path = "~/carefeed/people.yaml"):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[Person]:
        return _load_records(self.path, Person)

    def save(self, people: list[Person]) -> Path:
        return _save_records(self.path, people)

    def get(self, person_id: str) -> Optional[Person]:
        return next((p for p in self.load() if p.id == person_id), None)

    def upsert(self, person: Person) -> Person:
        """Insert or replace a person by id."""
        people = self.load()
        for i, existing in enumerate(people):
            if existing.id == person.id:
                people[i] = person
                break
        else:
            people.append(person)
        self.save(people)
        return person

    def remove(self, person_id: str) -> bool:
        people = self.load()
        kept = [p for p in people if p.id != person_id]
        if len(kept) == len(people):
            return False
        self.save(kept)
        return True

    def migrate(self) -> int:
        """Rewrite the file so legacy date lists are folded into ``moments``.

        Returns the number of people written.
        """
        people = self.load()
        if people:
            self.save(people)
            logger.info("people_migrated", path=str(self.path), count=len(people))
        return len(people)


class RelationshipStorage:
    """YAML-backed relationship storage."""

    def __init__(self, path: str | Path = "~/carefeed/relationships.yaml"):
        self.path = Path(path).expanduser()

    def load(self) -> list[Relationship]:
        return _load_records(self.path, Relationship)

    def save(self, relationships: list[Relationship]) -> Path:
        return _save_records(self.path, relationships)

    def add(self, from_id: str, to_id: str, rel_type: RelationshipType | str) -> Relationship:
        relationships = self.load()
        relationship = Relationship(id=make_id(), from_id=from_id, to_id=to_id, type=RelationshipType(rel_type))
        relationships.append(relationship)
        self.save(relationships)
        return relationship

    def remove(self, relationship_id: str) -> bool:
        relationships = self.load()
        kept = [r for r in relationships if r.id != relationship_id]
        if len(kept) == len(relationships):
            return False
        self.save(kept)
        return True

    def remove_for_person(self, person_id: str) -> int:
        relationships = self.load()
        kept = [r for r in relationships if not r.involves(person_id)]
        removed = len(relationships) - len(kept)
        if removed:
            self.save(kept)
        return removed

    def for_person(self, person_id: str) -> list[Relationship]:
        """Relationships where the person is either endpoint."""
        return [r for r in self.load() if r.involves(person_id)]

    def related_people(self, person_id: str, people: list[Person]) -> list[Person]:
        """People this person points to (outgoing relationships only)."""
        related_ids = {r.to_id for r in self.load() if r.from_id == person_id}
        return [p for p in people if p.id in related_ids]
