from .models import Child, Moment, Person, Relationship
from .storage import PeopleStorage, RelationshipStorage
from .suppression import SuppressionState, SuppressionStore

__all__ = [
    "Child",
    "Moment",
    "Person",
    "Relationship",
    "PeopleStorage",
    "RelationshipStorage",
    "SuppressionState",
    "SuppressionStore",
]
