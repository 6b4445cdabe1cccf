from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Any
from polycascade.store.base import Collection


class RelationType(Enum):
    # the target holds an array of embedded copies
    MANY = auto()
    # the target references a single copy
    ONE = auto()


REL_MANY = RelationType.MANY
REL_ONE = RelationType.ONE


@dataclass
class CascadeConfig:
    collection: Collection
    rel_type: RelationType
    query: dict[str, Any]
    properties: list[str] = field(default_factory=list)
    through_prop: str = ''
    old_query: dict[str, Any] = None
    nest: bool = False
    # document class used to decode nested targets, defaults to the collection's
    instance: type = None

    def __post_init__(self):
        if self.rel_type is RelationType.MANY and not self.through_prop:
            raise ValueError(f"A MANY relation into '{self.collection.name}' requires a through_prop")
        if not self.through_prop and not self.properties:
            raise ValueError(f"A relation into '{self.collection.name}' without through_prop requires properties")

    @property
    def is_embedded(self) -> bool:
        return bool(self.through_prop)

    @property
    def has_old_query(self) -> bool:
        return bool(self.old_query)

    def __repr__(self):
        rel = getattr(self.rel_type, 'name', self.rel_type)
        return f"<CascadeConfig {rel} {self.collection.name}.{self.through_prop or '*'} {self.properties}>"
