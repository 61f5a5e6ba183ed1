"""Raw syntax tree produced by the schema parser.

Nothing here is validated beyond the grammar: a declaration may still name
parents it is not allowed to have, or children that do not exist. The model
builder (``crudscaffold.ir.builder``) turns this tree into the semantic model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from crudscaffold.errors import Location


class ObjectKind(str, Enum):
    """Storage category of a declared object."""

    ROOT = "root"
    ORDERED_CHILD = "ordered_child"
    UNORDERED_CHILD = "unordered_child"
    BATCH = "batch"
    SINGLETON = "singleton"
    SINGLETON_FAMILY = "singleton_family"

    @property
    def is_collection(self) -> bool:
        return self in (ObjectKind.ROOT, ObjectKind.ORDERED_CHILD, ObjectKind.UNORDERED_CHILD)


KIND_KEYWORDS: Dict[str, ObjectKind] = {kind.value: kind for kind in ObjectKind}

PARENT_KEY = "parent"

# Child list property -> kind its entries must have
CHILD_LIST_KINDS: Dict[str, ObjectKind] = {
    "ordered_children": ObjectKind.ORDERED_CHILD,
    "unordered_children": ObjectKind.UNORDERED_CHILD,
    "batch_children": ObjectKind.BATCH,
    "singleton_children": ObjectKind.SINGLETON,
    "singleton_family_children": ObjectKind.SINGLETON_FAMILY,
}

PROPERTY_KEYS = (PARENT_KEY,) + tuple(CHILD_LIST_KINDS)


def property_keys_for(kind: ObjectKind) -> Tuple[str, ...]:
    """Keys an object of ``kind`` may legally carry."""
    if kind == ObjectKind.ROOT:
        return tuple(CHILD_LIST_KINDS)
    if kind.is_collection:
        return PROPERTY_KEYS
    return (PARENT_KEY,)


@dataclass
class PropertyValue:
    """Identifiers listed for one property, with the key's location."""

    names: List[str]
    location: Location


@dataclass
class ObjectDecl:
    """One ``<kind> <Name> { ... }`` block."""

    kind: ObjectKind
    name: str
    location: Location  # of the name token
    properties: Dict[str, PropertyValue] = field(default_factory=dict)

    @property
    def parent(self) -> Optional[List[str]]:
        value = self.properties.get(PARENT_KEY)
        return None if value is None else list(value.names)

    def child_list(self, key: str) -> List[str]:
        value = self.properties.get(key)
        return [] if value is None else list(value.names)

    @property
    def declares_children(self) -> bool:
        return any(self.properties.get(key) is not None for key in CHILD_LIST_KINDS)


@dataclass
class ConfigAst:
    """A parsed schema: repository name plus declarations in source order."""

    repository_name: str
    repository_location: Location
    objects: List[ObjectDecl] = field(default_factory=list)
