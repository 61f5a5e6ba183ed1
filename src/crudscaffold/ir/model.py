"""Semantic model of a validated schema."""

from itertools import chain
from typing import Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from crudscaffold.errors import Location
from crudscaffold.schema.ast import CHILD_LIST_KINDS, ObjectKind


class ObjectModel(BaseModel):
    """Fields shared by every declared object."""

    model_config = ConfigDict(frozen=True)

    kind: ObjectKind
    name: str
    parents: Optional[Tuple[str, ...]] = None  # None means repository-root scope
    location: Optional[Location] = Field(default=None, repr=False)

    @property
    def is_root(self) -> bool:
        return self.parents is None

    @property
    def is_multi_parent(self) -> bool:
        return self.parents is not None and len(self.parents) > 1

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None

    def child_lists(self) -> Dict[str, Tuple[str, ...]]:
        """Child list property name -> declared children."""
        return {}

    def has_children(self) -> bool:
        return any(self.child_lists().values())

    @model_validator(mode="after")
    def check_parents(self):
        if self.parents is not None and not self.parents:
            raise ValueError(f"{self.name}: parent list cannot be empty")
        return self


class CollectionModel(ObjectModel):
    """A root, ordered-child or unordered-child collection."""

    ordered_children: Tuple[str, ...] = ()
    unordered_children: Tuple[str, ...] = ()
    batch_children: Tuple[str, ...] = ()
    singleton_children: Tuple[str, ...] = ()
    singleton_family_children: Tuple[str, ...] = ()

    @field_validator("kind")
    @classmethod
    def check_collection_kind(cls, value: ObjectKind) -> ObjectKind:
        if not value.is_collection:
            raise ValueError(f"collection models cannot have kind {value.value}")
        return value

    @model_validator(mode="after")
    def check_scope(self):
        if self.kind == ObjectKind.ROOT and self.parents is not None:
            raise ValueError(f"{self.name}: root objects cannot have a parent")
        if self.kind != ObjectKind.ROOT and self.parents is None:
            raise ValueError(f"{self.name}: {self.kind.value} objects require a parent")
        return self

    @property
    def is_ordered(self) -> bool:
        return self.kind == ObjectKind.ORDERED_CHILD

    def child_lists(self) -> Dict[str, Tuple[str, ...]]:
        return {key: getattr(self, key) for key in CHILD_LIST_KINDS}

    def all_children(self) -> Tuple[str, ...]:
        return tuple(chain.from_iterable(self.child_lists().values()))


class BatchModel(ObjectModel):
    """A child collection only ever listed or replaced wholesale."""

    kind: ObjectKind = ObjectKind.BATCH

    @field_validator("kind")
    @classmethod
    def check_batch_kind(cls, value: ObjectKind) -> ObjectKind:
        if value != ObjectKind.BATCH:
            raise ValueError(f"batch models cannot have kind {value.value}")
        return value

    @model_validator(mode="after")
    def check_scope(self):
        if self.parents is None:
            raise ValueError(f"{self.name}: batch objects require a parent")
        return self


class SingletonModel(ObjectModel):
    """At most one record per parent (or per repository when root-scoped)."""

    kind: ObjectKind = ObjectKind.SINGLETON

    @field_validator("kind")
    @classmethod
    def check_singleton_kind(cls, value: ObjectKind) -> ObjectKind:
        if value != ObjectKind.SINGLETON:
            raise ValueError(f"singleton models cannot have kind {value.value}")
        return value


class SingletonFamilyModel(ObjectModel):
    """Keyed set of singletons under one parent."""

    kind: ObjectKind = ObjectKind.SINGLETON_FAMILY

    @field_validator("kind")
    @classmethod
    def check_family_kind(cls, value: ObjectKind) -> ObjectKind:
        if value != ObjectKind.SINGLETON_FAMILY:
            raise ValueError(f"singleton family models cannot have kind {value.value}")
        return value


class ConfigModel(BaseModel):
    """Every object of one repository, grouped by kind in declaration order."""

    model_config = ConfigDict(frozen=True)

    repository_name: str
    location: Optional[Location] = Field(default=None, repr=False)
    collections: Tuple[CollectionModel, ...] = ()
    batches: Tuple[BatchModel, ...] = ()
    singletons: Tuple[SingletonModel, ...] = ()
    singleton_families: Tuple[SingletonFamilyModel, ...] = ()

    def all_objects(self) -> Iterator[ObjectModel]:
        """Yield collections, batches, singletons, then singleton families."""
        return chain(self.collections, self.batches, self.singletons, self.singleton_families)

    def get(self, name: str) -> Optional[ObjectModel]:
        for obj in self.all_objects():
            if obj.name == name:
                return obj
        return None

    def owners_of(self, child: str) -> Tuple[CollectionModel, ...]:
        """Collections listing ``child`` in any of their child lists."""
        return tuple(c for c in self.collections if child in c.all_children())
