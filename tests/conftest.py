"""Shared fixtures: in-memory record types, a recording repository and a loader
for generated modules."""

import sys
import types
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest
from pydantic import BaseModel, Field, create_model

from crudscaffold import GenerationOptions, compile_schema
from crudscaffold.runtime.records import AutoFields, PkSk

EXAMPLE_SCHEMA = """
Repo;
root A { unordered_children: B }
unordered_child B { parent: A }
"""

SHOP_SCHEMA = """
// Storefront repository
Shop;

root Store {
    ordered_children: StoreShelf,
    unordered_children: Tag
    batch_children: StorePrice,
    singleton_children: Settings,
    singleton_family_children: Locale
}

ordered_child StoreShelf { parent: Store, ordered_children: Product }
ordered_child Product { parent: StoreShelf }
unordered_child Tag { parent: Store, Catalog }
root Catalog { unordered_children: Tag }
batch StorePrice { parent: Store }
singleton Settings { parent: Store }
singleton_family Locale { parent: Store }
singleton Banner {}
"""

# Import path generated modules load their record types from in tests
MODELS_MODULE = "crud_test_records"
OPTIONS = GenerationOptions(models_module=MODELS_MODULE)


def make_records(names: Iterable[str]) -> Dict[str, type]:
    """Build ``X``/``XData`` pydantic record classes for every name."""
    namespace: Dict[str, type] = {}
    for name in names:
        data_cls = create_model(f"{name}Data", value=(Optional[str], None))
        record_cls = create_model(
            name,
            id=(PkSk, ...),
            data=(data_cls, ...),
            auto_fields=(AutoFields, Field(default_factory=AutoFields)),
        )
        namespace[data_cls.__name__] = data_cls
        namespace[name] = record_cls
    return namespace


def load_generated(source: str, records: Dict[str, type]) -> types.ModuleType:
    """Execute generated source, serving ``records`` as the ``MODELS_MODULE`` import."""
    models = types.ModuleType(MODELS_MODULE)
    models.__dict__.update(records)
    sys.modules[MODELS_MODULE] = models
    try:
        module = types.ModuleType("generated_crud")
        exec(compile(source, "generated_crud.py", "exec"), module.__dict__)
    finally:
        del sys.modules[MODELS_MODULE]
    return module


def pk(value: str) -> PkSk:
    return PkSk(pk=value, sk=value)


class RecordingManager:
    """Accepts any manager primitive, records the call and returns a canned value.

    ``returns`` maps a primitive name to a value or to a callable receiving
    the call arguments.
    """

    def __init__(self, name: str):
        self.name = name
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.returns: Dict[str, Any] = {}

    def __getattr__(self, primitive: str):
        if primitive.startswith("__"):
            raise AttributeError(primitive)

        async def call(*args):
            self.calls.append((primitive, args))
            result = self.returns.get(primitive)
            if callable(result):
                return result(*args)
            return result

        return call

    def primitives(self) -> List[str]:
        return [name for name, _ in self.calls]


class RecordingRepository:
    """Hands out one RecordingManager per ``manage_<object>`` accessor."""

    def __init__(self):
        self.managers: Dict[str, RecordingManager] = {}

    def __getattr__(self, accessor: str):
        if not accessor.startswith("manage_"):
            raise AttributeError(accessor)
        manager = self.managers.setdefault(accessor, RecordingManager(accessor))
        return lambda: manager

    def all_calls(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        return [call for manager in self.managers.values() for call in manager.calls]


class FakeContext:
    def __init__(self, repository: RecordingRepository):
        self._repository = repository

    async def repository(self) -> RecordingRepository:
        return self._repository


@pytest.fixture
def repo() -> RecordingRepository:
    return RecordingRepository()


@pytest.fixture
def ctx(repo) -> FakeContext:
    return FakeContext(repo)


@pytest.fixture
def shop_records() -> Dict[str, type]:
    return make_records(
        ["Store", "StoreShelf", "Product", "Tag", "Catalog", "StorePrice", "Settings", "Locale", "Banner"]
    )


@pytest.fixture
def shop_module(shop_records) -> types.ModuleType:
    result = compile_schema(SHOP_SCHEMA, source="shop.crud", options=OPTIONS)
    assert result.ok, [str(d) for d in result.diagnostics]
    return load_generated(result.source, shop_records)


def record_of(records: Dict[str, type], name: str, item_id: str) -> BaseModel:
    return records[name](id=pk(item_id), data=records[f"{name}Data"](value=item_id))
