"""Storage manager contracts, one per (kind, scope, has-children) combination.

Generated repository protocols type each ``manage_<object>()`` accessor with
one of these. ``T`` is the record type, ``D`` its data payload and ``P`` the
parent record type (or the ``<Child>Parent`` marker for multi-parent
children).
"""

from typing import List, Optional, Protocol, TypeVar

from .records import PkSk

T = TypeVar("T")
D = TypeVar("D")
P = TypeVar("P")


class _ItemAccess(Protocol[T]):
    async def get(self, id: PkSk) -> T: ...

    async def update(self, item: T) -> None: ...


class _LeafDelete(Protocol[T, D]):
    async def delete(self, item: T) -> D: ...

    async def batch_delete(self, items: List[T]) -> List[D]: ...


class _RecursiveDelete(Protocol[T, D]):
    async def delete_recursive(self, item: T) -> D: ...

    async def delete_non_recursive(self, item: T) -> D: ...

    async def batch_delete_non_recursive(self, items: List[T]) -> List[D]: ...


class ManageRoot(_ItemAccess[T], _LeafDelete[T, D], Protocol[T, D]):
    async def query_all(self) -> List[T]: ...

    async def add(self, data: D) -> T: ...

    async def batch_add(self, data: List[D]) -> List[T]: ...

    async def batch_delete_all(self) -> None: ...


class ManageRootWithChildren(_ItemAccess[T], _RecursiveDelete[T, D], Protocol[T, D]):
    async def query_all(self) -> List[T]: ...

    async def add(self, data: D) -> T: ...

    async def batch_add(self, data: List[D]) -> List[T]: ...

    async def batch_delete_all_non_recursive(self) -> None: ...


class ManageUnorderedChild(_ItemAccess[T], _LeafDelete[T, D], Protocol[T, D, P]):
    async def query_all(self, parent: P) -> List[T]: ...

    async def add(self, parent: P, data: D) -> T: ...

    async def batch_add(self, parent: P, data: List[D]) -> List[T]: ...

    async def batch_delete_all(self, parent: P) -> None: ...


class ManageUnorderedChildWithChildren(_ItemAccess[T], _RecursiveDelete[T, D], Protocol[T, D, P]):
    async def query_all(self, parent: P) -> List[T]: ...

    async def add(self, parent: P, data: D) -> T: ...

    async def batch_add(self, parent: P, data: List[D]) -> List[T]: ...

    async def batch_delete_all_non_recursive(self, parent: P) -> None: ...


class ManageOrderedChild(_ItemAccess[T], _LeafDelete[T, D], Protocol[T, D, P]):
    """Children kept in caller-defined order; ``after=None`` appends."""

    async def query_all(self, parent: P) -> List[T]: ...

    async def add(self, parent: P, data: D, after: Optional[T] = None) -> T: ...

    async def batch_add(self, parent: P, data: List[D], after: Optional[T] = None) -> List[T]: ...

    async def batch_delete_all(self, parent: P) -> None: ...


class ManageOrderedChildWithChildren(_ItemAccess[T], _RecursiveDelete[T, D], Protocol[T, D, P]):
    async def query_all(self, parent: P) -> List[T]: ...

    async def add(self, parent: P, data: D, after: Optional[T] = None) -> T: ...

    async def batch_add(self, parent: P, data: List[D], after: Optional[T] = None) -> List[T]: ...

    async def batch_delete_all_non_recursive(self, parent: P) -> None: ...


class ManageBatchChild(Protocol[T, D, P]):
    """Children only ever read or replaced as a whole."""

    async def query_all(self, parent: P) -> List[T]: ...

    async def batch_delete_all(self, parent: P) -> None: ...

    async def batch_replace_all_ordered(self, parent: P, data: List[D]) -> None: ...


class ManageRootSingleton(Protocol[T, D]):
    async def get(self) -> T: ...

    async def set(self, data: D) -> T: ...

    async def delete(self) -> None: ...


class ManageSingletonChild(Protocol[T, D, P]):
    async def get(self, parent: P) -> T: ...

    async def set(self, parent: P, data: D) -> T: ...

    async def delete(self, parent: P) -> None: ...


class ManageRootSingletonFamily(Protocol[T, D]):
    async def get(self, key: str) -> T: ...

    async def set(self, data: D) -> T: ...

    async def batch_set(self, data: List[D]) -> List[T]: ...

    async def delete(self, key: str) -> None: ...

    async def batch_delete(self, keys: List[str]) -> None: ...

    async def query_all(self) -> List[T]: ...

    async def batch_delete_all(self) -> None: ...


class ManageSingletonFamilyChild(Protocol[T, D, P]):
    async def get(self, parent: P, key: str) -> T: ...

    async def set(self, parent: P, data: D) -> T: ...

    async def batch_set(self, parent: P, data: List[D]) -> List[T]: ...

    async def delete(self, parent: P, key: str) -> None: ...

    async def batch_delete(self, parent: P, keys: List[str]) -> None: ...

    async def query_all(self, parent: P) -> List[T]: ...

    async def batch_delete_all(self, parent: P) -> None: ...


MANAGER_PROTOCOLS = {
    cls.__name__: cls
    for cls in (
        ManageRoot,
        ManageRootWithChildren,
        ManageUnorderedChild,
        ManageUnorderedChildWithChildren,
        ManageOrderedChild,
        ManageOrderedChildWithChildren,
        ManageBatchChild,
        ManageRootSingleton,
        ManageSingletonChild,
        ManageRootSingletonFamily,
        ManageSingletonFamilyChild,
    )
}
