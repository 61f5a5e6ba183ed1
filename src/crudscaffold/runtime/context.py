"""Contracts for the objects generated code receives from its caller."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CrudContext(Protocol):
    """Per-request context passed into every generated operation.

    Generated implementations await ``ctx.repository()`` (the method name is
    configurable at generation time) to reach the object exposing the
    ``manage_<object>()`` accessors.
    """

    async def repository(self) -> Any: ...


class ManagerFactory(Protocol):
    """Builds a storage manager for one object.

    ``manager_kind`` is the name of a protocol in
    :mod:`crudscaffold.runtime.managers` (e.g. ``"ManageRootWithChildren"``)
    and ``record_type`` the record class it manages.
    """

    def __call__(self, manager_kind: str, record_type: type) -> Any: ...
