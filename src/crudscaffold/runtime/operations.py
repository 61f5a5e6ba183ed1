"""Generic CRUD operation envelope and the checks generated handlers run on it.

A routing layer turns a request into one of the envelope variants below and
passes it to ``manage_<object>_handler``. The handler decides whether the
variant is legal for its object and rejects it with
:class:`InvalidCrudRequestParameters` before touching storage if not.
"""

import asyncio
from typing import Annotated, Any, Awaitable, Iterable, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field, TypeAdapter

from crudscaffold.config.logging import get_logger

from .errors import InvalidCrudRequestParameters
from .records import PkSk

logger = get_logger(__name__)

T = TypeVar("T")


class List(BaseModel):
    op: Literal["list"] = "list"
    parent_id: Optional[PkSk] = None


class Create(BaseModel):
    op: Literal["create"] = "create"
    parent_id: Optional[PkSk] = None
    after: Optional[PkSk] = None
    data: Any


class CreateBatch(BaseModel):
    op: Literal["create_batch"] = "create_batch"
    parent_id: Optional[PkSk] = None
    after: Optional[PkSk] = None
    data: list[Any]


class Read(BaseModel):
    op: Literal["read"] = "read"
    id: PkSk


class ReadBatch(BaseModel):
    op: Literal["read_batch"] = "read_batch"
    ids: list[PkSk]


class Update(BaseModel):
    op: Literal["update"] = "update"
    item: Any


class Delete(BaseModel):
    op: Literal["delete"] = "delete"
    id: PkSk


class DeleteBatch(BaseModel):
    op: Literal["delete_batch"] = "delete_batch"
    ids: list[PkSk]
    non_recursive: bool = False


class DeleteAll(BaseModel):
    op: Literal["delete_all"] = "delete_all"
    parent_id: Optional[PkSk] = None
    non_recursive: bool = False


class ReplaceAll(BaseModel):
    op: Literal["replace_all"] = "replace_all"
    parent_id: Optional[PkSk] = None
    data: list[Any]


CrudOperation = Annotated[
    Union[List, Create, CreateBatch, Read, ReadBatch, Update, Delete, DeleteBatch, DeleteAll, ReplaceAll],
    Field(discriminator="op"),
]

_operation_adapter: TypeAdapter = TypeAdapter(CrudOperation)


def parse_operation(payload: Union[dict, str, bytes]) -> CrudOperation:
    """
    Build an envelope variant from a decoded payload or raw JSON.

    Args:
        payload: Mapping or JSON document with an ``op`` discriminator

    Returns:
        The matching envelope variant

    Raises:
        ValidationError: If ``op`` is unknown or a field has the wrong shape
    """
    if isinstance(payload, (str, bytes)):
        return _operation_adapter.validate_json(payload)
    return _operation_adapter.validate_python(payload)


def _variant(operation: Any) -> str:
    return getattr(operation, "op", type(operation).__name__)


def _reject(message: str) -> InvalidCrudRequestParameters:
    logger.debug(f"Rejected request: {message}")
    return InvalidCrudRequestParameters(message)


def require_parent_id(operation: Any, type_name: str) -> PkSk:
    """Return the envelope's parent ID, failing if it is missing."""
    if operation.parent_id is None:
        raise _reject(f"{_variant(operation)} operations on {type_name} require a valid parent ID")
    return operation.parent_id


def forbid_parent_id(operation: Any, type_name: str) -> None:
    if operation.parent_id is not None:
        raise _reject(f"{_variant(operation)} operations on {type_name} do not allow a parent ID")


def forbid_after(operation: Any, type_name: str) -> None:
    if operation.after is not None:
        raise _reject(
            f"{_variant(operation)} operations on {type_name} do not allow an `after` parameter; "
            f"only ordered collections accept one"
        )


def require_non_recursive(operation: Any, type_name: str) -> None:
    if not operation.non_recursive:
        raise _reject(
            f"{_variant(operation)} operations on {type_name} require `non_recursive=True` because "
            f"{type_name} has child objects that would be left behind"
        )


def unsupported(operation: Any, type_name: str, reason: str = "") -> InvalidCrudRequestParameters:
    """Build (not raise) the error for a variant the object does not support."""
    message = f"{_variant(operation)} operations are not supported for {type_name}"
    if reason:
        message = f"{message}; {reason}"
    return _reject(message)


def unsupported_for_batch(operation: Any, type_name: str) -> InvalidCrudRequestParameters:
    return _reject(
        f"{_variant(operation)} operations are not supported for batch collection {type_name}; "
        f"use list, delete_all or replace_all"
    )


def unsupported_for_singleton(operation: Any, type_name: str) -> InvalidCrudRequestParameters:
    return _reject(
        f"{_variant(operation)} operations are not supported for singleton {type_name}; "
        f"use the owner's accessor methods on the generated interface instead"
    )


async def fan_out(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """
    Await every call concurrently and return results in input order.

    All calls run to completion before anything is reported; if any failed,
    the first failure (in input order) is raised and no partial result is
    returned.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
