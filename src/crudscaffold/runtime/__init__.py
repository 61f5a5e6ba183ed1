"""Runtime support imported by generated modules."""

from .context import CrudContext, ManagerFactory
from .errors import CrudError, InvalidCrudRequestParameters
from .operations import CrudOperation, parse_operation
from .records import AutoFields, PkSk
from .results import (
    CreatedBatchResult,
    CreatedResult,
    CrudOperationResult,
    ItemResult,
    ItemsResult,
    UnitResult,
)

__all__ = [
    "AutoFields",
    "CreatedBatchResult",
    "CreatedResult",
    "CrudContext",
    "CrudError",
    "CrudOperation",
    "CrudOperationResult",
    "InvalidCrudRequestParameters",
    "ItemResult",
    "ItemsResult",
    "ManagerFactory",
    "PkSk",
    "UnitResult",
    "parse_operation",
]
