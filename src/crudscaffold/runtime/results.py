"""Results returned by generated request handlers."""

from typing import Any, List, Literal, Union

from pydantic import BaseModel

from .records import PkSk


class CreatedResult(BaseModel):
    result: Literal["created"] = "created"
    created_id: PkSk


class CreatedBatchResult(BaseModel):
    result: Literal["created_batch"] = "created_batch"
    created_ids: List[PkSk]


class ItemResult(BaseModel):
    result: Literal["item"] = "item"
    item: Any


class ItemsResult(BaseModel):
    result: Literal["items"] = "items"
    items: List[Any]


class UnitResult(BaseModel):
    result: Literal["unit"] = "unit"


CrudOperationResult = Union[CreatedResult, CreatedBatchResult, ItemResult, ItemsResult, UnitResult]
