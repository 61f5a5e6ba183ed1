"""Tests for the runtime envelope, precondition helpers and fan-out."""

import asyncio

import pytest
from pydantic import ValidationError

from crudscaffold.runtime import operations as ops
from crudscaffold.runtime.errors import CrudError, InvalidCrudRequestParameters
from crudscaffold.runtime.managers import MANAGER_PROTOCOLS
from crudscaffold.runtime.records import PkSk

from conftest import pk


def test_parse_operation_from_mapping():
    """Test the ``op`` discriminator selects the variant."""
    operation = ops.parse_operation({"op": "delete_all", "parent_id": {"pk": "a", "sk": "b"}, "non_recursive": True})
    assert isinstance(operation, ops.DeleteAll)
    assert operation.parent_id == PkSk(pk="a", sk="b")
    assert operation.non_recursive


def test_parse_operation_from_json():
    """Test raw JSON payloads are accepted."""
    operation = ops.parse_operation('{"op": "read_batch", "ids": [{"pk": "x", "sk": "y"}]}')
    assert isinstance(operation, ops.ReadBatch)
    assert operation.ids == [PkSk(pk="x", sk="y")]


def test_parse_operation_rejects_unknown_variant():
    """Test an unknown ``op`` fails validation."""
    with pytest.raises(ValidationError):
        ops.parse_operation({"op": "upsert"})


def test_pksk_str():
    """Test the composite key renders as ``pk|sk``."""
    assert str(PkSk(pk="a", sk="b")) == "a|b"


def test_precondition_messages():
    """Test each helper names the variant and the object type."""
    with pytest.raises(InvalidCrudRequestParameters) as exc_info:
        ops.require_parent_id(ops.List(), "Tag")
    assert exc_info.value.message == "list operations on Tag require a valid parent ID"

    with pytest.raises(InvalidCrudRequestParameters) as exc_info:
        ops.forbid_parent_id(ops.List(parent_id=pk("a")), "Store")
    assert exc_info.value.message == "list operations on Store do not allow a parent ID"

    with pytest.raises(InvalidCrudRequestParameters) as exc_info:
        ops.require_non_recursive(ops.DeleteAll(), "Store")
    assert "require `non_recursive=True`" in exc_info.value.message

    assert ops.require_parent_id(ops.List(parent_id=pk("a")), "Tag") == pk("a")
    ops.forbid_after(ops.Create(data={}), "Tag")


def test_unsupported_builds_without_raising():
    """Test the unsupported helpers return an error for the caller to raise."""
    error = ops.unsupported(ops.ReplaceAll(data=[]), "Product", "only batch collections support replace_all")
    assert isinstance(error, CrudError)
    assert str(error) == (
        "replace_all operations are not supported for Product; only batch collections support replace_all"
    )
    assert "batch collection Price" in ops.unsupported_for_batch(ops.Read(id=pk("a")), "Price").message
    assert "singleton Settings" in ops.unsupported_for_singleton(ops.Read(id=pk("a")), "Settings").message


async def test_fan_out_preserves_order():
    """Test results come back in input order even when completion order differs."""

    async def delayed(value, delay):
        await asyncio.sleep(delay)
        return value

    results = await ops.fan_out([delayed("a", 0.02), delayed("b", 0.0), delayed("c", 0.01)])
    assert results == ["a", "b", "c"]


async def test_fan_out_raises_first_failure_after_all_complete():
    """Test every call runs and the first failure in input order is raised."""
    finished = []

    async def ok(value):
        finished.append(value)
        return value

    async def fail(message):
        finished.append(message)
        raise KeyError(message)

    with pytest.raises(KeyError) as exc_info:
        await ops.fan_out([ok(1), fail("first"), fail("second"), ok(2)])
    assert exc_info.value.args == ("first",)
    assert sorted(map(str, finished)) == ["1", "2", "first", "second"]


def test_manager_protocol_registry():
    """Test every manager name used by generated code resolves to a protocol."""
    for name in (
        "ManageRoot",
        "ManageRootWithChildren",
        "ManageOrderedChild",
        "ManageUnorderedChildWithChildren",
        "ManageBatchChild",
        "ManageRootSingleton",
        "ManageSingletonFamilyChild",
    ):
        assert name in MANAGER_PROTOCOLS
