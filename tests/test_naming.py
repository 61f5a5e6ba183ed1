"""Tests for identifier derivation."""

import pytest

from crudscaffold.naming import (
    handler_name,
    helper_identifier,
    manager_accessor,
    placeholder_name,
    pluralize,
    strip_parent_prefix,
    to_snake_case,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("OrderLine", "order_line"),
        ("Item2Tag", "item2_tag"),
        ("userID", "user_id"),
        ("HTTPServer", "httpserver"),
        ("Already_Snake", "already_snake"),
        ("__Weird--Name__", "weird_name"),
        ("A", "a"),
    ],
)
def test_to_snake_case(name, expected):
    """Test case conversion boundaries."""
    assert to_snake_case(name) == expected


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Category", "Categories"),
        ("Box", "Boxes"),
        ("Item", "Items"),
        ("Child", "Childs"),
        ("Day", "Days"),
        ("Match", "Matches"),
        ("Wish", "Wishes"),
        ("Status", "Statuses"),
        ("Y", "ies"),
        ("Key", "Keys"),
    ],
)
def test_pluralize(name, expected):
    """Test the three suffix rules; irregulars are not special-cased."""
    assert pluralize(name) == expected


def test_strip_parent_prefix():
    """Test the parent prefix is removed unless nothing would remain."""
    assert strip_parent_prefix("Order", "OrderLine") == "Line"
    assert strip_parent_prefix("Order", "Order") == "Order"
    assert strip_parent_prefix("Order", "Invoice") == "Invoice"


def test_helper_identifier():
    """Test accessor names combine verb, stripping and pluralization."""
    assert helper_identifier("add", "OrderLine", "Order") == "add_line"
    assert helper_identifier("list", "OrderLine", "Order", plural=True) == "list_lines"
    assert helper_identifier("batch_delete_all", "Category", "Shop", plural=True) == "batch_delete_all_categories"
    assert helper_identifier("get", "Order", "Order") == "get_order"
    assert helper_identifier("get", "Settings") == "get_settings"


def test_identifiers_are_deterministic():
    """Test identical inputs always give identical output."""
    first = [helper_identifier("batch_add", "StoreShelf", "Store", plural=True) for _ in range(3)]
    assert len(set(first)) == 1


def test_artifact_names():
    """Test derived accessor, handler and placeholder names."""
    assert manager_accessor("OrderLine") == "manage_order_line"
    assert handler_name("OrderLine") == "manage_order_line_handler"
    assert placeholder_name("OrderLine") == "placeholder_order_line"
