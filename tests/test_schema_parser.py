"""Tests for the schema lexer and parser."""

import pytest

from crudscaffold.errors import SchemaError
from crudscaffold.schema import ObjectKind, parse_schema
from crudscaffold.schema.lexer import EOF, IDENT, tokenize

from conftest import EXAMPLE_SCHEMA, SHOP_SCHEMA


def _codes(error: SchemaError):
    return [d.code for d in error.diagnostics]


def test_tokenize_tracks_locations():
    """Test tokens carry 1-based line and column."""
    tokens = tokenize("Repo;\n  root A {}", source="x.crud")
    assert [t.type for t in tokens] == [IDENT, ";", IDENT, IDENT, "{", "}", EOF]
    root = tokens[2]
    assert (root.location.line, root.location.column) == (2, 3)
    assert str(root.location) == "x.crud:2:3"


def test_tokenize_skips_comments():
    """Test // and # comments are ignored."""
    tokens = tokenize("// header\nRepo; # trailing\n")
    assert [t.text for t in tokens if t.type == IDENT] == ["Repo"]


def test_tokenize_rejects_unknown_character():
    """Test stray punctuation is a located error."""
    with pytest.raises(SchemaError) as exc_info:
        tokenize("Repo;\nroot A = {}")
    diagnostic = exc_info.value.diagnostics[0]
    assert diagnostic.code == "UNEXPECTED_CHARACTER"
    assert diagnostic.location.line == 2


def test_parse_example_schema():
    """Test the minimal root/child schema."""
    ast = parse_schema(EXAMPLE_SCHEMA)
    assert ast.repository_name == "Repo"
    assert [(o.kind, o.name) for o in ast.objects] == [
        (ObjectKind.ROOT, "A"),
        (ObjectKind.UNORDERED_CHILD, "B"),
    ]
    assert ast.objects[0].child_list("unordered_children") == ["B"]
    assert ast.objects[0].parent is None
    assert ast.objects[1].parent == ["A"]


def test_parse_multi_parent_and_optional_commas():
    """Test comma-separated parent lists end where the next property starts."""
    ast = parse_schema("R;\nordered_child C { parent: A, B, ordered_children: D unordered_children: E }")
    decl = ast.objects[0]
    assert decl.parent == ["A", "B"]
    assert decl.child_list("ordered_children") == ["D"]
    assert decl.child_list("unordered_children") == ["E"]


def test_parse_property_order_is_irrelevant():
    """Test the same properties in either order give the same declaration."""
    first = parse_schema("R; ordered_child C { parent: A, ordered_children: D }").objects[0]
    second = parse_schema("R; ordered_child C { ordered_children: D, parent: A }").objects[0]
    assert first.parent == second.parent
    assert first.child_list("ordered_children") == second.child_list("ordered_children")


def test_parse_shop_schema():
    """Test a schema using every kind keyword."""
    ast = parse_schema(SHOP_SCHEMA)
    assert ast.repository_name == "Shop"
    kinds = {o.name: o.kind for o in ast.objects}
    assert kinds["StorePrice"] == ObjectKind.BATCH
    assert kinds["Locale"] == ObjectKind.SINGLETON_FAMILY
    assert kinds["Banner"] == ObjectKind.SINGLETON


def test_missing_semicolon_after_repository_name():
    """Test a repository name without `;` is reported."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("Repo\nroot A {}")
    assert "expected `;` after repository name" in str(exc_info.value)


def test_missing_repository_name():
    """Test starting with a kind keyword explains the repository name rule."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("root A {}")
    assert "expected repository name before object definitions" in str(exc_info.value)


def test_unknown_kind_keyword():
    """Test unknown kinds list the valid keywords."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("Repo;\nthing A {}")
    diagnostic = exc_info.value.diagnostics[0]
    assert diagnostic.code == "UNKNOWN_KIND"
    assert "unknown type `thing`" in diagnostic.message
    assert "`singleton_family`" in diagnostic.message
    assert (diagnostic.location.line, diagnostic.location.column) == (2, 1)


def test_duplicate_and_unknown_properties_are_all_reported():
    """Test property errors are collected rather than stopping at the first."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("Repo;\nunordered_child B { parent: A, parent: C, colour: Red }")
    error = exc_info.value
    assert _codes(error) == ["DUPLICATE_PROPERTY", "UNKNOWN_PROPERTY"]
    assert "duplicate `parent` property" in error.diagnostics[0].message
    assert "`batch_children`" in error.diagnostics[1].message


def test_trailing_comma_in_list_is_an_error():
    """Test a comma followed by `}` is rejected."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("Repo;\nroot A { unordered_children: B, }")
    assert exc_info.value.diagnostics[0].code == "TRAILING_COMMA"
    assert "expected identifier after `,`" in str(exc_info.value)


def test_unclosed_object():
    """Test end of input inside an object body."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("Repo;\nroot A { unordered_children: B")
    assert exc_info.value.diagnostics[0].code == "UNCLOSED_OBJECT"


def test_grammar_error_keeps_earlier_property_diagnostics():
    """Test a fatal error still reports recoverable ones found before it."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema("Repo;\nroot A { colour: Red }\nroot B { parent A }")
    assert _codes(exc_info.value) == ["UNKNOWN_PROPERTY", "EXPECTED_COLON"]


@pytest.mark.parametrize(
    "kind,expected,absent",
    [
        ("batch", ["`parent`"], "`batch_children`"),
        ("singleton_family", ["`parent`"], "`ordered_children`"),
        ("root", ["`ordered_children`", "`singleton_family_children`"], "`parent`"),
    ],
)
def test_unknown_property_lists_keys_for_the_kind(kind, expected, absent):
    """Test the unknown-property message names only keys the kind may carry."""
    with pytest.raises(SchemaError) as exc_info:
        parse_schema(f"Repo;\n{kind} C {{ colour: Red }}")
    message = exc_info.value.diagnostics[0].message
    assert f"`{kind}` objects accept:" in message
    for key in expected:
        assert key in message
    assert absent not in message
