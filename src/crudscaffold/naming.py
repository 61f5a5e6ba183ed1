"""Deterministic identifier derivation for generated code.

All functions are pure: the same inputs always give the same name, which is
what keeps an interface, its implementation and its handler in agreement.
"""

import re
from typing import Optional

_SEPARATORS = re.compile(r"_+")
_VOWELS = set("aeiou")
_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")


def to_snake_case(name: str) -> str:
    """
    Convert a PascalCase or camelCase name to snake_case.

    A separator goes in at every lower->upper and digit->upper transition and
    in place of any non-alphanumeric character; runs of separators collapse
    and leading/trailing ones are dropped. Runs of capitals are not split, so
    ``HTTPServer`` becomes ``httpserver``.

    Examples:
        "OrderLine" -> "order_line"
        "Item2Tag" -> "item2_tag"
        "userID" -> "user_id"
    """
    out = []
    prev = ""
    for ch in name:
        if not ch.isalnum():
            out.append("_")
        else:
            if ch.isupper() and (prev.islower() or prev.isdigit()):
                out.append("_")
            out.append(ch.lower())
        prev = ch
    return _SEPARATORS.sub("_", "".join(out)).strip("_")


def pluralize(name: str) -> str:
    """
    Pluralize an English noun with three suffix rules.

    Irregular plurals are not special-cased: ``Child`` becomes ``Childs``.

    Examples:
        "Category" -> "Categories"
        "Box" -> "Boxes"
        "Item" -> "Items"
    """
    lower = name.lower()
    # A lone "y" is its own predecessor, so "Y" becomes "ies"
    if lower.endswith("y") and lower[max(len(lower) - 2, 0)] not in _VOWELS:
        return name[:-1] + "ies"
    if lower.endswith(_SIBILANT_ENDINGS):
        return name + "es"
    return name + "s"


def strip_parent_prefix(parent: str, child: str) -> str:
    """Drop ``parent`` from the front of ``child`` unless nothing would remain."""
    if child.startswith(parent) and len(child) > len(parent):
        return child[len(parent):]
    return child


def helper_identifier(verb: str, name: str, parent: Optional[str] = None, plural: bool = False) -> str:
    """
    Name a per-child accessor method.

    Args:
        verb: Leading verb, e.g. ``add`` or ``batch_delete_all``
        name: Object the method operates on
        parent: Owner whose name is stripped from the front of ``name``
        plural: Pluralize the base before converting it

    Returns:
        ``<verb>_<snake base>``, e.g. ``add_line`` for (``add``, ``OrderLine``, ``Order``)
    """
    base = strip_parent_prefix(parent, name) if parent else name
    if plural:
        base = pluralize(base)
    return f"{verb}_{to_snake_case(base)}"


def interface_name(name: str) -> str:
    return f"{name}Crud"


def impl_name(name: str) -> str:
    return f"{name}CrudImpl"


def data_type_name(name: str) -> str:
    return f"{name}Data"


def marker_name(name: str) -> str:
    """Protocol shared by every record type allowed to own ``name``."""
    return f"{name}Parent"


def manager_accessor(name: str) -> str:
    return f"manage_{to_snake_case(name)}"


def handler_name(name: str) -> str:
    return f"manage_{to_snake_case(name)}_handler"


def placeholder_name(name: str) -> str:
    return f"placeholder_{to_snake_case(name)}"


def marker_placeholder_name(name: str) -> str:
    return f"placeholder_{to_snake_case(name)}_parent"


def repository_impl_name(repository_name: str) -> str:
    return f"{repository_name}Impl"
