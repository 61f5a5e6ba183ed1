"""Schema language: tokens, syntax tree and parser."""

from .ast import CHILD_LIST_KINDS, PROPERTY_KEYS, ConfigAst, ObjectDecl, ObjectKind
from .parser import parse_schema

__all__ = [
    "CHILD_LIST_KINDS",
    "PROPERTY_KEYS",
    "ConfigAst",
    "ObjectDecl",
    "ObjectKind",
    "parse_schema",
]
