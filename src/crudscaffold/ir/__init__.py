"""Semantic model: construction and validation."""

from .builder import build_model
from .model import (
    BatchModel,
    CollectionModel,
    ConfigModel,
    ObjectModel,
    SingletonFamilyModel,
    SingletonModel,
)
from .validators import ensure_valid, validate_model

__all__ = [
    "BatchModel",
    "CollectionModel",
    "ConfigModel",
    "ObjectModel",
    "SingletonFamilyModel",
    "SingletonModel",
    "build_model",
    "ensure_valid",
    "validate_model",
]
