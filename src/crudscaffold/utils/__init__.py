"""Utility helpers."""

from .model_io import load_model_from_json, save_model_to_json

__all__ = ["load_model_from_json", "save_model_to_json"]
