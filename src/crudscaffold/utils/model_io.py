"""Utilities for loading and saving the semantic model from/to JSON files."""

from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from crudscaffold.ir.model import ConfigModel


def load_model_from_json(model_path: Path) -> ConfigModel:
    """
    Load a ConfigModel from a JSON file.

    Args:
        model_path: Path to the JSON file

    Returns:
        Loaded ConfigModel instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty or does not hold a valid model
    """
    model_path = Path(model_path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")

    file_content = model_path.read_text(encoding="utf-8").strip()
    if not file_content:
        raise ValueError(
            f"Model file is empty: {model_path}. "
            f"Regenerate it with `crudscaffold model <schema> {model_path}`."
        )

    try:
        return TypeAdapter(ConfigModel).validate_json(file_content)
    except ValidationError as e:
        raise ValueError(
            f"Failed to load model from {model_path}: {e}. "
            f"The file may be corrupted or written by an incompatible version."
        ) from e


def save_model_to_json(model: ConfigModel, model_path: Path) -> None:
    """
    Save a ConfigModel to a JSON file.

    Note:
        Creates parent directories if they don't exist.
    """
    model_path = Path(model_path)
    model_path.parent.mkdir(parents=True, exist_ok=True)
    model_path.write_text(model.model_dump_json(indent=2), encoding="utf-8")
