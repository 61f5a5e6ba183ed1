"""Per-compile generation options."""

from typing import Optional

from pydantic import BaseModel, field_validator

from crudscaffold.config.settings import get_settings


class GenerationOptions(BaseModel):
    """Knobs that change the generated text without changing its surface."""

    models_module: Optional[str] = None  # emits ``from <module> import <records>`` when set
    context_accessor: str = "repository"

    @field_validator("models_module")
    @classmethod
    def check_models_module(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not all(part.isidentifier() for part in value.split(".")):
            raise ValueError(f"models_module must be a dotted import path, got {value!r}")
        return value

    @field_validator("context_accessor")
    @classmethod
    def check_context_accessor(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"context_accessor must be a Python identifier, got {value!r}")
        return value

    @classmethod
    def from_settings(cls, **overrides) -> "GenerationOptions":
        """Defaults from the environment, with explicit non-None overrides applied."""
        settings = get_settings()
        values = {
            "models_module": settings.models_module,
            "context_accessor": settings.context_accessor,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
