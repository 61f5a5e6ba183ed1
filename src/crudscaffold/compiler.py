"""End-to-end pipeline: schema text -> model -> validated model -> Python source."""

from dataclasses import dataclass, field
from typing import List, Optional

from crudscaffold.codegen import GenerationOptions, generate_module
from crudscaffold.config.logging import get_logger
from crudscaffold.errors import Diagnostic, SchemaError
from crudscaffold.ir.builder import build_model
from crudscaffold.ir.model import ConfigModel
from crudscaffold.ir.validators import ensure_valid
from crudscaffold.schema.parser import parse_schema

logger = get_logger(__name__)


@dataclass
class CompileResult:
    """Outcome of one compile: generated source, or the diagnostics that stopped it."""

    source: Optional[str] = None
    model: Optional[ConfigModel] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.source is not None and not self.diagnostics


def load_model(text: str, source: str = "<schema>") -> ConfigModel:
    """
    Parse, build and validate a schema without generating code.

    Raises:
        SchemaError: From whichever stage failed first
    """
    model = build_model(parse_schema(text, source))
    ensure_valid(model)
    return model


def compile_schema(
    text: str,
    repository_name: Optional[str] = None,
    *,
    source: str = "<schema>",
    options: Optional[GenerationOptions] = None,
) -> CompileResult:
    """
    Compile schema text into a generated Python module.

    Args:
        text: Schema source
        repository_name: If given, must match the name the schema declares
        source: Name used in diagnostics and in the generated module docstring
        options: Generation options (defaults if omitted)

    Returns:
        CompileResult with ``source`` set on success, ``diagnostics`` otherwise
    """
    model: Optional[ConfigModel] = None
    try:
        model = load_model(text, source)
        if repository_name is not None and repository_name != model.repository_name:
            raise SchemaError.at(
                model.location,
                "REPOSITORY_MISMATCH",
                f"schema declares repository `{model.repository_name}` but "
                f"`{repository_name}` was requested",
            )
        generated = generate_module(model, options, source)
    except SchemaError as e:
        logger.info(f"Compile of {source} failed with {len(e.diagnostics)} diagnostics")
        return CompileResult(model=model, diagnostics=e.diagnostics)

    logger.info(f"Compiled {source}: repository {model.repository_name}, {len(generated.splitlines())} lines")
    return CompileResult(source=generated, model=model)


def generate_source(
    text: str,
    repository_name: Optional[str] = None,
    *,
    source: str = "<schema>",
    options: Optional[GenerationOptions] = None,
) -> str:
    """Like :func:`compile_schema` but returns the source or raises SchemaError."""
    result = compile_schema(text, repository_name, source=source, options=options)
    if not result.ok:
        raise SchemaError(result.diagnostics)
    return result.source
