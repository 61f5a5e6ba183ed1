"""Typer CLI application."""

from pathlib import Path
from typing import List, Optional

import typer

from crudscaffold.codegen import GenerationOptions, build_module_surface
from crudscaffold.compiler import compile_schema, load_model
from crudscaffold.config.logging import setup_logging
from crudscaffold.config.settings import get_settings
from crudscaffold.errors import Diagnostic, SchemaError
from crudscaffold.naming import to_snake_case
from crudscaffold.utils.model_io import save_model_to_json

app = typer.Typer(help="crudscaffold: generate CRUD interfaces and handlers from a schema")


def _configure_logging() -> None:
    try:
        setup_logging()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _read_schema(schema_file: Path) -> str:
    if not schema_file.exists():
        typer.echo(f"Error: schema file not found: {schema_file}", err=True)
        raise typer.Exit(1)
    return schema_file.read_text(encoding="utf-8")


def _report(diagnostics: List[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        typer.echo(str(diagnostic), err=True)
    typer.echo(f"✗ {len(diagnostics)} error(s)", err=True)


@app.command()
def generate(
    schema_file: Path,
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output .py file"),
    models_module: Optional[str] = typer.Option(
        None, "--models-module", "-m", help="Import path providing the record types"
    ),
    accessor: Optional[str] = typer.Option(
        None, "--accessor", help="Async method on ctx that returns the repository"
    ),
    repository_name: Optional[str] = typer.Option(
        None, "--repository-name", help="Fail unless the schema declares this repository"
    ),
):
    """
    Generate interfaces, implementations and handlers from a schema.

    Args:
        schema_file: Path to the schema file
        out: Output path (defaults to <output_dir>/<repository>.py)
    """
    _configure_logging()
    settings = get_settings()

    typer.echo(f"Reading schema from {schema_file}")
    text = _read_schema(schema_file)

    try:
        options = GenerationOptions.from_settings(models_module=models_module, context_accessor=accessor)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    result = compile_schema(text, repository_name, source=str(schema_file), options=options)
    if not result.ok:
        _report(result.diagnostics)
        raise typer.Exit(1)

    out_path = Path(out) if out else settings.output_dir / f"{to_snake_case(result.model.repository_name)}.py"
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(result.source, encoding="utf-8")

    typer.echo(f"✓ Complete! Generated {result.model.repository_name} into {out_path}")


@app.command()
def check(schema_file: Path):
    """
    Parse and validate a schema without generating code.

    Args:
        schema_file: Path to the schema file
    """
    _configure_logging()
    text = _read_schema(schema_file)

    try:
        model = load_model(text, str(schema_file))
        build_module_surface(model)
    except SchemaError as e:
        _report(e.diagnostics)
        raise typer.Exit(1)

    count = sum(1 for _ in model.all_objects())
    typer.echo(f"✓ {schema_file}: repository {model.repository_name}, {count} objects")


@app.command()
def model(schema_file: Path, out_json: Path):
    """
    Write the validated semantic model as JSON.

    Args:
        schema_file: Path to the schema file
        out_json: Output path for the model JSON
    """
    _configure_logging()
    text = _read_schema(schema_file)

    try:
        config = load_model(text, str(schema_file))
    except SchemaError as e:
        _report(e.diagnostics)
        raise typer.Exit(1)

    typer.echo(f"Writing model to {out_json}")
    save_model_to_json(config, out_json)
    typer.echo(f"✓ Complete! Model written to {out_json}")


@app.command()
def surface(schema_file: Path):
    """
    Print every generated interface and its operations.

    Args:
        schema_file: Path to the schema file
    """
    _configure_logging()
    text = _read_schema(schema_file)

    try:
        module = build_module_surface(load_model(text, str(schema_file)))
    except SchemaError as e:
        _report(e.diagnostics)
        raise typer.Exit(1)

    for object_surface in module.objects:
        typer.echo(f"{object_surface.interface}  [{object_surface.description}]")
        for op in object_surface.operations:
            params = ", ".join(op.param_names)
            typer.echo(f"  {op.name}({params}) -> {op.returns}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
