"""Source emission: operation surface, templates and the module assembler."""

from typing import Optional

from crudscaffold.codegen.handlers import render_handlers
from crudscaffold.codegen.interfaces import render_interfaces
from crudscaffold.codegen.options import GenerationOptions
from crudscaffold.codegen.render import render_template
from crudscaffold.codegen.repository import render_repository
from crudscaffold.codegen.surface import ModuleSurface, build_module_surface
from crudscaffold.errors import SchemaError
from crudscaffold.ir.model import ConfigModel


def _section(text: str) -> str:
    # Sections are joined back to back; each must end on a newline
    return text.rstrip("\n") + "\n" if text.strip() else ""


def render_module(module: ModuleSurface, options: GenerationOptions, source: str = "<schema>") -> str:
    """Assemble the repository, interface and handler sections into one module."""
    text = render_template(
        "module.py.jinja2",
        repository=module.repository_name,
        source=source.replace("\\", "/").replace('"', "'"),
        models_module=options.models_module,
        record_types=module.record_types,
        repository_section=_section(render_repository(module)),
        interfaces_section=_section(render_interfaces(module, options.context_accessor)),
        handlers_section=_section(render_handlers(module)),
    )
    return text.rstrip("\n") + "\n"


def generate_module(
    model: ConfigModel,
    options: Optional[GenerationOptions] = None,
    source: str = "<schema>",
) -> str:
    """
    Generate Python source for a validated model.

    Args:
        model: Model that has passed ``validate_model``
        options: Generation options (defaults if omitted)
        source: Schema name recorded in the module docstring

    Returns:
        Source text of the generated module

    Raises:
        SchemaError: If no models module is configured or derived method names collide
    """
    options = options or GenerationOptions()
    if options.models_module is None:
        # Placeholders and the repository implementation construct record types at runtime
        raise SchemaError.at(
            model.location,
            "MISSING_MODELS_MODULE",
            f"no module provides the record types of `{model.repository_name}`; set `models_module` "
            f"(`--models-module` on the command line or `CRUDSCAFFOLD_MODELS_MODULE`)",
        )
    return render_module(build_module_surface(model), options, source)


__all__ = ["GenerationOptions", "ModuleSurface", "build_module_surface", "generate_module", "render_module"]
