"""Emit ``<Object>Crud`` interfaces and their forwarding ``<Object>CrudImpl`` classes."""

from crudscaffold.codegen.render import render_template
from crudscaffold.codegen.surface import ModuleSurface
from crudscaffold.config.logging import get_logger

logger = get_logger(__name__)


def render_interfaces(module: ModuleSurface, context_accessor: str = "repository") -> str:
    """
    Render one abstract interface and one implementation per object.

    Implementations hold no state: every method awaits
    ``ctx.<context_accessor>()`` for the repository and forwards its
    arguments unchanged to the object's manager, building a placeholder
    parent first for ``unchecked_*`` operations.

    Args:
        module: Resolved module surface
        context_accessor: Name of the async method on ``ctx`` returning the repository

    Returns:
        Python source for the interface section
    """
    if not context_accessor.isidentifier():
        raise ValueError(f"context accessor must be a Python identifier, got {context_accessor!r}")
    logger.debug(f"Rendering {len(module.objects)} interfaces for {module.repository_name}")
    return render_template("interfaces.py.jinja2", surfaces=module.objects, accessor=context_accessor)
