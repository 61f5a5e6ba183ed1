"""Emit the repository protocol, its factory-backed implementation, multi-parent
marker protocols and placeholder factories."""

from crudscaffold.codegen.render import render_template
from crudscaffold.codegen.surface import ModuleSurface
from crudscaffold.config.logging import get_logger
from crudscaffold.naming import repository_impl_name

logger = get_logger(__name__)


def render_repository(module: ModuleSurface) -> str:
    """Render the repository section of a generated module."""
    logger.debug(
        f"Rendering repository {module.repository_name}: {len(module.managers)} managers, "
        f"{len(module.markers)} markers, {len(module.placeholders)} placeholders"
    )
    return render_template(
        "repository.py.jinja2",
        repository=module.repository_name,
        repository_impl=repository_impl_name(module.repository_name),
        managers=module.managers,
        markers=module.markers,
        placeholders=module.placeholders,
    )
