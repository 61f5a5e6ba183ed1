"""Jinja2 environment for the ``*.py.jinja2`` code templates."""

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).parent / "templates"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Shared environment; undefined variables fail loudly instead of rendering empty."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=False,  # Python source, not HTML
    )


def render_template(name: str, **context) -> str:
    """Render one template from ``codegen/templates``."""
    return get_environment().get_template(name).render(**context)
