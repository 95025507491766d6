"""Kida environment for view templates.

Views are rendered from ``AppConfig.template_dir``. The environment is
created on first use of the ``templates`` dependency and cached for the
life of the App.
"""

from collections.abc import Mapping
from typing import Any

from kida import Environment, FileSystemLoader

from uno.config import AppConfig


def create_environment(config: AppConfig) -> Environment:
    """Create the view environment from app configuration."""
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=True,
        auto_reload=config.debug,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_view(env: Environment, name: str, *data: Mapping[str, Any]) -> str:
    """Render template *name* with the merged *data* maps."""
    context: dict[str, Any] = {}
    for mapping in data:
        context.update(mapping)
    return env.get_template(name).render(context)
