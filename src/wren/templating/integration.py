"""Jinja2 environment setup and app binding.

Creates a Jinja2 Environment from wren's AppConfig and binds
user-registered filters and globals. The environment is created once,
on first use by the app, and shared by every HTML view it builds.
"""

from collections.abc import Callable
from typing import Any

from jinja2 import Environment, FileSystemLoader

from wren.config import AppConfig


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
) -> Environment:
    """Create a Jinja2 Environment from app configuration.

    Templates are loaded from ``config.template_dir``. In debug mode
    templates are re-read when they change on disk.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    # User-defined filters and globals
    if filters:
        env.filters.update(filters)
    if globals_:
        env.globals.update(globals_)

    return env
