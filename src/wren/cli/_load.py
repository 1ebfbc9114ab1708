"""Load the App a ``wren`` command works on."""

import importlib
import logging
from collections.abc import Sequence

from wren.app import App
from wren.errors import ConfigurationError

logger = logging.getLogger("wren.cli")


def load_app(target: str, config_files: Sequence[str] = ()) -> App:
    """Import ``module[:name]`` and merge *config_files* into its settings.

    *name* defaults to ``app``. It may name an ``App`` or a function that
    builds one when called with no arguments. Config files are merged in
    order, so later files win.

    Raises:
        ConfigurationError: If the target cannot be imported or is not an App.
        ConfigError: If a config file is unreadable or corrupted.
    """
    module_name, _, name = target.partition(":")
    name = name or "app"
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f'Cannot import "{module_name}": {exc}'
        raise ConfigurationError(msg) from exc

    obj = getattr(module, name, None)
    if obj is None:
        msg = f'Module "{module_name}" has no attribute "{name}".'
        raise ConfigurationError(msg)
    if not isinstance(obj, App) and callable(obj):
        obj = obj()
    if not isinstance(obj, App):
        msg = f'"{target}" is a {type(obj).__name__}, not a wren App.'
        raise ConfigurationError(msg)

    for path in config_files:
        obj.settings.load(path)
        logger.debug("merged %s into %s settings", path, target)
    return obj
