"""Application configuration.

Two layers:

- ``AppConfig`` is a frozen dataclass for the framework's own settings —
  immutable after creation, IDE-autocompletable.
- ``ConfigTree`` holds the application's JSON documents, merged into one
  nested mapping and read with dotted paths (``tree.get("db.host")``).
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wren.errors import ConfigError

logger = logging.getLogger("wren.config")

PATH_SEPARATOR = "."


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Framework configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, database_url="sqlite:///app.db")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Database
    database_url: str | None = None
    echo: bool = False

    # Logging
    log_level: str = "info"

    @classmethod
    def from_tree(cls, tree: ConfigTree, section: str = "app") -> AppConfig:
        """Build an ``AppConfig`` from one section of a ``ConfigTree``.

        A missing section yields the defaults. Unknown keys are rejected so
        typos in config files surface at startup.
        """
        if not tree.has(section):
            return cls()
        values = tree.get(section)
        if not isinstance(values, dict):
            msg = f'Config section "{section}" must be an object.'
            raise ConfigError(msg)
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            msg = f'Unknown keys in config section "{section}": {", ".join(unknown)}'
            raise ConfigError(msg)
        return cls(**values)


class ConfigTree:
    """JSON configuration merged from one or more files.

    Later loads override earlier ones at the leaf level; sibling keys that
    the later document does not mention survive::

        tree = ConfigTree()
        tree.load("config/default.json")
        tree.load("config/production.json")
        tree.get("db.host")
        tree.has("feature.beta")
    """

    __slots__ = ("_values",)

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        if values:
            self.merge(values)

    def load(self, file: str | Path) -> dict[str, Any]:
        """Read a JSON file and merge it into the tree. Returns the whole tree."""
        path = Path(file)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f'Config file "{file}" is not readable.'
            raise ConfigError(msg) from exc
        try:
            values = json.loads(text)
        except ValueError as exc:
            msg = f'Config file "{file}" may be corrupted.'
            raise ConfigError(msg) from exc
        if not isinstance(values, dict):
            msg = f'Config file "{file}" may be corrupted.'
            raise ConfigError(msg)
        logger.debug("loaded config file %s", path)
        return self.merge(values)

    def merge(self, values: dict[str, Any]) -> dict[str, Any]:
        """Overlay an in-memory mapping onto the tree. Returns the whole tree."""
        self._values = _replace_recursive(self._values, values)
        return self._values

    def get(self, path: str | None = None) -> Any:
        """Resolve a dotted path. ``None`` returns the whole tree.

        Raises ``ConfigError`` if any segment is missing or ``null``.
        """
        if path is None:
            return self._values
        value: Any = self._values
        for key in path.split(PATH_SEPARATOR):
            value = _child(value, key)
            if value is None:
                msg = f'Value "{path}" is not defined.'
                raise ConfigError(msg)
        return value

    def has(self, path: str) -> bool:
        """True if ``get(path)`` would succeed."""
        try:
            self.get(path)
        except ConfigError:
            return False
        return True

    def __repr__(self) -> str:
        return f"ConfigTree({self._values!r})"


def _child(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    if isinstance(value, list) and key.isdigit():
        index = int(key)
        return value[index] if index < len(value) else None
    return None


def _replace_recursive(base: Any, overlay: Any) -> Any:
    """Recursive key overlay: objects by key, arrays by index, scalars replaced."""
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            merged[key] = _replace_recursive(base[key], value) if key in base else value
        return merged
    if isinstance(base, list) and isinstance(overlay, list):
        merged_list = list(base)
        for index, value in enumerate(overlay):
            if index < len(merged_list):
                merged_list[index] = _replace_recursive(merged_list[index], value)
            else:
                merged_list.append(value)
        return merged_list
    return overlay
