"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# Method values that match any request method
WILDCARD_METHODS = frozenset({None, "ANY"})


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route.

    ``method`` is upper-cased, or ``None`` for any method. ``pattern`` is a
    regular expression searched against the normalized request path.
    """

    method: str | None
    pattern: str
    handler: Callable[..., Any]

    def accepts(self, method: str) -> bool:
        """True if this route serves the given request method."""
        return self.method in WILDCARD_METHODS or self.method == method.upper()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path: str
    args: tuple[str, ...]
