"""Ordered regex router.

Registration prepends, so the most recently registered route is checked
first. Matching is a linear scan: the first route whose pattern is found
in the normalized path *and* whose method matches wins.
"""

import logging
import re
from collections.abc import Callable
from typing import Any
from urllib.parse import unquote

from wren.errors import NotFound
from wren.routing.route import Route, RouteMatch

logger = logging.getLogger("wren.routing")


def normalize_path(request_uri: str, base: str = "") -> str:
    """Reduce a request URI to the path routes are matched against.

    Drops the query string, percent-decodes, strips the application's base
    prefix (the WSGI ``SCRIPT_NAME``) and trims surrounding slashes::

        normalize_path("/users/42/?tab=posts")       -> "users/42"
        normalize_path("/blog/posts/7", "/blog")     -> "posts/7"
        normalize_path("/")                          -> ""
    """
    path = unquote(request_uri.split("?", 1)[0])
    base = base.rstrip("/")
    if base and (path == base or path.startswith(base + "/")):
        path = path[len(base) :]
    return path.strip("/")


class Router:
    """Routes scanned newest-first.

    Usage::

        router = Router()
        router.register("GET", r"^users/(\\d+)$", show_user)
        router.register(None, r"^ping$", ping)   # any method
        match = router.match("GET", "users/42")
        match.route.handler(*match.args)
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        # pattern -> compiled regex, or None when it failed to compile
        self._compiled: dict[str, re.Pattern[str] | None] = {}

    def register(
        self,
        method: str | None,
        pattern: str,
        handler: Callable[..., Any],
    ) -> Route:
        """Add a route in front of every route registered so far."""
        route = Route(
            method=method.upper() if isinstance(method, str) else None,
            pattern=pattern,
            handler=handler,
        )
        self._routes.insert(0, route)
        return route

    @property
    def routes(self) -> list[Route]:
        """Registered routes in dispatch order (newest first)."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def _regex(self, pattern: str) -> re.Pattern[str] | None:
        if pattern not in self._compiled:
            try:
                self._compiled[pattern] = re.compile(pattern)
            except re.error as exc:
                logger.warning("Skipping route with invalid pattern %r: %s", pattern, exc)
                self._compiled[pattern] = None
        return self._compiled[pattern]

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the route for a normalized path and request method.

        Returns a ``RouteMatch`` whose ``args`` are the pattern's capture
        groups in order (``""`` for groups that did not participate).
        Raises ``NotFound`` if no route matches.
        """
        for route in self._routes:
            regex = self._regex(route.pattern)
            if regex is None:
                continue
            found = regex.search(path)
            if found is None or not route.accepts(method):
                continue
            return RouteMatch(route=route, path=path, args=found.groups(default=""))

        logger.debug("no route matches %s %r", method, path)
        raise NotFound()
