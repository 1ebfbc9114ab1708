"""Immutable HTTP request.

Frozen metadata read from the WSGI environ, with lazily-read body access.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import IO, Any
from urllib.parse import parse_qsl, quote

from wren.http.headers import Headers
from wren.routing.router import normalize_path


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``uri`` is the request URI as the client sent it (path plus query);
    ``script_name`` is the prefix the application is mounted under.
    ``route_path`` is what routes are matched against.
    """

    method: str
    uri: str
    script_name: str
    headers: Headers
    query: Mapping[str, str]
    environ: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Private: WSGI input stream, read at most once
    _input: IO[bytes] | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def path(self) -> str:
        """The URI without its query string."""
        return self.uri.split("?", 1)[0]

    @property
    def route_path(self) -> str:
        """The normalized path routes are matched against."""
        return normalize_path(self.uri, self.script_name)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    # -- Body access --

    def body(self) -> bytes:
        """Read the full request body. Cached after the first read."""
        if "_body" in self._cache:
            return self._cache["_body"]
        result = b""
        length = self.content_length or 0
        if self._input is not None and length > 0:
            result = self._input.read(length)
        self._cache["_body"] = result
        return result

    def text(self) -> str:
        """Read the body as text (UTF-8)."""
        return self.body().decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.body())

    def form(self) -> Mapping[str, str]:
        """Parse an ``application/x-www-form-urlencoded`` body."""
        if "_form" not in self._cache:
            self._cache["_form"] = parse_params(self.body().decode("latin-1"))
        return self._cache["_form"]

    def input(self) -> dict[str, Any]:
        """Query values overlaid with form or JSON body values."""
        values: dict[str, Any] = dict(self.query)
        ct = self.content_type or ""
        if "json" in ct:
            payload = self.json() if self.body() else {}
            if isinstance(payload, dict):
                values.update(payload)
        elif "x-www-form-urlencoded" in ct:
            values.update(self.form())
        return values

    # -- Factory --

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Request:
        """Create a Request from a WSGI environ."""
        script_name = environ.get("SCRIPT_NAME", "")
        query_string = environ.get("QUERY_STRING", "")
        uri = environ.get("REQUEST_URI") or environ.get("RAW_URI")
        if not uri:
            # PATH_INFO carries the raw bytes decoded as latin-1 (PEP 3333)
            raw_path = (script_name + environ.get("PATH_INFO", "")).encode("latin-1")
            uri = quote(raw_path, safe="/;=,:@!$&'()*+")
            if query_string:
                uri = f"{uri}?{query_string}"
        return cls(
            method=environ.get("REQUEST_METHOD", "GET").upper(),
            uri=uri,
            script_name=script_name,
            headers=Headers.from_environ(environ),
            query=parse_params(query_string),
            environ=environ,
            _input=environ.get("wsgi.input"),
        )


def parse_params(text: str) -> Mapping[str, str]:
    """Read-only name -> value view of a query string or urlencoded form.

    Blank values are kept. A repeated name keeps its last value.
    """
    return MappingProxyType(dict(parse_qsl(text, keep_blank_values=True)))
