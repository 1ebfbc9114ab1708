"""Views — a bag of named output values rendered into a Response.

``JsonView`` serializes the bag as JSON; ``HtmlView`` runs a Jinja2
template with the bag as its context::

    view = JsonView()
    view["user"] = user
    return view                       # handlers may return views directly

    view = HtmlView("users/show.html", env=env)
    view.data.set("user", user)
    response = view.render()
"""

from __future__ import annotations

import dataclasses
import json as json_module
from collections.abc import Iterator, MutableMapping
from datetime import date, datetime
from html import escape
from pathlib import Path
from pprint import pformat
from typing import TYPE_CHECKING, Any

from jinja2 import TemplateNotFound
from jinja2 import TemplateError as JinjaTemplateError

from wren.errors import TemplateError
from wren.http.response import Response

if TYPE_CHECKING:
    from jinja2 import Environment, Template


class ViewData(MutableMapping[str, Any]):
    """The mutable named-value store a view renders.

    Reading a name that was never set returns ``None`` through ``get``.
    """

    __slots__ = ("_values",)

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def get(self, name: str, default: Any = None) -> Any:  # type: ignore[override]
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> ViewData:
        """Store a value and return the bag, for chaining."""
        self._values[name] = value
        return self

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ViewData({self._values!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)


class View:
    """Base view: a data bag plus response headers.

    Subclasses set ``content_type`` and override ``__str__`` to produce
    the body. Headers whose value is ``None`` are not sent.
    """

    content_type: str = "text/plain; charset=utf-8"

    def __init__(self, data: dict[str, Any] | None = None, *, status: int = 200) -> None:
        self.data = ViewData(data)
        self.headers: dict[str, str | None] = {}
        self.status = status

    # -- Data bag shortcuts --

    def __getitem__(self, name: str) -> Any:
        return self.data.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.data.set(name, value)

    def __str__(self) -> str:
        return pformat(self.data.to_dict())

    # -- Headers --

    def add_header(self, name: str, value: str | None) -> View:
        self.headers[name] = value
        return self

    def remove_header(self, name: str) -> View:
        self.headers.pop(name, None)
        return self

    def _response(self, body: str) -> Response:
        content_type = self.content_type
        headers: list[tuple[str, str]] = []
        for name, value in self.headers.items():
            if value is None:
                continue
            if name.lower() == "content-type":
                content_type = value
            else:
                headers.append((name, value))
        return Response(
            body=body,
            status=self.status,
            content_type=content_type,
            headers=tuple(headers),
        )

    def render(self) -> Response:
        """Build the Response: headers first, then the serialized bag."""
        return self._response(str(self))


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, set | frozenset | tuple):
        return list(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


class JsonView(View):
    """Renders the data bag as a compact JSON object."""

    content_type = "application/json"

    def __str__(self) -> str:
        return json_module.dumps(
            self.data.to_dict(),
            default=_json_default,
            separators=(",", ":"),
            ensure_ascii=False,
        )


class HtmlView(View):
    """Renders a Jinja2 template with the data bag as its context.

    The template is resolved when it is selected, so a missing file fails
    before any rendering happens.
    """

    content_type = "text/html; charset=utf-8"

    def __init__(
        self,
        template: str | None = None,
        data: dict[str, Any] | None = None,
        *,
        env: Environment,
        status: int = 200,
    ) -> None:
        super().__init__(data, status=status)
        self.env = env
        self.template: Template | None = None
        if template is not None:
            self.set_template(template)

    def set_template(self, name: str) -> HtmlView:
        """Select the template to render. Raises ``TemplateError`` if unavailable."""
        try:
            self.template = self.env.get_template(name)
        except TemplateNotFound as exc:
            msg = f'Template "{name}" is not available.'
            raise TemplateError(msg) from exc
        except JinjaTemplateError as exc:
            msg = f'Template "{name}" cannot be loaded: {exc}'
            raise TemplateError(msg) from exc
        return self

    def __str__(self) -> str:
        if self.template is None:
            msg = "No template selected for HtmlView; call set_template() first."
            raise TemplateError(msg)
        return self.template.render(self.data.to_dict())

    def dump(self) -> Response:
        """Render the data bag as an escaped ``<pre>`` block, for debugging."""
        return self._response(f"<pre>{escape(pformat(self.data.to_dict()))}</pre>")
