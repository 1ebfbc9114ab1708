"""Controllers — classes grouping request actions.

Actions are declared with ``@action`` and collected when the class is
created. Looking one up returns an explicit ``ActionLookup``; calling an
undeclared action is a 404, the same fault an unmatched route produces::

    class UserController(Controller):
        @action
        def show(self, user_id: str):
            user = User.get_by_id(self.app.db, user_id)
            if user is None:
                raise NotFound(f"No user {user_id}")
            return self.json_view(user=user)

    app.add_route("GET", r"^users/(\\d+)$", UserController.route("show"))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from wren.errors import ConfigurationError, NotFound
from wren.http.response import Redirect
from wren.view import HtmlView, JsonView

if TYPE_CHECKING:
    from wren.app import App
    from wren.http.request import Request

_ACTION_MARK = "__wren_action__"

F = TypeVar("F", bound=Callable[..., Any])


def action(func: F) -> F:
    """Mark a controller method as a routable action."""
    setattr(func, _ACTION_MARK, True)
    return func


@dataclass(frozen=True, slots=True)
class ActionLookup:
    """Result of looking up an action on a controller."""

    name: str
    handler: Callable[..., Any] | None = None

    @property
    def found(self) -> bool:
        return self.handler is not None


class Controller:
    """Base controller.

    ``request`` is the current request, ``app`` the application serving
    it, and ``input`` the request's query values overlaid with its form
    or JSON body.
    """

    actions: ClassVar[frozenset[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        names: set[str] = set()
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if getattr(attr, _ACTION_MARK, False):
                    names.add(name)
        cls.actions = frozenset(names)

    def __init__(self, request: Request | None = None, *, app: App | None = None) -> None:
        self.request = request
        self.app = app
        self.input: dict[str, Any] = request.input() if request is not None else {}

    # -- Actions --

    def find_action(self, name: str) -> ActionLookup:
        """Look up a declared action by name."""
        if name not in self.actions:
            return ActionLookup(name)
        return ActionLookup(name, getattr(self, name))

    def call(self, name: str, *args: Any) -> Any:
        """Run an action, or raise ``NotFound`` if it is not declared."""
        lookup = self.find_action(name)
        if lookup.handler is None:
            msg = f'Action "{name}" is not implemented in {type(self).__name__}.'
            raise NotFound(msg)
        return lookup.handler(*args)

    @classmethod
    def route(cls, name: str) -> Callable[..., Any]:
        """A route handler that runs this controller's *name* action.

        The controller is built per request; captured groups become the
        action's positional arguments.
        """

        def handler(*args: str, request: Request, app: App) -> Any:
            return cls(request, app=app).call(name, *args)

        handler.__name__ = f"{cls.__name__}.{name}"
        handler.__qualname__ = handler.__name__
        return handler

    # -- Responses --

    def redirect(self, url: str, code: int | None = None) -> Redirect:
        """Redirect response; return it from the action to end the request."""
        return Redirect(url, status=int(code) if code is not None else 302)

    def json_view(self, **data: Any) -> JsonView:
        return JsonView(data)

    def html_view(self, template: str, **data: Any) -> HtmlView:
        """HTML view bound to the app's template environment."""
        if self.app is None:
            msg = "html_view() needs a controller bound to an App."
            raise ConfigurationError(msg)
        return self.app.html_view(template, **data)
