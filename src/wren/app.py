"""wren application class.

Holds everything that used to be process-wide: the route table, the
error handler, the config, the database and the template environment.
Several apps can live side by side in one process.

The app is a WSGI callable. Each request is normalized, routed, handled
and rendered before the next one is considered.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from wren.config import AppConfig, ConfigTree
from wren.data.database import Database
from wren.http.request import Request
from wren.http.response import Response
from wren.routing.route import Route
from wren.routing.router import Router
from wren.server.errors import ErrorHandler, handle_error
from wren.server.negotiation import negotiate
from wren.server.sender import StartResponse, send_response
from wren.view import HtmlView, JsonView

if TYPE_CHECKING:
    from jinja2 import Environment

logger = logging.getLogger("wren.server")

Handler = Callable[..., Any]

# Handler parameters filled by name instead of by captured group
_INJECTED = ("request", "app")


class App:
    """The wren application.

    Usage::

        app = App(AppConfig(template_dir="views"), db="sqlite:///app.db")

        @app.route("GET", r"^users/(\\d+)$")
        def show_user(user_id):
            return {"id": user_id}

        @app.route(None, r"^$")          # any method
        def index():
            return "Hello"
    """

    __slots__ = (
        "_db",
        "_env",
        "_error_handler",
        "_router",
        "_template_filters",
        "_template_globals",
        "config",
        "settings",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
        settings: ConfigTree | None = None,
        jinja_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.settings: ConfigTree = settings if settings is not None else ConfigTree()
        self._router = Router()
        self._error_handler: ErrorHandler | None = None
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._env: Environment | None = jinja_env

        # Database — accepts a Database instance or connection URL string,
        # falling back to the configured URL.
        if db is None and self.config.database_url:
            db = self.config.database_url
        if isinstance(db, str):
            self._db: Database | None = Database(db, echo=self.config.echo)
        else:
            self._db = db

    @classmethod
    def from_config_files(cls, *files: str, section: str = "app") -> App:
        """Build an app from JSON config files (later files override earlier)."""
        settings = ConfigTree()
        for file in files:
            settings.load(file)
        return cls(AppConfig.from_tree(settings, section), settings=settings)

    # -- Route registration --

    def add_route(self, method: str | None, pattern: str, handler: Handler) -> Route:
        """Register a handler. Routes added later are checked first.

        Args:
            method: HTTP method, or ``None``/``"any"`` for every method.
            pattern: Regular expression searched in the normalized path
                (no leading or trailing slash). Anchor with ``^``/``$``.
            handler: Called with the pattern's captured groups as positional
                arguments; parameters named ``request`` or ``app`` receive
                the current request and this app.
        """
        return self._router.register(method, pattern, handler)

    def route(self, method: str | None, pattern: str) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self.add_route(method, pattern, func)
            return func

        return decorator

    @property
    def router(self) -> Router:
        return self._router

    # -- Error handling --

    def set_error_handler(self, handler: ErrorHandler) -> None:
        """Install the error handler, replacing any previous one.

        The handler receives the exception (and the request, if it takes
        two parameters) and returns anything a route handler can.
        """
        self._error_handler = handler

    @property
    def error_handler(self) -> ErrorHandler | None:
        return self._error_handler

    # -- Templates --

    def template_filter(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a Jinja2 filter via decorator."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._template_filters[name or func.__name__] = func
            if self._env is not None:
                self._env.filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a Jinja2 global via decorator."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._template_globals[name or func.__name__] = func
            if self._env is not None:
                self._env.globals[name or func.__name__] = func
            return func

        return decorator

    @property
    def env(self) -> Environment:
        """The Jinja2 environment HTML views render with, created on first use."""
        if self._env is None:
            from wren.templating.integration import create_environment

            self._env = create_environment(
                self.config,
                self._template_filters,
                self._template_globals,
            )
        return self._env

    def html_view(self, template: str | None = None, **data: Any) -> HtmlView:
        return HtmlView(template, data, env=self.env)

    def json_view(self, **data: Any) -> JsonView:
        return JsonView(data)

    # -- Database --

    @property
    def db(self) -> Database:
        """The app's database. Raises ``LookupError`` if none is configured."""
        if self._db is None:
            msg = "No database configured. Pass db= to App() or set AppConfig.database_url."
            raise LookupError(msg)
        return self._db

    def close(self) -> None:
        """Release the database connection, if any."""
        if self._db is not None:
            self._db.close()

    # -- Dispatch --

    def handle(self, request: Request) -> Response:
        """Route, run and render one request. Never raises."""
        try:
            match = self._router.match(request.method, request.route_path)
            handler = match.route.handler
            kwargs = _injected_kwargs(handler, len(match.args), request=request, app=self)
            result = handler(*match.args, **kwargs)
            return negotiate(result)
        except Exception as exc:
            return handle_error(exc, request, self._error_handler)

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        """WSGI entry point."""
        request = Request.from_environ(environ)
        response = self.handle(request)
        return send_response(response, start_response, method=request.method)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with the standard library's WSGI server.

        Single-threaded: fine for development and small internal tools.
        """
        from wsgiref.simple_server import make_server

        host = host or self.config.host
        port = port or self.config.port
        with make_server(host, port, self) as server:
            logger.info("Serving on http://%s:%d", host, port)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                logger.info("Shutting down")
            finally:
                self.close()


def _injected_kwargs(handler: Handler, positional: int, **available: Any) -> dict[str, Any]:
    """Keyword arguments for the handler parameters wren fills by name.

    The first *positional* parameters receive captured groups, so a
    parameter named ``app`` or ``request`` among them is left alone.
    """
    try:
        params = list(inspect.signature(handler).parameters.values())
    except (TypeError, ValueError):
        return {}
    kwargs: dict[str, Any] = {}
    for index, param in enumerate(params):
        if param.name not in _INJECTED:
            continue
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[param.name] = available[param.name]
        elif param.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD and index >= positional:
            kwargs[param.name] = available[param.name]
    return kwargs
