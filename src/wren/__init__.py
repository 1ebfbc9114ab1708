"""wren — a small synchronous MVC toolkit for Python web apps.

A regex router served over WSGI, controllers and views, a JSON config
tree, and active-record models over SQL.

Basic usage::

    from wren import App

    app = App()

    @app.route("GET", r"^users/(\\d+)$")
    def show_user(user_id):
        return {"id": user_id}

    app.run()

Data access::

    from wren.data import Database, Model
    db = Database("sqlite:///app.db")
    user = User.get_by_id(db, 42)
"""

__version__ = "0.1.0"
__all__ = [
    "ActionLookup",
    "App",
    "AppConfig",
    "ConfigError",
    "ConfigTree",
    "ConfigurationError",
    "Controller",
    "ErrorKind",
    "HTTPError",
    "HtmlView",
    "JsonView",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "TemplateError",
    "View",
    "ViewData",
    "WrenError",
    "action",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name in ("AppConfig", "ConfigTree"):
        from wren import config as _config

        return getattr(_config, name)

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in ("Controller", "ActionLookup", "action"):
        from wren import controller as _controller

        return getattr(_controller, name)

    if name in ("View", "ViewData", "JsonView", "HtmlView"):
        from wren import view as _view

        return getattr(_view, name)

    if name in (
        "ConfigError",
        "ConfigurationError",
        "ErrorKind",
        "HTTPError",
        "NotFound",
        "TemplateError",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
