"""wren exception hierarchy.

Shared across Router, App, controllers, views and the data layer so every
module raises and catches the same types. Each error carries an
``ErrorKind`` tag and an integer ``code``; the app's error boundary maps
a positive code to the HTTP status.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Category of a wren fault, as seen by the top-level error handler."""

    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    PRECONDITION = "precondition"
    TYPE_MISMATCH = "type_mismatch"
    STORAGE = "storage"
    HTTP = "http"
    INTERNAL = "internal"


class WrenError(Exception):
    """Base for all wren-specific errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    code: int = 0


class ConfigurationError(WrenError):
    """Raised when app, config or template setup is invalid."""

    kind = ErrorKind.CONFIGURATION
    code = 500


class ConfigError(ConfigurationError):
    """A config file is unreadable or corrupted, or a value is not defined."""


class TemplateError(ConfigurationError):
    """A view template is missing or cannot be loaded."""


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, controllers or handlers. The app catches these
    and hands them to the installed error handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        return ErrorKind.HTTP

    @property
    def code(self) -> int:  # type: ignore[override]
        return self.status

    def __str__(self) -> str:
        return self.detail or str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request, or a controller has no such action."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        return ErrorKind.NOT_FOUND


def error_kind(exc: BaseException) -> ErrorKind:
    """Return the ``ErrorKind`` of any exception (``INTERNAL`` for foreign ones)."""
    if isinstance(exc, WrenError):
        return exc.kind
    return ErrorKind.INTERNAL


def error_code(exc: BaseException) -> int:
    """Return the numeric code an exception carries (``0`` for foreign ones)."""
    code = getattr(exc, "code", 0) if isinstance(exc, WrenError) else 0
    return code if isinstance(code, int) and not isinstance(code, bool) else 0
