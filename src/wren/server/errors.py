"""Error handling pipeline for wren requests.

Every exception raised while routing or running a handler ends up here.
The app holds exactly one error handler; without a custom one the
default handler answers with the fault's code as HTTP status (500 when
it carries none) and a fixed one-line body.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wren.errors import HTTPError, error_code, error_kind
from wren.http.request import Request
from wren.http.response import Redirect, Response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")

ErrorHandler = Callable[..., Any]


def status_for(exc: BaseException) -> int:
    """HTTP status for a fault: its code when that is a valid status, else 500."""
    code = error_code(exc)
    if 100 <= code <= 599:
        return code
    return 500


def describe(exc: BaseException) -> str:
    """``"<ExceptionClass>: <message> (<code>)"`` — the default error body."""
    return f"{type(exc).__name__}: {exc} ({error_code(exc)})"


def default_error_handler(exc: BaseException) -> Response:
    """Plain-text response carrying the fault's class, message and code."""
    return Response(
        body=describe(exc),
        status=status_for(exc),
        content_type="text/plain; charset=utf-8",
    )


def _log_fault(exc: BaseException, request: Request) -> None:
    status = status_for(exc)
    kind = error_kind(exc).value
    if 400 <= status < 500:
        logger.debug("%d %s %s [%s]: %s", status, request.method, request.path, kind, exc)
    else:
        logger.exception("%d %s %s [%s]", status, request.method, request.path, kind, exc_info=exc)


def call_error_handler(
    handler: ErrorHandler,
    request: Request,
    exc: BaseException,
) -> Response:
    """Invoke a user-installed error handler with introspected arguments.

    Handlers may accept one (exc) or two (exc, request) arguments and may
    return anything a route handler can. Plain values (str, dict, views)
    are sent with the fault's status; an explicit ``Response``, ``Redirect``
    or ``(value, status)`` tuple is sent as is. If the handler itself
    fails, the default handler answers for the original fault.
    """
    try:
        params = inspect.signature(handler).parameters
        result = handler(exc, request) if len(params) >= 2 else handler(exc)
        response = negotiate(result)
    except Exception:
        logger.exception("Error handler %r failed", handler)
        return default_error_handler(exc)

    # Bare values take the fault's status; Response, Redirect and (value, status) keep theirs
    if not isinstance(result, Response | Redirect | tuple):
        response = response.with_status(status_for(exc))
    return response


def handle_error(
    exc: BaseException,
    request: Request,
    handler: ErrorHandler | None,
) -> Response:
    """Map any fault raised during dispatch to a Response."""
    _log_fault(exc, request)
    if handler is None:
        response = default_error_handler(exc)
    else:
        response = call_error_handler(handler, request, exc)

    # HTTPError may carry headers of its own (e.g. Allow, Location)
    if isinstance(exc, HTTPError):
        for name, value in exc.headers:
            if response.header(name) is None:
                response = response.with_header(name, value)
    return response
