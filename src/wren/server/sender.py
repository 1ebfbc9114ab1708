"""WSGI response sending — translates a wren Response into start_response()."""

from collections.abc import Callable
from typing import Any

from wren.http.response import Response

StartResponse = Callable[..., Any]


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def send_response(
    response: Response,
    start_response: StartResponse,
    *,
    method: str = "GET",
) -> list[bytes]:
    """Call ``start_response`` and return the WSGI body iterable."""
    body = response.body_bytes if _body_allowed(response.status) else b""

    headers: list[tuple[str, str]] = [("Content-Type", response.content_type)]
    headers.extend(response.headers)
    headers.append(("Content-Length", str(len(body))))

    start_response(response.status_line, headers)
    if method == "HEAD":
        return [b""]
    return [body]
