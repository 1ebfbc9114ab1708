"""Content negotiation — maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any

from wren.http.response import Redirect, Response
from wren.view import View


def negotiate(value: Any) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``          -> pass through
    2. ``View``              -> ``view.render()``
    3. ``Redirect``          -> status + Location header
    4. ``None``              -> 200, empty body
    5. ``str``               -> 200, text/html
    6. ``bytes``             -> 200, application/octet-stream
    7. ``dict`` / ``list``   -> 200, application/json
    8. ``(value, int)``      -> negotiate value, override status
    9. ``(value, int, dict)`` -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case View():
            return value.render()
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case None:
            return Response(body="")
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            body = json_module.dumps(value, separators=(",", ":"), default=str)
            return Response(body=body, content_type="application/json")
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a str, dict, list, View, Response or Redirect."
            )
            raise TypeError(msg)
