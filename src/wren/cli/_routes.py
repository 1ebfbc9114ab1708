"""``wren routes`` — list registered routes in dispatch order."""

import argparse
import sys

from wren.cli._load import load_app
from wren.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATTERN / HANDLER table, first-checked route first."""
    try:
        app = load_app(args.app)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for route in routes:
        handler_name = getattr(route.handler, "__qualname__", None) or repr(route.handler)
        rows.append((route.method or "ANY", route.pattern, handler_name))

    max_method = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    max_pattern = max(7, *(len(r[1]) for r in rows))  # "PATTERN" header

    fmt = f"{{:<{max_method}}}  {{:<{max_pattern}}}  {{}}"
    print(fmt.format("METHOD", "PATTERN", "HANDLER"))
    sep_len = max_method + max_pattern + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
