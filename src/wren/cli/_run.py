"""``wren run`` — serve an app with the stdlib WSGI server."""

import argparse
import logging
import sys

from wren.cli._load import load_app
from wren.errors import ConfigurationError


def configure_logging(level: str) -> None:
    """Send wren's named loggers to stderr at the configured level."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def run_server(args: argparse.Namespace) -> None:
    """Load ``args.app`` with its ``--config`` files and serve it.

    ``--host``/``--port`` override ``app.config``.
    """
    try:
        app = load_app(args.app, args.config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(app.config.log_level)
    app.run(args.host or app.config.host, args.port or app.config.port)
