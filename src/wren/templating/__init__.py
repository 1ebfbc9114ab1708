"""Template integration — Jinja2 environment setup for HTML views."""
