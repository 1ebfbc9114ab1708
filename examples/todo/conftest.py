"""Test isolation for the database-backed todo example.

Each test gets its own SQLite file; ``app.py`` reads the path from
``WREN_TODO_DB`` when the ``example_app`` fixture loads it.
"""

import pytest


@pytest.fixture(autouse=True)
def _todo_db(tmp_path, monkeypatch):
    monkeypatch.setenv("WREN_TODO_DB", str(tmp_path / "todo.db"))
