"""Typed database access over a single shared connection.

One ``Database`` owns one DB-API 2.0 connection. There is no pool: the
connection is opened on first use (or handed in ready-made) and reused by
every query and every ``Model`` operation that receives this instance.

Connection URL format::

    sqlite:///path/to/db.sqlite    # SQLite file
    sqlite:///:memory:             # In-memory SQLite

Any other DB-API connection that uses the ``qmark`` parameter style can be
wrapped directly::

    db = Database.from_connection(conn)

Statements outside a transaction commit immediately. Inside
``transaction()`` (or between ``begin()`` and ``commit()``/``rollback()``)
they share one unit of work.
"""

from __future__ import annotations

import logging
import sqlite3
import sys
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, TypeVar, overload

from wren.data._mapping import map_row, map_rows
from wren.data.errors import DataError, QueryError

T = TypeVar("T")

logger = logging.getLogger("wren.data")


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Database connection configuration."""

    url: str
    echo: bool = False


class Database:
    """Database access over one connection. SQL in, rows or dataclasses out.

    Usage::

        db = Database("sqlite:///app.db")

        @dataclass(frozen=True, slots=True)
        class User:
            id: int
            name: str

        # Raw rows as dicts
        rows = db.query("SELECT * FROM users WHERE id = ?", 42)

        # Typed
        users = db.fetch(User, "SELECT * FROM users")
        user = db.fetch_one(User, "SELECT * FROM users WHERE id = ?", 42)

        # Statements
        db.execute("UPDATE users SET name = ? WHERE id = ?", "Bob", 42)
        new_id = db.insert("INSERT INTO users (name) VALUES (?)", "Carol")

        # Atomic block
        with db.transaction():
            db.execute("INSERT INTO users ...", name)
            db.execute("INSERT INTO profiles ...", user_id)
    """

    __slots__ = ("_config", "_conn", "_in_transaction")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self._config = DatabaseConfig(url=url, echo=echo)
        _check_url(url)
        self._conn: Any = None
        self._in_transaction = False

    @classmethod
    def from_connection(cls, conn: Any, /, *, echo: bool = False) -> Database:
        """Wrap an already-open DB-API connection.

        The caller owns the connection's lifetime; ``close()`` still closes it.
        """
        db = cls.__new__(cls)
        db._config = DatabaseConfig(url="", echo=echo)
        db._conn = conn
        db._in_transaction = False
        return db

    # -- Connection management --

    @property
    def connection(self) -> Any:
        """The underlying DB-API connection, opened on first access."""
        if self._conn is None:
            self.connect()
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def connect(self) -> None:
        """Open the connection. Called automatically on first query."""
        if self._conn is not None:
            return
        path = _parse_sqlite_path(self._config.url)
        try:
            conn = sqlite3.connect(path)
        except sqlite3.Error as exc:
            msg = f"Cannot open database {self._config.url!r}: {exc}"
            raise DataError(msg) from exc
        conn.execute("PRAGMA foreign_keys=ON")
        self._conn = conn

    def close(self) -> None:
        """Close the connection. Safe to call twice."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        self._in_transaction = False

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    # -- Transactions --

    def begin(self) -> None:
        """Start a transaction. Statements are held until ``commit()``."""
        if self._in_transaction:
            msg = "A transaction is already in progress."
            raise DataError(msg)
        self.connection  # noqa: B018 — opens the connection
        self._in_transaction = True

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self.connection.commit()
        finally:
            self._in_transaction = False

    def rollback(self) -> None:
        """Roll back the current transaction."""
        try:
            self.connection.rollback()
        finally:
            self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Execute multiple statements atomically.

        Commits on clean exit, rolls back on exception. Nesting is
        transparent: an inner ``transaction()`` joins the outer one.

        Usage::

            with db.transaction():
                db.execute("INSERT INTO users ...", name)
                raise ValueError("oops")  # rolled back
        """
        if self._in_transaction:
            yield
            return

        self.begin()
        try:
            yield
        except BaseException:
            self.rollback()
            raise
        self.commit()

    # -- Echo / query logging --

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        """Print a query to stderr when echo is enabled."""
        if not self._config.echo:
            return
        ms = elapsed * 1000
        param_str = f"  params={tuple(params)!r}" if params else ""
        print(f"[wren.data] {ms:6.1f}ms  {sql}{param_str}", file=sys.stderr)

    def _run(self, sql: str, params: Sequence[Any]) -> Any:
        """Execute one statement and return its cursor.

        Outside a transaction the statement is committed straight away.
        """
        conn = self.connection
        t0 = time.perf_counter()
        try:
            cursor = conn.cursor()
            cursor.execute(sql, tuple(params))
            if not self._in_transaction:
                conn.commit()
            return cursor
        except Exception as exc:
            logger.debug("query failed: %s  params=%r", sql, tuple(params))
            raise QueryError(str(exc)) from exc
        finally:
            self._log_query(sql, params, time.perf_counter() - t0)

    # -- Public query API --

    def query(self, sql: str, /, *params: Any) -> list[dict[str, Any]]:
        """Execute any statement and return its rows as dicts.

        Statements that produce no result set return ``[]``.
        """
        cursor = self._run(sql, params)
        return _rows_as_dicts(cursor)

    def fetch(self, cls: type[T], sql: str, /, *params: Any) -> list[T]:
        """Execute a query and return all rows as typed dataclasses."""
        return map_rows(cls, self.query(sql, *params))

    def fetch_one(self, cls: type[T], sql: str, /, *params: Any) -> T | None:
        """Execute a query and return the first row, or ``None``."""
        rows = self.query(sql, *params)
        if not rows:
            return None
        return map_row(cls, rows[0])

    @overload
    def fetch_val(self, sql: str, /, *params: Any) -> Any: ...
    @overload
    def fetch_val(self, sql: str, /, *params: Any, as_type: type[T]) -> T | None: ...

    def fetch_val(self, sql: str, /, *params: Any, as_type: type | None = None) -> Any:
        """Execute a query and return the first column of the first row.

        Useful for COUNT, SUM, MAX, etc.
        """
        rows = self.query(sql, *params)
        if not rows:
            return None
        first_value = next(iter(rows[0].values()))
        if as_type is not None and first_value is not None:
            return as_type(first_value)
        return first_value

    def execute(self, sql: str, /, *params: Any) -> int:
        """Execute a statement (INSERT/UPDATE/DELETE) and return rows affected."""
        cursor = self._run(sql, params)
        return cursor.rowcount

    def insert(self, sql: str, /, *params: Any) -> int | None:
        """Execute an INSERT and return the driver-reported row id.

        Returns ``None`` when the driver does not report one.
        """
        cursor = self._run(sql, params)
        lastrowid = getattr(cursor, "lastrowid", None)
        return int(lastrowid) if lastrowid is not None else None

    def execute_script(self, sql: str, /) -> None:
        """Execute several ``;``-separated statements (SQLite only).

        Handy for creating tables in tests and example apps.
        """
        conn = self.connection
        if not hasattr(conn, "executescript"):
            msg = "execute_script() requires a SQLite connection"
            raise DataError(msg)
        t0 = time.perf_counter()
        try:
            conn.executescript(sql)
        except Exception as exc:
            raise QueryError(str(exc)) from exc
        finally:
            self._log_query(sql, (), time.perf_counter() - t0)


# =============================================================================
# URL checks and row helpers
# =============================================================================


def _check_url(url: str) -> None:
    """Reject URLs for drivers other than SQLite."""
    if url.startswith("sqlite"):
        return
    msg = (
        f"Unsupported database URL scheme: {url!r}. "
        "Supported: sqlite:///path, or wrap a DB-API connection with "
        "Database.from_connection()"
    )
    raise DataError(msg)


def _parse_sqlite_path(url: str) -> str:
    """Extract the file path from a sqlite:// URL."""
    # sqlite:///path/to/db  ->  path/to/db
    # sqlite:///:memory:    ->  :memory:
    prefix = "sqlite:///"
    if url.startswith(prefix):
        return url[len(prefix) :]
    prefix_short = "sqlite://"
    if url.startswith(prefix_short):
        return url[len(prefix_short) :]
    msg = f"Invalid SQLite URL: {url!r}"
    raise DataError(msg)


def _rows_as_dicts(cursor: Any) -> list[dict[str, Any]]:
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    return [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]
