"""Tests for wren.data — synchronous database access."""

import sqlite3
from dataclasses import dataclass

import pytest

from wren.data import Database, DataError
from wren.data._mapping import coerce, map_row, map_rows
from wren.data.errors import QueryError

# -- Test models --


@dataclass(frozen=True, slots=True)
class User:
    id: int
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Flagged:
    id: int
    active: bool
    score: float | None = None


# -- Fixtures --


@pytest.fixture
def db(tmp_path):
    """A fresh SQLite database with a users table."""
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    db.execute(
        "CREATE TABLE users ("
        "  id INTEGER PRIMARY KEY AUTOINCREMENT,"
        "  name TEXT NOT NULL,"
        "  email TEXT NOT NULL UNIQUE"
        ")"
    )
    yield db
    db.close()


@pytest.fixture
def seeded_db(db):
    """Database with pre-seeded users."""
    db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "Alice", "alice@test.com")
    db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "Bob", "bob@test.com")
    db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "Carol", "carol@test.com")
    return db


# =============================================================================
# Driver detection
# =============================================================================


class TestDriverDetection:
    def test_sqlite_url_connects_lazily(self, tmp_path) -> None:
        path = tmp_path / "lazy.db"
        db = Database(f"sqlite:///{path}")
        assert not path.exists()
        db.connect()
        assert path.exists()
        db.close()

    def test_sqlite_memory_url(self) -> None:
        with Database("sqlite:///:memory:") as db:
            assert db.fetch_val("SELECT 1") == 1

    def test_unsupported_url_raises(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL scheme"):
            Database("mysql://localhost/db")

    def test_from_connection(self) -> None:
        conn = sqlite3.connect(":memory:")
        db = Database.from_connection(conn)
        assert db.connection is conn
        assert db.fetch_val("SELECT 1 + 1") == 2
        db.close()


# =============================================================================
# Row mapping
# =============================================================================


class TestMapping:
    def test_map_row_basic(self) -> None:
        user = map_row(User, {"id": 1, "name": "Alice", "email": "a@test.com"})
        assert user == User(id=1, name="Alice", email="a@test.com")

    def test_map_row_filters_extra_columns(self) -> None:
        user = map_row(User, {"id": 1, "name": "A", "email": "e", "extra": "x"})
        assert user.name == "A"

    def test_map_row_raises_on_missing_field(self) -> None:
        with pytest.raises(TypeError):
            map_row(User, {"id": 1})

    def test_map_row_non_dataclass_raises(self) -> None:
        with pytest.raises(TypeError, match="not a dataclass"):
            map_row(dict, {"id": 1})

    def test_map_rows(self) -> None:
        rows = [{"id": 1, "name": "A", "email": "a"}, {"id": 2, "name": "B", "email": "b"}]
        assert [u.id for u in map_rows(User, rows)] == [1, 2]

    def test_coercion(self) -> None:
        row = map_row(Flagged, {"id": "7", "active": 1, "score": "2.5"})
        assert row == Flagged(id=7, active=True, score=2.5)

    def test_coerce_keeps_none(self) -> None:
        assert coerce(None, int) is None

    def test_coerce_empty_string_int(self) -> None:
        assert coerce("", int) == 0


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    def test_lazy_connect_on_first_query(self, tmp_path) -> None:
        db = Database(f"sqlite:///{tmp_path / 'lazy.db'}")
        assert db._conn is None
        db.query("SELECT 1")
        assert db._conn is not None
        db.close()

    def test_context_manager(self, tmp_path) -> None:
        with Database(f"sqlite:///{tmp_path / 'ctx.db'}") as db:
            assert db.fetch_val("SELECT 1") == 1
        assert db._conn is None

    def test_double_close_is_safe(self, tmp_path) -> None:
        db = Database(f"sqlite:///{tmp_path / 'close.db'}")
        db.connect()
        db.close()
        db.close()

    def test_separate_instances_are_independent(self, tmp_path) -> None:
        one = Database(f"sqlite:///{tmp_path / 'one.db'}")
        two = Database(f"sqlite:///{tmp_path / 'two.db'}")
        one.execute("CREATE TABLE t (x INTEGER)")
        with pytest.raises(QueryError):
            two.query("SELECT * FROM t")
        one.close()
        two.close()


# =============================================================================
# Queries
# =============================================================================


class TestFetch:
    def test_query_returns_dicts(self, seeded_db) -> None:
        rows = seeded_db.query("SELECT name FROM users ORDER BY id")
        assert rows == [{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}]

    def test_query_without_result_set(self, db) -> None:
        assert db.query("UPDATE users SET name = ?", "x") == []

    def test_fetch_all(self, seeded_db) -> None:
        users = seeded_db.fetch(User, "SELECT * FROM users ORDER BY id")
        assert [u.name for u in users] == ["Alice", "Bob", "Carol"]

    def test_fetch_with_params(self, seeded_db) -> None:
        users = seeded_db.fetch(User, "SELECT * FROM users WHERE name = ?", "Bob")
        assert len(users) == 1
        assert users[0].email == "bob@test.com"

    def test_fetch_one(self, seeded_db) -> None:
        user = seeded_db.fetch_one(User, "SELECT * FROM users WHERE id = ?", 1)
        assert user is not None
        assert user.name == "Alice"

    def test_fetch_one_returns_none(self, seeded_db) -> None:
        assert seeded_db.fetch_one(User, "SELECT * FROM users WHERE id = ?", 999) is None

    def test_fetch_val(self, seeded_db) -> None:
        assert seeded_db.fetch_val("SELECT COUNT(*) FROM users") == 3

    def test_fetch_val_with_type(self, seeded_db) -> None:
        assert seeded_db.fetch_val("SELECT COUNT(*) FROM users", as_type=str) == "3"

    def test_fetch_val_returns_none_on_empty(self, db) -> None:
        assert db.fetch_val("SELECT id FROM users") is None


class TestExecute:
    def test_execute_returns_rowcount(self, seeded_db) -> None:
        count = seeded_db.execute("UPDATE users SET name = ? WHERE id < ?", "X", 3)
        assert count == 2

    def test_insert_returns_row_id(self, seeded_db) -> None:
        new_id = seeded_db.insert("INSERT INTO users (name, email) VALUES (?, ?)", "Dan", "dan@test.com")
        assert new_id == 4

    def test_invalid_sql_raises_query_error(self, db) -> None:
        with pytest.raises(QueryError):
            db.execute("INSERT INTO nonexistent VALUES (1)")

    def test_constraint_violation_raises_query_error(self, seeded_db) -> None:
        with pytest.raises(QueryError, match="UNIQUE"):
            seeded_db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A2", "alice@test.com")

    def test_statements_commit_immediately(self, tmp_path) -> None:
        path = tmp_path / "commit.db"
        writer = Database(f"sqlite:///{path}")
        writer.execute_script("CREATE TABLE t (x INTEGER); INSERT INTO t VALUES (1);")
        writer.execute("INSERT INTO t VALUES (?)", 2)
        reader = Database(f"sqlite:///{path}")
        assert reader.fetch_val("SELECT COUNT(*) FROM t") == 2
        writer.close()
        reader.close()


class TestEcho:
    def test_echo_prints_statements(self, tmp_path, capsys) -> None:
        db = Database(f"sqlite:///{tmp_path / 'echo.db'}", echo=True)
        db.query("SELECT ?", 1)
        db.close()
        err = capsys.readouterr().err
        assert "[wren.data]" in err
        assert "SELECT ?" in err
        assert "params=(1,)" in err

    def test_no_echo_by_default(self, db, capsys) -> None:
        db.query("SELECT 1")
        assert capsys.readouterr().err == ""


# =============================================================================
# Transactions
# =============================================================================


class TestTransaction:
    def test_commit(self, db) -> None:
        with db.transaction():
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A", "a@test.com")
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "B", "b@test.com")
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 2
        assert db.in_transaction is False

    def test_rollback_on_error(self, db) -> None:
        with pytest.raises(ValueError, match="oops"), db.transaction():
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A", "a@test.com")
            raise ValueError("oops")
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 0
        assert db.in_transaction is False

    def test_rollback_on_query_error(self, db) -> None:
        with pytest.raises(QueryError), db.transaction():
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A", "same@test.com")
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "B", "same@test.com")
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 0

    def test_nested_is_transparent(self, db) -> None:
        with db.transaction():
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A", "a@test.com")
            with db.transaction():
                db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "B", "b@test.com")
            assert db.in_transaction is True
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 2

    def test_reads_inside_see_uncommitted_rows(self, db) -> None:
        with db.transaction():
            db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A", "a@test.com")
            assert db.fetch_val("SELECT COUNT(*) FROM users") == 1

    def test_begin_twice_fails(self, db) -> None:
        db.begin()
        with pytest.raises(DataError, match="already in progress"):
            db.begin()
        db.rollback()

    def test_explicit_begin_commit(self, db) -> None:
        db.begin()
        db.execute("INSERT INTO users (name, email) VALUES (?, ?)", "A", "a@test.com")
        db.commit()
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 1
