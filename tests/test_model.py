"""Tests for wren.data.model — active-record entities."""

import json
from dataclasses import dataclass, field
from typing import Any, Self

import pytest

from wren.data import Database, EntityTypeError, Model, PreconditionError
from wren.errors import ConfigurationError

# -- Test models --


@dataclass
class User(Model):
    __table__ = "users"

    name: str = ""
    email: str = ""
    active: bool = True


@dataclass
class AdminUser(User):
    pass


@dataclass
class Note(Model):
    __table__ = "notes"

    title: str = ""
    tags: list[str] = field(default_factory=list)

    @classmethod
    def inflate(cls, row: dict[str, Any]) -> Self:
        values = dict(row)
        values["tags"] = json.loads(values.get("tags") or "[]")
        return super().inflate(values)

    @classmethod
    def deflate(cls, instance: Self) -> dict[str, Any]:
        values = super().deflate(instance)
        values["tags"] = json.dumps(values["tags"])
        return values


# -- Fixtures --


@pytest.fixture
def db(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'models.db'}")
    db.execute_script(
        """
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER NOT NULL DEFAULT 1
        );
        CREATE TABLE notes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            tags TEXT NOT NULL
        );
        """
    )
    yield db
    db.close()


@pytest.fixture
def people(db) -> list[User]:
    return [
        User.add(db, User(name=name, email=f"{name.lower()}@test.com"))
        for name in ("Alice", "Bob", "Carol")
    ]


# =============================================================================
# Declaration
# =============================================================================


class TestDeclaration:
    def test_columns_include_id_first(self) -> None:
        assert User.columns() == ("id", "name", "email", "active")

    def test_id_defaults_to_none(self) -> None:
        assert User(name="x").id is None

    def test_invalid_table_name_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="table"):

            @dataclass
            class Bad(Model):
                __table__ = 'users"; DROP TABLE users; --'


# =============================================================================
# Serialization
# =============================================================================


class TestSerialization:
    def test_round_trip(self) -> None:
        row = {"id": 3, "name": "Alice", "email": "a@test.com", "active": True}
        assert User.deflate(User.inflate(row)) == row

    def test_round_trip_custom_mapping(self) -> None:
        row = {"id": 1, "title": "t", "tags": json.dumps(["a", "b"])}
        assert Note.deflate(Note.inflate(row)) == row

    def test_inflate_coerces_id(self) -> None:
        assert User.inflate({"id": "12", "name": "x", "email": "y"}).id == 12

    def test_inflate_coerces_bool(self) -> None:
        assert User.inflate({"id": 1, "name": "x", "email": "y", "active": 0}).active is False

    def test_inflate_ignores_unknown_columns(self) -> None:
        user = User.inflate({"id": 1, "name": "x", "email": "y", "created": "now"})
        assert user.name == "x"

    def test_deflate_rejects_other_type(self) -> None:
        with pytest.raises(EntityTypeError):
            User.deflate(Note(title="x"))  # type: ignore[arg-type]

    def test_as_dict(self) -> None:
        user = User(name="x", email="y", id=5)
        assert user.as_dict() == {"id": 5, "name": "x", "email": "y", "active": True}


# =============================================================================
# Reads
# =============================================================================


class TestReads:
    def test_get_by_id(self, db, people) -> None:
        user = User.get_by_id(db, people[1].id)
        assert user == people[1]

    def test_get_by_id_accepts_string(self, db, people) -> None:
        assert User.get_by_id(db, str(people[0].id)) == people[0]

    def test_get_by_id_missing(self, db, people) -> None:
        assert User.get_by_id(db, 999) is None

    def test_get_by_non_numeric_id_is_absent(self, db, people) -> None:
        assert User.get_by_id(db, "abc") is None

    def test_non_numeric_count_means_one(self, db, people) -> None:
        assert User.get_latest(db, "many") == people[2]  # type: ignore[arg-type]

    def test_get_all(self, db, people) -> None:
        assert User.get_all(db) == people

    def test_get_all_empty(self, db) -> None:
        assert User.get_all(db) == []

    def test_get_dispatches_on_id(self, db, people) -> None:
        assert User.get(db, people[2].id) == people[2]
        assert User.get(db) == people

    def test_get_latest_single(self, db, people) -> None:
        assert User.get_latest(db) == people[2]

    def test_get_latest_many(self, db, people) -> None:
        assert User.get_latest(db, 2) == [people[2], people[1]]

    def test_get_oldest_single(self, db, people) -> None:
        assert User.get_oldest(db) == people[0]

    def test_get_oldest_many(self, db, people) -> None:
        assert User.get_oldest(db, 5) == people

    def test_get_latest_empty_table(self, db) -> None:
        assert User.get_latest(db) is None
        assert User.get_oldest(db, 3) == []

    def test_has(self, db, people) -> None:
        assert User.has(db, people[0]) is True
        assert User.has(db, User(name="ghost", email="g", id=999)) is False

    def test_has_unsaved(self, db) -> None:
        assert User.has(db, User(name="new", email="n")) is False

    def test_has_rejects_subclass_instance(self, db, people) -> None:
        with pytest.raises(EntityTypeError):
            User.has(db, AdminUser(name="x", email="y", id=people[0].id))


# =============================================================================
# Writes
# =============================================================================


class TestAdd:
    def test_add_then_get_by_id(self, db) -> None:
        added = User.add(db, User(name="Dan", email="dan@test.com"))
        assert added.id is not None
        assert User.get_by_id(db, added.id) == added
        assert User.has(db, added) is True

    def test_add_discards_preset_id(self, db, people) -> None:
        added = User.add(db, User(name="Eve", email="eve@test.com", id=1))
        assert added.id == 4
        assert User.get_by_id(db, 1) == people[0]

    def test_add_custom_mapping(self, db) -> None:
        note = Note.add(db, Note(title="todo", tags=["a", "b"]))
        assert Note.get_by_id(db, note.id).tags == ["a", "b"]

    def test_add_rejects_other_type(self, db) -> None:
        with pytest.raises(EntityTypeError):
            User.add(db, Note(title="x"))  # type: ignore[arg-type]


class TestUpdate:
    def test_update_writes_fields(self, db, people) -> None:
        bob = people[1]
        bob.email = "robert@test.com"
        bob.active = False
        updated = User.update(db, bob)
        assert updated.email == "robert@test.com"
        assert updated.active is False
        assert User.get_by_id(db, bob.id) == updated

    def test_update_missing_row_fails_without_writing(self, db, people) -> None:
        ghost = User(name="ghost", email="alice@test.com", id=999)
        with pytest.raises(PreconditionError):
            User.update(db, ghost)
        assert User.get_all(db) == people

    def test_update_unsaved_fails(self, db) -> None:
        with pytest.raises(PreconditionError):
            User.update(db, User(name="new", email="n"))


class TestDelete:
    def test_delete_removes_row(self, db, people) -> None:
        removed = User.delete(db, people[0])
        assert removed is people[0]
        assert User.has(db, people[0]) is False
        assert User.get_all(db) == people[1:]

    def test_delete_missing_row_fails(self, db) -> None:
        with pytest.raises(PreconditionError):
            User.delete(db, User(name="ghost", email="g", id=42))

    def test_delete_all(self, db, people) -> None:
        User.delete_all(db)
        assert User.get_all(db) == []
