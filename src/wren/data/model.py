"""Active-record models over a single table keyed by ``id``.

A model is a dataclass that subclasses ``Model`` and names its table::

    @dataclass
    class User(Model):
        __table__ = "users"

        name: str
        email: str

Every operation takes the ``Database`` to run against as its first
argument — there is no global connection::

    alice = User.add(db, User(name="Alice", email="alice@example.com"))
    alice.email = "alice@example.org"
    User.update(db, alice)
    User.get_latest(db, 5)
    User.delete(db, alice)

Table and column names are interpolated into the SQL text (double-quoted),
so they are validated as plain identifiers. Values are always bound.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Self

from wren.data._mapping import coerce, coercion_map
from wren.data.errors import EntityTypeError, PreconditionError
from wren.errors import ConfigurationError

if TYPE_CHECKING:
    from wren.data.database import Database

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _as_int(value: Any) -> int:
    """Integer value of an id or count; anything non-numeric is 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _check_identifier(name: str, what: str) -> str:
    if not _IDENTIFIER.match(name):
        msg = f"Invalid {what} name {name!r}: use letters, digits and underscores only"
        raise ConfigurationError(msg)
    return name


@dataclass
class Model:
    """Base class for active-record entities.

    ``id`` is ``None`` until the entity has been added. Subclasses are
    dataclasses; their fields are the table's columns. Override
    ``inflate``/``deflate`` to map columns that need more than scalar
    coercion (JSON blobs, dates, ...), keeping the two symmetric.
    """

    __table__: ClassVar[str] = "model"

    id: int | None = field(default=None, kw_only=True)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _check_identifier(cls.__table__, "table")

    # -- Introspection --

    @classmethod
    def columns(cls) -> tuple[str, ...]:
        """Column names, in declaration order, ``id`` included."""
        names = tuple(f.name for f in dataclasses.fields(cls))
        for name in names:
            _check_identifier(name, "column")
        return names

    @classmethod
    def validate_instance(cls, instance: object) -> None:
        """Reject instances of any other type, subclasses included."""
        if type(instance) is not cls:
            msg = f"{cls.__name__} only accepts an instance of itself, got {type(instance).__name__}."
            raise EntityTypeError(msg)

    def as_dict(self) -> dict[str, Any]:
        """Field values of this entity, ``id`` included."""
        return {name: getattr(self, name) for name in self.columns()}

    # -- Serialization --

    @classmethod
    def inflate(cls, row: dict[str, Any]) -> Self:
        """Build an entity from a raw row mapping.

        Columns the model does not declare are ignored; missing ones keep
        their dataclass default. ``id`` is always an integer.
        """
        targets = coercion_map(cls)
        values = {k: coerce(v, targets[k]) for k, v in row.items() if k in targets}
        if values.get("id") is not None:
            values["id"] = int(values["id"])
        return cls(**values)

    @classmethod
    def deflate(cls, instance: Self) -> dict[str, Any]:
        """Build the column -> value mapping written for an entity."""
        cls.validate_instance(instance)
        return instance.as_dict()

    @classmethod
    def _one(cls, rows: list[dict[str, Any]]) -> Self | None:
        return cls.inflate(rows[0]) if rows else None

    @classmethod
    def _many(cls, rows: list[dict[str, Any]]) -> list[Self]:
        return [cls.inflate(row) for row in rows]

    # -- Reads --

    @classmethod
    def get_by_id(cls, db: Database, id: int | str) -> Self | None:  # noqa: A002
        """Return the entity with this id, or ``None``.

        A non-numeric id matches nothing.
        """
        sql = f'SELECT * FROM "{cls.__table__}" WHERE "id" = ?;'
        return cls._one(db.query(sql, _as_int(id)))

    @classmethod
    def get_all(cls, db: Database) -> list[Self]:
        """Return every entity in the table."""
        return cls._many(db.query(f'SELECT * FROM "{cls.__table__}";'))

    @classmethod
    def get(cls, db: Database, id: int | str | None = None) -> Self | list[Self] | None:  # noqa: A002
        """``get_by_id`` when an id is given, otherwise ``get_all``."""
        if id is not None:
            return cls.get_by_id(db, id)
        return cls.get_all(db)

    @classmethod
    def get_latest(cls, db: Database, count: int = 1) -> Self | list[Self] | None:
        """Newest entities by id. A single entity (or ``None``) when count is 1."""
        return cls._ordered(db, "DESC", count)

    @classmethod
    def get_oldest(cls, db: Database, count: int = 1) -> Self | list[Self] | None:
        """Oldest entities by id. A single entity (or ``None``) when count is 1."""
        return cls._ordered(db, "ASC", count)

    @classmethod
    def _ordered(cls, db: Database, direction: str, count: int) -> Self | list[Self] | None:
        limit = _as_int(count) or 1
        sql = f'SELECT * FROM "{cls.__table__}" ORDER BY "id" {direction} LIMIT ?;'
        rows = db.query(sql, limit)
        if limit == 1:
            return cls._one(rows)
        return cls._many(rows)

    @classmethod
    def has(cls, db: Database, instance: Self) -> bool:
        """True if a row with the instance's id exists."""
        cls.validate_instance(instance)
        if instance.id is None:
            return False
        return cls.get_by_id(db, instance.id) is not None

    # -- Writes --

    @classmethod
    def add(cls, db: Database, instance: Self) -> Self:
        """Insert the instance as a new row and return the stored entity.

        Any id already set on the instance is discarded.
        """
        values = cls.deflate(instance)
        values.pop("id", None)
        if values:
            names = '", "'.join(values)
            placeholders = ", ".join("?" for _ in values)
            sql = f'INSERT INTO "{cls.__table__}" ("{names}") VALUES ({placeholders});'
        else:
            sql = f'INSERT INTO "{cls.__table__}" DEFAULT VALUES;'
        new_id = db.insert(sql, *values.values())
        if new_id is None:
            # TODO: use INSERT ... RETURNING "id" once non-SQLite drivers are supported
            return cls.get_latest(db)  # type: ignore[return-value]
        return cls.get_by_id(db, new_id)  # type: ignore[return-value]

    @classmethod
    def update(cls, db: Database, instance: Self) -> Self:
        """Write every field except ``id`` and return the re-read entity."""
        if not cls.has(db, instance):
            msg = "An unsaved instance cannot be updated."
            raise PreconditionError(msg)
        values = cls.deflate(instance)
        values.pop("id", None)
        if values:
            assignments = ", ".join(f'"{name}" = ?' for name in values)
            sql = f'UPDATE "{cls.__table__}" SET {assignments} WHERE "id" = ?;'
            db.execute(sql, *values.values(), instance.id)
        return cls.get_by_id(db, instance.id)  # type: ignore[arg-type, return-value]

    @classmethod
    def delete(cls, db: Database, instance: Self) -> Self:
        """Delete the instance's row and return the instance."""
        if not cls.has(db, instance):
            msg = "An unsaved instance cannot be deleted."
            raise PreconditionError(msg)
        db.execute(f'DELETE FROM "{cls.__table__}" WHERE "id" = ?;', instance.id)
        return instance

    @classmethod
    def delete_all(cls, db: Database) -> None:
        """Delete every row in the table."""
        db.execute(f'DELETE FROM "{cls.__table__}";')
