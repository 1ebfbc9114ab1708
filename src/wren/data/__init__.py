"""Database access and active-record models for wren.

SQL in, dataclasses out. One connection per ``Database``; models take the
database explicitly.

Basic usage::

    from dataclasses import dataclass

    from wren.data import Database, Model

    db = Database("sqlite:///app.db")

    @dataclass
    class User(Model):
        __table__ = "users"

        name: str
        email: str

    user = User.add(db, User(name="Alice", email="alice@example.com"))
    same = User.get_by_id(db, user.id)
"""

from wren.data.database import Database
from wren.data.errors import (
    DataError,
    EntityTypeError,
    PreconditionError,
    QueryError,
)
from wren.data.model import Model

__all__ = [
    "DataError",
    "Database",
    "EntityTypeError",
    "Model",
    "PreconditionError",
    "QueryError",
]
