"""Data layer error hierarchy."""

from wren.errors import ErrorKind, WrenError


class DataError(WrenError):
    """Base for all wren.data errors."""

    kind = ErrorKind.STORAGE


class QueryError(DataError):
    """Raised when a SQL statement fails in the driver."""


class PreconditionError(DataError):
    """Raised when an update or delete targets a row that does not exist."""

    kind = ErrorKind.PRECONDITION


class EntityTypeError(DataError, TypeError):
    """Raised when a model operation receives an instance of another type."""

    kind = ErrorKind.TYPE_MISMATCH
