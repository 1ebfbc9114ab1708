"""Row-to-dataclass mapping with type coercion.

Converts raw database rows (dicts) into typed dataclasses. Uses dataclass
field introspection — no metaclass magic, no descriptors.

Type coercion handles the mismatch between database drivers (SQLite
returns strings or ints for some column types) and Python dataclass
annotations. Fields annotated as ``int`` coerce ``"45"`` to ``45``, and
empty strings to ``0``; ``bool`` fields accept SQLite's ``0``/``1``.
"""

import dataclasses
import types
import typing
from typing import Any, TypeVar, get_args, get_origin

T = TypeVar("T")

# Scalar types we know how to coerce from database driver values.
_COERCIBLE: dict[type, Any] = {
    int: lambda v: int(v) if v != "" else 0,
    float: lambda v: float(v) if v != "" else 0.0,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
}


def coercion_map(cls: type) -> dict[str, type | None]:
    """Build a {field_name: target_type} map for a dataclass.

    Returns ``None`` for fields that don't need coercion (complex types,
    generics, etc.). String annotations are resolved first.
    """
    hints = typing.get_type_hints(cls)
    result: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = hints.get(f.name, f.type)
        # Unwrap Optional (X | None) — coerce to the non-None branch
        origin = get_origin(annotation)
        if origin is types.UnionType or origin is typing.Union:
            args = [a for a in get_args(annotation) if a is not type(None)]
            annotation = args[0] if len(args) == 1 else None
        result[f.name] = annotation if annotation in _COERCIBLE else None
    return result


def coerce(value: Any, target: type | None) -> Any:
    """Coerce a single value to the target type, if needed."""
    if target is None or value is None:
        return value
    # bool is an int subclass; keep 0/1 from reaching bool fields untouched
    if isinstance(value, target) and not (target is bool and not isinstance(value, bool)):
        return value
    return _COERCIBLE[target](value)


def _require_dataclass(cls: type) -> None:
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass — wren.data maps rows onto dataclasses"
        raise TypeError(msg)


def map_row(cls: type[T], row: dict[str, Any]) -> T:
    """Map a dict-like row to a dataclass instance.

    Only passes keys that match dataclass fields. Extra columns are silently
    ignored (SELECT * is fine even if the dataclass has fewer fields).

    Raises ``TypeError`` if required fields are missing from the row.
    """
    _require_dataclass(cls)
    coercion = coercion_map(cls)
    filtered = {k: coerce(v, coercion[k]) for k, v in row.items() if k in coercion}
    return cls(**filtered)


def map_rows(cls: type[T], rows: list[dict[str, Any]]) -> list[T]:
    """Map a list of dict-like rows to dataclass instances."""
    _require_dataclass(cls)
    coercion = coercion_map(cls)
    return [
        cls(**{k: coerce(v, coercion[k]) for k, v in row.items() if k in coercion})
        for row in rows
    ]
