"""Mapping from record field types to PostgreSQL column types.

Mapping never fails: anything unrecognized becomes TEXT so table
definitions can always be generated.
"""

from __future__ import annotations

import types
from collections.abc import MutableSequence, Sequence
from collections.abc import Set as AbstractSet
from datetime import datetime
from typing import Annotated, Any, Union, get_args, get_origin

from pgfluent.core.types import ValueKind, ValueType

# Mapping from value kinds to PostgreSQL column types
SQL_TYPE_MAP: dict[ValueKind, str] = {
    ValueKind.STRING: "TEXT",
    ValueKind.BOOLEAN: "BOOLEAN",
    ValueKind.INT32: "INTEGER",
    ValueKind.INT64: "BIGINT",
    ValueKind.FLOAT32: "REAL",
    ValueKind.FLOAT64: "DOUBLE PRECISION",
    ValueKind.TIMESTAMP: "TIMESTAMP",
}

FALLBACK_SQL_TYPE = "TEXT"

# Checked in order: bool is a subclass of int
_PYTHON_KINDS: list[tuple[type, ValueKind]] = [
    (bool, ValueKind.BOOLEAN),
    (int, ValueKind.INT32),
    (float, ValueKind.FLOAT64),
    (str, ValueKind.STRING),
    (datetime, ValueKind.TIMESTAMP),
]

_ARRAY_TYPES = (list, tuple, set, frozenset, Sequence, MutableSequence, AbstractSet)

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


def _unwrap_annotated(hint: Any) -> tuple[Any, ValueKind | None]:
    """Strip `Annotated`, returning the base hint and any width marker."""
    if get_origin(hint) is not Annotated:
        return hint, None
    base, *metadata = get_args(hint)
    marker = next((m for m in metadata if isinstance(m, ValueKind)), None)
    return base, marker


def _is_array(hint: Any) -> bool:
    if hint in _ARRAY_TYPES:
        return True
    return get_origin(hint) in _ARRAY_TYPES


def _is_optional_timestamp(hint: Any) -> bool:
    if get_origin(hint) not in _UNION_TYPES:
        return False
    members = [a for a in get_args(hint) if a is not type(None)]
    return (
        len(members) == 1
        and isinstance(members[0], type)
        and get_origin(members[0]) is None
        and issubclass(members[0], datetime)
    )


def _scalar_kind(hint: Any) -> ValueKind:
    base, marker = _unwrap_annotated(hint)
    if marker is not None:
        return marker
    if _is_optional_timestamp(base):
        return ValueKind.TIMESTAMP
    if _is_array(base):
        return ValueKind.ARRAY
    if isinstance(base, type) and get_origin(base) is None:
        for python_type, kind in _PYTHON_KINDS:
            if issubclass(base, python_type):
                return kind
    return ValueKind.OTHER


def value_type_of(hint: Any) -> ValueType:
    """Derive the value type of a field from its type hint.

    Only one level of array is unwrapped: `list[list[str]]` is an array
    whose element kind is itself ARRAY, which maps like any unknown kind.

    Args:
        hint: A type hint as returned by `typing.get_type_hints(..., include_extras=True)`

    Returns:
        The field's ValueType
    """
    base, marker = _unwrap_annotated(hint)
    if marker is not None and marker != ValueKind.ARRAY:
        return ValueType(kind=marker)

    if _is_array(base):
        args = [a for a in get_args(base) if a is not Ellipsis]
        element = _scalar_kind(args[0]) if args else ValueKind.OTHER
        return ValueType(kind=ValueKind.ARRAY, element=element)

    return ValueType(kind=_scalar_kind(base))


def map_type(value_type: ValueType | ValueKind | Any) -> str:
    """Map a value type to a PostgreSQL column type.

    Accepts a ValueType, a bare ValueKind, or a Python type hint.

    Examples:
        >>> map_type(ValueKind.INT64)
        'BIGINT'
        >>> map_type(list[str])
        'TEXT[]'
    """
    if isinstance(value_type, ValueKind):
        value_type = ValueType(kind=value_type)
    elif not isinstance(value_type, ValueType):
        value_type = value_type_of(value_type)

    if value_type.is_array:
        element = value_type.element or ValueKind.OTHER
        return f"{SQL_TYPE_MAP.get(element, FALLBACK_SQL_TYPE)}[]"
    return SQL_TYPE_MAP.get(value_type.kind, FALLBACK_SQL_TYPE)
