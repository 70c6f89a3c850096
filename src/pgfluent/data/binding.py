"""Binding record values to named SQL parameters, and back.

`bind` turns a record instance into the name -> value table that travels
with generated SQL; `scan_row` builds a record instance from a result row.
Both go through `resolve_columns`, so they always agree on which fields
take part and under which column names.
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pgfluent.exceptions import RowShapeError, UnsupportedInputKindError
from pgfluent.schema.fields import is_record, is_record_type, resolve_columns

R = TypeVar("R")


def _snapshot(value: Any) -> Any:
    """Deep-copy a value; fall back to a shallow copy, then the value itself."""
    for copier in (copy.deepcopy, copy.copy):
        try:
            return copier(value)
        except (TypeError, copy.Error):
            continue
    return value


def bind(record: Any) -> dict[str, Any]:
    """Extract named arguments from a record instance.

    Values are deep-copied, so mutating the record afterwards does not
    change a table that was already produced. Values that cannot be copied
    (locks, open handles) are bound as they are.

    Args:
        record: A dataclass or pydantic model instance

    Returns:
        Dict of column name -> value, one entry per included field

    Raises:
        UnsupportedInputKindError: If record is not a record instance
    """
    if not is_record(record):
        raise UnsupportedInputKindError("bind", record)

    return {
        descriptor.column_name: _snapshot(getattr(record, descriptor.name))
        for descriptor in resolve_columns(record)
    }


def merge_bindings(target: dict[str, Any], args: Any, operation: str) -> dict[str, Any]:
    """Merge extra clause arguments into a copy of `target`.

    `args` is either a mapping (merged as-is) or a record instance (run
    through `bind` first). Later keys overwrite earlier ones.

    Raises:
        UnsupportedInputKindError: If args is neither
    """
    merged = dict(target)
    if args is None:
        return merged
    if isinstance(args, Mapping):
        merged.update(args)
    elif is_record(args):
        merged.update(bind(args))
    else:
        raise UnsupportedInputKindError(operation, args)
    return merged


def _init_kwargs(record_type: type, values: dict[str, Any]) -> dict[str, Any]:
    """Key constructor arguments the way the record type expects them."""
    if dataclasses.is_dataclass(record_type):
        init_names = {f.name for f in dataclasses.fields(record_type) if f.init}
        return {name: value for name, value in values.items() if name in init_names}
    fields = record_type.model_fields
    return {fields[name].alias or name: value for name, value in values.items()}


def scan_row(record_type: type[R], row: Sequence[Any] | Mapping[str, Any]) -> R:
    """Build a record instance from a database row.

    Args:
        record_type: Dataclass or pydantic model class
        row: Values in resolved column order, or a mapping keyed by column name
            (e.g. a SQLAlchemy ``RowMapping``)

    Returns:
        A new record_type instance. Excluded fields keep their defaults.

    Raises:
        UnsupportedInputKindError: If record_type is not a record type
        RowShapeError: If the row does not match the resolved columns
    """
    if not is_record_type(record_type):
        raise UnsupportedInputKindError("scan_row", record_type, expected="record type")

    descriptors = resolve_columns(record_type)
    expected = [d.column_name for d in descriptors]

    if isinstance(row, Mapping):
        missing = [name for name in expected if name not in row]
        if missing:
            raise RowShapeError(record_type, expected, f"missing columns {', '.join(missing)}")
        values = {d.name: row[d.column_name] for d in descriptors}
    else:
        if isinstance(row, (str, bytes)) or len(row) != len(expected):
            size = len(row) if not isinstance(row, (str, bytes)) else 1
            raise RowShapeError(
                record_type, expected, f"got {size} values for {len(expected)} columns"
            )
        values = {d.name: value for d, value in zip(descriptors, row)}

    return record_type(**_init_kwargs(record_type, values))
