"""Field metadata resolution for record types.

A record type is a dataclass or a pydantic model. Each exported field may
carry two annotations:

- `db`: the primary annotation, ``"<column>[,<option>...]"``. A column of
  ``-`` excludes the field; options may declare ``primarykey``,
  ``notnull`` and ``unique``.
- `json`: the secondary annotation, consulted for the column name only
  when the `db` annotation does not name the column.

Example:
    @dataclass
    class User:
        id: Int64 = column(db="id,primarykey")
        email: str = column(db="email,notnull,unique")
        display_name: str = column(json="displayName")
        password_hash: str = column(db="-")
"""

from __future__ import annotations

import builtins
import dataclasses
import functools
import logging
import sys
import typing
from typing import Annotated, Any

from pydantic import BaseModel

from pgfluent.config import get_constraint_matching
from pgfluent.core.types import Constraint, ConstraintMatching, FieldDescriptor, ValueKind
from pgfluent.exceptions import UnsupportedInputKindError
from pgfluent.schema.types import value_type_of

logger = logging.getLogger(__name__)

DB_TAG = "db"
JSON_TAG = "json"
EXCLUDE = "-"


def column(db: str | None = None, json: str | None = None, **kwargs: Any) -> Any:
    """Declare a dataclass field with `db` and/or `json` annotations.

    Accepts every keyword of `dataclasses.field`; existing `metadata` is kept.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if db is not None:
        metadata[DB_TAG] = db
    if json is not None:
        metadata[JSON_TAG] = json
    return dataclasses.field(metadata=metadata, **kwargs)


def is_record_type(obj: Any) -> bool:
    """Return True for dataclass classes and pydantic model classes."""
    if not isinstance(obj, type):
        return False
    return dataclasses.is_dataclass(obj) or issubclass(obj, BaseModel)


def is_record(obj: Any) -> bool:
    """Return True for dataclass and pydantic model instances."""
    if isinstance(obj, type):
        return False
    return dataclasses.is_dataclass(obj) or isinstance(obj, BaseModel)


def record_type_of(obj: Any, operation: str) -> type:
    """Return the record type of a record or record type.

    Raises:
        UnsupportedInputKindError: If obj is neither
    """
    if is_record_type(obj):
        return obj
    if is_record(obj):
        return type(obj)
    raise UnsupportedInputKindError(operation, obj, expected="record type")


def _first_segment(annotation: str | None) -> str:
    if not annotation:
        return ""
    return annotation.split(",")[0].strip()


def parse_constraints(
    annotation: str | None,
    matching: ConstraintMatching = ConstraintMatching.LOOSE,
) -> frozenset[Constraint]:
    """Collect the constraint flags declared by a `db` annotation.

    In loose mode a flag is set when its name occurs anywhere in the
    annotation, including inside the column name: ``db:"unique_code"``
    sets UNIQUE. Strict mode compares each option segment exactly.
    """
    if not annotation:
        return frozenset()
    if matching == ConstraintMatching.STRICT:
        options = {segment.strip() for segment in annotation.split(",")[1:]}
        return frozenset(c for c in Constraint if c.value in options)
    return frozenset(c for c in Constraint if c.value in annotation)


def parse_annotation(
    name: str,
    annotation: str | None,
    secondary_annotation: str | None = None,
    matching: ConstraintMatching = ConstraintMatching.LOOSE,
) -> tuple[str, bool, frozenset[Constraint]]:
    """Resolve column name, exclusion and constraints for one field.

    Precedence for the column name is `db` > `json` > attribute name. A
    `db` annotation whose column segment is blank (``""`` or
    ``",notnull"``) defers naming to the `json` annotation.

    Returns:
        Tuple of (column_name, excluded, constraints)
    """
    primary = _first_segment(annotation)
    if primary == EXCLUDE:
        return name, True, frozenset()
    if primary:
        return primary, False, parse_constraints(annotation, matching)

    secondary = _first_segment(secondary_annotation)
    if secondary == EXCLUDE:
        return name, True, frozenset()
    column_name = secondary or name
    return column_name, False, parse_constraints(annotation, matching)


def _raw_fields(record_type: type) -> list[tuple[str, str | None, str | None]]:
    """List (name, db, json) for every field in declaration order."""
    if dataclasses.is_dataclass(record_type):
        return [
            (f.name, f.metadata.get(DB_TAG), f.metadata.get(JSON_TAG))
            for f in dataclasses.fields(record_type)
        ]

    raw = []
    for name, info in record_type.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        db = extra.get(DB_TAG)
        json = extra.get(JSON_TAG, info.alias)
        raw.append((name, db, json))
    return raw


def _type_hints(record_type: type) -> dict[str, Any]:
    """Field type hints with `Annotated` metadata kept."""
    if not dataclasses.is_dataclass(record_type):
        # pydantic has resolved the hints already but moves Annotated extras to metadata
        hints = {}
        for name, info in record_type.model_fields.items():
            markers = [m for m in info.metadata if isinstance(m, ValueKind)]
            hints[name] = Annotated[info.annotation, markers[0]] if markers else info.annotation
        return hints

    try:
        return typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug(f"Resolving type hints of {record_type.__qualname__} field by field: {e}")

    globalns = vars(sys.modules.get(record_type.__module__, builtins))
    localns = dict(vars(record_type))
    hints = {}
    for f in dataclasses.fields(record_type):
        if not isinstance(f.type, str):
            hints[f.name] = f.type
            continue
        try:
            hints[f.name] = eval(f.type, globalns, localns)  # noqa: S307
        except (NameError, AttributeError, SyntaxError, TypeError):
            # Unresolvable annotations map to OTHER
            hints[f.name] = Any
    return hints


@functools.lru_cache(maxsize=256)
def _describe(record_type: type, matching: ConstraintMatching) -> tuple[FieldDescriptor, ...]:
    logger.debug(f"Resolving fields of {record_type.__qualname__} ({matching} matching)")
    hints = _type_hints(record_type)
    descriptors = []
    for name, annotation, secondary in _raw_fields(record_type):
        if name.startswith("_"):
            continue
        column_name, excluded, constraints = parse_annotation(
            name, annotation, secondary, matching
        )
        descriptors.append(
            FieldDescriptor(
                name=name,
                column_name=column_name,
                annotation=annotation,
                secondary_annotation=secondary,
                excluded=excluded,
                constraints=constraints,
                value_type=value_type_of(hints.get(name, Any)),
            )
        )
    return tuple(descriptors)


def inspect_fields(
    record: Any,
    matching: ConstraintMatching | str | None = None,
) -> tuple[FieldDescriptor, ...]:
    """Describe every exported field of a record type, excluded ones included.

    Args:
        record: A record type or record instance
        matching: Constraint matching mode (defaults to configuration)

    Raises:
        UnsupportedInputKindError: If record is not a dataclass or pydantic model
    """
    record_type = record_type_of(record, "inspect_fields")
    return _describe(record_type, get_constraint_matching(matching))


def resolve_columns(
    record: Any,
    matching: ConstraintMatching | str | None = None,
) -> tuple[FieldDescriptor, ...]:
    """Resolve the fields of a record type that map to SQL columns.

    Fields annotated with ``-`` and non-exported fields (leading underscore)
    are left out; the rest keep their declaration order.

    Args:
        record: A record type or record instance
        matching: Constraint matching mode (defaults to configuration)

    Returns:
        Tuple of FieldDescriptor, one per included field

    Raises:
        UnsupportedInputKindError: If record is not a dataclass or pydantic model
    """
    record_type = record_type_of(record, "resolve_columns")
    descriptors = _describe(record_type, get_constraint_matching(matching))
    return tuple(d for d in descriptors if not d.excluded)


def column_names(record: Any) -> list[str]:
    """Return the resolved column names of a record type, in order."""
    return [d.column_name for d in resolve_columns(record)]
