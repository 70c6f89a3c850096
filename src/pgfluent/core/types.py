"""Core types for pgfluent.

Descriptors are frozen pydantic models so a resolved column list can be
cached and shared without callers being able to mutate it.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from pgfluent.core.compat import StrEnum


class ValueKind(StrEnum):
    """Declared value kinds of a record field."""

    STRING = "string"
    BOOLEAN = "boolean"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TIMESTAMP = "timestamp"
    ARRAY = "array"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid value kind values."""
        return [k.value for k in cls]


class Constraint(StrEnum):
    """Column constraints recognized in the `db` annotation."""

    PRIMARY_KEY = "primarykey"
    NOT_NULL = "notnull"
    UNIQUE = "unique"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid constraint values."""
        return [c.value for c in cls]


class ConstraintMatching(StrEnum):
    """How constraint flags are detected in a `db` annotation."""

    LOOSE = "loose"  # substring match against the whole annotation
    STRICT = "strict"  # exact match against each option segment

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid matching modes."""
        return [m.value for m in cls]


class TableOption(StrEnum):
    """Preamble selection for CREATE TABLE."""

    IF_NOT_EXISTS = "IF_NOT_EXISTS"
    DROP = "DROP"
    DROP_CASCADE = "DROP_CASCADE"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid table option values."""
        return [o.value for o in cls]


# Width markers for fields whose Python type does not pin a SQL width
Int32 = Annotated[int, ValueKind.INT32]
Int64 = Annotated[int, ValueKind.INT64]
Float32 = Annotated[float, ValueKind.FLOAT32]
Float64 = Annotated[float, ValueKind.FLOAT64]


class ValueType(BaseModel):
    """A field's value type; `element` is set only for arrays."""

    kind: ValueKind = ValueKind.OTHER
    element: ValueKind | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_array(self) -> bool:
        return self.kind == ValueKind.ARRAY


class FieldDescriptor(BaseModel):
    """One exported field of a record type, as seen by the SQL mapping."""

    name: str = Field(..., description="Attribute name as declared on the record")
    column_name: str = Field(..., description="Resolved SQL column name")
    annotation: str | None = Field(default=None, description="Raw `db` annotation")
    secondary_annotation: str | None = Field(
        default=None, description="Raw `json` annotation (fallback for naming only)"
    )
    excluded: bool = Field(default=False, description="True when annotated with '-'")
    constraints: frozenset[Constraint] = Field(default_factory=frozenset)
    value_type: ValueType = Field(default_factory=ValueType)

    model_config = ConfigDict(frozen=True)

    @property
    def primary_key(self) -> bool:
        return Constraint.PRIMARY_KEY in self.constraints

    @property
    def not_null(self) -> bool:
        return Constraint.NOT_NULL in self.constraints

    @property
    def unique(self) -> bool:
        return Constraint.UNIQUE in self.constraints
