"""Core types for pgfluent."""

from pgfluent.core.types import (
    Constraint,
    ConstraintMatching,
    FieldDescriptor,
    Float32,
    Float64,
    Int32,
    Int64,
    TableOption,
    ValueKind,
    ValueType,
)

__all__ = [
    "Constraint",
    "ConstraintMatching",
    "FieldDescriptor",
    "TableOption",
    "ValueKind",
    "ValueType",
    "Int32",
    "Int64",
    "Float32",
    "Float64",
]
