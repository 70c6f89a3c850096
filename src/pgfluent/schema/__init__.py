"""Record introspection: column resolution, type mapping and table definitions."""

from pgfluent.schema.ddl import column_definitions, table_definition
from pgfluent.schema.fields import (
    column,
    column_names,
    inspect_fields,
    is_record,
    is_record_type,
    parse_annotation,
    resolve_columns,
)
from pgfluent.schema.types import SQL_TYPE_MAP, map_type, value_type_of

__all__ = [
    "column",
    "column_names",
    "inspect_fields",
    "is_record",
    "is_record_type",
    "parse_annotation",
    "resolve_columns",
    "SQL_TYPE_MAP",
    "map_type",
    "value_type_of",
    "column_definitions",
    "table_definition",
]
