"""pgfluent - Record-to-SQL mapping and fluent PostgreSQL statement assembly.

Records are dataclasses or pydantic models. Field annotations name columns
and declare constraints; statements are immutable values built by chaining.

Example:
    from dataclasses import dataclass

    from pgfluent import Int64, column, create_table, insert_into, select

    @dataclass
    class User:
        id: Int64 = column(db="id,primarykey")
        email: str = column(db="email,notnull,unique")
        password_hash: str = column(db="-", default="")

    ddl = create_table("users", User, "IF_NOT_EXISTS").sql

    user = User(id=1, email="ada@example.com")
    sql, args = insert_into("users").columns(user).values(user).result()
    # INSERT INTO users (id, email) VALUES (@id, @email)
    # {"id": 1, "email": "ada@example.com"}
"""

from pgfluent.config import Settings, get_settings
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
from pgfluent.data import bind, scan_row
from pgfluent.exceptions import (
    ConfigurationError,
    PgFluentError,
    RowShapeError,
    UnsupportedInputKindError,
)
from pgfluent.query import (
    Statement,
    create_table,
    delete,
    insert_into,
    raw_sql,
    select,
    select_columns,
    to_text_clause,
    update,
)
from pgfluent.schema import (
    column,
    column_names,
    inspect_fields,
    map_type,
    resolve_columns,
    table_definition,
    value_type_of,
)

__version__ = "0.1.0"

__all__ = [
    # Record mapping
    "column",
    "column_names",
    "inspect_fields",
    "resolve_columns",
    "bind",
    "scan_row",
    "map_type",
    "value_type_of",
    "table_definition",
    # Statements
    "Statement",
    "create_table",
    "delete",
    "insert_into",
    "raw_sql",
    "select",
    "select_columns",
    "update",
    "to_text_clause",
    # Types
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
    # Configuration
    "Settings",
    "get_settings",
    # Exceptions
    "PgFluentError",
    "UnsupportedInputKindError",
    "RowShapeError",
    "ConfigurationError",
]
