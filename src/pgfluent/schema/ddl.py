"""CREATE TABLE generation from record types."""

from __future__ import annotations

import logging
from typing import Any

from pgfluent.core.types import ConstraintMatching, TableOption
from pgfluent.exceptions import UnsupportedInputKindError
from pgfluent.schema.fields import is_record, is_record_type, resolve_columns
from pgfluent.schema.types import map_type

logger = logging.getLogger(__name__)

INDENT = "    "


def _table_option(option: TableOption | str | None) -> TableOption | None:
    if option is None:
        return None
    try:
        return TableOption(option)
    except ValueError:
        logger.debug(f"Unrecognized table option {option!r}, using plain CREATE TABLE")
        return None


def _preamble(table: str, option: TableOption | None) -> str:
    if option == TableOption.IF_NOT_EXISTS:
        return f"CREATE TABLE IF NOT EXISTS {table} (\n"
    if option == TableOption.DROP_CASCADE:
        return f"DROP TABLE IF EXISTS {table} CASCADE;\nCREATE TABLE {table} (\n"
    if option == TableOption.DROP:
        return f"DROP TABLE IF EXISTS {table};\nCREATE TABLE {table} (\n"
    return f"CREATE TABLE {table} (\n"


def column_definitions(
    record: Any,
    matching: ConstraintMatching | str | None = None,
) -> tuple[list[str], list[str]]:
    """Build column definitions and the primary key column list.

    Primary keys are never rendered inline, so several flagged fields
    form one composite key.

    Returns:
        Tuple of (column definitions, primary key column names)
    """
    columns: list[str] = []
    primary_keys: list[str] = []

    for descriptor in resolve_columns(record, matching):
        definition = f"{descriptor.column_name} {map_type(descriptor.value_type)}"
        if descriptor.primary_key:
            primary_keys.append(descriptor.column_name)
        if descriptor.not_null:
            definition += " NOT NULL"
        if descriptor.unique:
            definition += " UNIQUE"
        columns.append(definition)

    return columns, primary_keys


def table_definition(
    table: str,
    record: Any,
    option: TableOption | str | None = None,
    matching: ConstraintMatching | str | None = None,
) -> str:
    """Render a CREATE TABLE statement for a record type.

    Args:
        table: Table name, used verbatim
        record: Record type or instance
        option: IF_NOT_EXISTS, DROP or DROP_CASCADE; anything else yields
            a plain CREATE TABLE
        matching: Constraint matching mode (defaults to configuration)

    Raises:
        UnsupportedInputKindError: If record is not a dataclass or pydantic model
    """
    if not (is_record_type(record) or is_record(record)):
        raise UnsupportedInputKindError("create_table", record, expected="record type")

    columns, primary_keys = column_definitions(record, matching)

    sql = _preamble(table, _table_option(option))
    sql += INDENT + f",\n{INDENT}".join(columns)
    if primary_keys:
        sql += f",\n{INDENT}PRIMARY KEY ({', '.join(primary_keys)})"
    sql += "\n)"
    return sql
