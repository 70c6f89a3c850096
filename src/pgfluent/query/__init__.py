"""Fluent statement assembly.

Example:
    stmt = (
        select(User)
        .from_("users")
        .where("active = @active", {"active": True})
        .in_("id", [1, 2, 3])
        .order_by("id")
        .limit(10)
    )
    sql, args = stmt.result()
"""

from pgfluent.query.adapters import to_text_clause
from pgfluent.query.statement import (
    Statement,
    create_table,
    delete,
    insert_into,
    raw_sql,
    select,
    select_columns,
    update,
)

__all__ = [
    "Statement",
    "create_table",
    "delete",
    "insert_into",
    "raw_sql",
    "select",
    "select_columns",
    "update",
    "to_text_clause",
]
