"""Fluent PostgreSQL statement assembly.

A Statement is an immutable value: every chained call returns a new
Statement, so a shared base statement can be extended independently from
several places (and threads).

Placeholders use the ``@name`` syntax; every placeholder produced by a
record or a condition helper has a matching key in ``named_args``.

Errors do not raise mid-chain. A call that receives unsupported input
puts the statement in an error state; later calls return it unchanged, and
reading ``sql``, ``named_args`` or ``result()`` raises the stored error.

Example:
    sql, args = (
        insert_into("users")
        .columns(user)
        .values(user)
        .on_conflict("(id)")
        .do_nothing()
        .result()
    )
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, TypeVar

from pgfluent.core.types import ConstraintMatching, TableOption
from pgfluent.data.binding import bind, merge_bindings
from pgfluent.exceptions import PgFluentError, UnsupportedInputKindError
from pgfluent.schema.ddl import table_definition
from pgfluent.schema.fields import column_names, is_record, is_record_type

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., "Statement"])


def _chainable(method: F) -> F:
    """Skip the call on error-state statements; capture pgfluent errors."""

    @functools.wraps(method)
    def wrapper(self: Statement, *args: Any, **kwargs: Any) -> Statement:
        if self.error is not None:
            return self
        try:
            return method(self, *args, **kwargs)
        except PgFluentError as e:
            logger.debug(f"{method.__name__}() left statement in error state: {e.message}")
            return replace(self, error=e)

    return wrapper  # type: ignore[return-value]


def _target_columns(target: Any) -> tuple[list[str] | None, str]:
    """Resolve a select/returning target to (record columns, rendered text)."""
    if is_record(target) or is_record_type(target):
        names = column_names(target)
        return names, ", ".join(names)
    if isinstance(target, str):
        return None, target
    if isinstance(target, (list, tuple)) and all(isinstance(t, str) for t in target):
        return None, ", ".join(target)
    return None, "*"


def _frozen(args: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(args))


@dataclass(frozen=True, repr=False)
class Statement:
    """Accumulated SQL text, its named arguments, and a sticky error."""

    _text: str = ""
    _args: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    column_names: tuple[str, ...] = ()
    error: PgFluentError | None = None

    # Named arguments are a mapping proxy
    __hash__ = None  # type: ignore[assignment]

    # === Results ===

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def sql(self) -> str:
        """The SQL text.

        Raises:
            PgFluentError: The error recorded by an earlier call
        """
        if self.error is not None:
            raise self.error
        return self._text

    @property
    def named_args(self) -> dict[str, Any]:
        """A copy of the named arguments."""
        if self.error is not None:
            raise self.error
        return dict(self._args)

    def result(self) -> tuple[str, dict[str, Any]]:
        """Return (sql, named_args)."""
        return self.sql, self.named_args

    def __str__(self) -> str:
        return self.sql

    def __repr__(self) -> str:
        if self.error is not None:
            return f"Statement(error={self.error.message!r})"
        return f"Statement({self._text!r}, named_args={dict(self._args)!r})"

    # === Internal helpers ===

    def _append(self, clause: str, args: Mapping[str, Any] | None = None) -> Statement:
        merged = self._args if args is None else _frozen({**self._args, **args})
        return replace(self, _text=f"{self._text} {clause}", _args=merged)

    def _condition(self, keyword: str, condition: str, args: Any, operation: str) -> Statement:
        merged = merge_bindings(dict(self._args), args, operation)
        return replace(self, _text=f"{self._text} {keyword} {condition}", _args=_frozen(merged))

    def _has_where(self) -> bool:
        return " WHERE " in self._text

    # === INSERT ===

    @_chainable
    def columns(self, record: Any) -> Statement:
        """Append the record's column list: ``(a, b, c)``.

        The column list is kept for the following `values` call.
        """
        if not (is_record(record) or is_record_type(record)):
            raise UnsupportedInputKindError("columns", record, expected="record type")
        names = column_names(record)
        return replace(
            self,
            _text=f"{self._text} ({', '.join(names)})",
            column_names=tuple(names),
        )

    @_chainable
    def values(self, record: Any) -> Statement:
        """Append ``VALUES (@a, @b, @c)`` and bind the record's values.

        Placeholders follow the column list of the preceding `columns` call.
        """
        if not is_record(record):
            raise UnsupportedInputKindError("values", record)
        placeholders = ", ".join(f"@{name}" for name in self.column_names)
        return self._append(f"VALUES ({placeholders})", bind(record))

    @_chainable
    def on_conflict(self, clause: str = "") -> Statement:
        if not clause:
            return self._append("ON CONFLICT")
        return self._append(f"ON CONFLICT {clause}")

    @_chainable
    def do_nothing(self) -> Statement:
        return self._append("DO NOTHING")

    @_chainable
    def do_update(self) -> Statement:
        return self._append("DO UPDATE")

    # === UPDATE ===

    @_chainable
    def set(self, record: Any) -> Statement:
        """Append ``SET a = @a, b = @b`` for every included field, sorted by column."""
        if not is_record(record):
            raise UnsupportedInputKindError("set", record)
        args = bind(record)
        setters = sorted(f"{name} = @{name}" for name in args)
        return self._append(f"SET {', '.join(setters)}", args)

    # === SELECT ===

    @_chainable
    def from_(self, table: str) -> Statement:
        return self._append(f"FROM {table}")

    @_chainable
    def distinct(self) -> Statement:
        """Turn a leading ``SELECT`` into ``SELECT DISTINCT``."""
        if not self._text.startswith("SELECT"):
            return self
        return replace(self, _text=self._text.replace("SELECT", "SELECT DISTINCT", 1))

    @_chainable
    def join(self, join_type: str, table: str, condition: str) -> Statement:
        return self._append(f"{join_type} JOIN {table} ON {condition}")

    @_chainable
    def left_join(self, table: str, condition: str) -> Statement:
        return self._append(f"LEFT JOIN {table} ON {condition}")

    @_chainable
    def right_join(self, table: str, condition: str) -> Statement:
        return self._append(f"RIGHT JOIN {table} ON {condition}")

    @_chainable
    def full_outer_join(self, table: str, condition: str) -> Statement:
        return self._append(f"FULL OUTER JOIN {table} ON {condition}")

    @_chainable
    def group_by(self, clause: str) -> Statement:
        return self._append(f"GROUP BY {clause}")

    @_chainable
    def order_by(self, clause: str) -> Statement:
        return self._append(f"ORDER BY {clause}")

    @_chainable
    def limit(self, limit: int) -> Statement:
        return self._append(f"LIMIT {limit:d}")

    @_chainable
    def offset(self, offset: int) -> Statement:
        return self._append(f"OFFSET {offset:d}")

    @_chainable
    def returning(self, target: Any = None) -> Statement:
        """Append ``RETURNING``: a record's columns, a name list, raw text, or ``*``."""
        _, rendered = _target_columns(target)
        return self._append(f"RETURNING {rendered}")

    # === Conditions ===

    @_chainable
    def where(self, condition: str, args: Any = None) -> Statement:
        """Append ``WHERE condition``.

        Args:
            condition: Condition text with ``@name`` placeholders
            args: Mapping of name -> value, or a record instance to bind

        Calling `where` twice appends a second ``WHERE``; use `and_where`
        to extend an existing condition.
        """
        return self._condition("WHERE", condition, args, "where")

    @_chainable
    def and_where(self, condition: str, args: Any = None) -> Statement:
        """Append ``AND condition``, or ``WHERE condition`` if there is no WHERE yet."""
        if not self._has_where():
            return self._condition("WHERE", condition, args, "and_where")
        return self._condition("AND", condition, args, "and_where")

    @_chainable
    def having(self, condition: str, args: Any = None) -> Statement:
        return self._condition("HAVING", condition, args, "having")

    @_chainable
    def like(self, column: str, pattern: str) -> Statement:
        """Append ``WHERE column LIKE @column_pattern``."""
        return self._append(
            f"WHERE {column} LIKE @{column}_pattern", {f"{column}_pattern": pattern}
        )

    @_chainable
    def in_(self, column: str, values: Iterable[Any]) -> Statement:
        """Append ``column IN (@column_in_0, ...)`` under WHERE, or AND if a WHERE exists."""
        args = {f"{column}_in_{i}": value for i, value in enumerate(values)}
        placeholders = ", ".join(f"@{name}" for name in args)
        keyword = "AND" if self._has_where() else "WHERE"
        return self._append(f"{keyword} {column} IN ({placeholders})", args)

    @_chainable
    def between(self, column: str, start: Any, end: Any) -> Statement:
        """Append ``WHERE column BETWEEN @column_start AND @column_end``."""
        return self._append(
            f"WHERE {column} BETWEEN @{column}_start AND @{column}_end",
            {f"{column}_start": start, f"{column}_end": end},
        )


# === Statement constructors ===


def raw_sql(query: str) -> Statement:
    """Start from arbitrary SQL text."""
    return Statement(_text=query)


def insert_into(table: str) -> Statement:
    return Statement(_text=f"INSERT INTO {table}")


def update(table: str) -> Statement:
    return Statement(_text=f"UPDATE {table}")


def delete() -> Statement:
    """Start a DELETE; follow with `from_`."""
    return Statement(_text="DELETE")


def select(target: Any = None) -> Statement:
    """Start a SELECT.

    Args:
        target: A record (its columns, and its values as named arguments),
            a record type (its columns), a list of column names, raw column
            text, or None for ``*``
    """
    try:
        names, rendered = _target_columns(target)
        args = bind(target) if is_record(target) else {}
    except PgFluentError as e:
        logger.debug(f"select() produced an error-state statement: {e.message}")
        return Statement(error=e)
    return Statement(
        _text=f"SELECT {rendered}",
        _args=_frozen(args),
        column_names=tuple(names or ()),
    )


def select_columns(*names: str) -> Statement:
    """Start a SELECT from explicit column names."""
    return Statement(_text=f"SELECT {', '.join(names)}", column_names=names)


def create_table(
    table: str,
    record: Any,
    option: TableOption | str | None = None,
    matching: ConstraintMatching | str | None = None,
) -> Statement:
    """Start from a CREATE TABLE definition derived from a record type.

    Unsupported input yields an error-state statement.
    """
    try:
        return Statement(_text=table_definition(table, record, option, matching))
    except PgFluentError as e:
        logger.debug(f"create_table() produced an error-state statement: {e.message}")
        return Statement(error=e)
