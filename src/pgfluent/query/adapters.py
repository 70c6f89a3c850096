"""Hand-off of generated statements to SQLAlchemy.

SQLAlchemy's textual SQL uses ``:name`` bind parameters, so ``@name``
placeholders are rewritten before the text is wrapped. Nothing is executed.
"""

from __future__ import annotations

import re

from sqlalchemy import TextClause, text

from pgfluent.query.statement import Statement

PLACEHOLDER_PATTERN = re.compile(r"@(\w+)")


def to_text_clause(statement: Statement) -> TextClause:
    """Convert a statement into a SQLAlchemy TextClause with bound parameters.

    Only ``@name`` tokens whose name has a binding are rewritten; the
    clause carries exactly the bindings its text references.

    Example:
        with engine.connect() as conn:
            conn.execute(to_text_clause(select(User).from_("users").where("id = @id", {"id": 1})))

    Raises:
        PgFluentError: If the statement is in an error state
    """
    sql, named_args = statement.result()
    referenced: dict[str, object] = {}

    def _rewrite(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in named_args:
            return match.group(0)
        referenced[name] = named_args[name]
        return f":{name}"

    clause = text(PLACEHOLDER_PATTERN.sub(_rewrite, sql))
    if referenced:
        clause = clause.bindparams(**referenced)
    return clause
