"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from pgfluent.core.types import FieldDescriptor
from pgfluent.exceptions import PgFluentError
from pgfluent.schema.types import map_type

console = Console()


def describe_field(field: FieldDescriptor) -> dict[str, Any]:
    """Flatten a field descriptor into a JSON-friendly dict."""
    return {
        "name": field.name,
        "column": field.column_name,
        "sql_type": map_type(field.value_type),
        "constraints": sorted(c.value for c in field.constraints),
        "excluded": field.excluded,
    }


def describe_error(error: Exception) -> dict[str, Any]:
    """Flatten an exception; pgfluent errors keep their type and context."""
    if isinstance(error, PgFluentError):
        return error.to_dict()
    return {"error": type(error).__name__, "message": str(error)}


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_fields(self, title: str, fields: list[FieldDescriptor]) -> None:
        """Print resolved fields as a Rich table or JSON array."""
        rows = [describe_field(f) for f in fields]
        if self.json_mode:
            print(json.dumps(rows, indent=2))
            return

        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Field")
        table.add_column("Column")
        table.add_column("SQL Type")
        table.add_column("Constraints")
        for row in rows:
            table.add_row(
                row["name"],
                "[dim](excluded)[/dim]" if row["excluded"] else row["column"],
                "" if row["excluded"] else row["sql_type"],
                ", ".join(row["constraints"]),
            )
        console.print(table)

    def print_sql(self, sql: str, details: dict[str, Any] | None = None) -> None:
        """Print generated SQL, highlighted in terminal mode."""
        if self.json_mode:
            output: dict[str, Any] = {"sql": sql}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(Syntax(sql, "sql", theme="ansi_dark", background_color="default"))

    def print_error(self, error: Exception) -> None:
        """Print an error as a red panel, or as its JSON description."""
        described = describe_error(error)
        if self.json_mode:
            print(json.dumps(described, default=str, indent=2))
            return

        lines = [described["message"]]
        context = described.get("context") or {}
        if context:
            lines.append("")
            lines.extend(f"{key}: {value}" for key, value in context.items())
        console.print(Panel("\n".join(lines), title="[red]Error[/red]", border_style="red"))
