"""pgfluent CLI - Main entry point."""

from typing import Annotated

import typer

import pgfluent
from pgfluent.cli.context import CLIContext, load_record_type
from pgfluent.cli.output import OutputFormatter
from pgfluent.config import CONSTRAINT_MATCHING_ENV, LOG_LEVEL_ENV, get_settings
from pgfluent.core.types import TableOption
from pgfluent.query.statement import create_table
from pgfluent.schema.fields import inspect_fields

app = typer.Typer(
    name="pgfluent",
    help="pgfluent CLI - Inspect record mappings and generate PostgreSQL table definitions",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
    matching: Annotated[
        str | None,
        typer.Option(
            "--matching",
            "-m",
            envvar=CONSTRAINT_MATCHING_ENV,
            help="Constraint matching in db annotations: loose or strict",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            envvar=LOG_LEVEL_ENV,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = None,
) -> None:
    """Initialize CLI context with global options."""
    formatter = OutputFormatter(json_output)
    try:
        settings = get_settings(matching, log_level)
    except pgfluent.PgFluentError as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    cli_ctx = CLIContext(settings=settings, json_output=json_output)
    cli_ctx.configure_logging()
    ctx.obj = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"pgfluent v{pgfluent.__version__}")


@app.command()
def columns(
    ctx: typer.Context,
    target: Annotated[str, typer.Argument(help="Record type as module:Name")],
) -> None:
    """Show how a record's fields map to columns.

    Examples:

        pgfluent columns myapp.models:User
        pgfluent --json columns myapp.models:User
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        record_type = load_record_type(target)
        fields = inspect_fields(record_type, cli_ctx.settings.constraint_matching)
        formatter.print_fields(record_type.__qualname__, list(fields))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


@app.command()
def ddl(
    ctx: typer.Context,
    target: Annotated[str, typer.Argument(help="Record type as module:Name")],
    table: Annotated[str, typer.Option("--table", "-t", help="Table name")],
    option: Annotated[
        str | None,
        typer.Option(
            "--option",
            "-o",
            help=f"Table option: {', '.join(TableOption.values())}",
        ),
    ] = None,
) -> None:
    """Generate a CREATE TABLE statement from a record type.

    Examples:

        pgfluent ddl myapp.models:User --table users
        pgfluent ddl myapp.models:User -t users -o IF_NOT_EXISTS
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        record_type = load_record_type(target)
        sql = create_table(
            table, record_type, option, cli_ctx.settings.constraint_matching
        ).sql
        formatter.print_sql(sql, {"table": table, "record": record_type.__qualname__})
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
