"""ocient-query CLI entrypoint."""

from __future__ import annotations

from collections.abc import Iterable

import click

from ocient_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context
from ocient_cli.shared.exceptions import QueryError

from . import catalog, executor, render
from .builder import QueryRequest, QuerySelection, WhereClause, parse_where
from .health import check_health
from .macros import TimeRange, parse_instant, uses_time_macros


@click.group(help="Query an Ocient database through its REST execute endpoint.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    """Primary Click group for ocient-query commands."""
    cli_ctx.logger.debug("ocient-query group initialised.")


def _time_range_options(func):
    func = click.option("--to", "time_to", type=str, help="Range end (ISO-8601) for $__timeTo().")(func)
    func = click.option("--from", "time_from", type=str, help="Range start (ISO-8601) for $__timeFrom().")(func)
    return func


def _format_option(func):
    return click.option(
        "--format",
        "output_format",
        default="table",
        show_default=True,
        type=click.Choice(render.OUTPUT_FORMAT_CHOICES),
    )(func)


@cli.command("sql")
@click.argument("query", type=str)
@_time_range_options
@click.option("--strict", is_flag=True, help="Fail on values that do not fit their column type.")
@_format_option
@pass_cli_context
@handle_cli_errors
def run_sql(
    cli_ctx: CLIContext,
    query: str,
    time_from: str | None,
    time_to: str | None,
    strict: bool,
    output_format: str,
) -> None:
    """Execute raw SQL text."""
    if not query.strip():
        raise click.ClickException("Query text must not be empty.")
    request = QueryRequest(query_text=query, raw_query=True)
    _run_request(cli_ctx, request, time_from, time_to, strict, output_format)


@cli.command("build")
@click.option("--schema", required=True, help="Schema containing the table.")
@click.option("--table", required=True, help="Table to select from.")
@click.option("--column", "columns", multiple=True, help="Column to select (repeatable; default all).")
@click.option("--where", "where", multiple=True, metavar="'COL OP VALUE'", help="Filter clause (repeatable).")
@click.option("--timeseries", "timeseries_column", type=str, help="Column to restrict to the time range.")
@click.option("--print-only", is_flag=True, help="Print the generated SQL without executing it.")
@_time_range_options
@click.option("--strict", is_flag=True, help="Fail on values that do not fit their column type.")
@_format_option
@pass_cli_context
@handle_cli_errors
def run_builder(
    cli_ctx: CLIContext,
    schema: str,
    table: str,
    columns: Iterable[str],
    where: Iterable[str],
    timeseries_column: str | None,
    print_only: bool,
    time_from: str | None,
    time_to: str | None,
    strict: bool,
    output_format: str,
) -> None:
    """Build a SELECT from structured selections and run it."""
    clauses: list[WhereClause] = [parse_where(text) for text in where]
    selection = QuerySelection(
        schema=schema,
        table=table,
        columns=tuple(columns),
        where=tuple(clauses),
        timeseries_column=timeseries_column,
    )
    request = QueryRequest(selection=selection, raw_query=False)
    if print_only:
        click.echo(request.statement())
        return

    if timeseries_column:
        _warn_if_not_temporal(cli_ctx, schema, table, timeseries_column)
    _run_request(cli_ctx, request, time_from, time_to, strict, output_format)


@cli.command("schemas")
@pass_cli_context
@handle_cli_errors
def show_schemas(cli_ctx: CLIContext) -> None:
    """List schemas."""
    names = catalog.list_schemas(connection=cli_ctx.connection, logger=cli_ctx.logger)
    render.render_names(names, title="Schemas", logger=cli_ctx.logger)


@cli.command("tables")
@click.argument("schema", type=str)
@pass_cli_context
@handle_cli_errors
def show_tables(cli_ctx: CLIContext, schema: str) -> None:
    """List tables in SCHEMA."""
    names = catalog.list_tables(connection=cli_ctx.connection, schema=schema, logger=cli_ctx.logger)
    render.render_names(names, title="Tables", logger=cli_ctx.logger)


@cli.command("columns")
@click.argument("schema", type=str)
@click.argument("table", type=str)
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(("table", "json")),
)
@pass_cli_context
@handle_cli_errors
def show_columns(cli_ctx: CLIContext, schema: str, table: str, output_format: str) -> None:
    """Describe the columns of SCHEMA.TABLE."""
    columns = catalog.list_columns(
        connection=cli_ctx.connection, schema=schema, table=table, logger=cli_ctx.logger
    )
    render.render_columns(columns, output_format=output_format, logger=cli_ctx.logger)


@cli.command("health")
@pass_cli_context
@handle_cli_errors
def health(cli_ctx: CLIContext) -> None:
    """Check that the configured data source answers queries."""
    result = check_health(cli_ctx.connection, logger=cli_ctx.logger)
    render.render_health(result, logger=cli_ctx.logger)
    if not result.ok:
        raise click.exceptions.Exit(1)


def _run_request(
    cli_ctx: CLIContext,
    request: QueryRequest,
    time_from: str | None,
    time_to: str | None,
    strict: bool,
    output_format: str,
) -> None:
    statement = request.statement()
    time_range = _resolve_time_range(time_from, time_to)
    if time_range is None and uses_time_macros(statement):
        raise click.ClickException("Query uses $__timeFrom()/$__timeTo(); pass both --from and --to.")

    effective_strict = strict or cli_ctx.config.query.strict
    cli_ctx.logger.debug("Executing query", statement=statement, strict=effective_strict)
    frame = executor.run_request(
        request,
        connection=cli_ctx.connection,
        time_range=time_range,
        strict=effective_strict,
        logger=cli_ctx.logger,
    )
    cli_ctx.logger.debug("Query results", rows=frame.row_count, fields=len(frame.fields))
    render.render_frame(frame, output_format=output_format, logger=cli_ctx.logger)


def _resolve_time_range(time_from: str | None, time_to: str | None) -> TimeRange | None:
    if not time_from and not time_to:
        return None
    if not time_from or not time_to:
        raise click.ClickException("--from and --to must be given together.")
    return TimeRange(start=parse_instant(time_from), end=parse_instant(time_to))


def _warn_if_not_temporal(cli_ctx: CLIContext, schema: str, table: str, column: str) -> None:
    try:
        columns = catalog.list_columns(
            connection=cli_ctx.connection, schema=schema, table=table, logger=cli_ctx.logger
        )
    except QueryError as exc:
        cli_ctx.logger.debug(f"Column metadata unavailable: {exc}")
        return
    for info in columns:
        if info.column_name == column and not info.is_temporal:
            cli_ctx.logger.warning(
                f"Column {column} is not a timestamp type but was selected as the time-series column."
            )


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
