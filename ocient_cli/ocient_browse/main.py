"""ocient-browse CLI entrypoint."""

from __future__ import annotations

import click

from ocient_cli.ocient_query.executor import build_client
from ocient_cli.shared.cli import CLIContext, common_cli_options, describe_error, handle_cli_errors, pass_cli_context
from ocient_cli.shared.exceptions import DistinctValuesError

from . import render, session as browsing
from .browser import DistinctValueBrowser, fetch_distinct_values
from .types import BrowsingSession

PROMPT_HELP = "[n]ext, [p]revious, /text to search (/ clears), number to select, [q]uit"


@click.group(help="Browse the distinct values of a column.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    """Primary Click group for ocient-browse commands."""
    cli_ctx.logger.debug("ocient-browse group initialised.")


@cli.command("values")
@click.argument("schema", type=str)
@click.argument("table", type=str)
@click.argument("column", type=str)
@click.option("--page", "page", type=click.IntRange(min=0), default=0, show_default=True, help="Zero-based page.")
@click.option("--search", "search", type=str, help="Case-insensitive substring filter.")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(("table", "json")),
)
@pass_cli_context
@handle_cli_errors
def show_values(
    cli_ctx: CLIContext,
    schema: str,
    table: str,
    column: str,
    page: int,
    search: str | None,
    output_format: str,
) -> None:
    """Print one page of distinct values of SCHEMA.TABLE.COLUMN."""
    page_size = cli_ctx.config.browse.page_size
    offset = page * page_size
    result = fetch_distinct_values(
        connection=cli_ctx.connection,
        schema=schema,
        table=table,
        column=column,
        limit=page_size,
        offset=offset,
        search=search,
        logger=cli_ctx.logger,
    )
    render.render_page(
        result,
        column=column,
        offset=offset,
        output_format=output_format,
        logger=cli_ctx.logger,
        search=search,
    )


@cli.command("interactive")
@click.argument("schema", type=str)
@click.argument("table", type=str)
@click.argument("column", type=str)
@pass_cli_context
@handle_cli_errors
def interactive(cli_ctx: CLIContext, schema: str, table: str, column: str) -> None:
    """Page and search through values, then print the selected one."""
    with build_client(cli_ctx.connection) as client:
        browser = DistinctValueBrowser(cli_ctx.connection, client=client, logger=cli_ctx.logger)
        state = browsing.open_session(
            browser, schema, table, column, page_size=cli_ctx.config.browse.page_size
        )
        state = _prompt_loop(cli_ctx, browser, state)

    if state.selected is not None:
        click.echo(state.selected)
    else:
        cli_ctx.logger.info("No value selected.")


def _prompt_loop(cli_ctx: CLIContext, browser: DistinctValueBrowser, state: BrowsingSession) -> BrowsingSession:
    while True:
        render.render_session(state, logger=cli_ctx.logger)
        command = click.prompt(PROMPT_HELP, default="q", show_default=False).strip()
        if command in {"q", "quit"}:
            return state
        try:
            state = _apply_command(browser, state, command)
        except DistinctValuesError as exc:
            # The previous session stays current; the user can retry.
            cli_ctx.logger.error(describe_error(exc))
        except ValueError as exc:
            cli_ctx.logger.warning(str(exc))


def _apply_command(browser: DistinctValueBrowser, state: BrowsingSession, command: str) -> BrowsingSession:
    if command == "n":
        if not state.can_go_next:
            raise ValueError("Already on the last page.")
        return browsing.next_page(browser, state)
    if command == "p":
        if not state.can_go_previous:
            raise ValueError("Already on the first page.")
        return browsing.previous_page(browser, state)
    if command.startswith("/"):
        return browsing.search(browser, state, command[1:].strip())
    if command.isdigit():
        index = int(command)
        if not 1 <= index <= len(state.values):
            raise ValueError(f"Choose a number between 1 and {len(state.values)}.")
        return browsing.select_value(state, state.values[index - 1])
    raise ValueError(f"Unknown command '{command}'. {PROMPT_HELP}")


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
