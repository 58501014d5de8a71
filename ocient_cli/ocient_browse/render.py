"""Output rendering helpers for ocient-browse."""

from __future__ import annotations

import json
import sys

from rich import box
from rich.console import Console
from rich.table import Table

from ocient_cli.shared.logging import Logger

from .types import BrowsingSession, DistinctValuePage


def render_page(
    page: DistinctValuePage,
    *,
    column: str,
    offset: int,
    output_format: str,
    logger: Logger,
    search: str | None = None,
    stream=None,
) -> None:
    """Render one page of distinct values."""
    output_stream = stream or sys.stdout
    if (output_format or "table").lower() == "json":
        payload = {
            "column": column,
            "offset": offset,
            "values": list(page.values),
            "total_count": page.total_count,
            "has_more": page.has_more,
        }
        json.dump(payload, output_stream, indent=2)
        output_stream.write("\n")
        return

    if not page.values:
        if search:
            logger.info(f'No values matching "{search}" found.')
        else:
            logger.info(f"No values found for column {column}.")
        return

    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column(column)
    for index, value in enumerate(page.values, start=offset + 1):
        table.add_row(str(index), value)
    console.print(table)
    console.print(_summary(len(page.values), offset, page.total_count, page.has_more))


def render_session(session: BrowsingSession, *, logger: Logger, stream=None) -> None:
    """Render the current page of an interactive session with selection marks."""
    output_stream = stream or sys.stdout
    console = Console(file=output_stream, highlight=False, force_terminal=False)
    if session.search:
        console.print(f'Searching for values containing "{session.search}"')
    if not session.values:
        if session.search:
            logger.info(f'No values matching "{session.search}" found.')
        else:
            logger.info(f"No values found for column {session.column}.")
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column(session.column)
    table.add_column("")
    for index, value in enumerate(session.values, start=1):
        mark = "*" if value == session.selected else ""
        table.add_row(str(index), value, mark)
    console.print(table)
    console.print(
        f"Page {session.page + 1} · "
        + _summary(len(session.values), session.offset, session.total_count, session.has_more)
    )


def _summary(count: int, offset: int, total: int, has_more: bool) -> str:
    first = offset + 1 if count else offset
    text = f"Showing {first}-{offset + count} of {total} distinct values"
    if has_more:
        text += " (more available)"
    return text
