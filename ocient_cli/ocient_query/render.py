"""Output rendering helpers for ocient-query."""

from __future__ import annotations

import csv
import json
import sys
from datetime import datetime
from typing import IO, Any, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from ocient_cli.shared.logging import Logger

from .types import FLOAT, ColumnInfo, Frame, HealthResult
from .values import format_number

OUTPUT_FORMAT_CHOICES = ("table", "tsv", "csv", "json")


def render_frame(
    frame: Frame,
    *,
    output_format: str,
    logger: Logger,
    stream=None,
) -> None:
    """Render a typed frame to the desired format."""
    output_stream = stream or sys.stdout
    fmt = (output_format or "table").lower()

    if fmt == "table":
        _render_table(frame, logger=logger, stream=output_stream)
    elif fmt == "csv":
        _render_delimited(frame, stream=output_stream, delimiter=",")
    elif fmt == "tsv":
        _render_delimited(frame, stream=output_stream, delimiter="\t")
    elif fmt == "json":
        _render_json(frame, stream=output_stream)
    else:  # pragma: no cover - Click validation should prevent this
        raise ValueError(f"Unsupported output format '{output_format}'.")


def render_names(names: Sequence[str], *, title: str, logger: Logger, stream=None) -> None:
    """Render a single-column listing such as schemas or tables."""
    output_stream = stream or sys.stdout
    if not names:
        logger.info(f"No {title.lower()} found.")
        return
    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column(title)
    for name in names:
        table.add_row(name)
    console.print(table)


def render_columns(
    columns: Sequence[ColumnInfo],
    *,
    output_format: str,
    logger: Logger,
    stream=None,
) -> None:
    output_stream = stream or sys.stdout
    if (output_format or "table").lower() == "json":
        payload = [
            {
                "column_name": column.column_name,
                "data_type": column.data_type,
                "is_nullable": column.is_nullable,
                "column_default": column.column_default,
                "temporal": column.is_temporal,
            }
            for column in columns
        ]
        json.dump(payload, output_stream, indent=2)
        output_stream.write("\n")
        return

    if not columns:
        logger.info("No columns found.")
        return
    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Column", style="bold")
    table.add_column("Type")
    table.add_column("Nullable")
    table.add_column("Default")
    for column in columns:
        table.add_row(column.column_name, column.data_type, column.is_nullable, column.column_default or "")
    console.print(table)


def render_health(result: HealthResult, *, logger: Logger) -> None:
    if result.ok:
        logger.success(result.message)
    else:
        logger.error(result.message)


def _render_table(frame: Frame, *, logger: Logger, stream: IO[str]) -> None:
    console = Console(file=stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE_HEAVY, show_header=bool(frame.fields), header_style="bold")
    for f in frame.fields:
        justify = "right" if f.type == FLOAT else "left"
        table.add_column(f.name or "", justify=justify)

    if frame.row_count:
        for record in _rows(frame):
            table.add_row(*[_stringify(cell) for cell in record])
    else:
        logger.info("Query returned zero rows.")

    console.print(table)


def _render_delimited(frame: Frame, *, stream: IO[str], delimiter: str) -> None:
    writer = csv.writer(stream, delimiter=delimiter)
    if frame.fields:
        writer.writerow(frame.column_names)
    for record in _rows(frame):
        writer.writerow(_stringify(cell) for cell in record)


def _render_json(frame: Frame, *, stream: IO[str]) -> None:
    payload = {
        "name": frame.name,
        "fields": [{"name": f.name, "type": f.type} for f in frame.fields],
        "rows": [
            {name: _convert_json_value(value) for name, value in record.items()}
            for record in frame.to_records()
        ],
    }
    json.dump(payload, stream, indent=2)
    stream.write("\n")


def _rows(frame: Frame) -> list[tuple[Any, ...]]:
    return [tuple(f.values[index] for f in frame.fields) for index in range(frame.row_count)]


def _stringify(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _convert_json_value(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    return value
