"""Schema, table and column discovery through ``information_schema``."""

from __future__ import annotations

from datetime import datetime

import httpx

from ocient_cli.shared.config import ConnectionSettings
from ocient_cli.shared.logging import Logger

from .builder import quote_literal
from .executor import run_query
from .types import ColumnInfo, Frame
from .values import format_value

SCHEMAS_QUERY = "SELECT DISTINCT(table_schema) FROM information_schema.tables ORDER BY table_schema"
TABLES_QUERY = (
    "SELECT DISTINCT(table_name) FROM information_schema.tables "
    "WHERE table_schema = {schema} ORDER BY table_name"
)
COLUMNS_QUERY = (
    "SELECT column_name, data_type, is_nullable, column_default FROM information_schema.columns "
    "WHERE table_schema = {schema} AND table_name = {table} ORDER BY column_name"
)
COLUMN_INFO_FIELDS = ("column_name", "data_type", "is_nullable", "column_default")


def list_schemas(
    *,
    connection: ConnectionSettings,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> list[str]:
    frame = run_query(connection=connection, query=SCHEMAS_QUERY, client=client, logger=logger)
    return _first_column(frame)


def list_tables(
    *,
    connection: ConnectionSettings,
    schema: str,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> list[str]:
    if not schema:
        return []
    query = TABLES_QUERY.format(schema=quote_literal(schema))
    frame = run_query(connection=connection, query=query, client=client, logger=logger)
    return _first_column(frame)


def list_columns(
    *,
    connection: ConnectionSettings,
    schema: str,
    table: str,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> list[ColumnInfo]:
    """Return column metadata; an unexpected result shape yields an empty list."""
    if not schema or not table:
        return []
    query = COLUMNS_QUERY.format(schema=quote_literal(schema), table=quote_literal(table))
    frame = run_query(connection=connection, query=query, client=client, logger=logger)
    return columns_from_frame(frame)


def columns_from_frame(frame: Frame) -> list[ColumnInfo]:
    if not all(name in frame.column_names for name in COLUMN_INFO_FIELDS):
        return []
    names, types, nullables, defaults = (frame.field(name).values for name in COLUMN_INFO_FIELDS)
    return [
        ColumnInfo(
            column_name=_text(names[index]),
            data_type=_text(types[index]),
            is_nullable=_text(nullables[index]),
            column_default=_text(defaults[index]) or None,
        )
        for index in range(frame.row_count)
    ]


def _first_column(frame: Frame) -> list[str]:
    if not frame.fields:
        return []
    return [_text(value) for value in frame.fields[0].values]


def _text(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return format_value(value)
