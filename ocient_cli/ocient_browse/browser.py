"""Paginated, search-filtered discovery of a column's distinct values.

Each page request runs two statements against the live database: an
unfiltered ``COUNT(DISTINCT ...)`` and the filtered, paginated value query.
Nothing is cached, so the total can drift between pages while the table
changes. If either statement fails the whole request fails with
``DistinctValuesError`` naming the column; a partial page is never returned.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence

import httpx

from ocient_cli.ocient_query.executor import build_client, execute_statement
from ocient_cli.ocient_query.values import JsonNumber, decode_scalar, format_value
from ocient_cli.shared.config import ConnectionSettings
from ocient_cli.shared.exceptions import DistinctValuesError, QueryError
from ocient_cli.shared.logging import Logger

from .types import DEFAULT_PAGE_SIZE, DistinctValuePage


def count_query(schema: str, table: str, column: str) -> str:
    return f"SELECT COUNT(DISTINCT {column}) AS value_count FROM {schema}.{table} WHERE {column} IS NOT NULL"


def values_query(
    schema: str,
    table: str,
    column: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    search: str | None = None,
) -> str:
    sql = f"SELECT DISTINCT {column} FROM {schema}.{table} WHERE {column} IS NOT NULL"
    if search:
        pattern = search.replace("'", "''")
        sql += f" AND LOWER(CAST({column} AS VARCHAR)) LIKE LOWER('%{pattern}%')"
    sql += f" ORDER BY {column} ASC LIMIT {limit} OFFSET {offset}"
    return sql


def count_distinct_values(
    *,
    connection: ConnectionSettings,
    schema: str,
    table: str,
    column: str,
    cancel: threading.Event | None = None,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> int:
    """Return the number of distinct non-null values in ``column``."""
    rows = _execute(connection, count_query(schema, table, column), column, cancel, client, logger)
    return _count_from_rows(rows)


def fetch_distinct_values(
    *,
    connection: ConnectionSettings,
    schema: str,
    table: str,
    column: str,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    search: str | None = None,
    cancel: threading.Event | None = None,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> DistinctValuePage:
    """Return one page of distinct values, coerced to text."""
    if not schema or not table or not column:
        return DistinctValuePage()

    limit = limit if limit and limit > 0 else DEFAULT_PAGE_SIZE
    offset = max(0, offset)

    active_client = client or build_client(connection)
    try:
        total_count = count_distinct_values(
            connection=connection,
            schema=schema,
            table=table,
            column=column,
            cancel=cancel,
            client=active_client,
            logger=logger,
        )
        statement = values_query(schema, table, column, limit=limit, offset=offset, search=search)
        rows = _execute(connection, statement, column, cancel, active_client, logger)
    finally:
        if client is None:
            active_client.close()

    values = tuple(_values_from_rows(rows))
    return DistinctValuePage(
        values=values,
        total_count=total_count,
        has_more=offset + len(values) < total_count,
    )


class DistinctValueBrowser:
    """Bind connection settings so sessions can request pages by target only."""

    def __init__(
        self,
        connection: ConnectionSettings,
        *,
        client: httpx.Client | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.connection = connection
        self.client = client
        self.logger = logger

    def fetch_page(
        self,
        schema: str,
        table: str,
        column: str,
        *,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        search: str | None = None,
        cancel: threading.Event | None = None,
    ) -> DistinctValuePage:
        return fetch_distinct_values(
            connection=self.connection,
            schema=schema,
            table=table,
            column=column,
            limit=limit,
            offset=offset,
            search=search,
            cancel=cancel,
            client=self.client,
            logger=self.logger,
        )


# ---------------------------------------------------------------------------
# Internal helpers


def _execute(
    connection: ConnectionSettings,
    statement: str,
    column: str,
    cancel: threading.Event | None,
    client: httpx.Client | None,
    logger: Logger | None,
) -> list[dict[str, Any]]:
    outcome = execute_statement(
        connection=connection,
        statement=statement,
        cancel=cancel,
        client=client,
        logger=logger,
    )
    try:
        outcome.raise_for_status()
    except QueryError as exc:
        raise DistinctValuesError(column, str(exc)) from exc
    return outcome.rows


def _count_from_rows(rows: Sequence[Mapping[str, Any]]) -> int:
    if not rows or not rows[0]:
        return 0
    scalar = decode_scalar(next(iter(rows[0].values())))
    if isinstance(scalar, JsonNumber):
        return int(scalar.value)
    return 0


def _values_from_rows(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    values: list[str] = []
    for row in rows:
        if not row:
            continue
        raw = next(iter(row.values()))
        if raw is None:
            continue
        values.append(format_value(raw))
    return values
