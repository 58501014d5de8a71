"""Assemble SELECT statements from structured query-builder selections."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from ocient_cli.shared.exceptions import QueryError

from .macros import TIME_FROM_MACRO, TIME_TO_MACRO

OPERATORS = ("=", "!=", ">", ">=", "<", "<=", "LIKE")

# Longest operators first so ">=" is not read as ">".
_WHERE_RE = re.compile(r"^\s*(?P<column>[^\s=!<>]+)\s*(?P<operator>!=|>=|<=|=|>|<|\bLIKE\b)\s*(?P<value>.*?)\s*$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class WhereClause:
    """Single ``column operator 'value'`` condition."""

    column: str
    operator: str
    value: str


@dataclass(frozen=True, slots=True)
class QuerySelection:
    """Structured selections made in the query builder."""

    schema: str
    table: str
    columns: Sequence[str] = ()
    where: Sequence[WhereClause] = ()
    timeseries_column: str | None = None


@dataclass(frozen=True, slots=True)
class QueryRequest:
    """A query as submitted by a caller: raw SQL text or a builder selection.

    ``raw_query`` decides which one is executed; the other is ignored.
    """

    query_text: str = ""
    selection: QuerySelection | None = None
    raw_query: bool = True

    def statement(self) -> str:
        if self.raw_query:
            return self.query_text
        if self.selection is None:
            raise QueryError("Query builder mode requires a schema and table selection.")
        return build_query(self.selection)


def quote_literal(value: str) -> str:
    """Single-quote a value for inclusion in SQL text."""
    return "'" + value.replace("'", "''") + "'"


def parse_where(text: str) -> WhereClause:
    """Parse ``COLUMN OP VALUE`` text (e.g. ``region = west``) into a clause.

    A value already wrapped in single quotes is unwrapped.
    """
    match = _WHERE_RE.match(text)
    if match is None:
        raise QueryError(f"WHERE clause '{text}' must look like 'COLUMN OPERATOR VALUE'.")
    value = match["value"]
    if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
        value = value[1:-1]
    return WhereClause(column=match["column"], operator=match["operator"].upper(), value=value)


def build_query(selection: QuerySelection) -> str:
    """Return the SELECT statement for ``selection``.

    The time range of a designated time-series column uses the
    ``$__timeFrom()``/``$__timeTo()`` macros, which are resolved at execution
    time, and orders the result by that column.
    """
    if not selection.schema or not selection.table:
        raise QueryError("Both schema and table are required to build a query.")

    sql = f"SELECT {_select_list(selection.columns)} FROM {selection.schema}.{selection.table}"

    conditions = [_render_condition(clause) for clause in selection.where]
    ts_column = selection.timeseries_column
    if ts_column:
        conditions.append(f"{ts_column} >= {TIME_FROM_MACRO}")
        conditions.append(f"{ts_column} <= {TIME_TO_MACRO}")
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)

    if ts_column:
        sql += f" ORDER BY {ts_column} ASC"
    return sql


def _select_list(columns: Sequence[str]) -> str:
    names = [name for name in columns if name]
    return ", ".join(names) if names else "*"


def _render_condition(clause: WhereClause) -> str:
    if not clause.column:
        raise QueryError("WHERE clause is missing its column.")
    operator = clause.operator.upper()
    if operator not in OPERATORS:
        raise QueryError(f"Unsupported operator '{clause.operator}'. Choose one of: {', '.join(OPERATORS)}.")
    return f"{clause.column} {operator} {quote_literal(clause.value)}"
