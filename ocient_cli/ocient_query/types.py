"""Data structures shared across ocient-query modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

from ocient_cli.shared.exceptions import (
    QueryCancelledError,
    QueryError,
    RemoteQueryError,
    ResponseParseError,
    TransportError,
)

try:
    import pandas as pd
except ImportError:  # pragma: no cover - pandas is an optional dependency
    pd = None  # type: ignore[assignment]

SUCCESS_SQL_STATE = "00000"

# Zero value of a timestamp column, matching the remote system's "no time".
ZERO_INSTANT = datetime(1, 1, 1, tzinfo=timezone.utc)

RowSet = list[dict[str, Any]]


# Semantic column types, committed once per column from the first-row sample.
FLOAT = "float"
TEXT = "text"
BOOLEAN = "boolean"
TIMESTAMP = "timestamp"

# Failure kinds carried by a failed QueryOutcome.
TRANSPORT_FAILURE = "transport"
PROTOCOL_FAILURE = "protocol"
REMOTE_FAILURE = "remote"
CANCELLED = "cancelled"


def zero_value(column_type: str) -> Any:
    """Substitute used for missing or mismatched cells of ``column_type``."""
    if column_type == FLOAT:
        return 0.0
    if column_type == BOOLEAN:
        return False
    if column_type == TIMESTAMP:
        return ZERO_INSTANT
    return ""


@dataclass(frozen=True, slots=True)
class QueryStatus:
    """Status block of an execute response."""

    reason: str = ""
    sql_state: str = ""
    vendor_code: int = 0

    @property
    def ok(self) -> bool:
        return self.sql_state == SUCCESS_SQL_STATE


@dataclass(frozen=True, slots=True)
class QueryOutcome:
    """Result of a single execute call: rows on success, a typed failure otherwise."""

    rows: RowSet = field(default_factory=list)
    status: QueryStatus | None = None
    failure: str | None = None
    message: str = ""
    query_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(
        cls,
        kind: str,
        message: str,
        *,
        status: QueryStatus | None = None,
        query_id: str | None = None,
    ) -> QueryOutcome:
        return cls(rows=[], status=status, failure=kind, message=message, query_id=query_id)

    def raise_for_status(self) -> QueryOutcome:
        """Raise the exception matching the failure kind; return self on success."""
        if self.failure is None:
            return self
        if self.failure == REMOTE_FAILURE and self.status is not None:
            raise RemoteQueryError(self.status.reason, self.status.sql_state, self.status.vendor_code)
        if self.failure == TRANSPORT_FAILURE:
            raise TransportError(f"Query execution error: {self.message}")
        if self.failure == PROTOCOL_FAILURE:
            raise ResponseParseError(f"Error parsing response: {self.message}")
        if self.failure == CANCELLED:
            raise QueryCancelledError(self.message or "Query was cancelled.")
        raise QueryError(self.message)  # pragma: no cover


@dataclass(frozen=True, slots=True)
class Field:
    """One homogeneously typed column of a frame."""

    name: str
    type: str
    values: Sequence[Any]

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True, slots=True)
class Frame:
    """Column-oriented result: every field holds exactly ``row_count`` values."""

    name: str = "response"
    fields: tuple[Field, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.fields[0]) if self.fields else 0

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def field(self, name: str) -> Field:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def to_records(self) -> list[dict[str, Any]]:
        return [
            {f.name: f.values[index] for f in self.fields}
            for index in range(self.row_count)
        ]

    def to_dataframe(self) -> "pd.DataFrame":
        """Return the frame as a pandas DataFrame (requires the 'analysis' extra)."""
        if pd is None:
            raise ImportError(
                "pandas is required for Frame.to_dataframe(). Install the 'analysis' extra (pip install .[analysis])."
            )
        return pd.DataFrame({f.name: list(f.values) for f in self.fields}, columns=list(self.column_names))


@dataclass(frozen=True, slots=True)
class ColumnInfo:
    """Column metadata as reported by ``information_schema.columns``."""

    column_name: str
    data_type: str
    is_nullable: str
    column_default: str | None = None

    @property
    def is_temporal(self) -> bool:
        lowered = self.data_type.lower()
        return "timestamp" in lowered or "date" in lowered


@dataclass(frozen=True, slots=True)
class HealthResult:
    """Outcome of a connection health check."""

    ok: bool
    message: str
