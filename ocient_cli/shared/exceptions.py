"""Project-wide custom exceptions."""

from __future__ import annotations

from typing import Any


class OcientCliError(Exception):
    """Base exception for the Ocient CLI suite."""


class ConfigurationError(OcientCliError):
    """Raised when configuration loading or validation fails."""


class QueryError(OcientCliError):
    """Raised when query orchestration or execution fails."""


class TransportError(QueryError):
    """Raised when the execute endpoint could not be reached."""


class ResponseParseError(QueryError):
    """Raised when the execute endpoint returned an unreadable body."""


class QueryCancelledError(QueryError):
    """Raised when the caller cancelled an in-flight statement."""


class RemoteQueryError(QueryError):
    """Raised when the remote database reports a non-success SQL state."""

    def __init__(self, reason: str, sql_state: str, vendor_code: int) -> None:
        super().__init__(f"Query failed: {reason} (SQL state: {sql_state}, vendor code: {vendor_code})")
        self.reason = reason
        self.sql_state = sql_state
        self.vendor_code = vendor_code


class DistinctValuesError(QueryError):
    """Raised when browsing the distinct values of a column fails."""

    def __init__(self, column: str, message: str) -> None:
        super().__init__(f"Failed to load values for column '{column}': {message}")
        self.column = column


class ConversionError(OcientCliError):
    """Raised by strict frame building when a cell cannot be coerced."""

    def __init__(self, column: str, row_index: int, value: Any, target: str) -> None:
        super().__init__(f"Cannot convert {value!r} in column '{column}' (row {row_index}) to {target}.")
        self.column = column
        self.row_index = row_index
        self.value = value
