"""Time-range macro substitution for SQL text.

Query text may reference ``$__timeFrom()`` and ``$__timeTo()``; before the
statement is sent they are replaced with quoted instants in the remote
system's native ``YYYY-MM-DD HH:MM:SS`` form (UTC).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from dateutil.parser import isoparse

from ocient_cli.shared.exceptions import QueryError

from .timestamps import format_native

TIME_FROM_MACRO = "$__timeFrom()"
TIME_TO_MACRO = "$__timeTo()"


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Inclusive dashboard time range."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if _as_utc(self.end) < _as_utc(self.start):
            raise QueryError("Time range end must not precede its start.")


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 instant; naive values are taken as UTC."""
    try:
        parsed = isoparse(text.strip())
    except ValueError as exc:
        raise QueryError(f"Invalid ISO-8601 instant '{text}'.") from exc
    return _as_utc(parsed)


def uses_time_macros(sql: str) -> bool:
    return TIME_FROM_MACRO in sql or TIME_TO_MACRO in sql


def apply_time_macros(sql: str, time_range: TimeRange | None) -> str:
    """Replace the time macros in ``sql``; without a range the text is returned unchanged."""
    if time_range is None:
        return sql
    sql = sql.replace(TIME_FROM_MACRO, f"'{format_native(time_range.start)}'")
    return sql.replace(TIME_TO_MACRO, f"'{format_native(time_range.end)}'")


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
