"""Timestamp recognition for values returned by the execute endpoint.

The remote system renders timestamps as ``YYYY-MM-DD HH:MM:SS`` with up to
nine fractional digits. Other encodings show up when users cast or format
columns themselves, so parsing walks an ordered chain and the first format
that accepts the text wins:

1. native ``YYYY-MM-DD HH:MM:SS[.fffffffff]`` (UTC)
2. RFC 3339 ``YYYY-MM-DDTHH:MM:SS[.f]Z`` / ``±HH:MM`` (offset preserved)
3. bare ``YYYY-MM-DD HH:MM:SS`` (UTC)

Python datetimes resolve microseconds, so fractional digits past the sixth are
truncated.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable

from dateutil.parser import isoparse

NATIVE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NATIVE_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2}) (?P<time>\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d{1,9}))?$"
)
_RFC3339_RE = re.compile(
    r"^(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d+))?(?P<zone>Z|[+-]\d{2}:\d{2})$"
)
_BARE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def _micro(fraction: str | None) -> int:
    if not fraction:
        return 0
    return int(fraction[:6].ljust(6, "0"))


def _parse_native(text: str) -> datetime | None:
    match = _NATIVE_RE.match(text)
    if match is None:
        return None
    try:
        parsed = datetime.strptime(f"{match['date']} {match['time']}", NATIVE_FORMAT)
    except ValueError:
        return None
    return parsed.replace(microsecond=_micro(match["fraction"]), tzinfo=timezone.utc)


def _parse_rfc3339(text: str) -> datetime | None:
    match = _RFC3339_RE.match(text)
    if match is None:
        return None
    fraction = match["fraction"]
    normalised = match["stamp"]
    if fraction:
        normalised += "." + fraction[:6]
    normalised += match["zone"]
    try:
        return isoparse(normalised)
    except ValueError:
        return None


def _parse_bare(text: str) -> datetime | None:
    """Seconds-precision text without a fraction.

    Everything this accepts already parses as native, so it never wins in
    ``PARSERS``; it stays last so the chain lists every accepted format.
    """
    if _BARE_RE.match(text) is None:
        return None
    try:
        return datetime.strptime(text, NATIVE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


# Order matters: existing dashboards rely on native-first resolution.
PARSERS: tuple[tuple[str, Callable[[str], datetime | None]], ...] = (
    ("native", _parse_native),
    ("rfc3339", _parse_rfc3339),
    ("bare", _parse_bare),
)


def match_format(text: str) -> tuple[str, datetime] | None:
    """Return ``(format_name, instant)`` for the first format that parses ``text``."""
    for name, parser in PARSERS:
        parsed = parser(text)
        if parsed is not None:
            return name, parsed
    return None


def parse_timestamp(text: str) -> datetime | None:
    matched = match_format(text)
    return matched[1] if matched else None


def is_timestamp(text: str) -> bool:
    return match_format(text) is not None


def format_native(instant: datetime) -> str:
    """Render an instant in the remote system's native text form (UTC)."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return instant.strftime(NATIVE_FORMAT)
