"""Rich-based logging helpers shared across the Ocient CLI tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.theme import Theme
from rich.traceback import install

install(show_locals=False)

_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "debug": "dim",
    }
)

# Payloads (frames, JSON, CSV) go to stdout and log chatter to stderr so that
# `ocient-query sql ... --format csv > out.csv` stays clean.
_stdout_console = Console(theme=_THEME, highlight=False)
_stderr_console = Console(stderr=True, theme=_THEME, highlight=False)

MAX_FIELD_LENGTH = 2000


def format_fields(message: str, fields: dict[str, Any]) -> str:
    """Append ``key=value`` pairs to a log message.

    Long values (statements, response bodies) are truncated so a single debug
    line never floods the terminal.
    """
    if not fields:
        return message
    parts = []
    for key, value in fields.items():
        text = str(value)
        if len(text) > MAX_FIELD_LENGTH:
            text = text[:MAX_FIELD_LENGTH] + "…"
        parts.append(f"{key}={text}")
    return f"{message} " + " ".join(parts)


@dataclass(slots=True)
class Logger:
    """Console logger facade; ``debug`` output only appears when verbose."""

    verbose: bool = False

    @property
    def console(self) -> Console:
        return _stdout_console

    def info(self, message: str, **fields: Any) -> None:
        _stderr_console.print(format_fields(message, fields), style="info", markup=False)

    def success(self, message: str, **fields: Any) -> None:
        _stderr_console.print(format_fields(message, fields), style="success", markup=False)

    def warning(self, message: str, **fields: Any) -> None:
        _stderr_console.print(format_fields(message, fields), style="warning", markup=False)

    def error(self, message: str, **fields: Any) -> None:
        _stderr_console.print(format_fields(message, fields), style="error", markup=False)

    def debug(self, message: str, **fields: Any) -> None:
        if self.verbose:
            _stderr_console.print(format_fields(message, fields), style="debug", markup=False)


def get_logger(verbose: bool = False) -> Logger:
    """Return a configured Logger instance."""
    return Logger(verbose=verbose)
