"""Shared CLI helpers and decorators."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import click

from .config import AppConfig, ConnectionSettings, load_config
from .exceptions import ConfigurationError, OcientCliError, RemoteQueryError
from .logging import Logger, get_logger

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(slots=True)
class CLIContext:
    """Runtime context shared across CLI invocations."""

    config: AppConfig
    verbose: bool
    logger: Logger

    @property
    def connection(self) -> ConnectionSettings:
        return self.config.connection


pass_cli_context = click.make_pass_decorator(CLIContext)


def common_cli_options(func: F) -> F:
    """Decorator injecting shared CLI options and context creation."""

    @click.option("--config", "config_path", type=click.Path(path_type=str), help="Path to config file.")
    @click.option("--host", "host", type=str, help="Override the configured host.")
    @click.option("--database", "database", type=str, help="Override the configured database name.")
    @click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
    @click.pass_context
    @functools.wraps(func)
    def wrapper(
        ctx: click.Context,
        *args: Any,
        config_path: str | None = None,
        host: str | None = None,
        database: str | None = None,
        verbose: bool = False,
        **kwargs: Any,
    ) -> Any:
        try:
            app_config = load_config(config_path)
        except ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc

        app_config = app_config.with_connection(host=host, database=database)
        logger = get_logger(verbose=verbose)
        logger.debug("Loaded settings", source=app_config.source_path, **app_config.connection.describe())

        cli_ctx = CLIContext(config=app_config, verbose=verbose, logger=logger)
        ctx.obj = cli_ctx
        kwargs["cli_ctx"] = cli_ctx
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def handle_cli_errors(func: F) -> F:
    """Convert project exceptions into Click-friendly errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigurationError as exc:
            raise click.ClickException(f"Configuration error: {exc}") from exc
        except OcientCliError as exc:
            raise click.ClickException(str(exc)) from exc
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as exc:  # pragma: no cover
            raise click.ClickException(f"Unexpected error: {exc}") from exc

    return wrapper  # type: ignore[return-value]


def describe_error(exc: OcientCliError) -> str:
    """One-line rendering of a failure, with the remote triple when present."""
    if isinstance(exc, RemoteQueryError):
        return f"{exc.reason} (SQL state: {exc.sql_state}, vendor code: {exc.vendor_code})"
    return str(exc)
