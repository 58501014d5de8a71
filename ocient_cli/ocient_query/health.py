"""Connection health check used by ``ocient-query health``."""

from __future__ import annotations

import httpx

from ocient_cli.shared.config import ConnectionSettings
from ocient_cli.shared.logging import Logger

from .executor import execute_statement
from .types import REMOTE_FAILURE, HealthResult

HEALTH_QUERY = "SELECT 1"


def check_health(
    connection: ConnectionSettings,
    *,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> HealthResult:
    """Validate the settings, then run a trivial statement against the endpoint."""
    missing = _first_missing_setting(connection)
    if missing:
        return HealthResult(ok=False, message=f"{missing} is missing")

    outcome = execute_statement(connection=connection, statement=HEALTH_QUERY, client=client, logger=logger)
    if outcome.ok:
        return HealthResult(ok=True, message="Data source is working")
    if outcome.failure == REMOTE_FAILURE and outcome.status is not None:
        detail = f"{outcome.status.reason} (SQL state: {outcome.status.sql_state})"
    else:
        detail = outcome.message
    return HealthResult(ok=False, message=f"Connection test failed: {detail}")


def _first_missing_setting(connection: ConnectionSettings) -> str | None:
    checks = (
        ("Host", connection.host),
        ("Port", connection.port),
        ("Database", connection.database),
        ("Username", connection.username),
        ("Password", connection.password),
    )
    for label, value in checks:
        if not value:
            return label
    return None
