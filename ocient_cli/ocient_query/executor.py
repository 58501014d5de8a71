"""Statement execution against the remote ``/v1/execute`` endpoint."""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping
from typing import Any

import httpx

from ocient_cli.shared.config import ConnectionSettings
from ocient_cli.shared.exceptions import QueryCancelledError, QueryError
from ocient_cli.shared.logging import Logger

from .builder import QueryRequest
from .frames import build_frame
from .macros import TimeRange, apply_time_macros
from .types import (
    CANCELLED,
    PROTOCOL_FAILURE,
    REMOTE_FAILURE,
    TRANSPORT_FAILURE,
    Frame,
    QueryOutcome,
    QueryStatus,
)

COLLECTION_FORMAT = "collection"


def build_client(
    connection: ConnectionSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Return an HTTP client honouring the TLS and timeout settings.

    The caller owns the client and must close it; pass it to several
    ``execute_statement`` calls to reuse one connection.
    """
    return httpx.Client(
        verify=not connection.insecure_skip_verify,
        timeout=httpx.Timeout(connection.timeout),
        headers={"Content-Type": "application/json"},
        transport=transport,
    )


def execute_statement(
    *,
    connection: ConnectionSettings,
    statement: str,
    cancel: threading.Event | None = None,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> QueryOutcome:
    """Send one statement and return its outcome.

    Failures are reported through the outcome rather than raised: transport
    problems, unreadable bodies, remote SQL errors and cancellation each map
    to their own failure kind. Nothing is retried.
    """
    if cancel is not None and cancel.is_set():
        return QueryOutcome.failed(CANCELLED, "Query was cancelled before it was sent.")

    payload = {
        "database": connection.database,
        "statement": statement,
        "format": COLLECTION_FORMAT,
    }
    _debug(logger, "API request", url=connection.execute_url, database=connection.database, statement=statement)

    active_client = client or build_client(connection)
    try:
        body = _post(active_client, connection, payload, cancel, logger)
    except QueryCancelledError as exc:
        return QueryOutcome.failed(CANCELLED, str(exc))
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        # InvalidURL is raised for hosts like "db:443" that already carry a port.
        return QueryOutcome.failed(TRANSPORT_FAILURE, str(exc) or exc.__class__.__name__)
    finally:
        if client is None:
            active_client.close()

    outcome = parse_response(body)
    _debug(
        logger,
        "Parsed response",
        query_id=outcome.query_id,
        sql_state=outcome.status.sql_state if outcome.status else None,
        rows=len(outcome.rows),
    )
    return outcome


def parse_response(body: bytes | str) -> QueryOutcome:
    """Decode a collection-format response body."""
    try:
        document = json.loads(body)
    except ValueError as exc:
        return QueryOutcome.failed(PROTOCOL_FAILURE, str(exc))

    if not isinstance(document, Mapping):
        return QueryOutcome.failed(PROTOCOL_FAILURE, "response body must be a JSON object")

    query_id = document.get("query_id")
    query_id = str(query_id) if query_id is not None else None

    status_block = document.get("status")
    if not isinstance(status_block, Mapping):
        return QueryOutcome.failed(PROTOCOL_FAILURE, "response is missing the status block", query_id=query_id)
    try:
        status = QueryStatus(
            reason=str(status_block.get("reason") or ""),
            sql_state=str(status_block.get("sql_state") or ""),
            vendor_code=int(status_block.get("vendor_code") or 0),
        )
    except (TypeError, ValueError) as exc:
        return QueryOutcome.failed(PROTOCOL_FAILURE, f"invalid status block: {exc}", query_id=query_id)

    if not status.ok:
        return QueryOutcome.failed(REMOTE_FAILURE, status.reason, status=status, query_id=query_id)

    data = document.get("data")
    if data is None:
        data = []
    if not isinstance(data, list) or not all(isinstance(row, Mapping) for row in data):
        return QueryOutcome.failed(
            PROTOCOL_FAILURE, "response data must be a list of row objects", status=status, query_id=query_id
        )
    return QueryOutcome(rows=[dict(row) for row in data], status=status, query_id=query_id)


def run_query(
    *,
    connection: ConnectionSettings,
    query: str,
    time_range: TimeRange | None = None,
    strict: bool = False,
    cancel: threading.Event | None = None,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> Frame:
    """Execute SQL text and return its typed frame; failures raise ``QueryError``."""
    if not query or not query.strip():
        raise QueryError("Query text is empty.")

    statement = apply_time_macros(query, time_range)
    outcome = execute_statement(
        connection=connection,
        statement=statement,
        cancel=cancel,
        client=client,
        logger=logger,
    )
    outcome.raise_for_status()
    return build_frame(outcome.rows, strict=strict)


def run_request(
    request: QueryRequest,
    *,
    connection: ConnectionSettings,
    time_range: TimeRange | None = None,
    strict: bool = False,
    cancel: threading.Event | None = None,
    client: httpx.Client | None = None,
    logger: Logger | None = None,
) -> Frame:
    """Run a raw-SQL or builder request, whichever the request designates."""
    return run_query(
        connection=connection,
        query=request.statement(),
        time_range=time_range,
        strict=strict,
        cancel=cancel,
        client=client,
        logger=logger,
    )


# ---------------------------------------------------------------------------
# Internal helpers


def _post(
    client: httpx.Client,
    connection: ConnectionSettings,
    payload: Mapping[str, Any],
    cancel: threading.Event | None,
    logger: Logger | None,
) -> bytes:
    chunks: list[bytes] = []
    with client.stream(
        "POST",
        connection.execute_url,
        json=payload,
        auth=(connection.username, connection.password),
    ) as response:
        for chunk in response.iter_bytes():
            if cancel is not None and cancel.is_set():
                raise QueryCancelledError("Query was cancelled while reading the response.")
            chunks.append(chunk)
        _debug(logger, "Response received", status=response.status_code)
    body = b"".join(chunks)
    _debug(logger, "Response body", body=body.decode("utf-8", errors="replace"))
    return body


def _debug(logger: Logger | None, message: str, **fields: Any) -> None:
    if logger is not None:
        logger.debug(message, **fields)
