"""Shared pytest fixtures for the Ocient CLI tests.

HTTP traffic never leaves the process: clients are built on
``httpx.MockTransport`` and handlers answer with collection-format bodies.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from ocient_cli.shared import paths
from ocient_cli.shared.config import ConnectionSettings

Handler = Callable[[httpx.Request], httpx.Response]


class StubLogger:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str, **fields: Any) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str, **fields: Any) -> None:
        self.messages.append(("warning", message))

    def debug(self, message: str, **fields: Any) -> None:
        self.messages.append(("debug", message))

    def error(self, message: str, **fields: Any) -> None:
        self.messages.append(("error", message))

    def success(self, message: str, **fields: Any) -> None:
        self.messages.append(("success", message))


def success_body(rows: list[dict[str, Any]], query_id: str = "q-1") -> dict[str, Any]:
    return {
        "query_id": query_id,
        "status": {"reason": "", "sql_state": "00000", "vendor_code": 0},
        "data": rows,
    }


def error_body(reason: str, sql_state: str, vendor_code: int) -> dict[str, Any]:
    return {
        "query_id": "q-err",
        "status": {"reason": reason, "sql_state": sql_state, "vendor_code": vendor_code},
        "data": [],
    }


@pytest.fixture()
def stub_logger() -> StubLogger:
    return StubLogger()


@pytest.fixture()
def connection() -> ConnectionSettings:
    return ConnectionSettings(
        host="db.example.com",
        port=4050,
        database="analytics",
        username="reader",
        password="s3cret",
        insecure_skip_verify=True,
        timeout=5.0,
    )


@pytest.fixture()
def ok_body() -> Callable[..., dict[str, Any]]:
    return success_body


@pytest.fixture()
def failure_body() -> Callable[..., dict[str, Any]]:
    return error_body


@pytest.fixture()
def statements() -> list[str]:
    """Statements seen by handlers built with ``make_client``/``patch_http``."""
    return []


@pytest.fixture()
def make_client(statements: list[str]) -> Callable[[Handler], httpx.Client]:
    """Return a factory wrapping ``handler`` in a mock-transport client."""

    def factory(handler: Handler) -> httpx.Client:
        def recording(request: httpx.Request) -> httpx.Response:
            statements.append(json.loads(request.content)["statement"])
            return handler(request)

        return httpx.Client(transport=httpx.MockTransport(recording))

    return factory


@pytest.fixture()
def patch_http(
    monkeypatch: pytest.MonkeyPatch, make_client: Callable[[Handler], httpx.Client]
) -> Callable[[Handler], None]:
    """Route every client the CLI builds through ``handler``."""

    def install(handler: Handler) -> None:
        def fake_build_client(connection: ConnectionSettings, **kwargs: Any) -> httpx.Client:
            return make_client(handler)

        for target in (
            "ocient_cli.ocient_query.executor.build_client",
            "ocient_cli.ocient_browse.browser.build_client",
            "ocient_cli.ocient_browse.main.build_client",
        ):
            monkeypatch.setattr(target, fake_build_client)

    return install


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point configuration at a temp dir with complete connection settings."""
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path))
    monkeypatch.delenv(paths.CONFIG_FILE_ENV, raising=False)
    for key, value in {
        "OCIENT_HOST": "db.example.com",
        "OCIENT_PORT": "4050",
        "OCIENT_DATABASE": "analytics",
        "OCIENT_USERNAME": "reader",
        "OCIENT_PASSWORD": "s3cret",
    }.items():
        monkeypatch.setenv(key, value)
    for key in ("OCIENT_CLI_STRICT", "OCIENT_CLI_PAGE_SIZE", "OCIENT_TIMEOUT", "OCIENT_INSECURE_SKIP_VERIFY"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path
