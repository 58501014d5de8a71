from __future__ import annotations

from dataclasses import replace

import httpx
import pytest

from ocient_cli.ocient_query.health import HEALTH_QUERY, check_health


def test_healthy_connection(connection, make_client, statements, ok_body) -> None:
    with make_client(lambda request: httpx.Response(200, json=ok_body([{"1": 1}]))) as client:
        result = check_health(connection, client=client)

    assert result.ok is True
    assert result.message == "Data source is working"
    assert statements == [HEALTH_QUERY]


@pytest.mark.parametrize(
    "changes, label",
    [
        ({"host": ""}, "Host"),
        ({"database": ""}, "Database"),
        ({"username": ""}, "Username"),
        ({"password": ""}, "Password"),
        ({"host": "", "password": ""}, "Host"),
    ],
)
def test_first_missing_setting_is_reported(connection, changes, label: str) -> None:
    result = check_health(replace(connection, **changes))
    assert result.ok is False
    assert result.message == f"{label} is missing"


def test_remote_failure_message(connection, make_client, failure_body) -> None:
    with make_client(lambda request: httpx.Response(200, json=failure_body("bad login", "28000", -7))) as client:
        result = check_health(connection, client=client)

    assert result.ok is False
    assert result.message == "Connection test failed: bad login (SQL state: 28000)"


def test_transport_failure_message(connection, make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with make_client(handler) as client:
        result = check_health(connection, client=client)

    assert result.ok is False
    assert result.message == "Connection test failed: timed out"
