from __future__ import annotations

import json

import httpx
import pytest
import typer

from cli.client import ApiClient
from cli.config import CLIConfig


def _client_with(handler) -> ApiClient:
    config = CLIConfig(base_url="http://metrics.test")
    client = ApiClient(config)
    client._client.close()
    client._client = httpx.Client(
        base_url=config.base_url, transport=httpx.MockTransport(handler)
    )
    return client


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


def test_push_sample_posts_json_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    client = _client_with(handler)
    client.push_sample("cpu", "a", 42, 0.5)

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/metrics"
    assert json.loads(seen[0].content) == {"name": "cpu", "key": "a", "timestamp": 42, "value": 0.5}


def test_http_error_exits_with_detail(capsys) -> None:
    client = _client_with(
        lambda request: httpx.Response(400, json={"detail": "Missing required query parameter(s): key"})
    )

    with pytest.raises(typer.Exit) as exc_info:
        client.query_series("cpu", "a")

    assert exc_info.value.exit_code == 1
    assert "Missing required query parameter(s): key" in capsys.readouterr().err


@pytest.mark.parametrize("call", ["push", "query"])
def test_unreachable_server_exits_cleanly(capsys, call: str) -> None:
    client = _client_with(_refuse)

    with pytest.raises(typer.Exit) as exc_info:
        if call == "push":
            client.push_sample("cpu", "a", 1, 1.0)
        else:
            client.query_series("cpu", "a")

    assert exc_info.value.exit_code == 1
    err = capsys.readouterr().err
    assert "Could not reach http://metrics.test/metrics" in err
    assert "Connection refused" in err
