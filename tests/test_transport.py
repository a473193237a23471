"""Tests for the httpx backed transport."""

from __future__ import annotations

import httpx
import pytest

from iconcache.errors import NetworkError
from iconcache.infrastructure.services.transport import HttpTransport


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_returns_body_on_success():
    transport = HttpTransport(client=_client(lambda request: httpx.Response(200, content=b"png")))
    assert transport.get("http://x/a.png") == b"png"


def test_http_error_status_raises_network_error():
    transport = HttpTransport(client=_client(lambda request: httpx.Response(404)))
    with pytest.raises(NetworkError, match="404"):
        transport.get("http://x/a.png")


def test_connection_failure_raises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport = HttpTransport(client=_client(handler))
    with pytest.raises(NetworkError):
        transport.get("http://x/a.png")


def test_timeout_raises_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    transport = HttpTransport(client=_client(handler))
    with pytest.raises(NetworkError, match="Timed out"):
        transport.get("http://x/a.png")


def test_close_leaves_injected_client_open():
    client = _client(lambda request: httpx.Response(200, content=b""))
    transport = HttpTransport(client=client)
    transport.close()
    assert client.is_closed is False
    client.close()
