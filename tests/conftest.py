"""Pytest configuration and fixtures for httprequest tests.

This file provides:
- mock_client: Factory for httpx clients backed by httpx.MockTransport that
  record every request they are asked to send
"""

from __future__ import annotations

from typing import Callable, Generator

import httpx
import pytest

Handler = Callable[[httpx.Request], httpx.Response]
ClientFactory = Callable[..., tuple[httpx.Client, list[httpx.Request]]]


@pytest.fixture
def mock_client() -> Generator[ClientFactory, None, None]:
    """Create httpx clients whose transport is an in-process handler.

    Usage:
        client, sent = mock_client(status_code=200, content=b'{"a": 1}')
        client, sent = mock_client(handler=lambda request: httpx.Response(204))

    ``sent`` collects every httpx.Request the client was asked to send.
    Clients are closed at teardown.
    """
    clients: list[httpx.Client] = []

    def factory(
        handler: Handler | None = None,
        *,
        status_code: int = 200,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> tuple[httpx.Client, list[httpx.Request]]:
        sent: list[httpx.Request] = []

        def transport_handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            if handler is not None:
                return handler(request)
            return httpx.Response(status_code, content=content, headers=headers)

        http_client = httpx.Client(transport=httpx.MockTransport(transport_handler))
        clients.append(http_client)
        return http_client, sent

    yield factory

    for http_client in clients:
        http_client.close()
