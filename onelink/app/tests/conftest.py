"""
Shared fixtures for the proxy tests.

Upstreams are never contacted: every handler gets an ``httpx.MockTransport``
backed by an ``UpstreamStub`` that records the outbound requests and replays
a canned response.
"""

from typing import Any, Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from onelink.app.config import Settings
from onelink.app.main import create_app


class UpstreamStub:
    """Callable MockTransport handler that records every outbound request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={})
        )

    def respond_with(
        self,
        status_code: int = 200,
        json: Optional[Any] = None,
        text: Optional[str] = None,
    ) -> None:
        if text is not None:
            self._responder = lambda request: httpx.Response(status_code, text=text)
        else:
            self._responder = lambda request: httpx.Response(status_code, json=json)

    def fail_with(self, exc: Exception) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise exc
        self._responder = responder

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no upstream call was made"
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)


@pytest.fixture
def mock_settings():
    """Settings with both credentials and no .env lookup"""
    return Settings(
        OPENROUTER_API_KEY="test-openrouter-key",
        DEEPL_API_KEY="test-deepl-key",
        STARTUP_CONFIG_CHECK="warn",
        _env_file=None,
    )


@pytest.fixture
def unconfigured_settings():
    """Settings with neither credential"""
    return Settings(
        OPENROUTER_API_KEY=None,
        DEEPL_API_KEY=None,
        STARTUP_CONFIG_CHECK="warn",
        _env_file=None,
    )


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def transport(upstream):
    return httpx.MockTransport(upstream)


@pytest.fixture
def app(mock_settings, transport):
    return create_app(settings=mock_settings, transport=transport)


@pytest.fixture
def client(app):
    return TestClient(app)
