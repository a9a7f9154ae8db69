"""
Unit Tests for the Local Server Application
===========================================

Tests for onelink/app/main.py routes outside the proxy endpoints.

Run tests:
----------
    pytest onelink/app/tests/test_main.py -v
"""

from fastapi import status
from fastapi.testclient import TestClient


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"


def test_root_lists_proxy_endpoints(client):
    response = client.get("/")

    endpoints = response.json()["endpoints"]
    assert endpoints["chat"] == "/api/chat"
    assert endpoints["translate"] == "/api/translate"
    assert endpoints["usage"] == "/api/usage"


def test_unknown_path_is_not_found(client):
    response = client.get("/api/weather")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Not Found"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_wrong_verb_on_health_gets_json_error(client):
    response = client.post("/health")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json() == {"error": "Method Not Allowed"}
    assert "GET" in response.headers["allow"]
    assert response.headers["access-control-allow-origin"] == "*"


def test_unhandled_exception_returns_json_error(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "An unexpected error occurred"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"
