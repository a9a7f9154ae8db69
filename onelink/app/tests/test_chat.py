"""
Unit Tests for the Chat Proxy
=============================

Tests for onelink/app/proxy/chat.py

Test Coverage:
--------------
1. Successful completion is normalized to {"reply": ...}
2. Outbound body: model plus exactly two messages (system, user)
3. Credential and attribution headers sent to OpenRouter
4. Validation of required fields (no upstream call on failure)
5. Upstream error, parse error and empty-choices mapping

Run tests:
----------
    pytest onelink/app/tests/test_chat.py -v
"""

import json

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from onelink.app.main import create_app


CHAT_URL = "/api/chat"


@pytest.fixture
def chat_payload():
    return {
        "message": "How do I add a link?",
        "profile": "name=Ada; links=3",
    }


def completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


# ============================================================================
# Success Path
# ============================================================================

def test_chat_returns_first_choice_as_reply(client, upstream, chat_payload):
    upstream.respond_with(json={"choices": [{"message": {"content": "hello"}}]})

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"reply": "hello"}
    assert response.headers["content-type"] == "application/json"
    assert response.headers["access-control-allow-origin"] == "*"


def test_chat_null_content_is_empty_reply(client, upstream, chat_payload):
    upstream.respond_with(json={"choices": [{"message": {"role": "assistant", "content": None}}]})

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"reply": ""}


def test_chat_uses_only_first_choice(client, upstream, chat_payload):
    upstream.respond_with(json={
        "choices": [
            {"message": {"content": "first"}},
            {"message": {"content": "second"}},
        ]
    })

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.json() == {"reply": "first"}


def test_chat_outbound_body_has_system_and_user_messages(client, upstream, mock_settings):
    upstream.respond_with(json=completion("ok"))
    message = "  Ünïcode message\nwith spacing  "

    client.post(CHAT_URL, json={"message": message, "profile": "bio: hi"})

    body = json.loads(upstream.last_request.content)
    assert body["model"] == mock_settings.OPENROUTER_MODEL
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert body["messages"][1]["content"] == message
    assert body["messages"][0]["content"] == mock_settings.CHAT_SYSTEM_PROMPT + "bio: hi"


def test_chat_sends_credential_and_attribution_headers(client, upstream, chat_payload):
    upstream.respond_with(json=completion("ok"))

    client.post(CHAT_URL, json=chat_payload)

    request = upstream.last_request
    assert request.method == "POST"
    assert str(request.url) == "https://openrouter.ai/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-openrouter-key"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["HTTP-Referer"] == "https://onelink-demo.vercel.app"
    assert request.headers["X-Title"] == "OneLink Demo"


def test_chat_honours_configured_upstream(upstream, transport, mock_settings, chat_payload):
    settings = mock_settings.model_copy(update={
        "OPENROUTER_API_URL": "http://fake-llm.test/v1/chat",
        "OPENROUTER_MODEL": "test/model",
        "OPENROUTER_SITE_TITLE": "",
    })
    upstream.respond_with(json=completion("ok"))
    client = TestClient(create_app(settings=settings, transport=transport))

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_200_OK
    request = upstream.last_request
    assert str(request.url) == "http://fake-llm.test/v1/chat"
    assert json.loads(request.content)["model"] == "test/model"
    assert "X-Title" not in request.headers


# ============================================================================
# Request Validation
# ============================================================================

@pytest.mark.parametrize("missing", ["message", "profile"])
def test_chat_requires_field(client, upstream, chat_payload, missing):
    del chat_payload[missing]

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": f"{missing} is required"}
    assert upstream.requests == []


def test_chat_forwards_whitespace_message_verbatim(client, upstream):
    upstream.respond_with(json={"choices": [{"message": {"content": "ok"}}]})

    response = client.post(CHAT_URL, json={"message": "   ", "profile": "p"})

    assert response.status_code == status.HTTP_200_OK
    body = json.loads(upstream.last_request.content)
    assert body["messages"][1] == {"role": "user", "content": "   "}


def test_chat_rejects_non_string_message(client, upstream):
    response = client.post(CHAT_URL, json={"message": 42, "profile": "p"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"].startswith("Invalid request body")
    assert upstream.requests == []


def test_chat_without_credential_returns_500(unconfigured_settings, upstream, transport, chat_payload):
    client = TestClient(create_app(settings=unconfigured_settings, transport=transport))

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "OPENROUTER_API_KEY" in response.json()["error"]
    assert upstream.requests == []


# ============================================================================
# Upstream Response Mapping
# ============================================================================

def test_chat_empty_choices_is_empty_result(client, upstream, chat_payload):
    upstream.respond_with(json={"choices": []})

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "OpenRouter returned no choices"}


def test_chat_missing_choices_key_is_empty_result(client, upstream, chat_payload):
    upstream.respond_with(json={"id": "gen-1"})

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "no choices" in response.json()["error"]


def test_chat_unparseable_body_includes_raw_text(client, upstream, chat_payload):
    upstream.respond_with(text="<html>gateway hiccup</html>")

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"] == (
        "Failed to parse OpenRouter response: <html>gateway hiccup</html>"
    )


def test_chat_upstream_rejection_is_bad_gateway(client, upstream, chat_payload):
    upstream.respond_with(401, json={"error": {"message": "No auth credentials found"}})

    response = client.post(CHAT_URL, json=chat_payload)

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    error = response.json()["error"]
    assert "401 Unauthorized" in error
    assert "No auth credentials found" in error
