"""Tests for the Ultravox API client."""
from __future__ import annotations

import json

import httpx
import pytest

from callbridge.core.exceptions import MissingCredentialsError, VoiceProviderError
from callbridge.voice.session_builder import VoiceSessionConfig
from callbridge.voice.ultravox_client import UltravoxClient, get_ultravox_client, reset_ultravox_client

CONFIG = VoiceSessionConfig(
    script_text="You are a test agent.",
    model_id="fixie-ai/ultravox",
    voice_id="Mark",
    temperature=0.3,
    first_speaker="FIRST_SPEAKER_AGENT",
)


def test_create_session(mock_http):
    http = mock_http(
        lambda request: httpx.Response(
            201, json={"callId": "uv-1", "joinUrl": "wss://voice.example.com/join/uv-1"}
        )
    )
    client = UltravoxClient(http_client=http)

    session = client.create_session(CONFIG)

    assert session.call_id == "uv-1"
    assert session.join_url == "wss://voice.example.com/join/uv-1"

    request = http.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.ultravox.ai/api/calls"
    assert request.headers["X-API-Key"] == "test-ultravox-key"
    body = json.loads(request.content)
    assert body["systemPrompt"] == "You are a test agent."
    assert body["medium"] == {"twilio": {}}
    assert body["selectedTools"] == []


def test_create_session_error_status(mock_http):
    http = mock_http(lambda request: httpx.Response(401, json={"detail": "Invalid API key"}))
    client = UltravoxClient(http_client=http)

    with pytest.raises(VoiceProviderError) as exc_info:
        client.create_session(CONFIG)

    assert exc_info.value.code == 401
    assert "Invalid API key" in exc_info.value.detail


def test_create_session_without_join_url(mock_http):
    http = mock_http(lambda request: httpx.Response(201, json={"callId": "uv-1"}))

    with pytest.raises(VoiceProviderError):
        UltravoxClient(http_client=http).create_session(CONFIG)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>ok</html>"),
        httpx.Response(200, json=["wss://voice.example.com/join/uv-1"]),
    ],
    ids=["html", "json-list"],
)
def test_create_session_unreadable_body(mock_http, response):
    client = UltravoxClient(http_client=mock_http(lambda request: response))

    with pytest.raises(VoiceProviderError):
        client.create_session(CONFIG)


def test_create_session_transport_error(mock_http):
    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(VoiceProviderError):
        UltravoxClient(http_client=mock_http(_fail)).create_session(CONFIG)


def test_create_session_requires_api_key(mock_http, monkeypatch):
    monkeypatch.delenv("ULTRAVOX_API_KEY")
    http = mock_http(lambda request: httpx.Response(201, json={}))

    with pytest.raises(MissingCredentialsError):
        UltravoxClient(http_client=http).create_session(CONFIG)
    assert http.requests == []


def test_end_session(mock_http):
    http = mock_http(lambda request: httpx.Response(204))
    UltravoxClient(http_client=http).end_session("uv-1")

    request = http.requests[0]
    assert request.method == "DELETE"
    assert str(request.url) == "https://api.ultravox.ai/api/calls/uv-1"


def test_end_session_already_gone(mock_http):
    http = mock_http(lambda request: httpx.Response(404))
    UltravoxClient(http_client=http).end_session("uv-1")


def test_end_session_failure(mock_http):
    http = mock_http(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(VoiceProviderError):
        UltravoxClient(http_client=http).end_session("uv-1")


def test_shared_client_reused_and_closed(mock_http):
    http = mock_http(lambda request: httpx.Response(204))

    client = get_ultravox_client()
    assert get_ultravox_client() is client

    client._client = http
    client.end_session("uv-1")
    reset_ultravox_client()

    assert http.is_closed
    assert get_ultravox_client() is not client
