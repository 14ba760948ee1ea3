"""Pytest configuration and fixtures."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Optional
from unittest.mock import MagicMock

import httpx
import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Set test environment before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["TWILIO_ACCOUNT_SID"] = "ACtest00000000000000000000000000"
os.environ["TWILIO_AUTH_TOKEN"] = "test-auth-token"
os.environ["TWILIO_PHONE_NUMBER"] = "+15550000000"
os.environ["ULTRAVOX_API_KEY"] = "test-ultravox-key"
os.environ["SERVER_BASE_URL"] = "https://bridge.example.com"
os.environ["PHONE_FOREIGN_PREFIXES"] = "63"
# CRM and pass-through tool are off unless a test turns them on
for _name in ("GHL_API_KEY", "GHL_LOCATION_ID", "ADD_CONTACT_TOOL_URL", "VERCEL_URL", "RENDER_EXTERNAL_URL"):
    os.environ.pop(_name, None)

from callbridge.core.config import Settings, get_settings
from callbridge.crm.ghl_client import reset_crm_client
from callbridge.outreach.twilio_client import TwilioClient, reset_twilio_client
from callbridge.voice.ultravox_client import reset_ultravox_client


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test sees settings built from the current environment."""
    get_settings.cache_clear()
    reset_twilio_client()
    reset_ultravox_client()
    reset_crm_client()
    yield
    get_settings.cache_clear()
    reset_twilio_client()
    reset_ultravox_client()
    reset_crm_client()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def crm_settings() -> Settings:
    """Settings with the GoHighLevel CRM configured."""
    return Settings(
        ghl_api_key="ghl-test-key",
        ghl_location_id="loc-123",
        server_base_url="https://bridge.example.com",
    )


@pytest.fixture
def twilio_rest() -> MagicMock:
    """Stand-in for twilio.rest.Client with successful message and call creation."""
    rest = MagicMock()
    rest.messages.create.return_value = SimpleNamespace(sid="SM123", status="queued")
    rest.calls.create.return_value = SimpleNamespace(sid="CA123", status="queued")
    return rest


@pytest.fixture
def twilio_client(twilio_rest) -> TwilioClient:
    return TwilioClient(client=twilio_rest)


@pytest.fixture
def mock_http() -> Callable[..., httpx.Client]:
    """
    Build an httpx.Client whose requests are answered by `handler`.

    The handler receives the httpx.Request and returns an httpx.Response.
    Every request is recorded on `client.requests`.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_record))
        client.requests = seen  # type: ignore[attr-defined]
        return client

    return _make
