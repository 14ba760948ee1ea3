"""Test configuration loading."""
from __future__ import annotations

import pydantic
import pytest

from callbridge.core.config import Settings, get_settings, reload_settings


def test_settings_load():
    """Settings pick up the test environment."""
    settings = get_settings()

    assert settings.twilio_phone_number == "+15550000000"
    assert settings.ultravox_api_key == "test-ultravox-key"
    assert settings.sms_max_length == 1600
    assert settings.log_level in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    assert settings.missing_required() == []


def test_settings_cached():
    assert get_settings() is get_settings()
    first = get_settings()
    assert reload_settings() is not first


def test_missing_required(monkeypatch):
    monkeypatch.delenv("TWILIO_AUTH_TOKEN")
    monkeypatch.delenv("ULTRAVOX_API_KEY")

    settings = reload_settings()

    assert settings.missing_required() == ["TWILIO_AUTH_TOKEN", "ULTRAVOX_API_KEY"]
    assert not settings.is_twilio_enabled()
    assert not settings.is_ultravox_enabled()


def test_public_base_url_precedence():
    explicit = Settings(
        server_base_url="https://calls.example.com/",
        vercel_url="bridge.vercel.app",
        render_external_url="https://bridge.onrender.com",
    )
    assert explicit.public_base_url() == "https://calls.example.com"
    assert not explicit.is_public_base_url_local()

    vercel = Settings(server_base_url=None, vercel_url="bridge.vercel.app", render_external_url=None)
    assert vercel.public_base_url() == "https://bridge.vercel.app"

    render = Settings(server_base_url=None, vercel_url=None, render_external_url="https://bridge.onrender.com")
    assert render.public_base_url() == "https://bridge.onrender.com"


def test_public_base_url_localhost_fallback():
    settings = Settings(server_base_url=None, vercel_url=None, render_external_url=None, port=8080)
    assert settings.public_base_url() == "http://localhost:8080"
    assert settings.is_public_base_url_local()


def test_foreign_prefixes_parsed():
    settings = Settings(phone_foreign_prefixes=" 63, 44 ")
    assert settings.foreign_prefixes == ("63", "44")
    assert Settings(phone_foreign_prefixes="").foreign_prefixes == ()


def test_unknown_foreign_prefix_rejected():
    with pytest.raises(pydantic.ValidationError):
        Settings(phone_foreign_prefixes="999")
    with pytest.raises(pydantic.ValidationError):
        Settings(phone_foreign_prefixes="6x")


def test_first_speaker_validated():
    assert Settings(ultravox_first_speaker="first_speaker_user").ultravox_first_speaker == "FIRST_SPEAKER_USER"
    with pytest.raises(pydantic.ValidationError):
        Settings(ultravox_first_speaker="nobody")


def test_crm_enabled_requires_key_and_location(crm_settings):
    assert crm_settings.is_crm_enabled()
    assert "gohighlevel" in crm_settings.get_enabled_services()
    assert not Settings(ghl_api_key="key", ghl_location_id=None).is_crm_enabled()
