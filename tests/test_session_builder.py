"""Tests for voice session configuration building."""
from __future__ import annotations

from datetime import datetime, timezone
from string import Template

import pytest

from callbridge.core.config import Settings
from callbridge.core.exceptions import ConfigurationError
from callbridge.voice.session_builder import (
    ToolFlags,
    ToolMode,
    VoiceSessionBuilder,
    load_script_template,
)

FIXED_NOW = datetime(2026, 10, 17, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def builder(settings) -> VoiceSessionBuilder:
    return VoiceSessionBuilder(settings=settings)


def test_script_contains_caller_details(builder):
    config = builder.build("Alice", "+15551234567", "non-VIP", now=FIXED_NOW)

    assert "Alice" in config.script_text
    assert "+15551234567" in config.script_text
    assert "non-VIP" in config.script_text
    assert "2026-10-17 15:30" in config.script_text
    assert "$client_name" not in config.script_text


def test_script_carries_both_branches(builder):
    """Both the upsell and the congratulation paths are always present."""
    non_vip = builder.build("Alice", "+15551234567", "non-VIP", now=FIXED_NOW).script_text
    vip = builder.build("Alice", "+15551234567", "VIP", now=FIXED_NOW).script_text

    for script in (non_vip, vip):
        assert "NOT a VIP member" in script
        assert "IS a VIP member" in script


def test_build_is_deterministic(builder):
    first = builder.build("Alice", "+15551234567", "VIP", now=FIXED_NOW)
    second = builder.build("Alice", "+15551234567", "VIP", now=FIXED_NOW)
    assert first == second


def test_empty_user_type_defaults_to_non_vip(builder):
    config = builder.build("Alice", "+15551234567", "", now=FIXED_NOW)
    assert "Their current membership status is: non-VIP." in config.script_text


def test_model_settings_copied(builder, settings):
    config = builder.build("Alice", "+15551234567", now=FIXED_NOW)

    assert config.model_id == settings.ultravox_model
    assert config.voice_id == settings.ultravox_voice
    assert config.temperature == settings.ultravox_temperature
    assert config.first_speaker == "FIRST_SPEAKER_AGENT"


def test_default_tools_without_crm(builder):
    config = builder.build("Alice", "+15551234567", now=FIXED_NOW)

    assert config.tool_names == ["sendSMS"]
    sms_tool = config.tool_declarations[0]
    assert sms_tool.mode is ToolMode.DIRECT_CALLBACK
    assert sms_tool.url == "https://bridge.example.com/api/sms-webhook"
    assert [p.name for p in sms_tool.parameters] == ["recipient", "message"]


def test_optional_tools_only_suggested_when_available(builder):
    """Without the CRM, the script never tells the agent to call tagUser unconditionally."""
    config = builder.build("Alice", "+15551234567", now=FIXED_NOW)
    assert "tagUser" not in config.tool_names

    for tool in ("tagUser", "addContact"):
        lines = [line for line in config.script_text.splitlines() if tool in line]
        assert lines
        assert all("is available" in line for line in lines)


def test_crm_tag_tool_when_crm_configured(crm_settings):
    config = VoiceSessionBuilder(settings=crm_settings).build("Alice", "+15551234567", now=FIXED_NOW)

    assert config.tool_names == ["sendSMS", "tagUser"]
    assert config.tool_declarations[1].url == "https://bridge.example.com/api/tag-user"


def test_pass_through_tool_targets_third_party():
    settings = Settings(
        server_base_url="https://bridge.example.com",
        add_contact_tool_url="https://crm-bridge.example.net/contacts",
    )
    config = VoiceSessionBuilder(settings=settings).build("Alice", "+15551234567", now=FIXED_NOW)

    add_contact = config.tool_declarations[-1]
    assert add_contact.name == "addContact"
    assert add_contact.mode is ToolMode.PASS_THROUGH
    assert add_contact.url == "https://crm-bridge.example.net/contacts"


def test_flags_disable_tools(crm_settings):
    builder = VoiceSessionBuilder(settings=crm_settings)
    config = builder.build(
        "Alice", "+15551234567", tool_flags=ToolFlags(sms=False, crm_tag=False), now=FIXED_NOW
    )
    assert config.tool_declarations == ()


def test_add_contact_flag_without_url_fails(builder):
    with pytest.raises(ConfigurationError):
        builder.build("Alice", "+15551234567", tool_flags=ToolFlags(add_contact=True), now=FIXED_NOW)


def test_localhost_fallback_used_for_callbacks():
    settings = Settings(server_base_url=None, vercel_url=None, render_external_url=None, port=10000)
    config = VoiceSessionBuilder(settings=settings).build("Alice", "+15551234567", now=FIXED_NOW)
    assert config.tool_declarations[0].url == "http://localhost:10000/api/sms-webhook"


def test_payload_shape(builder):
    payload = builder.build("Alice", "+15551234567", now=FIXED_NOW).to_payload()

    assert payload["systemPrompt"].startswith("You are")
    assert payload["medium"] == {"twilio": {}}
    assert payload["firstSpeaker"] == "FIRST_SPEAKER_AGENT"

    tool = payload["selectedTools"][0]["temporaryTool"]
    assert tool["modelToolName"] == "sendSMS"
    assert tool["http"] == {
        "baseUrlPattern": "https://bridge.example.com/api/sms-webhook",
        "httpMethod": "POST",
    }
    recipient = tool["dynamicParameters"][0]
    assert recipient["name"] == "recipient"
    assert recipient["location"] == "PARAMETER_LOCATION_BODY"
    assert recipient["required"] is True


def test_custom_template(settings):
    builder = VoiceSessionBuilder(
        settings=settings,
        template=Template("Call $client_name ($user_type) at $phone_number on $current_time"),
    )
    config = builder.build("Bob", "+639171234567", "VIP", now=FIXED_NOW)
    assert config.script_text == "Call Bob (VIP) at +639171234567 on 2026-10-17 15:30 UTC"


def test_missing_template_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_script_template(tmp_path / "missing.txt")
