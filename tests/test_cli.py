"""Tests for the command line interface."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from callbridge.cli import app
from callbridge.core.exceptions import SmsProviderError

runner = CliRunner()


def test_info_lists_enabled_services():
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "https://bridge.example.com" in result.output
    assert "twilio" in result.output
    assert "test-auth-token" not in result.output


def test_call_reports_sid():
    orchestrator = MagicMock()
    orchestrator.initiate.return_value = "CA123"

    with patch("callbridge.voice.orchestrator.get_call_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, ["call", "Alice", "5551234567", "--user-type", "VIP"])

    assert result.exit_code == 0
    assert "CA123" in result.output
    orchestrator.initiate.assert_called_once_with("Alice", "5551234567", "VIP")


def test_sms_failure_exits_nonzero():
    gateway = MagicMock()
    gateway.send.side_effect = SmsProviderError("boom")

    with patch("callbridge.outreach.sms_gateway.get_sms_gateway", return_value=gateway):
        result = runner.invoke(app, ["sms", "5551234567", "hi"])

    assert result.exit_code == 2


def test_server_refuses_to_start_without_credentials(monkeypatch):
    monkeypatch.delenv("TWILIO_AUTH_TOKEN")

    with patch("callbridge.cli.uvicorn.run") as run:
        result = runner.invoke(app, ["server"])

    assert result.exit_code == 1
    run.assert_not_called()
