#!/usr/bin/env python3
"""Command Line Interface for the Ultravox call bridge.

Usage:
    callbridge server              # Start API server
    callbridge info                # Show configuration
    callbridge call Alice 5551234567 --user-type VIP
    callbridge sms 5551234567 "Your upgrade link"
"""
from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from callbridge.core.config import get_settings
from callbridge.core.exceptions import CallBridgeError, ConfigurationError
from callbridge.core.logging_config import get_logger, setup_logging
from callbridge.voice.session_builder import DEFAULT_USER_TYPE

LOGGER = get_logger(__name__)

app = typer.Typer(help="Ultravox call bridge CLI")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Twilio calls and SMS driven by Ultravox voice agents."""
    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, json_format=settings.log_format == "json")


def _require_configuration() -> None:
    missing = get_settings().missing_required()
    if missing:
        typer.echo(f"Missing required environment variables: {', '.join(missing)}", err=True)
        raise typer.Exit(code=1)


@app.command("server")
def run_server(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: Optional[int] = typer.Option(None, help="Port to bind (defaults to PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    _require_configuration()
    port = port or get_settings().port
    typer.echo(f"Starting API server on {host}:{port}...")
    uvicorn.run("callbridge.api.app:app", host=host, port=port, reload=reload)


@app.command("info")
def show_info() -> None:
    """Show configuration status (secrets are never printed)."""
    settings = get_settings()
    typer.echo(f"Environment:      {settings.environment}")
    typer.echo(f"Public base URL:  {settings.public_base_url()}")
    typer.echo(f"Enabled services: {', '.join(settings.get_enabled_services()) or 'none'}")
    typer.echo(f"Foreign prefixes: {', '.join(settings.foreign_prefixes) or 'none'}")
    missing = settings.missing_required()
    if missing:
        typer.echo(f"Missing:          {', '.join(missing)}")


@app.command("call")
def place_call(
    client_name: str = typer.Argument(..., help="Name the agent greets"),
    phone_number: str = typer.Argument(..., help="Destination phone number"),
    user_type: str = typer.Option(DEFAULT_USER_TYPE, "--user-type", help="non-VIP or VIP"),
) -> None:
    """Place an outbound call bridged to a voice agent."""
    from callbridge.voice.orchestrator import get_call_orchestrator

    _require_configuration()
    try:
        call_sid = get_call_orchestrator().initiate(client_name, phone_number, user_type)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)
    except CallBridgeError as e:
        typer.echo(f"Failed to initiate call: {e}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Call initiated: {call_sid}")


@app.command("sms")
def send_sms(
    phone_number: str = typer.Argument(..., help="Recipient phone number"),
    message: str = typer.Argument(..., help="Message body"),
) -> None:
    """Send a single SMS."""
    from callbridge.outreach.sms_gateway import get_sms_gateway

    _require_configuration()
    try:
        message_sid = get_sms_gateway().send(phone_number, message)
    except CallBridgeError as e:
        typer.echo(f"Failed to send SMS: {e}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"SMS sent: {message_sid}")


if __name__ == "__main__":
    app()
