"""Twilio client for SMS and outbound voice calls.

Provides a unified interface for the two Twilio operations the bridge needs:
- sending an SMS from the configured number
- placing an outbound call whose media stream is bridged to a voice session
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client
from twilio.twiml.voice_response import Connect, VoiceResponse

from callbridge.core.config import get_settings
from callbridge.core.exceptions import MissingCredentialsError, TelephonyProviderError
from callbridge.core.logging_config import get_logger, log_external_call
from callbridge.core.utils import monotonic_ms

LOGGER = get_logger(__name__)

# Twilio error code for a malformed or unroutable "To" number
INVALID_TO_NUMBER_CODE = 21211


@dataclass
class SMSResult:
    """Result from sending an SMS."""
    success: bool
    sid: Optional[str] = None
    status: str = "unknown"
    error_code: Optional[int] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "sid": self.sid,
            "status": self.status,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


def build_stream_twiml(stream_url: str) -> str:
    """
    Build TwiML that connects the call's media stream to `stream_url`.

    Produces `<Response><Connect><Stream url="..."/></Connect></Response>`.
    """
    response = VoiceResponse()
    connect = Connect()
    connect.stream(url=stream_url)
    response.append(connect)
    return str(response)


class TwilioClient:
    """
    Twilio client with error handling and call timing.

    Usage:
        client = get_twilio_client()
        result = client.send_sms(to="+15551234567", body="Hello!")
        call_sid = client.place_stream_call(to="+15551234567", stream_url=join_url)
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        """
        Initialize the Twilio client.

        Args:
            account_sid: Twilio Account SID (uses env if not provided).
            auth_token: Twilio Auth Token (uses env if not provided).
            from_number: Sender phone number (uses env if not provided).
            client: Pre-built Twilio REST client, mainly for tests.
        """
        settings = get_settings()
        self.account_sid = account_sid or settings.twilio_account_sid
        self.auth_token = auth_token or settings.twilio_auth_token
        self.from_number = from_number or settings.twilio_phone_number
        self._client: Optional[Client] = client

    def _get_client(self) -> Client:
        """Get or create the Twilio REST client."""
        if self._client is None:
            if not self.account_sid or not self.auth_token:
                raise MissingCredentialsError("Twilio credentials not configured")
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured."""
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send_sms(self, to: str, body: str) -> SMSResult:
        """
        Send an SMS message. Single attempt, no retry.

        Args:
            to: Recipient phone number (normalized).
            body: Message content.

        Returns:
            SMSResult with send outcome. Failures are reported in the result,
            not raised.
        """
        started = monotonic_ms()
        try:
            client = self._get_client()
            message = client.messages.create(to=to, from_=self.from_number, body=body)
        except TwilioRestException as e:
            log_external_call(
                LOGGER, "twilio", "send_sms", False, monotonic_ms() - started,
                error_code=e.code,
            )
            if e.code == INVALID_TO_NUMBER_CODE:
                LOGGER.error(f"Twilio rejected 'to' number as invalid: {to}")
            else:
                LOGGER.error(f"Twilio error sending to {to}: {e}")
            return SMSResult(
                success=False,
                status="failed",
                error_code=e.code,
                error_message=str(e.msg),
            )
        except MissingCredentialsError:
            raise
        except Exception as e:
            log_external_call(LOGGER, "twilio", "send_sms", False, monotonic_ms() - started)
            LOGGER.exception(f"Unexpected error sending SMS to {to}")
            return SMSResult(
                success=False,
                status="error",
                error_message=str(e),
            )

        log_external_call(
            LOGGER, "twilio", "send_sms", True, monotonic_ms() - started,
            sid=message.sid,
        )
        return SMSResult(success=True, sid=message.sid, status=message.status)

    def place_stream_call(self, to: str, stream_url: str) -> str:
        """
        Place an outbound call whose audio is streamed to `stream_url`.

        Args:
            to: Destination phone number (normalized).
            stream_url: Voice session join URL.

        Returns:
            The Twilio call SID.

        Raises:
            TelephonyProviderError: If Twilio refuses or fails to create the call.
        """
        started = monotonic_ms()
        try:
            client = self._get_client()
            call = client.calls.create(
                twiml=build_stream_twiml(stream_url),
                to=to,
                from_=self.from_number,
            )
        except TwilioRestException as e:
            log_external_call(
                LOGGER, "twilio", "create_call", False, monotonic_ms() - started,
                error_code=e.code,
            )
            raise TelephonyProviderError(
                f"Twilio call failed: {e.msg}", code=e.code, detail=str(e.msg)
            ) from e
        except MissingCredentialsError:
            raise
        except Exception as e:
            log_external_call(LOGGER, "twilio", "create_call", False, monotonic_ms() - started)
            raise TelephonyProviderError(f"Twilio call failed: {e}", detail=str(e)) from e

        log_external_call(
            LOGGER, "twilio", "create_call", True, monotonic_ms() - started,
            call_sid=call.sid,
        )
        return call.sid


# Module-level singleton
_client: Optional[TwilioClient] = None


def get_twilio_client() -> TwilioClient:
    """Get the global TwilioClient instance."""
    global _client
    if _client is None:
        _client = TwilioClient()
    return _client


def reset_twilio_client() -> None:
    """Reset the global Twilio client (useful for testing)."""
    global _client
    _client = None


__all__ = [
    "TwilioClient",
    "SMSResult",
    "build_stream_twiml",
    "get_twilio_client",
    "reset_twilio_client",
    "INVALID_TO_NUMBER_CODE",
]
