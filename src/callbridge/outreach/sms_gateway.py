"""SMS gateway: validation and error translation around Twilio message sends."""
from __future__ import annotations

from typing import Optional

from callbridge.core.config import Settings, get_settings
from callbridge.core.exceptions import (
    InvalidRecipientError,
    InvalidSmsRequestError,
    MessageTooLongError,
    SmsProviderError,
)
from callbridge.core.logging_config import get_logger
from callbridge.core.utils import utcnow
from .phone import normalize_phone_number, phone_region
from .twilio_client import TwilioClient, get_twilio_client

LOGGER = get_logger(__name__)


class SmsGateway:
    """
    Sends a single SMS per call to `send()`.

    Validation happens before Twilio is contacted, so a rejected request never
    costs a provider call. There is no retry; callers decide whether to try
    again.
    """

    def __init__(
        self,
        twilio: Optional[TwilioClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.twilio = twilio or get_twilio_client()

    @property
    def max_length(self) -> int:
        return self.settings.sms_max_length

    def validate(self, recipient: Optional[str], message: Optional[str]) -> str:
        """
        Check an SMS request and return the normalized recipient.

        Raises:
            InvalidSmsRequestError: Empty message.
            MessageTooLongError: Message longer than SMS_MAX_LENGTH.
            InvalidRecipientError: Recipient cannot be normalized.
        """
        if not message:
            raise InvalidSmsRequestError("Message body is empty")
        if len(message) > self.max_length:
            raise MessageTooLongError(len(message), self.max_length)

        normalized = normalize_phone_number(recipient, self.settings.foreign_prefixes)
        if normalized is None:
            raise InvalidRecipientError("Invalid phone number format")
        return normalized

    def send(self, recipient: Optional[str], message: Optional[str]) -> str:
        """
        Send `message` to `recipient`.

        Args:
            recipient: Raw recipient phone number.
            message: SMS body (at most SMS_MAX_LENGTH characters).

        Returns:
            The Twilio message SID.

        Raises:
            InvalidSmsRequestError, MessageTooLongError, InvalidRecipientError:
                before any provider call.
            SmsProviderError: Twilio rejected or failed the send.
        """
        to = self.validate(recipient, message)

        log_data = {
            "recipient": to,
            "region": phone_region(to),
            "length": len(message),
            "timestamp": utcnow().isoformat(),
        }
        if self.settings.log_message_content:
            log_data["body"] = message
        LOGGER.info("Sending SMS", extra={"extra_data": log_data})

        result = self.twilio.send_sms(to=to, body=message)
        if not result.success:
            raise SmsProviderError(
                result.error_message or "SMS send failed",
                code=result.error_code,
                detail=result.error_message,
            )

        LOGGER.info(f"SMS sent successfully. SID: {result.sid}")
        return result.sid


def get_sms_gateway() -> SmsGateway:
    """Build an SmsGateway over the shared Twilio client."""
    return SmsGateway()


__all__ = ["SmsGateway", "get_sms_gateway"]
