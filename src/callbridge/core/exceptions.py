"""Custom exceptions for the call bridge application."""
from __future__ import annotations

from typing import Optional


class CallBridgeError(Exception):
    """Base exception for all application errors."""

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CallBridgeError):
    """Raised when required configuration is missing or invalid."""

    pass


class MissingCredentialsError(ConfigurationError):
    """Raised when required API credentials are not configured."""

    pass


# =============================================================================
# Validation Errors (caller-caused, HTTP 400)
# =============================================================================


class ValidationError(CallBridgeError):
    """Raised when request parameters are missing or malformed."""

    pass


class MissingOrInvalidParametersError(ValidationError):
    """Raised when a call request lacks a client name or a usable phone number."""

    pass


class InvalidPhoneNumberError(ValidationError):
    """Raised when a phone number is invalid or cannot be normalized."""

    pass


class InvalidRecipientError(InvalidPhoneNumberError):
    """Raised when an SMS recipient cannot be normalized."""

    pass


class InvalidSmsRequestError(ValidationError):
    """Raised when an SMS request is unusable (e.g. empty body)."""

    pass


class MessageTooLongError(InvalidSmsRequestError):
    """Raised when an SMS body exceeds the provider's length limit."""

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Message exceeds {limit} character SMS limit ({length} characters)")


# =============================================================================
# Provider Errors (downstream failures, HTTP 500)
# =============================================================================


class ProviderError(CallBridgeError):
    """
    Base exception for any downstream API failure.

    Attributes:
        code: Provider-specific error code or HTTP status, when known.
        detail: Provider-supplied error text.
    """

    def __init__(self, message: str, code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.detail = detail


class SmsProviderError(ProviderError):
    """Raised when Twilio rejects or fails to send an SMS."""

    pass


class TelephonyProviderError(ProviderError):
    """Raised when Twilio fails to place an outbound call."""

    pass


class VoiceProviderError(ProviderError):
    """Raised when the Ultravox API fails to create or end a voice session."""

    pass


class CrmError(ProviderError):
    """Base exception for GoHighLevel CRM errors."""

    pass


class CrmNotConfiguredError(CrmError):
    """Raised when a CRM operation is requested without CRM credentials."""

    pass


class CrmSearchError(CrmError):
    """Raised when the contact search request fails."""

    pass


class CrmCreateError(CrmError):
    """Raised when the contact create request fails."""

    pass


class CrmTagError(CrmError):
    """Raised when adding a tag to a contact fails."""

    pass


__all__ = [
    # Base
    "CallBridgeError",
    # Configuration
    "ConfigurationError",
    "MissingCredentialsError",
    # Validation
    "ValidationError",
    "MissingOrInvalidParametersError",
    "InvalidPhoneNumberError",
    "InvalidRecipientError",
    "InvalidSmsRequestError",
    "MessageTooLongError",
    # Providers
    "ProviderError",
    "SmsProviderError",
    "TelephonyProviderError",
    "VoiceProviderError",
    "CrmError",
    "CrmNotConfiguredError",
    "CrmSearchError",
    "CrmCreateError",
    "CrmTagError",
]
