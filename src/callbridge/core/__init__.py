"""Core module exports."""
from __future__ import annotations

from callbridge.core.config import Settings, get_settings, reload_settings
from callbridge.core.exceptions import (
    # Base
    CallBridgeError,
    # Configuration
    ConfigurationError,
    MissingCredentialsError,
    # Validation
    ValidationError,
    MissingOrInvalidParametersError,
    InvalidPhoneNumberError,
    InvalidRecipientError,
    InvalidSmsRequestError,
    MessageTooLongError,
    # Providers
    ProviderError,
    SmsProviderError,
    TelephonyProviderError,
    VoiceProviderError,
    CrmError,
    CrmNotConfiguredError,
    CrmSearchError,
    CrmCreateError,
    CrmTagError,
)
from callbridge.core.logging_config import (
    setup_logging,
    get_logger,
    get_context_logger,
    log_external_call,
    bind_request_id,
    reset_request_id,
    JSONFormatter,
    ContextLogger,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "reload_settings",
    # Exceptions - Base
    "CallBridgeError",
    # Exceptions - Config
    "ConfigurationError",
    "MissingCredentialsError",
    # Exceptions - Validation
    "ValidationError",
    "MissingOrInvalidParametersError",
    "InvalidPhoneNumberError",
    "InvalidRecipientError",
    "InvalidSmsRequestError",
    "MessageTooLongError",
    # Exceptions - Providers
    "ProviderError",
    "SmsProviderError",
    "TelephonyProviderError",
    "VoiceProviderError",
    "CrmError",
    "CrmNotConfiguredError",
    "CrmSearchError",
    "CrmCreateError",
    "CrmTagError",
    # Logging
    "setup_logging",
    "get_logger",
    "get_context_logger",
    "log_external_call",
    "bind_request_id",
    "reset_request_id",
    "JSONFormatter",
    "ContextLogger",
]
