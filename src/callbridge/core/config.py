"""Configuration management for the call bridge service.

All configuration is loaded from environment variables and/or .env file.
Settings are read once at startup and treated as read-only afterwards.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

import phonenumbers
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root detection
PROJECT_ROOT = Path(__file__).resolve().parents[3]
ENV_FILE = PROJECT_ROOT / ".env"

VALID_FIRST_SPEAKERS = {"FIRST_SPEAKER_AGENT", "FIRST_SPEAKER_USER"}


class Settings(BaseSettings):
    """
    Runtime configuration powered by environment variables and .env overrides.

    All settings can be configured via:
    1. Environment variables (highest priority)
    2. .env file in project root (loaded automatically)
    3. Default values (lowest priority)

    Twilio and Ultravox credentials are required before the server accepts
    traffic; see `missing_required()`.
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # -------------------------------------------------------------------------
    # Twilio
    # -------------------------------------------------------------------------
    twilio_account_sid: Optional[str] = Field(default=None, alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: Optional[str] = Field(default=None, alias="TWILIO_AUTH_TOKEN")
    twilio_phone_number: Optional[str] = Field(default=None, alias="TWILIO_PHONE_NUMBER")

    # -------------------------------------------------------------------------
    # Ultravox
    # -------------------------------------------------------------------------
    ultravox_api_key: Optional[str] = Field(default=None, alias="ULTRAVOX_API_KEY")
    ultravox_api_url: str = Field(default="https://api.ultravox.ai/api", alias="ULTRAVOX_API_URL")
    ultravox_model: str = Field(default="fixie-ai/ultravox", alias="ULTRAVOX_MODEL")
    ultravox_voice: str = Field(default="Mark", alias="ULTRAVOX_VOICE")
    ultravox_temperature: float = Field(default=0.3, alias="ULTRAVOX_TEMPERATURE", ge=0.0, le=1.0)
    ultravox_first_speaker: str = Field(
        default="FIRST_SPEAKER_AGENT", alias="ULTRAVOX_FIRST_SPEAKER"
    )
    ultravox_cleanup_orphaned_sessions: bool = Field(
        default=False,
        alias="ULTRAVOX_CLEANUP_ORPHANED_SESSIONS",
        description="Delete the voice session when the Twilio call could not be placed",
    )

    # -------------------------------------------------------------------------
    # GoHighLevel CRM (optional)
    # -------------------------------------------------------------------------
    ghl_api_key: Optional[str] = Field(default=None, alias="GHL_API_KEY")
    ghl_location_id: Optional[str] = Field(default=None, alias="GHL_LOCATION_ID")
    ghl_api_url: str = Field(default="https://services.leadconnectorhq.com", alias="GHL_API_URL")
    ghl_api_version: str = Field(default="2021-07-28", alias="GHL_API_VERSION")

    # -------------------------------------------------------------------------
    # Voice agent tools
    # -------------------------------------------------------------------------
    add_contact_tool_url: Optional[str] = Field(
        default=None,
        alias="ADD_CONTACT_TOOL_URL",
        description="Third-party endpoint the voice agent calls directly to register contacts",
    )

    # -------------------------------------------------------------------------
    # Public URL detection
    # -------------------------------------------------------------------------
    server_base_url: Optional[str] = Field(default=None, alias="SERVER_BASE_URL")
    vercel_url: Optional[str] = Field(default=None, alias="VERCEL_URL")
    render_external_url: Optional[str] = Field(default=None, alias="RENDER_EXTERNAL_URL")
    port: int = Field(default=10000, alias="PORT", ge=1, le=65535)

    # -------------------------------------------------------------------------
    # Phone & SMS
    # -------------------------------------------------------------------------
    phone_foreign_prefixes: str = Field(default="63", alias="PHONE_FOREIGN_PREFIXES")
    sms_max_length: int = Field(default=1600, alias="SMS_MAX_LENGTH", ge=1)

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    http_timeout_seconds: float = Field(default=30, alias="HTTP_TIMEOUT_SECONDS", gt=0)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="text", alias="LOG_FORMAT")  # "text" or "json"
    log_message_content: bool = Field(default=False, alias="LOG_MESSAGE_CONTENT")
    environment: str = Field(default="local", alias="ENVIRONMENT")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Ensure log format is valid."""
        lower = v.lower()
        if lower not in {"text", "json"}:
            raise ValueError("log_format must be 'text' or 'json'")
        return lower

    @field_validator("ultravox_first_speaker")
    @classmethod
    def validate_first_speaker(cls, v: str) -> str:
        upper = v.upper()
        if upper not in VALID_FIRST_SPEAKERS:
            raise ValueError(f"ultravox_first_speaker must be one of {VALID_FIRST_SPEAKERS}")
        return upper

    @field_validator("phone_foreign_prefixes")
    @classmethod
    def validate_foreign_prefixes(cls, v: str) -> str:
        """Every configured prefix must be a real calling code."""
        prefixes = [p.strip() for p in v.split(",") if p.strip()]
        for prefix in prefixes:
            if not prefix.isdigit():
                raise ValueError(f"Foreign prefix '{prefix}' must be digits only")
            if phonenumbers.region_code_for_country_code(int(prefix)) == "ZZ":
                raise ValueError(f"Foreign prefix '{prefix}' is not a known country calling code")
        return ",".join(prefixes)

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    @property
    def foreign_prefixes(self) -> tuple[str, ...]:
        """Configured foreign calling-code prefixes, in declaration order."""
        if not self.phone_foreign_prefixes:
            return ()
        return tuple(self.phone_foreign_prefixes.split(","))

    def missing_required(self) -> list[str]:
        """Names of required environment variables that are not set."""
        required = {
            "TWILIO_ACCOUNT_SID": self.twilio_account_sid,
            "TWILIO_AUTH_TOKEN": self.twilio_auth_token,
            "TWILIO_PHONE_NUMBER": self.twilio_phone_number,
            "ULTRAVOX_API_KEY": self.ultravox_api_key,
        }
        return [name for name, value in required.items() if not value]

    def public_base_url(self) -> str:
        """
        Resolve the externally reachable URL used in tool callbacks.

        Resolution order:
        - SERVER_BASE_URL
        - VERCEL_URL (scheme added)
        - RENDER_EXTERNAL_URL
        - http://localhost:PORT (local testing only)
        """
        if self.server_base_url:
            return self.server_base_url.rstrip("/")
        if self.vercel_url:
            return f"https://{self.vercel_url}".rstrip("/")
        if self.render_external_url:
            return self.render_external_url.rstrip("/")
        return f"http://localhost:{self.port}"

    def is_public_base_url_local(self) -> bool:
        """True when tool callbacks would point at localhost."""
        return not (self.server_base_url or self.vercel_url or self.render_external_url)

    def is_twilio_enabled(self) -> bool:
        """Check if Twilio is configured."""
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone_number)

    def is_ultravox_enabled(self) -> bool:
        """Check if Ultravox is configured."""
        return bool(self.ultravox_api_key)

    def is_crm_enabled(self) -> bool:
        """
        Check if the GoHighLevel CRM is configured.

        Returns True only if both GHL_API_KEY and GHL_LOCATION_ID are set.
        """
        return bool(self.ghl_api_key and self.ghl_location_id)

    def is_add_contact_tool_enabled(self) -> bool:
        return bool(self.add_contact_tool_url)

    def get_enabled_services(self) -> list[str]:
        """Get list of enabled external services."""
        services = []
        if self.is_twilio_enabled():
            services.append("twilio")
        if self.is_ultravox_enabled():
            services.append("ultravox")
        if self.is_crm_enabled():
            services.append("gohighlevel")
        if self.is_add_contact_tool_enabled():
            services.append("add_contact_tool")
        return services


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. To reload settings,
    call `get_settings.cache_clear()` first.

    Returns:
        Settings object with all configuration.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Clear settings cache and reload from environment.

    Useful for testing or after modifying .env file.
    """
    get_settings.cache_clear()
    return get_settings()
