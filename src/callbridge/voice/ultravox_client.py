"""Ultravox API client for creating and ending hosted voice sessions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from callbridge.core.config import get_settings
from callbridge.core.exceptions import MissingCredentialsError, VoiceProviderError
from callbridge.core.logging_config import get_logger, log_external_call
from callbridge.core.utils import monotonic_ms
from .session_builder import VoiceSessionConfig

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class VoiceSession:
    """A created voice session and the URL a media stream joins it by."""

    call_id: Optional[str]
    join_url: str


class UltravoxClient:
    """Thin synchronous client for the Ultravox REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the Ultravox client.

        Args:
            api_key: Ultravox API key (uses env if not provided).
            base_url: API root (uses ULTRAVOX_API_URL if not provided).
            http_client: Pre-built httpx client, mainly for tests.
        """
        settings = get_settings()
        self.api_key = api_key or settings.ultravox_api_key
        self.base_url = (base_url or settings.ultravox_api_url).rstrip("/")
        self.timeout = settings.http_timeout_seconds
        self._client: Optional[httpx.Client] = http_client

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _ensure_configured(self) -> None:
        if not self.api_key:
            raise MissingCredentialsError(
                "Ultravox API key not configured. Set ULTRAVOX_API_KEY environment variable."
            )

    def _headers(self) -> Dict[str, str]:
        return {"X-API-Key": self.api_key or "", "Content-Type": "application/json"}

    def create_session(self, config: VoiceSessionConfig) -> VoiceSession:
        """
        Create a voice session for `config`.

        Returns:
            The created VoiceSession.

        Raises:
            VoiceProviderError: On transport failure, non-2xx status, or a
                response without a join URL.
        """
        self._ensure_configured()
        started = monotonic_ms()
        try:
            response = self._get_client().post(
                f"{self.base_url}/calls",
                json=config.to_payload(),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            log_external_call(LOGGER, "ultravox", "create_session", False, monotonic_ms() - started)
            raise VoiceProviderError(f"Ultravox request failed: {e}", detail=str(e)) from e

        duration = monotonic_ms() - started
        if not response.is_success:
            log_external_call(
                LOGGER, "ultravox", "create_session", False, duration,
                status_code=response.status_code,
            )
            raise VoiceProviderError(
                f"Ultravox API error: {response.status_code} {response.text}",
                code=response.status_code,
                detail=response.text,
            )

        try:
            data: Any = response.json()
        except ValueError as e:
            log_external_call(LOGGER, "ultravox", "create_session", False, duration)
            raise VoiceProviderError(
                "Ultravox returned a non-JSON response", detail=response.text
            ) from e
        if not isinstance(data, dict):
            log_external_call(LOGGER, "ultravox", "create_session", False, duration)
            raise VoiceProviderError("Ultravox response was not a JSON object", detail=response.text)

        join_url = data.get("joinUrl")
        if not join_url:
            log_external_call(LOGGER, "ultravox", "create_session", False, duration)
            raise VoiceProviderError("Ultravox response did not include a joinUrl", detail=str(data))

        session = VoiceSession(call_id=data.get("callId"), join_url=join_url)
        log_external_call(
            LOGGER, "ultravox", "create_session", True, duration,
            ultravox_call_id=session.call_id,
            tools=config.tool_names,
        )
        return session

    def end_session(self, call_id: str) -> None:
        """
        Delete a session that will never be joined.

        Raises:
            VoiceProviderError: If Ultravox does not accept the delete.
        """
        self._ensure_configured()
        started = monotonic_ms()
        try:
            response = self._get_client().delete(
                f"{self.base_url}/calls/{call_id}",
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            log_external_call(LOGGER, "ultravox", "end_session", False, monotonic_ms() - started)
            raise VoiceProviderError(f"Ultravox request failed: {e}", detail=str(e)) from e

        success = response.is_success or response.status_code == 404
        log_external_call(
            LOGGER, "ultravox", "end_session", success, monotonic_ms() - started,
            ultravox_call_id=call_id,
            status_code=response.status_code,
        )
        if not success:
            raise VoiceProviderError(
                f"Ultravox delete failed: {response.status_code} {response.text}",
                code=response.status_code,
                detail=response.text,
            )


# Module-level singleton
_client: Optional[UltravoxClient] = None


def get_ultravox_client() -> UltravoxClient:
    """Get the global UltravoxClient instance."""
    global _client
    if _client is None:
        _client = UltravoxClient()
    return _client


def reset_ultravox_client() -> None:
    """Close and drop the global Ultravox client."""
    global _client
    if _client is not None:
        _client.close()
    _client = None


__all__ = ["UltravoxClient", "VoiceSession", "get_ultravox_client", "reset_ultravox_client"]
