"""Outbound call orchestration: voice session first, then the Twilio call."""
from __future__ import annotations

from typing import Optional

from callbridge.core.config import Settings, get_settings
from callbridge.core.exceptions import (
    MissingOrInvalidParametersError,
    TelephonyProviderError,
    VoiceProviderError,
)
from callbridge.core.logging_config import get_context_logger, get_logger
from callbridge.outreach.phone import normalize_phone_number
from callbridge.outreach.twilio_client import TwilioClient, get_twilio_client
from .session_builder import DEFAULT_USER_TYPE, ToolFlags, VoiceSessionBuilder
from .ultravox_client import UltravoxClient, VoiceSession, get_ultravox_client

LOGGER = get_logger(__name__)


class CallOrchestrator:
    """
    Places an outbound call bridged to a freshly created voice session.

    The sequence is linear: validate, build config, create session, place
    call. Any failure aborts the remaining steps and propagates.
    """

    def __init__(
        self,
        builder: Optional[VoiceSessionBuilder] = None,
        voice: Optional[UltravoxClient] = None,
        telephony: Optional[TwilioClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.builder = builder or VoiceSessionBuilder(settings=self.settings)
        self.voice = voice or get_ultravox_client()
        self.telephony = telephony or get_twilio_client()

    def initiate(
        self,
        client_name: Optional[str],
        phone_number: Optional[str],
        user_type: Optional[str] = DEFAULT_USER_TYPE,
        tool_flags: Optional[ToolFlags] = None,
    ) -> str:
        """
        Start a sales call.

        Args:
            client_name: Name the agent greets.
            phone_number: Raw destination number.
            user_type: Membership status (defaults to "non-VIP").
            tool_flags: Per-call tool switches.

        Returns:
            The Twilio call SID.

        Raises:
            MissingOrInvalidParametersError: Before any provider call.
            VoiceProviderError: Session creation failed; no call placed.
            TelephonyProviderError: Twilio failed after the session was created.
        """
        if not client_name or not phone_number:
            raise MissingOrInvalidParametersError(
                "Missing required parameters: clientName and phoneNumber"
            )
        to = normalize_phone_number(phone_number, self.settings.foreign_prefixes)
        if to is None:
            raise MissingOrInvalidParametersError("Invalid phone number format.")

        config = self.builder.build(
            client_name=client_name,
            phone_number=to,
            user_type=user_type or DEFAULT_USER_TYPE,
            tool_flags=tool_flags,
        )

        session = self.voice.create_session(config)
        LOGGER.info(
            "Voice session created",
            extra={"extra_data": {"ultravox_call_id": session.call_id, "to": to}},
        )

        try:
            call_sid = self.telephony.place_stream_call(to=to, stream_url=session.join_url)
        except TelephonyProviderError:
            LOGGER.error(
                "Twilio call failed after voice session was created",
                extra={"extra_data": {"ultravox_call_id": session.call_id, "to": to}},
            )
            self._discard_session(session)
            raise

        call_logger = get_context_logger(__name__, call_sid=call_sid)
        call_logger.info(f"Call initiated to {to} for {client_name} ({user_type or DEFAULT_USER_TYPE})")
        return call_sid

    def _discard_session(self, session: VoiceSession) -> None:
        """Best-effort removal of a session no call will join."""
        if not self.settings.ultravox_cleanup_orphaned_sessions:
            LOGGER.warning(f"Voice session {session.call_id} left orphaned")
            return
        if not session.call_id:
            LOGGER.warning("Voice session has no call id; cannot clean it up")
            return
        try:
            self.voice.end_session(session.call_id)
            LOGGER.info(f"Orphaned voice session {session.call_id} ended")
        except VoiceProviderError as e:
            LOGGER.error(f"Could not end orphaned voice session {session.call_id}: {e}")


def get_call_orchestrator() -> CallOrchestrator:
    """Build a CallOrchestrator from configuration."""
    return CallOrchestrator()


__all__ = ["CallOrchestrator", "get_call_orchestrator"]
