"""Builds the Ultravox session configuration for an outbound sales call."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from string import Template
from typing import Any, Dict, Optional

from callbridge.core.config import Settings, get_settings
from callbridge.core.exceptions import ConfigurationError
from callbridge.core.logging_config import get_logger
from callbridge.core.utils import utcnow

LOGGER = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
SALES_SCRIPT_TEMPLATE = TEMPLATES_DIR / "sales_script.txt"

SMS_WEBHOOK_PATH = "/api/sms-webhook"
TAG_USER_PATH = "/api/tag-user"

DEFAULT_USER_TYPE = "non-VIP"


class ToolMode(str, enum.Enum):
    """How the voice provider reaches a tool."""

    DIRECT_CALLBACK = "direct_callback"  # provider calls back into this service
    PASS_THROUGH = "pass_through"  # provider calls a third party directly


@dataclass(frozen=True, slots=True)
class ToolParameter:
    """A single parameter the voice agent supplies when invoking a tool."""

    name: str
    description: str
    type: str = "string"
    required: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "location": "PARAMETER_LOCATION_BODY",
            "schema": {"type": self.type, "description": self.description},
            "required": self.required,
        }


@dataclass(frozen=True, slots=True)
class ToolDeclaration:
    """A tool the voice agent may call during the conversation."""

    name: str
    description: str
    parameters: tuple[ToolParameter, ...]
    mode: ToolMode
    url: str
    http_method: str = "POST"

    def to_payload(self) -> Dict[str, Any]:
        """Ultravox `selectedTools` entry (an HTTP temporary tool)."""
        return {
            "temporaryTool": {
                "modelToolName": self.name,
                "description": self.description,
                "dynamicParameters": [p.to_payload() for p in self.parameters],
                "http": {
                    "baseUrlPattern": self.url,
                    "httpMethod": self.http_method,
                },
            }
        }


@dataclass(frozen=True, slots=True)
class VoiceSessionConfig:
    """Everything Ultravox needs to host one call. Never mutated after build."""

    script_text: str
    model_id: str
    voice_id: str
    temperature: float
    first_speaker: str
    tool_declarations: tuple[ToolDeclaration, ...] = ()

    @property
    def tool_names(self) -> list[str]:
        return [tool.name for tool in self.tool_declarations]

    def to_payload(self) -> Dict[str, Any]:
        """Request body for `POST /calls`."""
        return {
            "systemPrompt": self.script_text,
            "model": self.model_id,
            "voice": self.voice_id,
            "temperature": self.temperature,
            "firstSpeaker": self.first_speaker,
            "medium": {"twilio": {}},
            "selectedTools": [tool.to_payload() for tool in self.tool_declarations],
        }


@dataclass(frozen=True, slots=True)
class ToolFlags:
    """
    Per-call switches for which tools the agent gets.

    None means "use the configured default".
    """

    sms: Optional[bool] = None
    crm_tag: Optional[bool] = None
    add_contact: Optional[bool] = None


def load_script_template(path: Path = SALES_SCRIPT_TEMPLATE) -> Template:
    """Read the sales script template from disk."""
    try:
        return Template(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Sales script template not readable: {path}") from e


def send_sms_tool(base_url: str) -> ToolDeclaration:
    return ToolDeclaration(
        name="sendSMS",
        description="Send a text message to the caller. Use only after the caller agrees to receive one.",
        parameters=(
            ToolParameter("recipient", "Phone number to text, digits with optional country code"),
            ToolParameter("message", "Text message content, at most 1600 characters"),
        ),
        mode=ToolMode.DIRECT_CALLBACK,
        url=f"{base_url}{SMS_WEBHOOK_PATH}",
    )


def tag_user_tool(base_url: str) -> ToolDeclaration:
    return ToolDeclaration(
        name="tagUser",
        description="Apply a tag to the caller's CRM contact, creating the contact if needed.",
        parameters=(
            ToolParameter("phoneNumber", "Caller phone number"),
            ToolParameter("tag", "Tag to apply, e.g. vip-interested"),
        ),
        mode=ToolMode.DIRECT_CALLBACK,
        url=f"{base_url}{TAG_USER_PATH}",
    )


def add_contact_tool(url: str) -> ToolDeclaration:
    return ToolDeclaration(
        name="addContact",
        description="Register a new contact in the CRM.",
        parameters=(
            ToolParameter("phoneNumber", "Contact phone number"),
            ToolParameter("firstName", "Contact first name", required=False),
        ),
        mode=ToolMode.PASS_THROUGH,
        url=url,
    )


@dataclass
class VoiceSessionBuilder:
    """
    Turns a call request into a `VoiceSessionConfig`.

    The script carries both the VIP and non-VIP branches; the voice model picks
    between them during the conversation, so nothing here branches on
    `user_type`. Output depends only on the arguments, the settings and the
    template.
    """

    settings: Settings = field(default_factory=get_settings)
    template: Template = field(default_factory=load_script_template)

    def render_script(
        self,
        client_name: str,
        phone_number: str,
        user_type: str,
        now: datetime,
    ) -> str:
        return self.template.substitute(
            client_name=client_name,
            phone_number=phone_number,
            user_type=user_type,
            current_time=now.strftime("%Y-%m-%d %H:%M %Z").strip(),
        )

    def resolve_flags(self, flags: Optional[ToolFlags]) -> ToolFlags:
        """Fill unset flags from configuration."""
        flags = flags or ToolFlags()
        return ToolFlags(
            sms=True if flags.sms is None else flags.sms,
            crm_tag=self.settings.is_crm_enabled() if flags.crm_tag is None else flags.crm_tag,
            add_contact=(
                self.settings.is_add_contact_tool_enabled()
                if flags.add_contact is None
                else flags.add_contact
            ),
        )

    def build_tools(self, flags: ToolFlags) -> tuple[ToolDeclaration, ...]:
        base_url = self.settings.public_base_url()
        tools: list[ToolDeclaration] = []

        if flags.sms:
            tools.append(send_sms_tool(base_url))
        if flags.crm_tag:
            tools.append(tag_user_tool(base_url))
        if flags.add_contact:
            if not self.settings.add_contact_tool_url:
                raise ConfigurationError("addContact tool requested but ADD_CONTACT_TOOL_URL is not set")
            tools.append(add_contact_tool(self.settings.add_contact_tool_url))

        if any(t.mode is ToolMode.DIRECT_CALLBACK for t in tools) and self.settings.is_public_base_url_local():
            LOGGER.warning(
                f"Tool callbacks point at {base_url}; set SERVER_BASE_URL for calls outside local testing"
            )
        return tuple(tools)

    def build(
        self,
        client_name: str,
        phone_number: str,
        user_type: str = DEFAULT_USER_TYPE,
        tool_flags: Optional[ToolFlags] = None,
        now: Optional[datetime] = None,
    ) -> VoiceSessionConfig:
        """
        Build the session configuration for one call.

        Args:
            client_name: Name the agent addresses the caller by.
            phone_number: Normalized destination number.
            user_type: Membership status, "non-VIP" or "VIP".
            tool_flags: Per-call tool switches.
            now: Timestamp embedded in the script (defaults to current UTC).

        Returns:
            A frozen VoiceSessionConfig.
        """
        script = self.render_script(
            client_name=client_name,
            phone_number=phone_number,
            user_type=user_type or DEFAULT_USER_TYPE,
            now=now or utcnow(),
        )
        return VoiceSessionConfig(
            script_text=script,
            model_id=self.settings.ultravox_model,
            voice_id=self.settings.ultravox_voice,
            temperature=self.settings.ultravox_temperature,
            first_speaker=self.settings.ultravox_first_speaker,
            tool_declarations=self.build_tools(self.resolve_flags(tool_flags)),
        )


__all__ = [
    "ToolMode",
    "ToolParameter",
    "ToolDeclaration",
    "VoiceSessionConfig",
    "ToolFlags",
    "VoiceSessionBuilder",
    "load_script_template",
    "DEFAULT_USER_TYPE",
]
