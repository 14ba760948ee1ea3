"""Voice sessions: script building, Ultravox client and call orchestration."""
from .session_builder import (
    ToolMode,
    ToolParameter,
    ToolDeclaration,
    VoiceSessionConfig,
    ToolFlags,
    VoiceSessionBuilder,
    DEFAULT_USER_TYPE,
)
from .ultravox_client import UltravoxClient, VoiceSession, get_ultravox_client, reset_ultravox_client
from .orchestrator import CallOrchestrator, get_call_orchestrator

__all__ = [
    "ToolMode",
    "ToolParameter",
    "ToolDeclaration",
    "VoiceSessionConfig",
    "ToolFlags",
    "VoiceSessionBuilder",
    "DEFAULT_USER_TYPE",
    "UltravoxClient",
    "VoiceSession",
    "get_ultravox_client",
    "reset_ultravox_client",
    "CallOrchestrator",
    "get_call_orchestrator",
]
