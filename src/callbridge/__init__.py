"""Ultravox call bridge: Twilio calls and SMS driven by hosted voice agents."""
from __future__ import annotations

__version__ = "1.0.0"
