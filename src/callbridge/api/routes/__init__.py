"""API route modules."""
from __future__ import annotations

from . import calls, health, sms, tools

__all__ = ["calls", "health", "sms", "tools"]
