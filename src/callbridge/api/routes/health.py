"""Health check routes."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from callbridge.core.config import get_settings
from callbridge.core.utils import utcnow

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check - always returns OK."""
    return {"status": "ok"}


@router.get("/health/detailed")
async def detailed_health_check() -> Dict[str, Any]:
    """Configuration status of every provider. Makes no outbound calls."""
    settings = get_settings()
    missing = settings.missing_required()
    return {
        "status": "ok" if not missing else "misconfigured",
        "timestamp": utcnow().isoformat(),
        "environment": settings.environment,
        "missing_configuration": missing,
        "public_base_url": settings.public_base_url(),
        "public_base_url_is_local": settings.is_public_base_url_local(),
        "checks": {
            "twilio": {
                "configured": settings.is_twilio_enabled(),
                "account_sid": bool(settings.twilio_account_sid),
                "auth_token": bool(settings.twilio_auth_token),
                "from_number": bool(settings.twilio_phone_number),
            },
            "ultravox": {"configured": settings.is_ultravox_enabled()},
            "gohighlevel": {"configured": settings.is_crm_enabled()},
            "add_contact_tool": {"configured": settings.is_add_contact_tool_enabled()},
        },
    }
