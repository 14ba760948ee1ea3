"""Service dependencies for FastAPI routes."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from callbridge.core.logging_config import get_logger
from callbridge.crm.ghl_client import GoHighLevelClient, get_crm_client
from callbridge.outreach.sms_gateway import SmsGateway, get_sms_gateway
from callbridge.voice.orchestrator import CallOrchestrator, get_call_orchestrator

LOGGER = get_logger(__name__)


def sms_gateway() -> SmsGateway:
    """FastAPI dependency that provides the SMS gateway."""
    return get_sms_gateway()


def call_orchestrator() -> CallOrchestrator:
    """FastAPI dependency that provides the call orchestrator."""
    return get_call_orchestrator()


def crm_client() -> GoHighLevelClient:
    """FastAPI dependency that provides the CRM client."""
    return get_crm_client()


async def request_body(request: Request) -> Dict[str, Any]:
    """
    Parse the request body as a flat mapping.

    JSON objects and form posts are accepted. An empty or unparseable body
    yields an empty mapping so handlers can still fall back to the query
    string.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw:
        return {}
    try:
        data = await request.json()
    except ValueError:
        LOGGER.warning(f"Ignoring unparseable request body on {request.url.path}")
        return {}
    return data if isinstance(data, dict) else {}


__all__ = ["sms_gateway", "call_orchestrator", "crm_client", "request_body"]
