"""CRM tool callbacks invoked by the voice agent mid-call."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from callbridge.api.deps import crm_client, request_body
from callbridge.core.exceptions import CallBridgeError, CrmNotConfiguredError
from callbridge.core.logging_config import get_logger
from callbridge.core.utils import first_param
from callbridge.crm.ghl_client import GoHighLevelClient
from callbridge.outreach.phone import normalize_phone_number

router = APIRouter()
LOGGER = get_logger(__name__)


def _phone_param(request: Request, body: Dict[str, Any]) -> str | None:
    query = request.query_params
    return first_param(
        (body, "phoneNumber"), (body, "recipient"), (query, "recipient"), (query, "phoneNumber")
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/api/tag-user", response_model=None)
async def tag_user(
    request: Request,
    body: Dict[str, Any] = Depends(request_body),
    crm: GoHighLevelClient = Depends(crm_client),
) -> Dict[str, Any] | JSONResponse:
    """tagUser tool: find or create the caller's contact, then add a tag."""
    raw_phone = _phone_param(request, body)
    tag = first_param((body, "tag"), (request.query_params, "tag"))

    if not raw_phone or not tag:
        return _error(400, "Missing phoneNumber or tag")
    phone_number = normalize_phone_number(raw_phone)
    if phone_number is None:
        return _error(400, "Invalid phone number format")

    def _tag() -> str:
        contact = crm.find_or_create_contact(phone_number)
        crm.add_tag(contact.id, tag)
        return contact.id

    try:
        contact_id = await run_in_threadpool(_tag)
    except CrmNotConfiguredError as e:
        LOGGER.warning(f"tagUser called without CRM configuration: {e}")
        return _error(400, str(e))
    except CallBridgeError as e:
        LOGGER.error(f"Error tagging contact {phone_number}: {e}")
        return _error(500, f"Tagging failed: {e}")

    return {"success": True, "contactId": contact_id, "tag": tag}


@router.post("/api/add-contact", response_model=None)
async def add_contact(
    request: Request,
    body: Dict[str, Any] = Depends(request_body),
    crm: GoHighLevelClient = Depends(crm_client),
) -> Dict[str, Any] | JSONResponse:
    """Register a contact by phone number, reusing an existing match."""
    raw_phone = _phone_param(request, body)
    first_name = first_param((body, "firstName"), (request.query_params, "firstName"))

    if not raw_phone:
        return _error(400, "Missing phoneNumber")
    phone_number = normalize_phone_number(raw_phone)
    if phone_number is None:
        return _error(400, "Invalid phone number format")

    try:
        contact = await run_in_threadpool(crm.find_or_create_contact, phone_number, first_name)
    except CrmNotConfiguredError as e:
        LOGGER.warning(f"addContact called without CRM configuration: {e}")
        return _error(400, str(e))
    except CallBridgeError as e:
        LOGGER.error(f"Error adding contact {phone_number}: {e}")
        return _error(500, f"Contact registration failed: {e}")

    return {"success": True, "contactId": contact.id}
