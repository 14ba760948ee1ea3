"""SMS routes: the sendSMS tool callback and the direct send endpoint."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from callbridge.api.deps import request_body, sms_gateway
from callbridge.core.exceptions import CallBridgeError, ValidationError
from callbridge.core.logging_config import get_logger
from callbridge.core.utils import first_param
from callbridge.outreach.sms_gateway import SmsGateway

router = APIRouter()
LOGGER = get_logger(__name__)


@router.post("/api/sms-webhook", response_model=None)
async def sms_webhook(
    request: Request,
    body: Dict[str, Any] = Depends(request_body),
    gateway: SmsGateway = Depends(sms_gateway),
) -> Dict[str, Any] | JSONResponse:
    """
    sendSMS tool callback invoked by the voice agent.

    Recipient lookup order: body.recipient, body.phoneNumber,
    query.phoneNumber, query.recipient. The message comes from the body,
    then the query string.
    """
    query = request.query_params
    recipient = first_param(
        (body, "recipient"), (body, "phoneNumber"), (query, "phoneNumber"), (query, "recipient")
    )
    message = first_param((body, "message"), (query, "message"))

    if not recipient or not message:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Missing recipient or message"},
        )

    try:
        message_sid = await run_in_threadpool(gateway.send, recipient, message)
    except ValidationError as e:
        LOGGER.warning(f"Rejected SMS webhook request: {e}")
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except CallBridgeError as e:
        LOGGER.error(f"Error sending SMS in webhook: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": f"SMS send failed: {e}"},
        )

    return {"success": True, "messageSid": message_sid, "message": "SMS sent successfully"}


@router.post("/send-sms", response_model=None)
async def send_sms(
    body: Dict[str, Any] = Depends(request_body),
    gateway: SmsGateway = Depends(sms_gateway),
) -> Dict[str, Any] | JSONResponse:
    """Send an SMS directly; `phoneNumber` and `message` come from the body."""
    phone_number = first_param((body, "phoneNumber"))
    message = first_param((body, "message"))

    if not phone_number or not message:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing required parameters: phoneNumber and message"},
        )

    try:
        message_sid = await run_in_threadpool(gateway.send, phone_number, message)
    except ValidationError as e:
        LOGGER.warning(f"Rejected SMS request: {e}")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid SMS request", "message": str(e)},
        )
    except CallBridgeError as e:
        LOGGER.error(f"Error sending SMS: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to send SMS", "message": str(e)},
        )

    return {"success": True, "message": "SMS sent successfully", "messageSid": message_sid}
