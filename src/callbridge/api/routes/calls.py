"""Call initiation routes."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from callbridge.api.deps import call_orchestrator, request_body
from callbridge.core.exceptions import CallBridgeError, MissingOrInvalidParametersError
from callbridge.core.logging_config import get_logger
from callbridge.core.utils import first_param
from callbridge.voice.orchestrator import CallOrchestrator
from callbridge.voice.session_builder import DEFAULT_USER_TYPE

router = APIRouter()
LOGGER = get_logger(__name__)


@router.api_route("/initiate-call", methods=["GET", "POST"], response_model=None)
async def initiate_call(
    request: Request,
    body: Dict[str, Any] = Depends(request_body),
    orchestrator: CallOrchestrator = Depends(call_orchestrator),
) -> Dict[str, Any] | JSONResponse:
    """
    Start an outbound sales call.

    Parameters `clientName`, `phoneNumber` and `userType` are read from the
    query string first, then the body. `userType` defaults to "non-VIP".
    """
    query = request.query_params
    client_name = first_param((query, "clientName"), (body, "clientName"))
    phone_number = first_param((query, "phoneNumber"), (body, "phoneNumber"))
    user_type = first_param((query, "userType"), (body, "userType")) or DEFAULT_USER_TYPE

    try:
        call_sid = await run_in_threadpool(
            orchestrator.initiate, client_name, phone_number, user_type
        )
    except MissingOrInvalidParametersError as e:
        LOGGER.warning(f"Rejected call request: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)})
    except CallBridgeError as e:
        LOGGER.error(f"Error in initiate-call: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to initiate call", "message": str(e)},
        )

    return {"success": True, "message": "Call initiated successfully", "callSid": call_sid}
