"""POST /v1/chat - loan manager questions about a scored application"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from xai_credit.api.dependencies import (
    get_narrative_client,
    get_request_id,
    get_session_id,
    get_submission_guard,
)
from xai_credit.api.submissions import SubmissionGuard
from xai_credit.api.v1.schemas import ChatMessageSchema, ChatRequest, ChatResponse
from xai_credit.domain.exceptions import PreconditionViolation, ServiceError, SubmissionInProgressError
from xai_credit.domain.scoring import score
from xai_credit.infrastructure.clients.narrative import NarrativeClient

router = APIRouter()

CHAT_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."


@router.post("/chat", response_model=ChatResponse)
async def create_chat_reply(
    request_body: ChatRequest,
    request: Request,
    session_id: Optional[str] = Depends(get_session_id),
    guard: SubmissionGuard = Depends(get_submission_guard),
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    """
    Answer a follow-up question using only the applicant data and its scoring result.

    The result is recomputed from the applicant and model type; scoring is deterministic,
    so it matches what the caller was shown.
    """
    request_id = get_request_id(request)

    try:
        record = request_body.applicant.to_domain()
        result = score(record, request_body.model_type)
        history = [message.to_domain() for message in request_body.history]

        async with guard.hold(session_id):
            reply = await narrative_client.chat(record, result, history)

        return ChatResponse(message=ChatMessageSchema(role="model", text=reply))

    except PreconditionViolation as e:
        logging.warning(f"Invalid chat request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except SubmissionInProgressError as e:
        logging.warning(f"Overlapping submission: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except ServiceError as e:
        logging.error(f"Chat failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail=CHAT_ERROR_MESSAGE)

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
