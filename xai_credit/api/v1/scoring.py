"""POST /v1/score and POST /v1/assessment - credit scoring and explanation endpoints"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from xai_credit.api.dependencies import (
    get_narrative_client,
    get_request_id,
    get_session_id,
    get_submission_guard,
)
from xai_credit.api.submissions import SubmissionGuard
from xai_credit.api.v1.schemas import (
    ApplicantSchema,
    AssessmentResponse,
    ScoreRequest,
    ScoringResultSchema,
)
from xai_credit.domain.exceptions import PreconditionViolation, ServiceError, SubmissionInProgressError
from xai_credit.domain.models import ApplicantRecord, Decision, ModelType, ScoringResult
from xai_credit.domain.scoring import score
from xai_credit.infrastructure.clients.narrative import NarrativeClient
from xai_credit.infrastructure.observability.logging import log_assessment
from xai_credit.infrastructure.observability.metrics import record_score

router = APIRouter()

EXPLANATION_ERROR_MESSAGE = "An error occurred while generating the explanation. Please try again."


def score_applicant(record: ApplicantRecord, model_type: ModelType, request_id: str) -> ScoringResult:
    """Run the scoring engine and record the outcome"""
    start_time = time.time()
    result = score(record, model_type)

    duration_ms = (time.time() - start_time) * 1000
    record_score(result.model_type.value, result.decision is Decision.APPROVED, result.score)
    log_assessment(request_id, result.model_type.value, result.decision.value, result.score, duration_ms)
    return result


async def assess(
    record: ApplicantRecord,
    model_type: ModelType,
    narrative_client: NarrativeClient,
    request_id: str,
) -> AssessmentResponse:
    """
    Score an applicant, then ask the narrative provider for an explanation.

    A provider failure leaves the scoring result intact and is reported in
    ``explanation_error`` instead of failing the request.
    """
    result = score_applicant(record, model_type, request_id)

    explanation: Optional[str] = None
    explanation_error: Optional[str] = None
    try:
        explanation = await narrative_client.explain(record, result)
    except ServiceError as e:
        logging.error(f"Explanation failed: {e}", extra={"request_id": request_id})
        explanation_error = EXPLANATION_ERROR_MESSAGE

    return AssessmentResponse(
        applicant=ApplicantSchema.from_domain(record),
        result=ScoringResultSchema.from_domain(result),
        explanation=explanation,
        explanation_error=explanation_error,
    )


@router.post("/score", response_model=ScoringResultSchema)
def create_score(request_body: ScoreRequest, request: Request):
    """
    Score an applicant with the selected model variant.

    Pure computation; the narrative provider is not called.
    """
    request_id = get_request_id(request)

    try:
        record = request_body.applicant.to_domain()
        result = score_applicant(record, request_body.model_type, request_id)
        return ScoringResultSchema.from_domain(result)

    except PreconditionViolation as e:
        logging.warning(f"Invalid applicant: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/assessment", response_model=AssessmentResponse)
async def create_assessment(
    request_body: ScoreRequest,
    request: Request,
    session_id: Optional[str] = Depends(get_session_id),
    guard: SubmissionGuard = Depends(get_submission_guard),
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    """
    Score an applicant and generate a human-readable explanation.

    Flow:
    1. Validate the applicant record
    2. Run the selected scoring model
    3. Ask the narrative provider to explain the result
    4. Return result plus explanation, or result plus a user-facing error
    """
    request_id = get_request_id(request)

    try:
        record = request_body.applicant.to_domain()
        async with guard.hold(session_id):
            return await assess(record, request_body.model_type, narrative_client, request_id)

    except PreconditionViolation as e:
        logging.warning(f"Invalid applicant: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except SubmissionInProgressError as e:
        logging.warning(f"Overlapping submission: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
