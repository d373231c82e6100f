"""POST /v1/documents/assessment - score an applicant extracted from an uploaded document"""

import logging
import mimetypes
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic.alias_generators import to_camel

from xai_credit.api.dependencies import (
    get_narrative_client,
    get_request_id,
    get_session_id,
    get_submission_guard,
)
from xai_credit.api.submissions import SubmissionGuard
from xai_credit.api.v1.schemas import DocumentAssessmentResponse
from xai_credit.api.v1.scoring import assess
from xai_credit.config import settings
from xai_credit.domain.exceptions import (
    NoFieldsExtracted,
    PreconditionViolation,
    ServiceError,
    SubmissionInProgressError,
)
from xai_credit.domain.models import DEFAULT_APPLICANT, ModelType, merge_extracted_fields
from xai_credit.infrastructure.clients.narrative import SUPPORTED_DOCUMENT_TYPES, NarrativeClient

router = APIRouter()

EXTRACTION_ERROR_MESSAGE = (
    "Could not automatically parse the document. Please try again or use manual input."
)


def resolve_mime_type(file: UploadFile) -> Optional[str]:
    """Declared content type, falling back to a guess from the file name"""
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type in SUPPORTED_DOCUMENT_TYPES:
        return content_type

    guessed, _ = mimetypes.guess_type(file.filename or "")
    if guessed in SUPPORTED_DOCUMENT_TYPES:
        return guessed
    if (file.filename or "").lower().endswith(".md"):
        return "text/markdown"
    return None


@router.post("/documents/assessment", response_model=DocumentAssessmentResponse)
async def create_document_assessment(
    request: Request,
    file: UploadFile = File(..., description="Loan application document (.txt, .md or .pdf)"),
    model_type: ModelType = Form(default=ModelType.STANDARD),
    session_id: Optional[str] = Depends(get_session_id),
    guard: SubmissionGuard = Depends(get_submission_guard),
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    """
    Extract applicant fields from a document, then score and explain them.

    Flow:
    1. Check the upload type and size
    2. Ask the narrative provider to extract the six applicant fields
    3. Overlay extracted fields on the default applicant
    4. Score and explain as POST /v1/assessment does
    """
    request_id = get_request_id(request)

    mime_type = resolve_mime_type(file)
    if mime_type is None:
        raise HTTPException(status_code=415, detail=f"Unsupported document type: {file.content_type}")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded document is empty")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Uploaded document is too large")

    try:
        async with guard.hold(session_id):
            extracted = await narrative_client.extract_fields(content, mime_type)
            record = merge_extracted_fields(DEFAULT_APPLICANT, extracted)
            assessment = await assess(record, model_type, narrative_client, request_id)

        return DocumentAssessmentResponse(
            **assessment.model_dump(),
            extracted_fields=[to_camel(name) for name in extracted],
        )

    except NoFieldsExtracted as e:
        logging.warning(f"No fields extracted: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except PreconditionViolation as e:
        logging.warning(f"Invalid extracted applicant: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except SubmissionInProgressError as e:
        logging.warning(f"Overlapping submission: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except ServiceError as e:
        logging.error(f"Document extraction failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail=EXTRACTION_ERROR_MESSAGE)

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
