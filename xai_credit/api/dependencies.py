"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Header, Request

from xai_credit.api.submissions import SubmissionGuard
from xai_credit.config import settings
from xai_credit.infrastructure.clients.narrative import NarrativeClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_id(x_session_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Session key for the in-flight guard, taken from the X-Session-ID header"""
    return x_session_id or None


def get_submission_guard(request: Request) -> SubmissionGuard:
    """Provide the application-wide submission guard"""
    return request.app.state.submission_guard


def get_narrative_client() -> NarrativeClient:
    """Provide narrative provider client instance"""
    return NarrativeClient(settings.genai_config())
