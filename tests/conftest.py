"""Pytest fixtures for testing"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from xai_credit.api.dependencies import get_narrative_client
from xai_credit.api.main import create_app
from xai_credit.domain.models import PRESETS, ApplicantRecord
from xai_credit.infrastructure.clients.narrative import NarrativeClient


@pytest.fixture
def narrative_client() -> AsyncMock:
    """Stand-in narrative provider; no test reaches a live backend"""
    mock = AsyncMock(spec=NarrativeClient)
    mock.explain.return_value = "Your application was approved."
    mock.chat.return_value = "The largest factor was annual income."
    mock.extract_fields.return_value = {}
    return mock


@pytest.fixture
def client(narrative_client: AsyncMock) -> TestClient:
    """Create FastAPI test client with the narrative provider stubbed out"""
    app = create_app()
    app.dependency_overrides[get_narrative_client] = lambda: narrative_client
    return TestClient(app)


@pytest.fixture
def good_applicant() -> ApplicantRecord:
    return PRESETS["Good Applicant"]


@pytest.fixture
def risky_applicant() -> ApplicantRecord:
    return PRESETS["Risky Applicant"]


@pytest.fixture
def good_applicant_payload() -> dict:
    """Good Applicant preset as it appears on the wire"""
    return {
        "creditUtilization": 15,
        "paymentHistoryMonths": 84,
        "debtToIncomeRatio": 25,
        "recentInquiries": 1,
        "annualIncome": 8000000,
        "loanAmount": 2000000,
    }


@pytest.fixture
def risky_applicant_payload() -> dict:
    return {
        "creditUtilization": 92,
        "paymentHistoryMonths": 9,
        "debtToIncomeRatio": 55,
        "recentInquiries": 6,
        "annualIncome": 3000000,
        "loanAmount": 1500000,
    }
