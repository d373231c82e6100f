"""Integration tests for API endpoints"""

import json
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from xai_credit.domain.exceptions import ServiceError
from xai_credit.domain.models import DEFAULT_APPLICANT, ModelType, PRESETS
from xai_credit.domain.scoring import score

CAMEL_FACTORS = {
    "creditUtilization",
    "paymentHistoryMonths",
    "debtToIncomeRatio",
    "recentInquiries",
    "annualIncome",
    "loanAmount",
}


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "xai_credit_scoring_total" in response.text
    assert "narrative_failures_total" in response.text


def test_request_id_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    minted = client.get("/health")
    assert minted.headers["X-Request-ID"]


def test_presets_endpoint(client: TestClient):
    response = client.get("/v1/presets")

    assert response.status_code == 200
    data = response.json()
    assert data["default"]["annualIncome"] == 4500000
    assert set(data["presets"]) == {"Good Applicant", "Borderline", "Risky Applicant"}
    assert data["presets"]["Risky Applicant"]["creditUtilization"] == 92


def test_score_endpoint_standard(client: TestClient, good_applicant_payload: dict, narrative_client: AsyncMock):
    """Test POST /v1/score with the Good Applicant preset"""
    response = client.post("/v1/score", json={"applicant": good_applicant_payload, "modelType": "standard"})

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 758
    assert data["decision"] == "Approved"
    assert data["modelType"] == "standard"
    assert set(data["featureImportance"]) == CAMEL_FACTORS
    assert data["featureImportance"]["paymentHistoryMonths"]["impact"] == 72
    narrative_client.explain.assert_not_called()


def test_score_endpoint_defaults_to_standard(client: TestClient, good_applicant_payload: dict):
    response = client.post("/v1/score", json={"applicant": good_applicant_payload})

    assert response.status_code == 200
    assert response.json()["modelType"] == "standard"


def test_score_endpoint_deep_learning(client: TestClient, risky_applicant_payload: dict):
    response = client.post("/v1/score", json={"applicant": risky_applicant_payload, "modelType": "deepLearning"})

    assert response.status_code == 200
    data = response.json()
    assert data["decision"] == "Denied"
    assert data["score"] == 300
    assert data["modelType"] == "deepLearning"


def test_score_endpoint_rejects_non_positive_income(client: TestClient, good_applicant_payload: dict):
    payload = {**good_applicant_payload, "annualIncome": 0}
    response = client.post("/v1/score", json={"applicant": payload})

    assert response.status_code == 422


def test_score_endpoint_rejects_non_finite_numbers(client: TestClient, good_applicant_payload: dict):
    body = json.dumps({"applicant": {**good_applicant_payload, "loanAmount": float("inf")}})
    assert "Infinity" in body

    response = client.post("/v1/score", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 422


def test_score_endpoint_extreme_loan_to_income(client: TestClient, good_applicant_payload: dict):
    payload = {**good_applicant_payload, "annualIncome": 1, "loanAmount": 1e200}

    for model_type in ("standard", "deepLearning"):
        response = client.post("/v1/score", json={"applicant": payload, "modelType": model_type})

        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 300
        assert data["decision"] == "Denied"
        assert data["featureImportance"]["loanAmount"]["impact"] < 0


def test_score_endpoint_unexpected_error(client: TestClient, good_applicant_payload: dict, monkeypatch):
    def broken_score(record, model_type):
        raise RuntimeError("engine exploded")

    monkeypatch.setattr("xai_credit.api.v1.scoring.score", broken_score)

    response = client.post("/v1/score", json={"applicant": good_applicant_payload})

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"


def test_score_endpoint_rejects_unknown_model(client: TestClient, good_applicant_payload: dict):
    response = client.post("/v1/score", json={"applicant": good_applicant_payload, "modelType": "randomForest"})

    assert response.status_code == 422


def test_assessment_endpoint_with_explanation(
    client: TestClient,
    good_applicant_payload: dict,
    narrative_client: AsyncMock,
):
    """Test POST /v1/assessment returns result and explanation"""
    narrative_client.explain.return_value = "Congratulations, you were approved."

    response = client.post("/v1/assessment", json={"applicant": good_applicant_payload})

    assert response.status_code == 200
    data = response.json()
    assert data["result"]["decision"] == "Approved"
    assert data["explanation"] == "Congratulations, you were approved."
    assert data["explanationError"] is None
    assert data["applicant"] == good_applicant_payload

    record, result = narrative_client.explain.call_args.args
    assert record == PRESETS["Good Applicant"]
    assert result == score(PRESETS["Good Applicant"], ModelType.STANDARD)


def test_assessment_survives_narrative_failure(
    client: TestClient,
    risky_applicant_payload: dict,
    narrative_client: AsyncMock,
):
    """Provider failure is reported, scoring result is still returned"""
    narrative_client.explain.side_effect = ServiceError("GenAI API error: 503")

    response = client.post("/v1/assessment", json={"applicant": risky_applicant_payload})

    assert response.status_code == 200
    data = response.json()
    assert data["explanation"] is None
    assert "error occurred" in data["explanationError"]
    assert data["result"]["decision"] == "Denied"
    assert data["result"]["score"] == 300


def test_assessment_rejected_while_session_busy(client: TestClient, good_applicant_payload: dict):
    guard = client.app.state.submission_guard
    guard.begin("session-1")
    try:
        busy = client.post(
            "/v1/assessment",
            json={"applicant": good_applicant_payload},
            headers={"X-Session-ID": "session-1"},
        )
        other = client.post(
            "/v1/assessment",
            json={"applicant": good_applicant_payload},
            headers={"X-Session-ID": "session-2"},
        )
    finally:
        guard.finish("session-1")

    assert busy.status_code == 409
    assert other.status_code == 200
    assert not guard.is_pending("session-2")


def test_chat_endpoint(client: TestClient, good_applicant_payload: dict, narrative_client: AsyncMock):
    """Test POST /v1/chat returns the next assistant turn"""
    narrative_client.chat.return_value = "Annual income contributed +80 points."

    response = client.post(
        "/v1/chat",
        json={
            "applicant": good_applicant_payload,
            "modelType": "standard",
            "history": [{"role": "user", "text": "What helped the most?"}],
        },
    )

    assert response.status_code == 200
    assert response.json()["message"] == {"role": "model", "text": "Annual income contributed +80 points."}

    record, result, history = narrative_client.chat.call_args.args
    assert result.score == 758
    assert [m.text for m in history] == ["What helped the most?"]


def test_chat_requires_trailing_user_turn(client: TestClient, good_applicant_payload: dict):
    response = client.post(
        "/v1/chat",
        json={
            "applicant": good_applicant_payload,
            "history": [{"role": "user", "text": "Hi"}, {"role": "model", "text": "Hello"}],
        },
    )

    assert response.status_code == 422


def test_chat_provider_failure(client: TestClient, good_applicant_payload: dict, narrative_client: AsyncMock):
    narrative_client.chat.side_effect = ServiceError("GenAI API timeout after 30.0s")

    response = client.post(
        "/v1/chat",
        json={"applicant": good_applicant_payload, "history": [{"role": "user", "text": "Why?"}]},
    )

    assert response.status_code == 503
    assert response.json()["detail"] == "Sorry, I encountered an error. Please try again."


def test_document_assessment_merges_over_defaults(client: TestClient, narrative_client: AsyncMock):
    """Test POST /v1/documents/assessment with a partially filled document"""
    narrative_client.extract_fields.return_value = {"annual_income": 9_000_000, "recent_inquiries": 1.0}
    narrative_client.explain.return_value = "Explained."

    response = client.post(
        "/v1/documents/assessment",
        files={"file": ("application.txt", b"Annual income: 90,00,000\nInquiries: 1", "text/plain")},
        data={"model_type": "deepLearning"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["extractedFields"] == ["annualIncome", "recentInquiries"]
    assert data["applicant"]["annualIncome"] == 9_000_000
    assert data["applicant"]["recentInquiries"] == 1
    assert data["applicant"]["creditUtilization"] == DEFAULT_APPLICANT.credit_utilization
    assert data["result"]["modelType"] == "deepLearning"
    assert data["explanation"] == "Explained."

    content, mime_type = narrative_client.extract_fields.call_args.args
    assert content == b"Annual income: 90,00,000\nInquiries: 1"
    assert mime_type == "text/plain"


def test_document_without_fields(client: TestClient, narrative_client: AsyncMock):
    narrative_client.extract_fields.return_value = {}

    response = client.post(
        "/v1/documents/assessment",
        files={"file": ("notes.md", b"# Shopping list", "text/markdown")},
    )

    assert response.status_code == 422
    assert "Could not extract" in response.json()["detail"]
    narrative_client.explain.assert_not_called()


def test_document_unsupported_type(client: TestClient, narrative_client: AsyncMock):
    response = client.post(
        "/v1/documents/assessment",
        files={"file": ("scan.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 415
    narrative_client.extract_fields.assert_not_called()


def test_document_empty_upload(client: TestClient):
    response = client.post(
        "/v1/documents/assessment",
        files={"file": ("empty.txt", b"", "text/plain")},
    )

    assert response.status_code == 400


def test_document_extraction_failure(client: TestClient, narrative_client: AsyncMock):
    narrative_client.extract_fields.side_effect = ServiceError("GenAI API error: 500")

    response = client.post(
        "/v1/documents/assessment",
        files={"file": ("application.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 503
    assert "manual input" in response.json()["detail"]
