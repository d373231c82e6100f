"""Pydantic schemas for API request/response validation"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from xai_credit.domain.models import (
    ApplicantRecord,
    ChatMessage,
    Decision,
    ModelType,
    ScoringResult,
)


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


class ApplicantSchema(CamelModel):
    """Applicant financial profile"""

    model_config = ConfigDict(allow_inf_nan=False)

    credit_utilization: float = Field(..., ge=0, le=100, description="Credit utilization, percent")
    payment_history_months: float = Field(..., ge=0, description="Length of payment history in months")
    debt_to_income_ratio: float = Field(..., ge=0, le=100, description="Debt-to-income ratio, percent")
    recent_inquiries: int = Field(..., ge=0, description="Credit inquiries in the last 6 months")
    annual_income: float = Field(..., gt=0, description="Annual income in INR")
    loan_amount: float = Field(..., ge=0, description="Requested loan amount in INR")

    def to_domain(self) -> ApplicantRecord:
        return ApplicantRecord(**self.model_dump(by_alias=False))

    @classmethod
    def from_domain(cls, record: ApplicantRecord) -> "ApplicantSchema":
        return cls(**record.as_dict())


class FeatureImpactSchema(CamelModel):
    impact: float
    importance: float


class ScoringResultSchema(CamelModel):
    """Scoring engine output, feature keys in camelCase"""

    score: int
    decision: Decision
    feature_importance: Dict[str, FeatureImpactSchema]
    model_type: ModelType

    @classmethod
    def from_domain(cls, result: ScoringResult) -> "ScoringResultSchema":
        return cls(
            score=result.score,
            decision=result.decision,
            feature_importance={
                to_camel(name): FeatureImpactSchema(impact=fi.impact, importance=fi.importance)
                for name, fi in result.feature_importance.items()
            },
            model_type=result.model_type,
        )


class ScoreRequest(CamelModel):
    """Request body for POST /v1/score and POST /v1/assessment"""

    applicant: ApplicantSchema
    model_type: ModelType = ModelType.STANDARD


class AssessmentResponse(CamelModel):
    """Response for POST /v1/assessment"""

    applicant: ApplicantSchema
    result: ScoringResultSchema
    explanation: Optional[str] = None
    explanation_error: Optional[str] = None


class DocumentAssessmentResponse(AssessmentResponse):
    """Response for POST /v1/documents/assessment"""

    extracted_fields: List[str]


class ChatMessageSchema(CamelModel):
    role: Literal["user", "model"]
    text: str = Field(..., min_length=1)

    def to_domain(self) -> ChatMessage:
        return ChatMessage(role=self.role, text=self.text)


class ChatRequest(ScoreRequest):
    """Request body for POST /v1/chat"""

    history: List[ChatMessageSchema] = Field(..., min_length=1)

    @model_validator(mode="after")
    def ends_with_user_turn(self) -> "ChatRequest":
        if self.history[-1].role != "user":
            raise ValueError("history must end with a user message")
        return self


class ChatResponse(CamelModel):
    """Response for POST /v1/chat"""

    message: ChatMessageSchema


class PresetsResponse(CamelModel):
    """Response for GET /v1/presets"""

    default: ApplicantSchema
    presets: Dict[str, ApplicantSchema]
