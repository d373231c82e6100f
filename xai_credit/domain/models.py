"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from xai_credit.domain.exceptions import NoFieldsExtracted, PreconditionViolation

# Factor order is also the tie-break order when ranking impacts
FACTOR_NAMES: Tuple[str, ...] = (
    "credit_utilization",
    "payment_history_months",
    "debt_to_income_ratio",
    "recent_inquiries",
    "annual_income",
    "loan_amount",
)


class Decision(str, Enum):
    """Binary credit outcome"""

    APPROVED = "Approved"
    DENIED = "Denied"


class ModelType(str, Enum):
    """Simulated black-box model variant"""

    STANDARD = "standard"
    DEEP_LEARNING = "deepLearning"

    @property
    def display_name(self) -> str:
        if self is ModelType.STANDARD:
            return "Standard Risk Model"
        return "Deep Learning Model"


@dataclass(frozen=True)
class ApplicantRecord:
    """Financial profile of one loan applicant, validated on construction"""

    credit_utilization: float  # percent, 0-100
    payment_history_months: float
    debt_to_income_ratio: float  # percent, 0-100
    recent_inquiries: int  # last 6 months
    annual_income: float  # INR
    loan_amount: float  # INR

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            try:
                finite = math.isfinite(value)
            except (TypeError, OverflowError):
                finite = False
            if not finite:
                raise PreconditionViolation(f"{f.name} must be a finite number, got {value!r}")

        # Loan-to-income divides by income
        if self.annual_income <= 0:
            raise PreconditionViolation(f"annual_income must be positive, got {self.annual_income}")
        if not 0 <= self.credit_utilization <= 100:
            raise PreconditionViolation(
                f"credit_utilization must be within [0, 100], got {self.credit_utilization}"
            )
        if not 0 <= self.debt_to_income_ratio <= 100:
            raise PreconditionViolation(
                f"debt_to_income_ratio must be within [0, 100], got {self.debt_to_income_ratio}"
            )
        if self.payment_history_months < 0:
            raise PreconditionViolation(
                f"payment_history_months must not be negative, got {self.payment_history_months}"
            )
        if isinstance(self.recent_inquiries, bool) or not isinstance(self.recent_inquiries, int):
            raise PreconditionViolation(
                f"recent_inquiries must be an integer, got {self.recent_inquiries!r}"
            )
        if self.recent_inquiries < 0:
            raise PreconditionViolation(f"recent_inquiries must not be negative, got {self.recent_inquiries}")
        if self.loan_amount < 0:
            raise PreconditionViolation(f"loan_amount must not be negative, got {self.loan_amount}")

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class FeatureImpact:
    """Signed point contribution of one factor and its normalized magnitude"""

    impact: float
    importance: float


@dataclass(frozen=True)
class ScoringResult:
    """Output of the scoring engine"""

    score: int
    decision: Decision
    feature_importance: Mapping[str, FeatureImpact]
    model_type: ModelType

    def __post_init__(self) -> None:
        # Breakdown is read-only
        if not isinstance(self.feature_importance, MappingProxyType):
            object.__setattr__(self, "feature_importance", MappingProxyType(dict(self.feature_importance)))


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a conversation with the narrative provider"""

    role: str  # "user" or "model"
    text: str


DEFAULT_APPLICANT = ApplicantRecord(
    credit_utilization=45,
    payment_history_months=18,
    debt_to_income_ratio=30,
    recent_inquiries=3,
    annual_income=4_500_000,
    loan_amount=1_000_000,
)

PRESETS: Mapping[str, ApplicantRecord] = MappingProxyType(
    {
        "Good Applicant": ApplicantRecord(
            credit_utilization=15,
            payment_history_months=84,
            debt_to_income_ratio=25,
            recent_inquiries=1,
            annual_income=8_000_000,
            loan_amount=2_000_000,
        ),
        "Borderline": ApplicantRecord(
            credit_utilization=55,
            payment_history_months=22,
            debt_to_income_ratio=40,
            recent_inquiries=3,
            annual_income=5_000_000,
            loan_amount=2_500_000,
        ),
        "Risky Applicant": ApplicantRecord(
            credit_utilization=92,
            payment_history_months=9,
            debt_to_income_ratio=55,
            recent_inquiries=6,
            annual_income=3_000_000,
            loan_amount=1_500_000,
        ),
    }
)


def merge_extracted_fields(base: ApplicantRecord, extracted: Mapping[str, float]) -> ApplicantRecord:
    """
    Overlay fields parsed from a document on top of a base record.

    Raises:
        NoFieldsExtracted: If nothing usable was parsed
        PreconditionViolation: If the merged record is invalid
    """
    known = {name: value for name, value in extracted.items() if name in FACTOR_NAMES}
    if not known:
        raise NoFieldsExtracted(
            "Could not extract any required fields from the document. "
            "Please ensure it contains relevant financial information."
        )

    inquiries = known.get("recent_inquiries")
    if isinstance(inquiries, float) and inquiries.is_integer():
        known["recent_inquiries"] = int(inquiries)

    return replace(base, **known)
