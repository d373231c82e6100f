"""Risk scoring engine - simulated black-box models behind the credit decision"""

import math
from typing import Callable, Dict, List

from xai_credit.domain.models import (
    FACTOR_NAMES,
    ApplicantRecord,
    Decision,
    FeatureImpact,
    ModelType,
    ScoringResult,
)

BASELINE_SCORE = 650
MIN_SCORE = 300
MAX_SCORE = 850
APPROVAL_THRESHOLD = 670

# Shared by both variants, not derived from a record's realized impacts
TOTAL_IMPACT_RANGE = 450

# Deep-learning variant: flat penalty when DTI and utilization are both high
INTERACTION_DTI_THRESHOLD = 40
INTERACTION_UTILIZATION_THRESHOLD = 60
INTERACTION_PENALTY = 50

# Past this loan-to-income ratio either loan term alone pins the score to MIN_SCORE
MAX_LOAN_TO_INCOME = 1_000_000.0


def loan_to_income(record: ApplicantRecord) -> float:
    return min(record.loan_amount / record.annual_income, MAX_LOAN_TO_INCOME)


def standard_impacts(record: ApplicantRecord) -> Dict[str, float]:
    """
    Per-factor point deltas for the standard model.

    Every factor is scored independently of the others:
    - Utilization: quadratic penalty, up to -200 at 100%
    - Payment history: flat -80 under a year, ramps to 0 at 36 months, bonus capped at +100
    - DTI: linear penalty, up to -100
    - Inquiries: -15 each
    - Income: +10 per 10 lakh, capped at +100 (1 crore)
    - Loan amount: penalty once loan-to-income exceeds 0.5
    """
    months = record.payment_history_months
    if months < 12:
        history_impact = -80.0
    elif months < 36:
        history_impact = (months - 12) * 2 - 40
    else:
        history_impact = min((months - 36) * 1.5, 100)

    lti = loan_to_income(record)

    return {
        "credit_utilization": -((record.credit_utilization / 100) ** 2) * 200,
        "payment_history_months": history_impact,
        "debt_to_income_ratio": -(record.debt_to_income_ratio / 100) * 100,
        "recent_inquiries": -record.recent_inquiries * 15.0,
        "annual_income": min(record.annual_income / 1_000_000, 10) * 10,
        "loan_amount": -(max(0.0, lti - 0.5) ** 1.5) * 50,
    }


def deep_learning_impacts(record: ApplicantRecord) -> Dict[str, float]:
    """
    Per-factor point deltas for the deep-learning model.

    Non-linear terms with cross-factor interactions: income softens the DTI penalty,
    short history amplifies the inquiry penalty, and DTI amplifies the loan-to-income penalty.
    """
    # ln and sqrt are undefined or unbounded below one month
    months = max(1.0, record.payment_history_months)
    income_in_lakhs = record.annual_income / 100_000
    lti = loan_to_income(record)

    return {
        "credit_utilization": -((record.credit_utilization / 100) ** 3) * 250,
        "payment_history_months": math.log(months) * 25 - 50,
        "debt_to_income_ratio": -(record.debt_to_income_ratio / 100) * (150 - min(income_in_lakhs, 100)),
        "recent_inquiries": -record.recent_inquiries * (10 + 40 / math.sqrt(months)),
        "annual_income": math.tanh((record.annual_income - 600_000) / 2_000_000) * 80,
        "loan_amount": -(lti**2) * (50 + record.debt_to_income_ratio),
    }


def deep_learning_adjustment(record: ApplicantRecord) -> float:
    """Score adjustment not attributed to any single factor"""
    if (
        record.debt_to_income_ratio > INTERACTION_DTI_THRESHOLD
        and record.credit_utilization > INTERACTION_UTILIZATION_THRESHOLD
    ):
        return -INTERACTION_PENALTY
    return 0.0


def finalize_score(raw_score: float) -> int:
    """Round once (halves round up), then clamp to the reportable range"""
    if math.isinf(raw_score):
        return MIN_SCORE if raw_score < 0 else MAX_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, math.floor(raw_score + 0.5)))


def determine_decision(score: int) -> Decision:
    return Decision.APPROVED if score >= APPROVAL_THRESHOLD else Decision.DENIED


def _build_result(impacts: Dict[str, float], adjustment: float, model_type: ModelType) -> ScoringResult:
    raw_score = BASELINE_SCORE
    for name in FACTOR_NAMES:
        raw_score += impacts[name]
    raw_score += adjustment

    final_score = finalize_score(raw_score)

    return ScoringResult(
        score=final_score,
        decision=determine_decision(final_score),
        feature_importance={
            name: FeatureImpact(
                impact=impacts[name],
                importance=abs(impacts[name]) / TOTAL_IMPACT_RANGE,
            )
            for name in FACTOR_NAMES
        },
        model_type=model_type,
    )


def score_standard(record: ApplicantRecord) -> ScoringResult:
    return _build_result(standard_impacts(record), 0.0, ModelType.STANDARD)


def score_deep_learning(record: ApplicantRecord) -> ScoringResult:
    return _build_result(
        deep_learning_impacts(record),
        deep_learning_adjustment(record),
        ModelType.DEEP_LEARNING,
    )


_VARIANTS: Dict[ModelType, Callable[[ApplicantRecord], ScoringResult]] = {
    ModelType.STANDARD: score_standard,
    ModelType.DEEP_LEARNING: score_deep_learning,
}


def score(record: ApplicantRecord, model_type: ModelType = ModelType.STANDARD) -> ScoringResult:
    """
    Main entry point: score an applicant with the selected model variant.

    Pure and deterministic. Record validity is enforced when the record is built.
    """
    return _VARIANTS[ModelType(model_type)](record)


def top_factors(result: ScoringResult, n: int = 3) -> List[str]:
    """Factor names ordered by absolute impact, largest first"""
    ranked = sorted(
        FACTOR_NAMES,
        key=lambda name: (-abs(result.feature_importance[name].impact), FACTOR_NAMES.index(name)),
    )
    return ranked[:n]
