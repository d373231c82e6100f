"""Prompt construction for the narrative provider"""

from typing import Any, Dict

from xai_credit.domain.models import FACTOR_NAMES, ApplicantRecord, ScoringResult
from xai_credit.domain.scoring import top_factors
from xai_credit.utils.formatting import format_inr, format_plain

# Camel-case keys are what the provider sees in the extraction schema
EXTRACTION_FIELDS: Dict[str, str] = {
    "creditUtilization": "credit_utilization",
    "paymentHistoryMonths": "payment_history_months",
    "debtToIncomeRatio": "debt_to_income_ratio",
    "recentInquiries": "recent_inquiries",
    "annualIncome": "annual_income",
    "loanAmount": "loan_amount",
}

FACTOR_LABELS: Dict[str, str] = {
    "credit_utilization": "Credit Utilization",
    "payment_history_months": "Payment History",
    "debt_to_income_ratio": "DTI Ratio",
    "recent_inquiries": "Recent Inquiries",
    "annual_income": "Annual Income",
    "loan_amount": "Loan Amount",
}

EXPLANATION_INSTRUCTIONS = """\
You are an expert and empathetic loan officer AI assistant. Your task is to explain a credit decision to a customer in a clear, helpful, and human-readable way.

**Instructions:**
1. Your tone must be professional, reassuring, and educational.
2. Use ONLY the data provided below. Do NOT invent or assume any information.
3. Start the explanation by clearly stating the decision (Approved or Denied).
4. Identify the top 2-3 factors that most influenced the decision, based on the 'impact' score (large positive or negative numbers are most significant).
5. Explain *how* each key factor influenced the decision in simple terms. For example, "A high credit utilization of X% suggests..."
6. If the decision is 'Denied', provide constructive, actionable advice on how the applicant could improve their profile for a future application, based directly on the negative factors identified.
7. Keep the explanation concise and easy to understand for someone with no financial background.
8. Structure your response with clear paragraphs. Do not use markdown lists."""

CHAT_INSTRUCTIONS = """\
You are an expert financial analyst AI assisting a loan manager. Your task is to answer questions about a loan application based *only* on the provided data. Be concise, data-driven, and professional. Do not offer opinions or information outside of the data provided."""

EXTRACTION_PROMPT = """\
You are an intelligent document parsing AI. Your task is to read the following loan application document (which could be a text file or a PDF) and extract the specified financial details.
- If a value is not found, omit the key from the output.
- Extract only numerical values. For example, for "₹ 45,00,000", extract 4500000.
- For "Credit Utilization", look for a percentage.
- For "Payment History", look for a number of months.
- For "DTI", look for a percentage.
- For "Recent Inquiries", find the number of inquiries.
- For "Annual Income", find the total annual income figure in INR.
- For "Loan Amount Requested", find the required loan amount in INR.

Analyze the provided document and respond with the extracted data."""


def applicant_block(record: ApplicantRecord) -> str:
    return "\n".join(
        [
            "**Applicant Data:**",
            f"- Credit Utilization Ratio: {format_plain(record.credit_utilization)}%",
            f"- Payment History Length: {format_plain(record.payment_history_months)} months",
            f"- Debt-to-Income (DTI) Ratio: {format_plain(record.debt_to_income_ratio)}%",
            f"- Recent Credit Inquiries: {record.recent_inquiries}",
            f"- Annual Income: ₹{format_inr(record.annual_income)}",
            f"- Loan Amount Required: ₹{format_inr(record.loan_amount)}",
        ]
    )


def model_output_block(result: ScoringResult) -> str:
    lines = [
        "**ML Model Output:**",
        f"- Final Decision: {result.decision.value}",
        f"- Calculated Credit Score: {result.score}",
        f"- Model Used: {result.model_type.display_name}",
        "- Key Factor Impacts (a positive number improved the score, a negative number lowered it):",
    ]
    for name in FACTOR_NAMES:
        impact = result.feature_importance[name].impact
        lines.append(f"  - {FACTOR_LABELS[name]} Impact: {impact:.0f} points")
    leading = ", ".join(FACTOR_LABELS[name] for name in top_factors(result))
    lines.append(f"- Most Influential Factors: {leading}")
    return "\n".join(lines)


def build_explanation_prompt(record: ApplicantRecord, result: ScoringResult) -> str:
    return "\n\n".join(
        [
            EXPLANATION_INSTRUCTIONS,
            applicant_block(record),
            model_output_block(result),
            "Begin the explanation now.",
        ]
    )


def build_chat_instruction(record: ApplicantRecord, result: ScoringResult) -> str:
    return "\n\n".join([CHAT_INSTRUCTIONS, applicant_block(record), model_output_block(result)])


def extraction_schema() -> Dict[str, Any]:
    """Response schema asking for any subset of the six numeric fields"""
    return {
        "type": "OBJECT",
        "properties": {key: {"type": "NUMBER"} for key in EXTRACTION_FIELDS},
    }
