"""GET /v1/presets - Example applicant profiles"""

from fastapi import APIRouter

from xai_credit.api.v1.schemas import ApplicantSchema, PresetsResponse
from xai_credit.domain.models import DEFAULT_APPLICANT, PRESETS

router = APIRouter()


@router.get("/presets", response_model=PresetsResponse)
def get_presets():
    """
    Retrieve the default form values and named example applicants.

    Returns:
        Default applicant plus Good / Borderline / Risky presets
    """
    return PresetsResponse(
        default=ApplicantSchema.from_domain(DEFAULT_APPLICANT),
        presets={name: ApplicantSchema.from_domain(record) for name, record in PRESETS.items()},
    )
