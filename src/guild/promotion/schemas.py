"""Request/response schemas for eligibility and promotion."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from guild.accounts.schemas import AccountResponse
from guild.promotion.eligibility import PromotionEligibility


class CriteriaResponse(BaseModel):
    attendance_count: int
    attendance_required: int
    submission_count: int
    submission_required: int
    quality_score: float
    quality_required: float


class EligibilityResponse(BaseModel):
    is_eligible: bool
    criteria: CriteriaResponse
    reasons: list[str]

    @classmethod
    def from_result(cls, result: PromotionEligibility) -> EligibilityResponse:
        return cls.model_validate(result.to_dict())


class PromoteRequest(BaseModel):
    enrollment_id: str
    notes: str | None = Field(None, max_length=1000)


class PromoteResponse(BaseModel):
    account: AccountResponse
    enrollment_id: str
    promoted_at: datetime
    eligibility: EligibilityResponse
    warnings: list[str]
