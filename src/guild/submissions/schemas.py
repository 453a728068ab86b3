"""Schemas for activity submissions and review."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SubmitRequest(BaseModel):
    activity_id: str
    evidence_url: str | None = Field(None, max_length=500)
    submission_text: str | None = Field(None, max_length=10_000)


class ApproveRequest(BaseModel):
    quality_score: float
    review_notes: str | None = Field(None, max_length=2000)


class RejectSubmissionRequest(BaseModel):
    review_notes: str | None = Field(None, max_length=2000)


class SubmissionResponse(BaseModel):
    id: str
    account_id: str
    activity_id: str
    status: str
    evidence_url: str | None
    submission_text: str | None
    quality_score: float | None
    reward_amount: Decimal
    reviewed_by: str | None
    reviewed_at: datetime | None
    review_notes: str | None
    submitted_at: datetime

    model_config = {"from_attributes": True}
