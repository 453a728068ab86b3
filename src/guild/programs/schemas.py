"""Schemas for program enrollment."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EnrollRequest(BaseModel):
    account_id: str


class EnrollmentResponse(BaseModel):
    id: str
    account_id: str
    program_id: str
    status: str
    enrolled_at: datetime
    completed_at: datetime | None
    promoted_at: datetime | None

    model_config = {"from_attributes": True}
