"""Request/response schemas for account endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class AccountResponse(BaseModel):
    """An account as seen by its owner or by staff."""

    id: str
    handle: str | None
    email: str | None
    display_name: str | None
    avatar_url: str | None
    bio: str | None
    role: str
    account_status: str
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class AccountListResponse(BaseModel):
    accounts: list[AccountResponse]
    total: int
    limit: int
    offset: int


class OnboardingRequest(BaseModel):
    handle: str = Field(..., min_length=3, max_length=50)

    @field_validator("handle")
    @classmethod
    def normalize_handle(cls, v: str) -> str:
        return v.strip().lower()


class StatusChangeRequest(BaseModel):
    status: str
    reason: str | None = Field(None, max_length=500)


class StatusChangeResponse(BaseModel):
    account: AccountResponse
    previous_status: str


class RoleChangeRequest(BaseModel):
    role: str
    reason: str | None = Field(None, max_length=500)


class RoleChangeResponse(BaseModel):
    account: AccountResponse
    previous_role: str


class RejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)
