"""Program enrollment endpoints (staff)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from guild.db.models import Account
from guild.db.ports import MembershipStore
from guild.dependencies import get_store
from guild.identity.dependencies import get_current_account
from guild.programs.schemas import EnrollmentResponse, EnrollRequest
from guild.programs.service import enroll_account

router = APIRouter(prefix="/api/v1/admin/programs", tags=["Programs"])


@router.post("/{program_id}/enrollments", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    program_id: str,
    body: EnrollRequest,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> EnrollmentResponse:
    enrollment = await enroll_account(store, actor, program_id, body.account_id)
    return EnrollmentResponse.model_validate(enrollment)
