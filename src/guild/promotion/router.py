"""Eligibility reads and guest promotion."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from guild.accounts.audit import AuditSink
from guild.accounts.schemas import AccountResponse
from guild.db.models import Account
from guild.db.ports import MembershipStore
from guild.dependencies import get_audit_sink, get_store
from guild.identity.dependencies import get_current_account
from guild.promotion.schemas import EligibilityResponse, PromoteRequest, PromoteResponse
from guild.promotion.service import get_eligibility, promote

router = APIRouter(tags=["Promotion"])


@router.get("/api/v1/me/eligibility", response_model=EligibilityResponse)
async def my_eligibility(
    enrollment_id: str = Query(...),
    account: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> EligibilityResponse:
    """The caller's own progress towards promotion."""
    result = await get_eligibility(store, account.id, enrollment_id, account)
    return EligibilityResponse.from_result(result)


@router.get("/api/v1/admin/accounts/{account_id}/eligibility", response_model=EligibilityResponse)
async def account_eligibility(
    account_id: str,
    enrollment_id: str = Query(...),
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> EligibilityResponse:
    result = await get_eligibility(store, account_id, enrollment_id, actor)
    return EligibilityResponse.from_result(result)


@router.post("/api/v1/admin/accounts/{account_id}/promote", response_model=PromoteResponse)
async def promote_account(
    account_id: str,
    body: PromoteRequest,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
    audit: AuditSink = Depends(get_audit_sink),
) -> PromoteResponse:
    """Promote a guest to active. Eligibility failures come back as warnings unless enforced."""
    result = await promote(store, account_id, body.enrollment_id, actor, body.notes, audit=audit)
    return PromoteResponse(
        account=AccountResponse.model_validate(result.account),
        enrollment_id=result.enrollment.id,
        promoted_at=result.enrollment.promoted_at,
        eligibility=EligibilityResponse.from_result(result.eligibility),
        warnings=result.warnings,
    )
