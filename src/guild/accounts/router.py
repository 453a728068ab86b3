"""Account endpoints: the caller's own account and the staff review queue."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from guild.accounts.audit import AuditSink
from guild.accounts.schemas import (
    AccountListResponse,
    AccountResponse,
    OnboardingRequest,
    RejectRequest,
    RoleChangeRequest,
    RoleChangeResponse,
    StatusChangeRequest,
    StatusChangeResponse,
)
from guild.accounts.service import (
    approve_account,
    change_account_role,
    change_account_status,
    complete_onboarding,
    list_accounts,
    reject_account,
)
from guild.db.enums import AccountStatus
from guild.db.models import Account
from guild.db.ports import MembershipStore
from guild.dependencies import get_audit_sink, get_store
from guild.identity.dependencies import get_current_account

me_router = APIRouter(prefix="/api/v1/me", tags=["Me"])
admin_router = APIRouter(prefix="/api/v1/admin/accounts", tags=["Admin"])


# ---------------------------------------------------------------------------
# Own account
# ---------------------------------------------------------------------------


@me_router.get("", response_model=AccountResponse)
async def get_me(account: Account = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.model_validate(account)


@me_router.post("/onboarding", response_model=AccountResponse)
async def finish_onboarding(
    body: OnboardingRequest,
    account: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> AccountResponse:
    """Claim a handle and submit the account for review."""
    account = await complete_onboarding(store, account, body.handle)
    return AccountResponse.model_validate(account)


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=AccountListResponse)
async def list_accounts_endpoint(
    status: str = Query(AccountStatus.PENDING.value),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> AccountListResponse:
    accounts, total = await list_accounts(store, actor, status, limit=limit, offset=offset)
    return AccountListResponse(
        accounts=[AccountResponse.model_validate(a) for a in accounts],
        total=total,
        limit=limit,
        offset=offset,
    )


@admin_router.patch("/{account_id}/status", response_model=StatusChangeResponse)
async def change_status_endpoint(
    account_id: str,
    body: StatusChangeRequest,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
    audit: AuditSink = Depends(get_audit_sink),
) -> StatusChangeResponse:
    account, previous = await change_account_status(store, account_id, body.status, actor, body.reason, audit=audit)
    return StatusChangeResponse(account=AccountResponse.model_validate(account), previous_status=previous)


@admin_router.patch("/{account_id}/role", response_model=RoleChangeResponse)
async def change_role_endpoint(
    account_id: str,
    body: RoleChangeRequest,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
    audit: AuditSink = Depends(get_audit_sink),
) -> RoleChangeResponse:
    account, previous = await change_account_role(store, account_id, body.role, actor, body.reason, audit=audit)
    return RoleChangeResponse(account=AccountResponse.model_validate(account), previous_role=previous)


@admin_router.post("/{account_id}/approve", response_model=AccountResponse)
async def approve_endpoint(
    account_id: str,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
    audit: AuditSink = Depends(get_audit_sink),
) -> AccountResponse:
    account = await approve_account(store, account_id, actor, audit=audit)
    return AccountResponse.model_validate(account)


@admin_router.post("/{account_id}/reject", response_model=AccountResponse)
async def reject_endpoint(
    account_id: str,
    body: RejectRequest | None = None,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
    audit: AuditSink = Depends(get_audit_sink),
) -> AccountResponse:
    """Reject a pending account. The account is soft-deleted."""
    reason = body.reason if body else None
    account = await reject_account(store, account_id, actor, reason, audit=audit)
    return AccountResponse.model_validate(account)
