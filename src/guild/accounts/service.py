"""Account lifecycle business logic.

Rules:
- Only staff (moderator or admin) mutate another account's status or role
- Nobody modifies their own status or role, or any admin account
- Moderators cannot ban and cannot grant the admin role
- Suspending and banning need a reason
- Rejection soft-deletes the account
- guest -> active happens only through ``guild.promotion.service.promote``

Authority is checked before the target is loaded so callers without it learn
nothing about which accounts exist.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from guild.accounts.audit import AuditEntry, AuditSink, write_audit
from guild.accounts.roles import check_role_change, check_staff, check_status_change, parse_role
from guild.accounts.status import parse_status, reason_required, validate_transition
from guild.db.enums import AccountStatus
from guild.errors import ConflictError, DuplicateRecordError, ForbiddenError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from guild.db.models import Account
    from guild.db.ports import MembershipStore

logger = structlog.get_logger()

HANDLE_PATTERN = re.compile(r"^[a-z0-9_]{3,50}$")


async def get_account_or_404(store: MembershipStore, account_id: str, *, for_update: bool = False) -> Account:
    account = await store.get_account(account_id, for_update=for_update)
    if account is None:
        raise NotFoundError("Account")
    return account


def _require_staff(actor: Account) -> None:
    denial = check_staff(actor)
    if denial:
        raise ForbiddenError.from_denial(denial)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


async def transition(
    store: MembershipStore,
    account: Account,
    target_status: AccountStatus | str,
    acting_account: Account,
    reason: str | None = None,
    *,
    audit: AuditSink | None = None,
) -> Account:
    """Move ``account`` to ``target_status`` on behalf of ``acting_account``.

    Checks run before any write, so on error the account is untouched.

    Raises:
        ForbiddenError: the actor lacks authority for this change.
        ConflictError: the account is already in ``target_status``.
        ValidationError: ``target_status`` is not a legal successor.
    """
    target = parse_status(target_status)
    denial = check_status_change(acting_account, account, target)
    if denial:
        raise ForbiddenError.from_denial(denial)

    validate_transition(account.account_status, target)

    old_status = account.account_status
    now = datetime.now(timezone.utc)
    async with store.transaction():
        account.account_status = target.value
        account.updated_at = now
        if target == AccountStatus.REJECTED:
            account.deleted_at = now

    logger.info(
        "account_status_changed",
        account_id=account.id,
        old_status=old_status,
        new_status=target.value,
        actor_id=acting_account.id,
    )
    write_audit(
        audit,
        AuditEntry(
            actor_id=acting_account.id,
            account_id=account.id,
            action="status",
            old_value=old_status,
            new_value=target.value,
            reason=reason,
            at=now,
        ),
    )
    return account


async def change_account_status(
    store: MembershipStore,
    account_id: str,
    target_status: AccountStatus | str,
    actor: Account,
    reason: str | None = None,
    *,
    audit: AuditSink | None = None,
) -> tuple[Account, str]:
    """API-level status change. Returns ``(account, previous_status)``."""
    target = parse_status(target_status)
    _require_staff(actor)
    if reason_required(target) and not (reason and reason.strip()):
        raise ValidationError(f"A reason is required to set status {target.value}", "REASON_REQUIRED")

    account = await get_account_or_404(store, account_id, for_update=True)
    previous = account.account_status
    await transition(store, account, target, actor, reason, audit=audit)
    return account, previous


async def approve_account(
    store: MembershipStore, account_id: str, actor: Account, *, audit: AuditSink | None = None
) -> Account:
    """pending -> active."""
    _require_staff(actor)
    account = await get_account_or_404(store, account_id, for_update=True)
    if account.account_status != AccountStatus.PENDING:
        raise ConflictError(f"Account is {account.account_status}, cannot approve", "NOT_PENDING")
    return await transition(store, account, AccountStatus.ACTIVE, actor, audit=audit)


async def reject_account(
    store: MembershipStore,
    account_id: str,
    actor: Account,
    reason: str | None = None,
    *,
    audit: AuditSink | None = None,
) -> Account:
    """pending -> rejected; the account is soft-deleted."""
    _require_staff(actor)
    account = await get_account_or_404(store, account_id, for_update=True)
    if account.account_status != AccountStatus.PENDING:
        raise ConflictError(f"Account is {account.account_status}, cannot reject", "NOT_PENDING")
    return await transition(store, account, AccountStatus.REJECTED, actor, reason, audit=audit)


async def list_accounts(
    store: MembershipStore,
    actor: Account,
    status: AccountStatus | str = AccountStatus.PENDING,
    *,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Account], int]:
    """Staff-only listing of accounts in ``status`` plus the total count."""
    _require_staff(actor)
    value = parse_status(status).value
    accounts = await store.list_accounts(value, limit=limit, offset=offset)
    total = await store.count_accounts(value)
    return accounts, total


async def count_accounts(
    store: MembershipStore, actor: Account, status: AccountStatus | str = AccountStatus.PENDING
) -> int:
    _require_staff(actor)
    return await store.count_accounts(parse_status(status).value)


# ---------------------------------------------------------------------------
# Role
# ---------------------------------------------------------------------------


async def change_account_role(
    store: MembershipStore,
    account_id: str,
    target_role: str,
    actor: Account,
    reason: str | None = None,
    *,
    audit: AuditSink | None = None,
) -> tuple[Account, str]:
    """Change another account's role. Returns ``(account, previous_role)``."""
    role = parse_role(target_role)
    _require_staff(actor)
    account = await get_account_or_404(store, account_id, for_update=True)

    denial = check_role_change(actor, account, role)
    if denial:
        raise ForbiddenError.from_denial(denial)
    if account.role == role.value:
        raise ConflictError(f"Account already has role {role.value}", "ROLE_UNCHANGED")

    old_role = account.role
    now = datetime.now(timezone.utc)
    async with store.transaction():
        account.role = role.value
        account.updated_at = now

    logger.info("account_role_changed", account_id=account.id, old_role=old_role, new_role=role.value, actor_id=actor.id)
    write_audit(
        audit,
        AuditEntry(
            actor_id=actor.id,
            account_id=account.id,
            action="role",
            old_value=old_role,
            new_value=role.value,
            reason=reason,
            at=now,
        ),
    )
    return account, old_role


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


async def complete_onboarding(store: MembershipStore, account: Account, handle: str) -> Account:
    """Owner claims a handle and submits the account for review (incomplete -> pending)."""
    normalized = handle.strip().lower()
    if not HANDLE_PATTERN.match(normalized):
        raise ValidationError("Handle must be 3-50 characters of a-z, 0-9 or _", "INVALID_HANDLE")

    validate_transition(account.account_status, AccountStatus.PENDING)

    # Rejected accounts keep their handle; the unique index covers every row.
    existing = await store.get_account_by_handle(normalized, include_deleted=True)
    if existing is not None and existing.id != account.id:
        raise ConflictError("Handle already taken", "HANDLE_TAKEN")

    try:
        async with store.transaction():
            account.handle = normalized
            account.account_status = AccountStatus.PENDING.value
            account.updated_at = datetime.now(timezone.utc)
    except DuplicateRecordError as exc:
        raise ConflictError("Handle already taken", "HANDLE_TAKEN") from exc

    logger.info("onboarding_completed", account_id=account.id, handle=normalized)
    return account
