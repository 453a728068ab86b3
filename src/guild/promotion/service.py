"""Guest -> active promotion.

Eligibility is advisory unless ``promotion_require_eligibility`` is set: an
ineligible guest can still be promoted, but the result carries the verdict
and a warning, and a ``promotion_ineligible`` event is logged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from guild.accounts.audit import AuditEntry, AuditSink, write_audit
from guild.accounts.roles import check_not_self, check_staff, check_target_mutable
from guild.accounts.service import get_account_or_404
from guild.accounts.status import validate_transition
from guild.config import get_settings
from guild.db.enums import AccountStatus, EnrollmentStatus
from guild.errors import ConflictError, ForbiddenError, NotFoundError
from guild.promotion.eligibility import PromotionEligibility, calculate_eligibility

if TYPE_CHECKING:
    from guild.db.models import Account, ProgramEnrollment
    from guild.db.ports import MembershipStore

logger = structlog.get_logger()


@dataclass
class PromotionResult:
    account: Account
    enrollment: ProgramEnrollment
    eligibility: PromotionEligibility
    warnings: list[str] = field(default_factory=list)


async def get_eligibility(
    store: MembershipStore,
    account_id: str,
    enrollment_id: str,
    viewer: Account,
) -> PromotionEligibility:
    """Eligibility read for staff, or for the account itself."""
    if viewer.id != account_id:
        denial = check_staff(viewer)
        if denial:
            raise ForbiddenError.from_denial(denial)
    return await calculate_eligibility(store, account_id, enrollment_id)


async def promote(
    store: MembershipStore,
    account_id: str,
    enrollment_id: str,
    acting_account: Account,
    notes: str | None = None,
    *,
    audit: AuditSink | None = None,
    require_eligibility: bool | None = None,
) -> PromotionResult:
    """
    Promote a guest to an active member within one of their enrollments.

    Raises:
        ForbiddenError: Actor is not staff, targets themselves, or targets an admin.
        NotFoundError: Account or enrollment missing, or the enrollment is not theirs.
        ConflictError: Account is not a guest (INVALID_STATUS_FOR_PROMOTION), the
            enrollment was already promoted or dropped, or eligibility is enforced
            and fails.
    """
    if require_eligibility is None:
        require_eligibility = get_settings().promotion_require_eligibility

    denial = check_staff(acting_account) or check_not_self(acting_account, account_id)
    if denial:
        raise ForbiddenError.from_denial(denial)

    account = await get_account_or_404(store, account_id, for_update=True)
    denial = check_target_mutable(account)
    if denial:
        raise ForbiddenError.from_denial(denial)

    if account.account_status != AccountStatus.GUEST:
        raise ConflictError(
            "Only guest accounts can be promoted",
            "INVALID_STATUS_FOR_PROMOTION",
            details={"current_status": account.account_status},
        )

    enrollment = await store.get_enrollment(enrollment_id, for_update=True)
    if enrollment is None or enrollment.account_id != account.id:
        raise NotFoundError("Program enrollment")
    if enrollment.promoted_at is not None:
        raise ConflictError("Enrollment was already used for a promotion", "ALREADY_PROMOTED")
    if enrollment.status == EnrollmentStatus.DROPPED.value:
        raise ConflictError("Enrollment was dropped", "ENROLLMENT_DROPPED")

    eligibility = await calculate_eligibility(store, account.id, enrollment.id)
    warnings: list[str] = []
    if not eligibility.is_eligible:
        if require_eligibility:
            raise ConflictError(
                "Account does not meet the promotion criteria",
                "NOT_ELIGIBLE",
                details={"reasons": eligibility.reasons},
            )
        warnings.append("Promoted without meeting eligibility criteria: " + "; ".join(eligibility.reasons))
        logger.warning(
            "promotion_ineligible",
            account_id=account.id,
            enrollment_id=enrollment.id,
            actor_id=acting_account.id,
            reasons=eligibility.reasons,
        )

    validate_transition(account.account_status, AccountStatus.ACTIVE, via_promotion=True)

    now = datetime.now(timezone.utc)
    async with store.transaction():
        account.account_status = AccountStatus.ACTIVE.value
        account.updated_at = now
        enrollment.promoted_at = now
        enrollment.extra = {
            **(enrollment.extra or {}),
            "promoted_at": now.isoformat(),
            "promoted_by": acting_account.id,
            "promotion_notes": notes,
            "eligible_at_promotion": eligibility.is_eligible,
        }
        enrollment.updated_at = now

    logger.info("guest_promoted", account_id=account.id, enrollment_id=enrollment.id, actor_id=acting_account.id)
    write_audit(
        audit,
        AuditEntry(
            actor_id=acting_account.id,
            account_id=account.id,
            action="promotion",
            old_value=AccountStatus.GUEST.value,
            new_value=AccountStatus.ACTIVE.value,
            reason=notes,
            at=now,
        ),
    )
    return PromotionResult(account=account, enrollment=enrollment, eligibility=eligibility, warnings=warnings)
