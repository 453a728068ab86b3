"""Program enrollment management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from guild.accounts.roles import check_staff
from guild.accounts.service import get_account_or_404
from guild.db.enums import EnrollmentStatus
from guild.db.models import ProgramEnrollment, new_id
from guild.errors import ConflictError, DuplicateRecordError, ForbiddenError, NotFoundError

if TYPE_CHECKING:
    from guild.db.models import Account
    from guild.db.ports import MembershipStore

logger = structlog.get_logger()


async def enroll_account(
    store: MembershipStore,
    actor: Account,
    program_id: str,
    account_id: str,
) -> ProgramEnrollment:
    """Enroll an account in a program. At most one live enrollment per pair."""
    denial = check_staff(actor)
    if denial:
        raise ForbiddenError.from_denial(denial)

    if await store.get_program(program_id) is None:
        raise NotFoundError("Program")
    account = await get_account_or_404(store, account_id)

    if await store.find_enrollment(account.id, program_id) is not None:
        raise ConflictError("Account is already enrolled in this program", "ENROLLMENT_EXISTS")

    now = datetime.now(timezone.utc)
    enrollment = ProgramEnrollment(
        id=new_id(),
        account_id=account.id,
        program_id=program_id,
        status=EnrollmentStatus.ENROLLED.value,
        enrolled_at=now,
        completed_at=None,
        promoted_at=None,
        extra={},
        updated_at=now,
        deleted_at=None,
    )
    try:
        async with store.transaction():
            store.add(enrollment)
    except DuplicateRecordError as exc:
        raise ConflictError("Account is already enrolled in this program", "ENROLLMENT_EXISTS") from exc

    logger.info("account_enrolled", account_id=account.id, program_id=program_id, enrollment_id=enrollment.id)
    return enrollment
