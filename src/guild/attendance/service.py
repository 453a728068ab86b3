"""Attendance marking.

One record per (account, session); marking again overwrites the previous
status. A whole marking request is written in a single transaction.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from guild.accounts.roles import check_staff
from guild.db.enums import AttendanceStatus
from guild.errors import ForbiddenError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from guild.db.models import Account, AttendanceRecord
    from guild.db.ports import MembershipStore

logger = structlog.get_logger()


def _parse_attendance_status(value: str) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}", "INVALID_ATTENDANCE_STATUS") from None


async def bulk_mark_attendance(
    store: MembershipStore,
    actor: Account,
    session_id: str,
    records: Sequence[tuple[str, str]],
) -> list[AttendanceRecord]:
    """Upsert ``(account_id, status)`` pairs for a session, all or nothing."""
    denial = check_staff(actor)
    if denial:
        raise ForbiddenError.from_denial(denial)

    if not records:
        raise ValidationError("No attendance records given", "EMPTY_REQUEST")
    parsed = [(account_id, _parse_attendance_status(status)) for account_id, status in records]

    account_ids = [account_id for account_id, _ in parsed]
    if len(set(account_ids)) != len(account_ids):
        raise ValidationError("An account appears more than once", "DUPLICATE_ACCOUNT")

    session = await store.get_program_session(session_id)
    if session is None:
        raise NotFoundError("Session")
    for account_id in account_ids:
        if await store.get_account(account_id) is None:
            raise NotFoundError("Account")

    now = datetime.now(timezone.utc)
    marked: list[AttendanceRecord] = []
    async with store.transaction():
        for account_id, status in parsed:
            record = await store.upsert_attendance(
                account_id=account_id,
                session_id=session.id,
                program_id=session.program_id,
                status=status.value,
                marked_by=actor.id,
                marked_at=now,
            )
            marked.append(record)

    logger.info("attendance_marked", session_id=session.id, count=len(marked), actor_id=actor.id)
    return marked


async def mark_attendance(
    store: MembershipStore,
    actor: Account,
    session_id: str,
    account_ids: Iterable[str],
    status: str,
) -> list[AttendanceRecord]:
    """Mark every account in ``account_ids`` with the same status."""
    return await bulk_mark_attendance(store, actor, session_id, [(account_id, status) for account_id in account_ids])
