"""SQLAlchemy implementation of the membership store."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError

from guild.db.models import (
    Account,
    Activity,
    ActivitySubmission,
    AttendanceRecord,
    Profile,
    Program,
    ProgramEnrollment,
    ProgramSession,
    new_id,
)
from guild.errors import DuplicateRecordError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Select

logger = structlog.get_logger()

UNIQUE_VIOLATION = "23505"


class SqlMembershipStore:
    """``MembershipStore`` over an ``AsyncSession``.

    Lookups made with ``for_update=True`` take a row lock (``SELECT ... FOR
    UPDATE``) that is held until :meth:`transaction` commits or rolls back, so
    two concurrent transitions on the same account serialize instead of losing
    an update.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _one(self, stmt: Select[Any], *, for_update: bool = False) -> Any:  # noqa: ANN401
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    async def get_account(self, account_id: str, *, for_update: bool = False) -> Account | None:
        stmt = select(Account).where(Account.id == account_id, Account.deleted_at.is_(None))
        return await self._one(stmt, for_update=for_update)

    async def get_account_by_external_id(self, external_id: str) -> Account | None:
        stmt = select(Account).where(Account.external_id == external_id, Account.deleted_at.is_(None))
        return await self._one(stmt)

    async def get_account_by_handle(self, handle: str, *, include_deleted: bool = False) -> Account | None:
        stmt = select(Account).where(func.lower(Account.handle) == handle.lower())
        if not include_deleted:
            stmt = stmt.where(Account.deleted_at.is_(None))
        return await self._one(stmt)

    async def get_profile(self, account_id: str) -> Profile | None:
        return await self._one(select(Profile).where(Profile.account_id == account_id))

    async def get_program(self, program_id: str) -> Program | None:
        return await self._one(select(Program).where(Program.id == program_id))

    async def get_program_session(self, session_id: str) -> ProgramSession | None:
        return await self._one(select(ProgramSession).where(ProgramSession.id == session_id))

    async def get_enrollment(self, enrollment_id: str, *, for_update: bool = False) -> ProgramEnrollment | None:
        stmt = select(ProgramEnrollment).where(
            ProgramEnrollment.id == enrollment_id,
            ProgramEnrollment.deleted_at.is_(None),
        )
        return await self._one(stmt, for_update=for_update)

    async def find_enrollment(self, account_id: str, program_id: str) -> ProgramEnrollment | None:
        stmt = select(ProgramEnrollment).where(
            ProgramEnrollment.account_id == account_id,
            ProgramEnrollment.program_id == program_id,
            ProgramEnrollment.deleted_at.is_(None),
        )
        return await self._one(stmt)

    async def get_activity(self, activity_id: str) -> Activity | None:
        return await self._one(select(Activity).where(Activity.id == activity_id))

    async def get_submission(self, submission_id: str, *, for_update: bool = False) -> ActivitySubmission | None:
        stmt = select(ActivitySubmission).where(ActivitySubmission.id == submission_id)
        return await self._one(stmt, for_update=for_update)

    # ------------------------------------------------------------------
    # Filtered counts and aggregates
    # ------------------------------------------------------------------

    async def list_accounts(self, status: str, *, limit: int = 100, offset: int = 0) -> list[Account]:
        result = await self._db.execute(
            select(Account)
            .where(Account.account_status == status, Account.deleted_at.is_(None))
            .order_by(Account.created_at.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def count_accounts(self, status: str) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(Account)
            .where(Account.account_status == status, Account.deleted_at.is_(None))
        )
        return int(result.scalar_one())

    async def count_attendance(self, account_id: str, status: str, *, program_id: str | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(AttendanceRecord)
            .where(AttendanceRecord.account_id == account_id, AttendanceRecord.status == status)
        )
        if program_id is not None:
            stmt = stmt.where(AttendanceRecord.program_id == program_id)
        result = await self._db.execute(stmt)
        return int(result.scalar_one())

    async def count_submissions(self, account_id: str, status: str) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(ActivitySubmission)
            .where(ActivitySubmission.account_id == account_id, ActivitySubmission.status == status)
        )
        return int(result.scalar_one())

    async def average_quality_score(self, account_id: str, status: str) -> float:
        result = await self._db.execute(
            select(func.coalesce(func.avg(ActivitySubmission.quality_score), 0)).where(
                ActivitySubmission.account_id == account_id,
                ActivitySubmission.status == status,
            )
        )
        return float(result.scalar_one())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, obj: object) -> None:
        self._db.add(obj)

    async def upsert_attendance(
        self,
        *,
        account_id: str,
        session_id: str,
        program_id: str | None,
        status: str,
        marked_by: str,
        marked_at: datetime,
    ) -> AttendanceRecord:
        stmt = (
            pg_insert(AttendanceRecord)
            .values(
                id=new_id(),
                account_id=account_id,
                session_id=session_id,
                program_id=program_id,
                status=status,
                marked_by=marked_by,
                marked_at=marked_at,
            )
            .on_conflict_do_update(
                constraint="uq_attendance_account_session",
                set_={"status": status, "marked_by": marked_by, "marked_at": marked_at, "program_id": program_id},
            )
            .returning(AttendanceRecord)
        )
        result = await self._db.scalars(stmt, execution_options={"populate_existing": True})
        return result.one()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
            if sqlstate != UNIQUE_VIOLATION:
                raise
            logger.info("store_unique_violation", error=str(exc.orig))
            raise DuplicateRecordError("Record conflicts with an existing row") from exc
        except Exception:
            await self._db.rollback()
            logger.debug("store_transaction_rolled_back")
            raise
