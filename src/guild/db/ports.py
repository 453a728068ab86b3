"""Persistence port consumed by the membership engine.

Keep this small and framework-agnostic so tests can supply an in-memory fake.
Every ``get_*`` lookup hides soft-deleted rows unless asked otherwise.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol

from guild.db.models import (
    Account,
    Activity,
    ActivitySubmission,
    AttendanceRecord,
    Profile,
    Program,
    ProgramEnrollment,
    ProgramSession,
)


class MembershipStore(Protocol):
    """Query/transaction interface over the relational store."""

    # --- point lookups ---

    async def get_account(self, account_id: str, *, for_update: bool = False) -> Account | None: ...

    async def get_account_by_external_id(self, external_id: str) -> Account | None: ...

    async def get_account_by_handle(self, handle: str, *, include_deleted: bool = False) -> Account | None: ...

    async def get_profile(self, account_id: str) -> Profile | None: ...

    async def get_program(self, program_id: str) -> Program | None: ...

    async def get_program_session(self, session_id: str) -> ProgramSession | None: ...

    async def get_enrollment(self, enrollment_id: str, *, for_update: bool = False) -> ProgramEnrollment | None: ...

    async def find_enrollment(self, account_id: str, program_id: str) -> ProgramEnrollment | None: ...

    async def get_activity(self, activity_id: str) -> Activity | None: ...

    async def get_submission(self, submission_id: str, *, for_update: bool = False) -> ActivitySubmission | None: ...

    # --- filtered counts and aggregates ---

    async def list_accounts(self, status: str, *, limit: int = 100, offset: int = 0) -> list[Account]: ...

    async def count_accounts(self, status: str) -> int: ...

    async def count_attendance(self, account_id: str, status: str, *, program_id: str | None = None) -> int: ...

    async def count_submissions(self, account_id: str, status: str) -> int: ...

    async def average_quality_score(self, account_id: str, status: str) -> float:
        """Mean quality score over matching submissions; 0.0 when none are scored."""
        ...

    # --- writes ---

    def add(self, obj: object) -> None: ...

    async def upsert_attendance(
        self,
        *,
        account_id: str,
        session_id: str,
        program_id: str | None,
        status: str,
        marked_by: str,
        marked_at: datetime,
    ) -> AttendanceRecord: ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """All-or-nothing unit of work: every write inside commits or none does.

        Raises ``DuplicateRecordError`` when a unique constraint rejects the commit.
        """
        ...
