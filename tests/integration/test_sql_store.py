"""SqlMembershipStore against a real PostgreSQL database.

Skipped unless GUILD_TEST_DATABASE_URL is set. The schema is created from the
ORM metadata and dropped afterwards, so point it at a scratch database.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from guild.db.base import Base
from guild.db.models import Account, Activity, ActivitySubmission, Program, ProgramEnrollment, ProgramSession, new_id
from guild.db.store import SqlMembershipStore
from guild.errors import DuplicateRecordError
from guild.promotion.eligibility import calculate_eligibility

DATABASE_URL = os.environ.get("GUILD_TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(not DATABASE_URL, reason="GUILD_TEST_DATABASE_URL not set")

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db:
        yield db
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def _account(handle: str, **fields) -> Account:
    return Account(
        id=new_id(),
        external_id=f"idp|{handle}",
        handle=handle,
        role=fields.pop("role", "member"),
        account_status=fields.pop("account_status", "active"),
        created_at=NOW,
        **fields,
    )


class TestSqlMembershipStore:
    async def test_lookups_hide_soft_deleted(self, session):
        store = SqlMembershipStore(session)
        live = _account("alive")
        gone = _account("gone", deleted_at=NOW)
        async with store.transaction():
            store.add(live)
            store.add(gone)

        assert (await store.get_account(live.id)).id == live.id
        assert await store.get_account(gone.id) is None
        assert (await store.get_account_by_handle("ALIVE")).id == live.id
        assert await store.get_account_by_external_id("idp|gone") is None

    async def test_rollback_discards_writes(self, session):
        store = SqlMembershipStore(session)
        account = _account("rolled")
        with pytest.raises(RuntimeError):
            async with store.transaction():
                store.add(account)
                raise RuntimeError("boom")
        assert await store.get_account_by_handle("rolled") is None

    async def test_unique_violation_is_typed(self, session):
        store = SqlMembershipStore(session)
        gone = _account("claimed", deleted_at=NOW)
        async with store.transaction():
            store.add(gone)
        gone_id = gone.id

        assert await store.get_account_by_handle("claimed") is None
        assert (await store.get_account_by_handle("claimed", include_deleted=True)).id == gone_id

        with pytest.raises(DuplicateRecordError):
            async with store.transaction():
                store.add(_account("claimed"))
        assert (await store.get_account_by_handle("claimed", include_deleted=True)).id == gone_id

    async def test_attendance_upsert_and_eligibility(self, session):
        store = SqlMembershipStore(session)
        learner = _account("learner", account_status="guest")
        staff = _account("staff", role="moderator")
        program = Program(id=new_id(), name="Bootcamp", is_active=True, created_at=NOW)
        sessions = [ProgramSession(id=new_id(), program_id=program.id, title=f"S{i}") for i in range(5)]
        enrollment = ProgramEnrollment(
            id=new_id(), account_id=learner.id, program_id=program.id, status="enrolled", enrolled_at=NOW, extra={}
        )
        activity = Activity(id=new_id(), title="Docs", reward_amount=Decimal("10"), status="active")
        async with store.transaction():
            for obj in (learner, staff, program, *sessions, enrollment, activity):
                store.add(obj)
        async with store.transaction():
            for score in (70.0, 80.0, 90.0):
                store.add(
                    ActivitySubmission(
                        id=new_id(),
                        account_id=learner.id,
                        activity_id=activity.id,
                        status="approved",
                        quality_score=score,
                        reward_amount=Decimal("10"),
                        submitted_at=NOW,
                    )
                )

        async with store.transaction():
            for s in sessions:
                await store.upsert_attendance(
                    account_id=learner.id,
                    session_id=s.id,
                    program_id=program.id,
                    status="absent",
                    marked_by=staff.id,
                    marked_at=NOW,
                )
        async with store.transaction():
            for s in sessions:
                record = await store.upsert_attendance(
                    account_id=learner.id,
                    session_id=s.id,
                    program_id=program.id,
                    status="present",
                    marked_by=staff.id,
                    marked_at=NOW,
                )
                assert record.status == "present"

        assert await store.count_attendance(learner.id, "present", program_id=program.id) == 5
        assert await store.count_attendance(learner.id, "absent") == 0
        assert await store.average_quality_score(learner.id, "approved") == pytest.approx(80.0)

        result = await calculate_eligibility(store, learner.id, enrollment.id)
        assert result.is_eligible
