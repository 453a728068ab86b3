"""Guest promotion tests."""

from __future__ import annotations

import pytest

from guild.errors import ConflictError, ForbiddenError, NotFoundError
from guild.promotion.service import get_eligibility, promote
from tests.fakes import (
    CommitFailed,
    seed_account,
    seed_attendance,
    seed_enrollment,
    seed_program,
    seed_submission,
)


@pytest.fixture
def program(store):
    return seed_program(store)


@pytest.fixture
def enrollment(store, guest, program):
    return seed_enrollment(store, guest, program)


@pytest.fixture
def eligible(store, guest, program):
    seed_attendance(store, guest, program, 5)
    for score in (72.0, 78.0, 90.0):
        seed_submission(store, guest, quality_score=score)


class TestPromote:
    @pytest.mark.usefixtures("eligible")
    async def test_promotes_eligible_guest(self, store, admin, guest, enrollment, audit_sink):
        result = await promote(store, guest.id, enrollment.id, admin, "well done", audit=audit_sink)

        assert result.account.account_status == "active"
        assert result.enrollment.promoted_at is not None
        assert result.eligibility.is_eligible
        assert result.warnings == []
        assert enrollment.extra["promoted_by"] == admin.id
        assert enrollment.extra["promotion_notes"] == "well done"
        assert enrollment.extra["eligible_at_promotion"] is True
        assert store.commits == 1

        [entry] = audit_sink.entries
        assert (entry.action, entry.old_value, entry.new_value) == ("promotion", "guest", "active")

    async def test_ineligible_promotion_is_flagged_not_blocked(self, store, moderator, guest, enrollment):
        result = await promote(store, guest.id, enrollment.id, moderator, require_eligibility=False)

        assert guest.account_status == "active"
        assert not result.eligibility.is_eligible
        assert len(result.warnings) == 1
        assert "need 5 more attended sessions" in result.warnings[0]
        assert enrollment.extra["eligible_at_promotion"] is False

    async def test_enforced_eligibility_blocks(self, store, admin, guest, enrollment):
        with pytest.raises(ConflictError) as exc_info:
            await promote(store, guest.id, enrollment.id, admin, require_eligibility=True)
        assert exc_info.value.code == "NOT_ELIGIBLE"
        assert exc_info.value.details["reasons"]
        assert guest.account_status == "guest"
        assert enrollment.promoted_at is None

    async def test_active_account_cannot_be_promoted(self, store, admin, member, program):
        active_enrollment = seed_enrollment(store, member, program)
        with pytest.raises(ConflictError) as exc_info:
            await promote(store, member.id, active_enrollment.id, admin)
        assert exc_info.value.code == "INVALID_STATUS_FOR_PROMOTION"
        assert exc_info.value.details == {"current_status": "active"}

    async def test_member_cannot_promote(self, store, member, guest, enrollment):
        with pytest.raises(ForbiddenError) as exc_info:
            await promote(store, guest.id, enrollment.id, member)
        assert exc_info.value.code == "INSUFFICIENT_ROLE"
        assert guest.account_status == "guest"

    async def test_cannot_promote_self(self, store, program):
        odd_moderator = seed_account(store, role="moderator", status="guest")
        own = seed_enrollment(store, odd_moderator, program)
        with pytest.raises(ForbiddenError) as exc_info:
            await promote(store, odd_moderator.id, own.id, odd_moderator)
        assert exc_info.value.code == "SELF_MODIFICATION"

    async def test_enrollment_of_another_account(self, store, admin, guest, program):
        other = seed_account(store, status="guest")
        foreign = seed_enrollment(store, other, program)
        with pytest.raises(NotFoundError):
            await promote(store, guest.id, foreign.id, admin)
        assert guest.account_status == "guest"

    async def test_missing_account(self, store, admin, enrollment):
        with pytest.raises(NotFoundError):
            await promote(store, "missing", enrollment.id, admin)

    async def test_enrollment_promoted_only_once(self, store, admin, guest, enrollment, program):
        enrollment.promoted_at = enrollment.enrolled_at
        with pytest.raises(ConflictError) as exc_info:
            await promote(store, guest.id, enrollment.id, admin)
        assert exc_info.value.code == "ALREADY_PROMOTED"

    @pytest.mark.usefixtures("eligible")
    async def test_dropped_enrollment_refused(self, store, admin, guest, program):
        dropped = seed_enrollment(store, guest, program, status="dropped")
        with pytest.raises(ConflictError) as exc_info:
            await promote(store, guest.id, dropped.id, admin)
        assert exc_info.value.code == "ENROLLMENT_DROPPED"
        assert guest.account_status == "guest"
        assert dropped.promoted_at is None

    @pytest.mark.usefixtures("eligible")
    async def test_failed_commit_applies_nothing(self, store, admin, guest, enrollment, audit_sink):
        store.fail_on_commit = True

        with pytest.raises(CommitFailed):
            await promote(store, guest.id, enrollment.id, admin, audit=audit_sink)

        assert guest.account_status == "guest"
        assert enrollment.promoted_at is None
        assert enrollment.extra == {}
        assert store.rollbacks == 1
        assert audit_sink.entries == []


class TestGetEligibility:
    async def test_account_reads_own(self, store, guest, enrollment):
        result = await get_eligibility(store, guest.id, enrollment.id, guest)
        assert not result.is_eligible

    async def test_staff_reads_any(self, store, moderator, guest, enrollment):
        await get_eligibility(store, guest.id, enrollment.id, moderator)

    async def test_member_cannot_read_others(self, store, member, guest, enrollment):
        with pytest.raises(ForbiddenError):
            await get_eligibility(store, guest.id, enrollment.id, member)
