"""Activity submissions and their one-shot review.

pending -> under_review -> {approved, rejected}
pending -> {approved, rejected}

Approval attaches a quality score (0-100). A reviewed submission is final.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from guild.accounts.roles import check_not_self, check_staff
from guild.db.enums import ActivityStatus, SubmissionStatus
from guild.db.models import ActivitySubmission, new_id
from guild.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from guild.db.models import Account
    from guild.db.ports import MembershipStore

logger = structlog.get_logger()

REVIEWABLE = frozenset({SubmissionStatus.PENDING.value, SubmissionStatus.UNDER_REVIEW.value})


async def submit_activity(
    store: MembershipStore,
    account: Account,
    activity_id: str,
    *,
    evidence_url: str | None = None,
    submission_text: str | None = None,
) -> ActivitySubmission:
    """Create a pending submission for an active activity."""
    if not (evidence_url or submission_text):
        raise ValidationError("Provide an evidence URL or a text", "EVIDENCE_REQUIRED")

    activity = await store.get_activity(activity_id)
    if activity is None:
        raise NotFoundError("Activity")
    if activity.status != ActivityStatus.ACTIVE:
        raise ConflictError("Activity is not accepting submissions", "ACTIVITY_CLOSED")

    submission = ActivitySubmission(
        id=new_id(),
        account_id=account.id,
        activity_id=activity.id,
        status=SubmissionStatus.PENDING.value,
        evidence_url=evidence_url,
        submission_text=submission_text,
        quality_score=None,
        reward_amount=activity.reward_amount,
        reviewed_by=None,
        reviewed_at=None,
        review_notes=None,
        submitted_at=datetime.now(timezone.utc),
    )
    async with store.transaction():
        store.add(submission)

    logger.info("activity_submitted", submission_id=submission.id, account_id=account.id, activity_id=activity.id)
    return submission


async def _load_for_review(store: MembershipStore, submission_id: str, reviewer: Account) -> ActivitySubmission:
    denial = check_staff(reviewer)
    if denial:
        raise ForbiddenError.from_denial(denial)

    submission = await store.get_submission(submission_id, for_update=True)
    if submission is None:
        raise NotFoundError("Submission")

    denial = check_not_self(reviewer, submission.account_id)
    if denial:
        raise ForbiddenError.from_denial(denial)

    if submission.status not in REVIEWABLE:
        raise ConflictError(f"Submission is already {submission.status}", "ALREADY_REVIEWED")
    return submission


async def start_review(store: MembershipStore, submission_id: str, reviewer: Account) -> ActivitySubmission:
    """pending -> under_review."""
    submission = await _load_for_review(store, submission_id, reviewer)
    if submission.status != SubmissionStatus.PENDING:
        raise ConflictError("Submission is already under review", "ALREADY_UNDER_REVIEW")
    async with store.transaction():
        submission.status = SubmissionStatus.UNDER_REVIEW.value
    return submission


async def approve_submission(
    store: MembershipStore,
    submission_id: str,
    reviewer: Account,
    quality_score: float,
    review_notes: str | None = None,
) -> ActivitySubmission:
    if not 0 <= quality_score <= 100:
        raise ValidationError("Quality score must be between 0 and 100", "INVALID_SCORE")

    submission = await _load_for_review(store, submission_id, reviewer)
    async with store.transaction():
        submission.status = SubmissionStatus.APPROVED.value
        submission.quality_score = float(quality_score)
        submission.reviewed_by = reviewer.id
        submission.reviewed_at = datetime.now(timezone.utc)
        submission.review_notes = review_notes

    logger.info(
        "submission_reviewed",
        submission_id=submission.id,
        status=submission.status,
        quality_score=submission.quality_score,
        reviewer_id=reviewer.id,
    )
    return submission


async def reject_submission(
    store: MembershipStore,
    submission_id: str,
    reviewer: Account,
    review_notes: str | None = None,
) -> ActivitySubmission:
    submission = await _load_for_review(store, submission_id, reviewer)
    async with store.transaction():
        submission.status = SubmissionStatus.REJECTED.value
        submission.reviewed_by = reviewer.id
        submission.reviewed_at = datetime.now(timezone.utc)
        submission.review_notes = review_notes

    logger.info("submission_reviewed", submission_id=submission.id, status=submission.status, reviewer_id=reviewer.id)
    return submission
