"""Submission endpoints: members submit, staff review."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from guild.db.models import Account
from guild.db.ports import MembershipStore
from guild.dependencies import get_store
from guild.identity.dependencies import get_current_account
from guild.submissions.schemas import (
    ApproveRequest,
    RejectSubmissionRequest,
    SubmissionResponse,
    SubmitRequest,
)
from guild.submissions.service import approve_submission, reject_submission, start_review, submit_activity

router = APIRouter(prefix="/api/v1/submissions", tags=["Submissions"])
admin_router = APIRouter(prefix="/api/v1/admin/submissions", tags=["Admin"])


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit(
    body: SubmitRequest,
    account: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> SubmissionResponse:
    submission = await submit_activity(
        store,
        account,
        body.activity_id,
        evidence_url=body.evidence_url,
        submission_text=body.submission_text,
    )
    return SubmissionResponse.model_validate(submission)


@admin_router.post("/{submission_id}/review", response_model=SubmissionResponse)
async def begin_review(
    submission_id: str,
    reviewer: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> SubmissionResponse:
    submission = await start_review(store, submission_id, reviewer)
    return SubmissionResponse.model_validate(submission)


@admin_router.post("/{submission_id}/approve", response_model=SubmissionResponse)
async def approve(
    submission_id: str,
    body: ApproveRequest,
    reviewer: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> SubmissionResponse:
    submission = await approve_submission(store, submission_id, reviewer, body.quality_score, body.review_notes)
    return SubmissionResponse.model_validate(submission)


@admin_router.post("/{submission_id}/reject", response_model=SubmissionResponse)
async def reject(
    submission_id: str,
    body: RejectSubmissionRequest | None = None,
    reviewer: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> SubmissionResponse:
    notes = body.review_notes if body else None
    submission = await reject_submission(store, submission_id, reviewer, notes)
    return SubmissionResponse.model_validate(submission)
