"""Promotion eligibility calculator.

Criteria for guest -> active, each checked and reported on its own:
- at least 5 sessions attended (``present``) in the enrollment's program
- at least 3 approved submissions
- mean quality score of approved submissions at least 70.0 (0 when none)

The verdict is never cached: every call recomputes from the stored records
and performs no writes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from guild.db.enums import AttendanceStatus, SubmissionStatus
from guild.errors import NotFoundError

if TYPE_CHECKING:
    from guild.db.ports import MembershipStore

ATTENDANCE_REQUIRED = 5
SUBMISSIONS_REQUIRED = 3
QUALITY_REQUIRED = 70.0


@dataclass(frozen=True)
class EligibilityCriteria:
    attendance_count: int
    attendance_required: int
    submission_count: int
    submission_required: int
    quality_score: float
    quality_required: float


@dataclass(frozen=True)
class PromotionEligibility:
    is_eligible: bool
    criteria: EligibilityCriteria
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def evaluate(attendance_count: int, submission_count: int, quality_score: float) -> PromotionEligibility:
    """Apply the thresholds to already-aggregated numbers."""
    reasons: list[str] = []

    if attendance_count < ATTENDANCE_REQUIRED:
        reasons.append(f"need {ATTENDANCE_REQUIRED - attendance_count} more attended sessions")

    if submission_count < SUBMISSIONS_REQUIRED:
        reasons.append(f"need {SUBMISSIONS_REQUIRED - submission_count} more approved submissions")

    if quality_score < QUALITY_REQUIRED:
        reasons.append(
            f"quality score {quality_score:.2f} is {QUALITY_REQUIRED - quality_score:.2f} points "
            f"below {QUALITY_REQUIRED:.2f}"
        )

    return PromotionEligibility(
        is_eligible=not reasons,
        criteria=EligibilityCriteria(
            attendance_count=attendance_count,
            attendance_required=ATTENDANCE_REQUIRED,
            submission_count=submission_count,
            submission_required=SUBMISSIONS_REQUIRED,
            quality_score=quality_score,
            quality_required=QUALITY_REQUIRED,
        ),
        reasons=reasons,
    )


async def calculate_eligibility(
    store: MembershipStore,
    account_id: str,
    enrollment_id: str,
) -> PromotionEligibility:
    """
    Compute promotion eligibility for ``account_id`` within an enrollment.

    Raises:
        NotFoundError: The enrollment does not exist or belongs to another account.
    """
    enrollment = await store.get_enrollment(enrollment_id)
    if enrollment is None or enrollment.account_id != account_id:
        raise NotFoundError("Program enrollment")

    attendance_count = await store.count_attendance(
        account_id, AttendanceStatus.PRESENT.value, program_id=enrollment.program_id
    )
    submission_count = await store.count_submissions(account_id, SubmissionStatus.APPROVED.value)
    quality_score = await store.average_quality_score(account_id, SubmissionStatus.APPROVED.value)

    return evaluate(attendance_count, submission_count, quality_score)
