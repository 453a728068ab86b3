"""Persisted enum values.

The string values are stored verbatim in the database and must stay stable.
"""

from __future__ import annotations

import enum


class AccountStatus(str, enum.Enum):
    INCOMPLETE = "incomplete"
    PENDING = "pending"
    GUEST = "guest"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"
    REJECTED = "rejected"


class Role(str, enum.Enum):
    """Account role. Declaration order is authority order: member < moderator < admin."""

    MEMBER = "member"
    MODERATOR = "moderator"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, other: Role) -> bool:
        """Authority comparison used by every permission check."""
        return self.rank >= other.rank


_ROLE_RANK: dict[Role, int] = {role: index for index, role in enumerate(Role)}


class ProfileVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class EnrollmentStatus(str, enum.Enum):
    ENROLLED = "enrolled"
    COMPLETED = "completed"
    DROPPED = "dropped"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActivityStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def values(enum_cls: type[enum.Enum]) -> list[str]:
    """Return the persisted values of an enum, in declaration order."""
    return [member.value for member in enum_cls]
