"""Typed error taxonomy shared by every membership component.

Each error carries a stable machine-readable ``code`` and the HTTP status the
API boundary maps it to. Components raise these; only
``guild.middleware.error_handler`` turns them into responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from guild.accounts.roles import Denial


class MembershipError(Exception):
    """Base class for all typed membership errors."""

    status_code: int = 400
    default_code: str = "ERROR"

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}


class ValidationError(MembershipError):
    """Malformed input or an illegal target state."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class UnauthorizedError(MembershipError):
    """No verified identity."""

    status_code = 401
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required", code: str | None = None) -> None:
        super().__init__(message, code)


class ForbiddenError(MembershipError):
    """Verified caller without the authority for the request."""

    status_code = 403
    default_code = "FORBIDDEN"

    @classmethod
    def from_denial(cls, denial: Denial) -> ForbiddenError:
        return cls(denial.message, denial.code)


class ConflictError(MembershipError):
    """A state precondition was not met."""

    status_code = 409
    default_code = "CONFLICT"


class DuplicateRecordError(ConflictError):
    """A unique constraint rejected the commit.

    Raised by the store; services re-raise it with the code of the rule the
    constraint backs.
    """

    default_code = "DUPLICATE_RECORD"


class NotFoundError(MembershipError):
    """Referenced entity is absent or soft-deleted."""

    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource") -> None:
        # Never echo the looked-up identifier.
        super().__init__(f"{resource} not found")
