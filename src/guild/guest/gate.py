"""Guest access gate.

Guest is an account *status*, not a role, so this gate never looks at roles.
Non-guest callers pass through untouched. For guests:

- restricted prefixes (administration, attendance marking, voting) always deny
- allowed prefixes (browsing, submitting, own profile) allow
- anything else denies
"""

from __future__ import annotations

from guild.db.enums import AccountStatus
from guild.errors import ForbiddenError

API_PREFIX = "/api/v1"

GUEST_RESTRICTED_PREFIXES: tuple[str, ...] = (
    f"{API_PREFIX}/admin",
    f"{API_PREFIX}/attendance/mark",
    f"{API_PREFIX}/votes",
)

GUEST_ALLOWED_PREFIXES: tuple[str, ...] = (
    f"{API_PREFIX}/profiles",
    f"{API_PREFIX}/activities",
    f"{API_PREFIX}/submissions",
    f"{API_PREFIX}/bounties",
    f"{API_PREFIX}/programs",
    f"{API_PREFIX}/me",
)


def _under(path: str, prefix: str) -> bool:
    """Segment-aware prefix match: ``/api/v1/me`` covers ``/api/v1/me/x`` but not ``/api/v1/members``."""
    return path == prefix or path.startswith(prefix + "/")


def is_guest_path_allowed(path: str, account_status: str) -> bool:
    if account_status != AccountStatus.GUEST:
        return True
    normalized = path.rstrip("/") or "/"
    if any(_under(normalized, prefix) for prefix in GUEST_RESTRICTED_PREFIXES):
        return False
    return any(_under(normalized, prefix) for prefix in GUEST_ALLOWED_PREFIXES)


def enforce_guest_access(path: str, account_status: str) -> None:
    """Raise ``ForbiddenError(GUEST_ACCESS_RESTRICTED)`` if a guest may not reach ``path``."""
    if not is_guest_path_allowed(path, account_status):
        raise ForbiddenError("Guest accounts do not have access to this resource", "GUEST_ACCESS_RESTRICTED")
