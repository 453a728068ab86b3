"""Account status state machine.

    incomplete -> pending -> {active, rejected}
    guest -> active            (promotion only)
    active <-> suspended
    active -> banned
    rejected, banned           terminal
"""

from __future__ import annotations

from guild.db.enums import AccountStatus
from guild.errors import ConflictError, ValidationError

VALID_TRANSITIONS: dict[AccountStatus, frozenset[AccountStatus]] = {
    AccountStatus.INCOMPLETE: frozenset({AccountStatus.PENDING}),
    AccountStatus.PENDING: frozenset({AccountStatus.ACTIVE, AccountStatus.REJECTED}),
    AccountStatus.GUEST: frozenset({AccountStatus.ACTIVE}),
    AccountStatus.ACTIVE: frozenset({AccountStatus.SUSPENDED, AccountStatus.BANNED}),
    AccountStatus.SUSPENDED: frozenset({AccountStatus.ACTIVE}),
    AccountStatus.BANNED: frozenset(),
    AccountStatus.REJECTED: frozenset(),
}

# Edges that exist in the graph but may only be taken by a dedicated operation.
PROMOTION_ONLY: frozenset[tuple[AccountStatus, AccountStatus]] = frozenset(
    {(AccountStatus.GUEST, AccountStatus.ACTIVE)}
)

_REASON_REQUIRED = frozenset({AccountStatus.SUSPENDED, AccountStatus.BANNED})


def parse_status(value: str) -> AccountStatus:
    try:
        return AccountStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown account status: {value!r}", "INVALID_STATUS") from None


def successors(current: AccountStatus | str) -> frozenset[AccountStatus]:
    """Legal next states for ``current``."""
    return VALID_TRANSITIONS[parse_status(current)]


def reason_required(target: AccountStatus | str) -> bool:
    """True when moving into ``target`` must be justified with a reason."""
    return parse_status(target) in _REASON_REQUIRED


def validate_transition(
    current: AccountStatus | str,
    target: AccountStatus | str,
    *,
    via_promotion: bool = False,
) -> None:
    """Raise unless ``current -> target`` is a legal move.

    Raises:
        ConflictError: ``target`` equals ``current``.
        ValidationError: ``target`` is not a declared successor, or the edge is
            reserved for promotion and ``via_promotion`` is False.
    """
    current_status = parse_status(current)
    target_status = parse_status(target)

    if current_status == target_status:
        raise ConflictError(f"Account is already {target_status.value}", "STATUS_UNCHANGED")

    allowed = VALID_TRANSITIONS[current_status]
    if target_status not in allowed:
        raise ValidationError(
            f"Invalid transition: {current_status.value} -> {target_status.value}",
            "INVALID_TRANSITION",
            details={"allowed": sorted(s.value for s in allowed)},
        )

    if (current_status, target_status) in PROMOTION_ONLY and not via_promotion:
        raise ValidationError(
            f"{current_status.value} -> {target_status.value} is only reachable through promotion",
            "INVALID_TRANSITION",
        )
