"""Role & permission authority.

Every check returns ``None`` when the action is allowed or a :class:`Denial`
naming the rule that fired. Callers raise ``ForbiddenError.from_denial``.
All role comparisons go through ``Role.at_least``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol

from guild.db.enums import AccountStatus, Role
from guild.errors import ValidationError


class DenialCode(str, enum.Enum):
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    SELF_MODIFICATION = "SELF_MODIFICATION"
    ADMIN_IMMUTABLE = "ADMIN_IMMUTABLE"
    ESCALATION_DENIED = "ESCALATION_DENIED"
    BAN_REQUIRES_ADMIN = "BAN_REQUIRES_ADMIN"


@dataclass(frozen=True)
class Denial:
    reason: DenialCode
    message: str

    @property
    def code(self) -> str:
        return self.reason.value


class Actor(Protocol):
    id: str
    role: str


# Minimum role for any administrative mutation.
STAFF = Role.MODERATOR


def parse_role(value: str) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}", "INVALID_ROLE") from None


def check_staff(actor: Actor, minimum: Role = STAFF) -> Denial | None:
    """Actor must hold at least ``minimum`` authority."""
    if not parse_role(actor.role).at_least(minimum):
        return Denial(DenialCode.INSUFFICIENT_ROLE, f"{minimum.value.capitalize()} role required")
    return None


def check_not_self(actor: Actor, target_id: str) -> Denial | None:
    if actor.id == target_id:
        return Denial(DenialCode.SELF_MODIFICATION, "Cannot modify your own account")
    return None


def check_target_mutable(target: Actor) -> Denial | None:
    if parse_role(target.role) == Role.ADMIN:
        return Denial(DenialCode.ADMIN_IMMUTABLE, "Admin accounts cannot be modified")
    return None


def check_account_action(actor: Actor, target: Actor) -> Denial | None:
    """Baseline for any mutation of another account: staff, not self, target not admin."""
    return check_staff(actor) or check_not_self(actor, target.id) or check_target_mutable(target)


def check_status_change(actor: Actor, target: Actor, new_status: AccountStatus | str) -> Denial | None:
    denial = check_account_action(actor, target)
    if denial:
        return denial
    if AccountStatus(new_status) == AccountStatus.BANNED and not parse_role(actor.role).at_least(Role.ADMIN):
        return Denial(DenialCode.BAN_REQUIRES_ADMIN, "Only admins can ban accounts")
    return None


def check_role_change(actor: Actor, target: Actor, new_role: Role | str) -> Denial | None:
    denial = check_account_action(actor, target)
    if denial:
        return denial
    # Nobody grants more authority than they hold.
    if not parse_role(actor.role).at_least(parse_role(new_role)):
        return Denial(DenialCode.ESCALATION_DENIED, f"Cannot grant the {Role(new_role).value} role")
    return None
