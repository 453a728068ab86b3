"""Unit tests for the role & permission authority."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from guild.accounts.roles import (
    DenialCode,
    check_account_action,
    check_role_change,
    check_staff,
    check_status_change,
)
from guild.db.enums import Role
from guild.errors import ValidationError


@dataclass
class _Actor:
    id: str
    role: str


ADMIN = _Actor("a-1", "admin")
OTHER_ADMIN = _Actor("a-2", "admin")
MODERATOR = _Actor("m-1", "moderator")
OTHER_MODERATOR = _Actor("m-2", "moderator")
MEMBER = _Actor("u-1", "member")
OTHER_MEMBER = _Actor("u-2", "member")


class TestRoleOrdering:
    def test_ordering(self):
        assert Role.MEMBER.rank < Role.MODERATOR.rank < Role.ADMIN.rank

    @pytest.mark.parametrize(
        ("role", "other", "expected"),
        [
            (Role.ADMIN, Role.ADMIN, True),
            (Role.ADMIN, Role.MEMBER, True),
            (Role.MODERATOR, Role.ADMIN, False),
            (Role.MODERATOR, Role.MODERATOR, True),
            (Role.MEMBER, Role.MODERATOR, False),
        ],
    )
    def test_at_least(self, role, other, expected):
        assert role.at_least(other) is expected


class TestStaff:
    def test_member_has_no_authority(self):
        denial = check_staff(MEMBER)
        assert denial is not None
        assert denial.reason == DenialCode.INSUFFICIENT_ROLE

    @pytest.mark.parametrize("actor", [MODERATOR, ADMIN])
    def test_staff_allowed(self, actor):
        assert check_staff(actor) is None

    def test_admin_minimum(self):
        assert check_staff(MODERATOR, Role.ADMIN).reason == DenialCode.INSUFFICIENT_ROLE

    def test_unknown_actor_role_is_validation_error(self):
        with pytest.raises(ValidationError):
            check_staff(_Actor("x", "owner"))


class TestAccountAction:
    @pytest.mark.parametrize("actor", [ADMIN, MODERATOR])
    def test_self_modification_denied(self, actor):
        assert check_account_action(actor, actor).reason == DenialCode.SELF_MODIFICATION

    @pytest.mark.parametrize("actor", [ADMIN, MODERATOR])
    def test_admin_target_immutable(self, actor):
        assert check_account_action(actor, OTHER_ADMIN).reason == DenialCode.ADMIN_IMMUTABLE

    def test_member_cannot_act_even_on_member(self):
        assert check_account_action(MEMBER, OTHER_MEMBER).reason == DenialCode.INSUFFICIENT_ROLE

    def test_insufficient_role_reported_before_target_rules(self):
        # A member targeting an admin learns only that they lack authority.
        assert check_account_action(MEMBER, ADMIN).reason == DenialCode.INSUFFICIENT_ROLE

    def test_moderator_on_member_allowed(self):
        assert check_account_action(MODERATOR, MEMBER) is None


class TestStatusChange:
    def test_moderator_cannot_ban(self):
        denial = check_status_change(MODERATOR, MEMBER, "banned")
        assert denial.reason == DenialCode.BAN_REQUIRES_ADMIN

    def test_admin_can_ban(self):
        assert check_status_change(ADMIN, MEMBER, "banned") is None

    def test_moderator_can_suspend(self):
        assert check_status_change(MODERATOR, MEMBER, "suspended") is None

    def test_self_status_change_denied_for_admin(self):
        assert check_status_change(ADMIN, ADMIN, "suspended").reason == DenialCode.SELF_MODIFICATION


class TestRoleChange:
    def test_moderator_cannot_grant_admin(self):
        denial = check_role_change(MODERATOR, OTHER_MODERATOR, "admin")
        assert denial.reason == DenialCode.ESCALATION_DENIED
        assert denial.code == "ESCALATION_DENIED"

    def test_moderator_can_grant_moderator(self):
        assert check_role_change(MODERATOR, MEMBER, "moderator") is None

    def test_admin_can_grant_admin(self):
        assert check_role_change(ADMIN, MODERATOR, "admin") is None

    def test_self_role_change_denied(self):
        assert check_role_change(MODERATOR, MODERATOR, "member").reason == DenialCode.SELF_MODIFICATION

    def test_unknown_target_role(self):
        with pytest.raises(ValidationError) as exc_info:
            check_role_change(ADMIN, MEMBER, "superuser")
        assert exc_info.value.code == "INVALID_ROLE"
