"""Profile reads with visibility enforcement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from guild.db.enums import ProfileVisibility
from guild.errors import NotFoundError
from guild.profiles.visibility import (
    LOCATION_FIELDS,
    SOCIAL_FIELDS,
    can_view_field,
    filter_fields,
    profile_values,
)

if TYPE_CHECKING:
    from guild.db.models import Account
    from guild.db.ports import MembershipStore


@dataclass(frozen=True)
class ProfileView:
    account_id: str
    profile_visibility: str
    fields: dict[str, Any]
    is_owner: bool
    can_view_socials: bool
    can_view_location: bool

    @property
    def is_private(self) -> bool:
        return self.profile_visibility == ProfileVisibility.PRIVATE


async def get_profile_view(store: MembershipStore, handle: str, viewer: Account | None) -> ProfileView:
    """Load the profile behind ``handle`` as ``viewer`` is allowed to see it."""
    account = await store.get_account_by_handle(handle)
    if account is None:
        raise NotFoundError("Profile")
    profile = await store.get_profile(account.id)

    # No profile row yet: nothing beyond the always-public identity to share.
    visibility = profile.profile_visibility if profile is not None else ProfileVisibility.PRIVATE.value
    viewer_id = viewer.id if viewer is not None else None

    return ProfileView(
        account_id=account.id,
        profile_visibility=visibility,
        fields=filter_fields(profile_values(account, profile), visibility, owner_id=account.id, viewer_id=viewer_id),
        is_owner=viewer_id == account.id,
        can_view_socials=all(
            can_view_field(f, visibility, owner_id=account.id, viewer_id=viewer_id) for f in SOCIAL_FIELDS
        ),
        can_view_location=all(
            can_view_field(f, visibility, owner_id=account.id, viewer_id=viewer_id) for f in LOCATION_FIELDS
        ),
    )
