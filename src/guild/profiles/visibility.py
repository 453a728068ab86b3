"""Field-level profile visibility policy.

Each known field is declared once in ``FIELD_POLICY`` with the audience it
needs. Rules, first match wins:

1. unknown field -> hidden
2. viewer owns the profile -> visible
3. always-public field -> visible
4. private profile -> hidden
5. public profile -> members-only fields visible to everyone, owner-only hidden

Everything here is pure; the same inputs always give the same output.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from guild.db.enums import ProfileVisibility

if TYPE_CHECKING:
    from guild.db.models import Account, Profile


class FieldVisibility(str, enum.Enum):
    ALWAYS_PUBLIC = "always_public"
    MEMBERS = "members"
    OWNER = "owner"


FIELD_POLICY: dict[str, FieldVisibility] = {
    # identity
    "handle": FieldVisibility.ALWAYS_PUBLIC,
    "display_name": FieldVisibility.ALWAYS_PUBLIC,
    "avatar_url": FieldVisibility.ALWAYS_PUBLIC,
    "bio": FieldVisibility.ALWAYS_PUBLIC,
    "joined_at": FieldVisibility.ALWAYS_PUBLIC,
    # location
    "city": FieldVisibility.MEMBERS,
    "country": FieldVisibility.MEMBERS,
    "country_code": FieldVisibility.MEMBERS,
    # learning
    "learning_tracks": FieldVisibility.MEMBERS,
    "availability_status": FieldVisibility.MEMBERS,
    # social handles
    "github_username": FieldVisibility.MEMBERS,
    "twitter_username": FieldVisibility.MEMBERS,
    "linkedin_url": FieldVisibility.MEMBERS,
    "telegram_username": FieldVisibility.MEMBERS,
    # completion stats
    "completed_bounties": FieldVisibility.MEMBERS,
    "total_earnings_usd": FieldVisibility.MEMBERS,
    "activities_completed": FieldVisibility.MEMBERS,
    # owner only
    "email": FieldVisibility.OWNER,
    "profile_views": FieldVisibility.OWNER,
}

KNOWN_FIELDS: tuple[str, ...] = tuple(FIELD_POLICY)
SOCIAL_FIELDS = ("github_username", "twitter_username", "linkedin_url", "telegram_username")
LOCATION_FIELDS = ("city", "country", "country_code")


def can_view_field(
    field: str,
    profile_visibility: str,
    *,
    owner_id: str,
    viewer_id: str | None,
) -> bool:
    """Whether ``viewer_id`` (``None`` = anonymous) may see ``field``."""
    level = FIELD_POLICY.get(field)
    if level is None:
        return False
    if viewer_id is not None and viewer_id == owner_id:
        return True
    if level == FieldVisibility.ALWAYS_PUBLIC:
        return True
    if profile_visibility != ProfileVisibility.PUBLIC:
        return False
    return level == FieldVisibility.MEMBERS


def filter_fields(
    values: Mapping[str, Any],
    profile_visibility: str,
    *,
    owner_id: str,
    viewer_id: str | None,
) -> dict[str, Any]:
    """Return every known field; hidden or missing ones come back as ``None``."""
    return {
        field: values.get(field)
        if can_view_field(field, profile_visibility, owner_id=owner_id, viewer_id=viewer_id)
        else None
        for field in KNOWN_FIELDS
    }


def profile_values(account: Account, profile: Profile | None) -> dict[str, Any]:
    """Flatten an account and its profile into the field names of ``FIELD_POLICY``."""
    values: dict[str, Any] = {
        "handle": account.handle,
        "display_name": account.display_name,
        "avatar_url": account.avatar_url,
        "bio": account.bio,
        "joined_at": account.created_at,
        "email": account.email,
    }
    if profile is not None:
        for field in KNOWN_FIELDS:
            if field not in values and hasattr(profile, field):
                values[field] = getattr(profile, field)
    return values
