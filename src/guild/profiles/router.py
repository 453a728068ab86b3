"""Public profile endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from guild.db.models import Account
from guild.db.ports import MembershipStore
from guild.dependencies import get_store
from guild.identity.dependencies import get_optional_account
from guild.profiles.schemas import ProfileResponse
from guild.profiles.service import get_profile_view

router = APIRouter(prefix="/api/v1/profiles", tags=["Profiles"])


@router.get("/{handle}", response_model=ProfileResponse)
async def read_profile(
    handle: str,
    viewer: Account | None = Depends(get_optional_account),
    store: MembershipStore = Depends(get_store),
) -> ProfileResponse:
    """Read a profile; anonymous callers are allowed."""
    view = await get_profile_view(store, handle, viewer)
    return ProfileResponse(
        **view.fields,
        profile_visibility=view.profile_visibility,
        is_owner=view.is_owner,
        is_private=view.is_private,
        can_view_socials=view.can_view_socials,
        can_view_location=view.can_view_location,
    )
