"""Response schema for profile reads. Hidden fields are ``null``."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    handle: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    joined_at: datetime | None = None

    city: str | None = None
    country: str | None = None
    country_code: str | None = None

    learning_tracks: list[str] | None = None
    availability_status: str | None = None

    github_username: str | None = None
    twitter_username: str | None = None
    linkedin_url: str | None = None
    telegram_username: str | None = None

    completed_bounties: int | None = None
    total_earnings_usd: float | None = None
    activities_completed: int | None = None

    email: str | None = None
    profile_views: int | None = None

    profile_visibility: str
    is_owner: bool
    is_private: bool
    can_view_socials: bool
    can_view_location: bool
