"""Profile reads through the visibility policy."""

from __future__ import annotations

from httpx import AsyncClient

from tests.conftest import auth_headers
from tests.fakes import seed_account, seed_profile

HIDDEN_ON_PRIVATE = (
    "city",
    "country",
    "country_code",
    "learning_tracks",
    "availability_status",
    "github_username",
    "twitter_username",
    "linkedin_url",
    "telegram_username",
    "completed_bounties",
    "total_earnings_usd",
    "activities_completed",
    "email",
    "profile_views",
)


class TestProfileRead:
    async def test_anonymous_viewer_of_private_profile(self, client: AsyncClient, store):
        owner = seed_account(store, handle="hidden_one", bio="hello")
        seed_profile(store, owner, visibility="private")

        response = await client.get("/api/v1/profiles/hidden_one")

        assert response.status_code == 200
        data = response.json()
        assert data["handle"] == "hidden_one"
        assert data["bio"] == "hello"
        assert data["is_private"] is True
        assert data["can_view_socials"] is False
        assert data["can_view_location"] is False
        for field in HIDDEN_ON_PRIVATE:
            assert data[field] is None, field

    async def test_public_profile_anonymous(self, client: AsyncClient, store):
        owner = seed_account(store, handle="open_one")
        seed_profile(store, owner, visibility="public")

        data = (await client.get("/api/v1/profiles/open_one")).json()

        assert data["city"] == "Lisbon"
        assert data["github_username"] == "octo"
        assert data["learning_tracks"] == ["python", "design"]
        assert data["email"] is None
        assert data["profile_views"] is None

    async def test_owner_sees_private_fields(self, client: AsyncClient, store):
        owner = seed_account(store, handle="me_myself")
        seed_profile(store, owner, visibility="private")

        data = (await client.get("/api/v1/profiles/me_myself", headers=auth_headers(owner))).json()

        assert data["is_owner"] is True
        assert data["city"] == "Lisbon"
        assert data["email"] == "me_myself@example.com"
        assert data["profile_views"] == 10

    async def test_other_member_sees_only_public_on_private(self, client: AsyncClient, store, member):
        owner = seed_account(store, handle="shy_one")
        seed_profile(store, owner, visibility="private")

        data = (await client.get("/api/v1/profiles/shy_one", headers=auth_headers(member))).json()

        assert data["is_owner"] is False
        assert data["telegram_username"] is None

    async def test_handle_lookup_is_case_insensitive(self, client: AsyncClient, store):
        seed_account(store, handle="mixed_case")
        response = await client.get("/api/v1/profiles/Mixed_Case")
        assert response.status_code == 200

    async def test_account_without_profile_row(self, client: AsyncClient, store):
        seed_account(store, handle="bare")
        data = (await client.get("/api/v1/profiles/bare")).json()
        assert data["handle"] == "bare"
        assert data["city"] is None

    async def test_unknown_handle(self, client: AsyncClient):
        response = await client.get("/api/v1/profiles/nobody_here")
        assert response.status_code == 404
        assert response.json() == {"detail": "Profile not found", "code": "NOT_FOUND"}

    async def test_guest_can_browse_profiles(self, client: AsyncClient, store, guest):
        seed_account(store, handle="someone")
        response = await client.get("/api/v1/profiles/someone", headers=auth_headers(guest))
        assert response.status_code == 200
