"""Eligibility and promotion endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers
from tests.fakes import seed_attendance, seed_enrollment, seed_program, seed_submission


@pytest.fixture
def program(store):
    return seed_program(store)


@pytest.fixture
def enrollment(store, guest, program):
    return seed_enrollment(store, guest, program)


class TestEligibilityEndpoints:
    async def test_guest_reads_own_progress(self, client: AsyncClient, store, guest, program, enrollment):
        seed_attendance(store, guest, program, 4)
        for _ in range(3):
            seed_submission(store, guest, quality_score=80.0)

        response = await client.get(
            "/api/v1/me/eligibility", params={"enrollment_id": enrollment.id}, headers=auth_headers(guest)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_eligible"] is False
        assert data["reasons"] == ["need 1 more attended sessions"]
        assert data["criteria"]["attendance_count"] == 4

    async def test_staff_reads_eligibility(self, client: AsyncClient, moderator, guest, enrollment):
        response = await client.get(
            f"/api/v1/admin/accounts/{guest.id}/eligibility",
            params={"enrollment_id": enrollment.id},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 200
        assert response.json()["criteria"]["submission_required"] == 3

    async def test_unknown_enrollment(self, client: AsyncClient, moderator, guest):
        response = await client.get(
            f"/api/v1/admin/accounts/{guest.id}/eligibility",
            params={"enrollment_id": "nope"},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 404


class TestPromoteEndpoint:
    async def test_promote_ineligible_guest_with_warning(
        self, client: AsyncClient, admin, guest, enrollment, audit_sink
    ):
        response = await client.post(
            f"/api/v1/admin/accounts/{guest.id}/promote",
            json={"enrollment_id": enrollment.id, "notes": "fast track"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["account"]["account_status"] == "active"
        assert data["enrollment_id"] == enrollment.id
        assert data["promoted_at"] is not None
        assert data["eligibility"]["is_eligible"] is False
        assert len(data["warnings"]) == 1
        assert audit_sink.entries[-1].action == "promotion"

    async def test_active_account_cannot_be_promoted(self, client: AsyncClient, store, admin, member, program):
        active_enrollment = seed_enrollment(store, member, program)
        response = await client.post(
            f"/api/v1/admin/accounts/{member.id}/promote",
            json={"enrollment_id": active_enrollment.id},
            headers=auth_headers(admin),
        )
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INVALID_STATUS_FOR_PROMOTION"
        assert body["details"] == {"current_status": "active"}

    async def test_second_promotion_conflicts(self, client: AsyncClient, admin, guest, enrollment):
        url = f"/api/v1/admin/accounts/{guest.id}/promote"
        first = await client.post(url, json={"enrollment_id": enrollment.id}, headers=auth_headers(admin))
        second = await client.post(url, json={"enrollment_id": enrollment.id}, headers=auth_headers(admin))
        assert first.status_code == 200
        assert second.status_code == 409
