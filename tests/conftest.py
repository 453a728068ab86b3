"""Shared test fixtures.

API tests run the real app over ``ASGITransport`` with the store, identity
verifier and audit sink swapped through ``dependency_overrides``. No database
or Redis is needed; the rate limiter passes through when Redis is not set up.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from guild.accounts.audit import MemoryAuditSink
from guild.db.models import Account
from guild.dependencies import get_audit_sink, get_store
from guild.identity.resolver import JwtIdentityVerifier, get_identity_verifier
from guild.main import create_app
from tests.fakes import InMemoryStore, seed_account

TEST_IDENTITY_SECRET = "test-identity-secret-with-enough-bytes"


def issue_token(external_id: str, *, expires_in: int = 300, secret: str = TEST_IDENTITY_SECRET) -> str:
    """Mint a token the way the upstream identity provider would."""
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {"sub": external_id, "iat": now, "exp": now + timedelta(seconds=expires_in)},
        secret,
        algorithm="HS256",
    )


def auth_headers(account: Account) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(account.external_id)}"}


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def audit_sink() -> MemoryAuditSink:
    return MemoryAuditSink()


@pytest.fixture
def admin(store: InMemoryStore) -> Account:
    return seed_account(store, role="admin", handle="root_admin")


@pytest.fixture
def moderator(store: InMemoryStore) -> Account:
    return seed_account(store, role="moderator", handle="mod_one")


@pytest.fixture
def member(store: InMemoryStore) -> Account:
    return seed_account(store, role="member", handle="plain_member")


@pytest.fixture
def guest(store: InMemoryStore) -> Account:
    return seed_account(store, role="member", status="guest", handle="new_guest")


@pytest_asyncio.fixture
async def client(store: InMemoryStore, audit_sink: MemoryAuditSink) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_audit_sink] = lambda: audit_sink
    app.dependency_overrides[get_identity_verifier] = lambda: JwtIdentityVerifier(TEST_IDENTITY_SECRET, "HS256")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
