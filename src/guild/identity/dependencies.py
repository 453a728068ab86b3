"""FastAPI identity dependencies."""

from __future__ import annotations

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from guild.db.enums import AccountStatus
from guild.db.models import Account
from guild.db.ports import MembershipStore
from guild.dependencies import get_store
from guild.errors import ForbiddenError
from guild.guest.gate import enforce_guest_access
from guild.identity.resolver import IdentityVerifier, get_identity_verifier, resolve_account

# auto_error=False so a missing header surfaces as our 401, not FastAPI's 403.
_bearer = HTTPBearer(auto_error=False)

INACTIVE_STATUSES = frozenset(s.value for s in (AccountStatus.BANNED, AccountStatus.SUSPENDED, AccountStatus.REJECTED))


async def get_current_account(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    store: MembershipStore = Depends(get_store),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Account:
    """
    Resolve the caller's account and apply the guest gate to the request path.

    Raises 401 without a valid identity, 403 for inactive accounts or guests
    outside their allowed paths.
    """
    token = credentials.credentials if credentials else None
    account = await resolve_account(store, verifier, token)
    if account.account_status in INACTIVE_STATUSES:
        raise ForbiddenError(f"Account is {account.account_status}", "ACCOUNT_INACTIVE")
    enforce_guest_access(request.url.path, account.account_status)
    return account


async def get_optional_account(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    store: MembershipStore = Depends(get_store),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Account | None:
    """Same as get_current_account, but anonymous callers get ``None``."""
    if credentials is None:
        return None
    return await get_current_account(request, credentials, store, verifier)
