"""
Identity resolution.

The upstream identity provider issues the bearer token; this module only
verifies it and maps the verified subject to a stored account. Any failure
on the way surfaces as ``UnauthorizedError``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import jwt
import structlog

from guild.config import get_settings
from guild.errors import UnauthorizedError

if TYPE_CHECKING:
    from guild.db.models import Account
    from guild.db.ports import MembershipStore

logger = structlog.get_logger()


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> str:
        """Return the external identity reference carried by ``token``."""
        ...


class JwtIdentityVerifier:
    """Verify provider-issued JWTs with PyJWT."""

    def __init__(
        self,
        key: str,
        algorithm: str = "RS256",
        *,
        issuer: str | None = None,
        audience: str | None = None,
    ) -> None:
        self._key = key
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience

    @classmethod
    def from_settings(cls) -> JwtIdentityVerifier:
        settings = get_settings()
        if settings.identity_jwt_algorithm.startswith("HS"):
            key = settings.identity_jwt_secret
        else:
            key = Path(settings.identity_jwt_public_key_path).read_text()
        return cls(
            key,
            settings.identity_jwt_algorithm,
            issuer=settings.identity_jwt_issuer,
            audience=settings.identity_jwt_audience,
        )

    def verify(self, token: str) -> str:
        """
        Verify and decode a provider token.

        Returns:
            The ``sub`` claim.

        Raises:
            UnauthorizedError: If the token is invalid, expired, or has no subject.
        """
        options: dict[str, Any] = {"require": ["sub", "exp"]}
        if self._audience is None:
            options["verify_aud"] = False
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._key,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                audience=self._audience,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired") from None
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError(f"Invalid token: {e}") from None

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise UnauthorizedError("Token has no subject")
        return subject


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    """Process-wide verifier built from settings (FastAPI dependency)."""
    return JwtIdentityVerifier.from_settings()


async def resolve_account(store: MembershipStore, verifier: IdentityVerifier, token: str | None) -> Account:
    """Map a bearer token to its stored, non-deleted account."""
    if not token:
        raise UnauthorizedError()

    external_id = verifier.verify(token)
    account = await store.get_account_by_external_id(external_id)
    if account is None:
        logger.info("identity_without_account", external_id=external_id)
        raise UnauthorizedError("No account for this identity")
    return account
