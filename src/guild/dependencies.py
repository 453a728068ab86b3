"""Shared FastAPI dependencies."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from guild.accounts.audit import AuditSink, LoggingAuditSink
from guild.database import get_session
from guild.db.ports import MembershipStore
from guild.db.store import SqlMembershipStore


async def get_store(db: AsyncSession = Depends(get_session)) -> MembershipStore:  # noqa: B008
    """Request-scoped membership store over the request's DB session."""
    return SqlMembershipStore(db)


@lru_cache
def get_audit_sink() -> AuditSink:
    """Audit sink injected into mutating services."""
    return LoggingAuditSink()
