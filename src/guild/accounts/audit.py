"""Audit trail for account mutations.

Sinks are injected into the services. Writing is best-effort: a broken sink
is logged and never blocks or reverts the change it describes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Protocol

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuditEntry:
    actor_id: str
    account_id: str
    action: str  # "status" | "role" | "promotion"
    old_value: str | None
    new_value: str
    reason: str | None = None
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AuditSink(Protocol):
    def write(self, entry: AuditEntry) -> None: ...


class LoggingAuditSink:
    """Emit each entry as a structured ``account_audit`` log event."""

    def __init__(self, logger_name: str = "guild.audit") -> None:
        self._log = structlog.get_logger(logger_name)

    def write(self, entry: AuditEntry) -> None:
        payload = asdict(entry)
        payload["at"] = entry.at.isoformat()
        self._log.info("account_audit", **payload)


class MemoryAuditSink:
    """Keep entries in a list."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def write(self, entry: AuditEntry) -> None:
        self.entries.append(entry)


def write_audit(sink: AuditSink | None, entry: AuditEntry) -> None:
    if sink is None:
        return
    try:
        sink.write(entry)
    except Exception:
        logger.warning(
            "audit_write_failed",
            action=entry.action,
            account_id=entry.account_id,
            actor_id=entry.actor_id,
            exc_info=True,
        )
