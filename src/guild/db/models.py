"""ORM models for the membership schema.

Enum-valued columns are plain strings guarded by CHECK constraints in the
migration; ``guild.db.enums`` holds the allowed values.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guild.db.base import Base


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class Account(Base):
    """Community account. Never physically deleted; rejection soft-deletes."""

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    handle: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(String(280), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="member", server_default="member")
    account_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="incomplete", server_default="incomplete"
    )
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    profile: Mapped[Profile | None] = relationship("Profile", back_populates="account", uselist=False)


class Profile(Base):
    """Extended profile, 1:1 with an account."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    account_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("accounts.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    # Location
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country_code: Mapped[str | None] = mapped_column(String(2), nullable=True)

    # Learning
    learning_tracks: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    availability_status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="available", server_default="available"
    )

    # Social handles
    github_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    twitter_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    telegram_username: Mapped[str | None] = mapped_column(String(100), nullable=True)

    profile_visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default="public", server_default="public"
    )

    # Denormalized completion stats
    completed_bounties: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_earnings_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    activities_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    profile_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    account: Mapped[Account] = relationship("Account", back_populates="profile")


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------


class Program(Base):
    __tablename__ = "programs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, server_default=text("true"))
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ProgramSession(Base):
    """A single meeting of a program; attendance is marked per session."""

    __tablename__ = "program_sessions"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    program_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    session_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ProgramEnrollment(Base):
    """Account enrollment in a program. ``promoted_at`` is written once, by promotion."""

    __tablename__ = "program_enrollments"
    __table_args__ = (
        Index(
            "uq_program_enrollments_active",
            "account_id",
            "program_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    account_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    program_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="enrolled", server_default="enrolled")
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    promoted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    extra: Mapped[dict[str, Any]] = mapped_column("metadata", JSONB, default=dict, server_default="{}")
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AttendanceRecord(Base):
    """One record per (account, session); re-marking overwrites."""

    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("account_id", "session_id", name="uq_attendance_account_session"),)

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    account_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    session_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("program_sessions.id", ondelete="CASCADE"), nullable=False
    )
    program_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False), ForeignKey("programs.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    marked_by: Mapped[str] = mapped_column(UUID(as_uuid=False), ForeignKey("accounts.id"), nullable=False)
    marked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    reward_amount: Mapped[Decimal] = mapped_column(Numeric(18, 8), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft", server_default="draft")
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ActivitySubmission(Base):
    """Submitted evidence for an activity. Review is a one-shot transition."""

    __tablename__ = "activity_submissions"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)
    account_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    activity_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    evidence_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    submission_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    quality_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    reward_amount: Mapped[Decimal] = mapped_column(Numeric(18, 8), nullable=False, default=Decimal("0"))
    reviewed_by: Mapped[str | None] = mapped_column(UUID(as_uuid=False), ForeignKey("accounts.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
