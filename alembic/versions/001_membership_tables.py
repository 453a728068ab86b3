"""Membership schema: accounts, profiles, programs, attendance, submissions.

Enum-valued columns are strings restricted by CHECK constraints so the stored
values stay stable.

Revision ID: 001_membership_tables
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_membership_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ACCOUNT_STATUSES = ("incomplete", "pending", "guest", "active", "suspended", "banned", "rejected")
ROLES = ("member", "moderator", "admin")
PROFILE_VISIBILITIES = ("public", "private")
ENROLLMENT_STATUSES = ("enrolled", "completed", "dropped")
ATTENDANCE_STATUSES = ("present", "absent", "excused")
SUBMISSION_STATUSES = ("pending", "under_review", "approved", "rejected")
ACTIVITY_STATUSES = ("draft", "active", "paused", "completed", "cancelled")


def _one_of(column: str, values: Sequence[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id", postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text("gen_random_uuid()")
    )


def _account_fk(name: str, *, nullable: bool = False, ondelete: str | None = "CASCADE") -> sa.Column:
    return sa.Column(
        name, postgresql.UUID(as_uuid=False), sa.ForeignKey("accounts.id", ondelete=ondelete), nullable=nullable
    )


def upgrade() -> None:
    """Create the membership tables."""
    # --- accounts ---
    op.create_table(
        "accounts",
        _uuid_pk(),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("handle", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("bio", sa.String(280), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("role", sa.String(16), server_default="member", nullable=False),
        sa.Column("account_status", sa.String(16), server_default="incomplete", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("external_id", name="uq_accounts_external_id"),
        sa.UniqueConstraint("handle", name="uq_accounts_handle"),
        sa.CheckConstraint(_one_of("role", ROLES), name="ck_accounts_role"),
        sa.CheckConstraint(_one_of("account_status", ACCOUNT_STATUSES), name="ck_accounts_account_status"),
    )
    op.create_index("ix_accounts_status", "accounts", ["account_status"], postgresql_where=sa.text("deleted_at IS NULL"))

    # --- profiles ---
    op.create_table(
        "profiles",
        _uuid_pk(),
        _account_fk("account_id"),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("country_code", sa.String(2), nullable=True),
        sa.Column("learning_tracks", postgresql.JSONB(), nullable=True),
        sa.Column("availability_status", sa.String(32), server_default="available", nullable=False),
        sa.Column("github_username", sa.String(100), nullable=True),
        sa.Column("twitter_username", sa.String(100), nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
        sa.Column("telegram_username", sa.String(100), nullable=True),
        sa.Column("profile_visibility", sa.String(16), server_default="public", nullable=False),
        sa.Column("completed_bounties", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_earnings_usd", sa.Float(), server_default="0", nullable=False),
        sa.Column("activities_completed", sa.Integer(), server_default="0", nullable=False),
        sa.Column("profile_views", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("account_id", name="uq_profiles_account_id"),
        sa.CheckConstraint(
            _one_of("profile_visibility", PROFILE_VISIBILITIES), name="ck_profiles_profile_visibility"
        ),
    )

    # --- programs and sessions ---
    op.create_table(
        "programs",
        _uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=True),
    )
    op.create_table(
        "program_sessions",
        _uuid_pk(),
        sa.Column(
            "program_id", postgresql.UUID(as_uuid=False), sa.ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("session_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_program_sessions_program_id", "program_sessions", ["program_id"])

    # --- enrollments ---
    op.create_table(
        "program_enrollments",
        _uuid_pk(),
        _account_fk("account_id"),
        sa.Column(
            "program_id", postgresql.UUID(as_uuid=False), sa.ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("status", sa.String(16), server_default="enrolled", nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("promoted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), server_default="{}", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(_one_of("status", ENROLLMENT_STATUSES), name="ck_program_enrollments_status"),
    )
    # At most one live enrollment per (account, program).
    op.create_index(
        "uq_program_enrollments_active",
        "program_enrollments",
        ["account_id", "program_id"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    # --- attendance ---
    op.create_table(
        "attendance",
        _uuid_pk(),
        _account_fk("account_id"),
        sa.Column(
            "session_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("program_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "program_id", postgresql.UUID(as_uuid=False), sa.ForeignKey("programs.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("status", sa.String(16), nullable=False),
        _account_fk("marked_by", ondelete=None),
        sa.Column("marked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("account_id", "session_id", name="uq_attendance_account_session"),
        sa.CheckConstraint(_one_of("status", ATTENDANCE_STATUSES), name="ck_attendance_status"),
    )
    op.create_index("ix_attendance_account_program", "attendance", ["account_id", "program_id", "status"])

    # --- activities and submissions ---
    op.create_table(
        "activities",
        _uuid_pk(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("reward_amount", sa.Numeric(18, 8), server_default="0", nullable=False),
        sa.Column("status", sa.String(16), server_default="draft", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=True),
        sa.CheckConstraint(_one_of("status", ACTIVITY_STATUSES), name="ck_activities_status"),
    )
    op.create_table(
        "activity_submissions",
        _uuid_pk(),
        _account_fk("account_id"),
        sa.Column(
            "activity_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("evidence_url", sa.String(500), nullable=True),
        sa.Column("submission_text", sa.Text(), nullable=True),
        sa.Column("quality_score", sa.Float(), nullable=True),
        sa.Column("reward_amount", sa.Numeric(18, 8), server_default="0", nullable=False),
        _account_fk("reviewed_by", nullable=True, ondelete=None),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(_one_of("status", SUBMISSION_STATUSES), name="ck_activity_submissions_status"),
        sa.CheckConstraint(
            "quality_score IS NULL OR (quality_score >= 0 AND quality_score <= 100)",
            name="ck_activity_submissions_quality_score",
        ),
    )
    op.create_index("ix_activity_submissions_account_status", "activity_submissions", ["account_id", "status"])


def downgrade() -> None:
    """Drop the membership tables."""
    op.drop_table("activity_submissions")
    op.drop_table("activities")
    op.drop_table("attendance")
    op.drop_table("program_enrollments")
    op.drop_table("program_sessions")
    op.drop_table("programs")
    op.drop_table("profiles")
    op.drop_table("accounts")
