"""initial_auth_schema

Revision ID: 4f2a9c1d7b3e
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f2a9c1d7b3e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_NOT_DELETED = sa.text("deleted_at IS NULL")


def upgrade() -> None:
    """Upgrade schema - principal, auth_session, verification_token, login_attempt."""

    # Create principal table (credential store)
    op.create_table(
        "principal",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("status_reason", sa.String(length=500), nullable=True),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("email_normalized", sa.String(length=254), nullable=True),
        sa.Column("username", sa.String(length=50), nullable=True),
        sa.Column("username_normalized", sa.String(length=50), nullable=True),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("credential_hash", sa.String(length=255), nullable=True),
        sa.Column(
            "email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "failed_login_count", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("failed_login_window_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_principal_role", "principal", ["role"])
    op.create_index("ix_principal_status", "principal", ["status"])
    op.create_index("ix_principal_deleted_at", "principal", ["deleted_at"])
    op.create_index(
        "uq_principal_role_email_active",
        "principal",
        ["role", "email_normalized"],
        unique=True,
        postgresql_where=_NOT_DELETED,
    )
    op.create_index(
        "uq_principal_role_username_active",
        "principal",
        ["role", "username_normalized"],
        unique=True,
        postgresql_where=_NOT_DELETED,
    )

    # Create auth_session table (refresh-token registry)
    op.create_table(
        "auth_session",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("principal_id", sa.String(), nullable=False),
        sa.Column("family_id", sa.String(), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column(
            "remember_me", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(length=32), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["principal_id"], ["principal.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("token_hash"),
    )
    op.create_index("ix_auth_session_principal_id", "auth_session", ["principal_id"])
    op.create_index("ix_auth_session_family_id", "auth_session", ["family_id"])
    op.create_index(
        "ix_auth_session_principal_active",
        "auth_session",
        ["principal_id", "revoked_at", "expires_at"],
    )

    # Create verification_token table (single-use email verify / password reset)
    op.create_table(
        "verification_token",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("principal_id", sa.String(), nullable=False),
        sa.Column("purpose", sa.String(length=32), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("superseded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["principal_id"], ["principal.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("token_hash"),
    )
    op.create_index(
        "ix_verification_token_principal_id", "verification_token", ["principal_id"]
    )
    op.create_index(
        "ix_verification_token_principal_purpose",
        "verification_token",
        ["principal_id", "purpose"],
    )

    # Create login_attempt table (login history)
    op.create_table(
        "login_attempt",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("principal_id", sa.String(), nullable=True),
        sa.Column("identifier", sa.String(length=254), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("succeeded", sa.Boolean(), nullable=False),
        sa.Column("failure_reason", sa.String(length=32), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["principal_id"], ["principal.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_login_attempt_principal_time", "login_attempt", ["principal_id", "created_at"]
    )


def downgrade() -> None:
    """Downgrade schema - drop all authentication tables."""
    op.drop_index("ix_login_attempt_principal_time", table_name="login_attempt")
    op.drop_table("login_attempt")

    op.drop_index("ix_verification_token_principal_purpose", table_name="verification_token")
    op.drop_index("ix_verification_token_principal_id", table_name="verification_token")
    op.drop_table("verification_token")

    op.drop_index("ix_auth_session_principal_active", table_name="auth_session")
    op.drop_index("ix_auth_session_family_id", table_name="auth_session")
    op.drop_index("ix_auth_session_principal_id", table_name="auth_session")
    op.drop_table("auth_session")

    op.drop_index("uq_principal_role_username_active", table_name="principal")
    op.drop_index("uq_principal_role_email_active", table_name="principal")
    op.drop_index("ix_principal_deleted_at", table_name="principal")
    op.drop_index("ix_principal_status", table_name="principal")
    op.drop_index("ix_principal_role", table_name="principal")
    op.drop_table("principal")
