"""Initial accounts table: KYC status and role lifecycles.

Revision ID: 20261001000000
Revises:
Create Date: 2026-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261001000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("kyc_status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="user"),
        sa.Column("role_assigned_by", sa.String(length=64), nullable=True),
        sa.Column("role_assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("portfolio_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "kyc_status IN ('pending', 'verified', 'rejected')",
            name="ck_accounts_kyc_status",
        ),
        sa.CheckConstraint(
            "role IN ('user', 'admin', 'super_admin')",
            name="ck_accounts_role",
        ),
    )
    op.create_index(op.f("ix_accounts_email"), "accounts", ["email"], unique=True)
    op.create_index(op.f("ix_accounts_kyc_status"), "accounts", ["kyc_status"], unique=False)
    op.create_index(op.f("ix_accounts_role"), "accounts", ["role"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_accounts_role"), table_name="accounts")
    op.drop_index(op.f("ix_accounts_kyc_status"), table_name="accounts")
    op.drop_index(op.f("ix_accounts_email"), table_name="accounts")
    op.drop_table("accounts")
