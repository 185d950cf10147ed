# ruff: noqa: I001
"""Reviewed "not a duplicate" pairs for the duplicate audit.

Revision ID: 0002_duplicate_audit_ignores
Revises: 0001_ledger_core
Create Date: 2026-09-21
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_duplicate_audit_ignores"
down_revision: str | None = "0001_ledger_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Pairs are stored as (min(id), max(id)) so either ordering matches.
    op.create_table(
        "duplicate_audit_ignores",
        sa.Column("a_transaction_id", sa.BigInteger(), primary_key=True),
        sa.Column("b_transaction_id", sa.BigInteger(), primary_key=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "a_transaction_id < b_transaction_id", name="ck_duplicate_audit_ignores_ordered"
        ),
    )
    op.create_index(
        "ix_duplicate_audit_ignores_b", "duplicate_audit_ignores", ["b_transaction_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_duplicate_audit_ignores_b", table_name="duplicate_audit_ignores")
    op.drop_table("duplicate_audit_ignores")
