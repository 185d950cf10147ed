# ruff: noqa: I001
"""Soft-delete flag on transactions (duplicate resolution keeps the row).

Revision ID: 0003_tx_soft_delete
Revises: 0002_duplicate_audit_ignores
Create Date: 2026-10-02
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0003_tx_soft_delete"
down_revision: str | None = "0002_duplicate_audit_ignores"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Soft-deleted rows keep their identity, so a re-import of the same
    # statement does not bring them back.
    op.add_column(
        "transactions",
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )


def downgrade() -> None:
    op.drop_column("transactions", "is_deleted")
