# ruff: noqa: I001
"""Ledger core tables: accounts, categories, category rules, transactions.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-09-14
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "account_type", sa.String(), nullable=False, server_default=sa.text("'Checking'")
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
    )

    op.create_table(
        "category_rules",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("description_pattern", sa.Text(), nullable=False),
        sa.Column("category_id", sa.BigInteger(), nullable=False),
        sa.Column("match_type", sa.String(), nullable=False, server_default=sa.text("'contains'")),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("100")),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            "match_type in ('exact','starts_with','contains')",
            name="ck_category_rules_match_type",
        ),
        sa.UniqueConstraint(
            "description_pattern", "category_id", "match_type", name="uq_category_rules_rule"
        ),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.BigInteger(), nullable=False),
        sa.Column("posted_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("category_id", sa.BigInteger(), nullable=True),
        sa.Column("matched_rule_id", sa.Integer(), nullable=True),
        sa.Column("matched_rule_pattern", sa.Text(), nullable=True),
        sa.Column("categorized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("identity", sa.String(), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
    )

    # Sole insert-time deduplication key; import relies on ON CONFLICT against it
    op.create_unique_constraint(
        "uq_transactions_account_identity", "transactions", ["account_id", "identity"]
    )
    op.create_index("ix_transactions_posted_date", "transactions", ["posted_date"])
    op.create_index(
        "ix_transactions_account_amount_date",
        "transactions",
        ["account_id", "amount", "posted_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_transactions_account_amount_date", table_name="transactions")
    op.drop_index("ix_transactions_posted_date", table_name="transactions")
    op.drop_constraint("uq_transactions_account_identity", "transactions", type_="unique")
    op.drop_table("transactions")
    op.drop_table("category_rules")
    op.drop_table("categories")
    op.drop_table("accounts")
