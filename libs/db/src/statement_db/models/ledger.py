from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# BIGINT identity on Postgres; SQLite only auto-increments INTEGER PRIMARY KEY.
_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: accounts
# ---------------------------


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Free text such as Checking, Savings, CreditCard, Investment, Loan
    account_type: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'Checking'")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )


# ---------------------------
# Reference: categories + rules
# ---------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )


class CategoryRule(Base):
    __tablename__ = "category_rules"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    description_pattern: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False
    )
    match_type: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'contains'")
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("100"))
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint(
            "match_type in ('exact','starts_with','contains')",
            name="ck_category_rules_match_type",
        ),
        UniqueConstraint(
            "description_pattern", "category_id", "match_type", name="uq_category_rules_rule"
        ),
    )


# ---------------------------
# Core: transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    # Canonical date. For banks with a volatile posted date this holds the
    # stable transaction date instead.
    posted_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Debit negative, credit positive regardless of the source convention.
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    # Legacy free-text category; new rows use category_id.
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    matched_rule_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    matched_rule_pattern: Mapped[str | None] = mapped_column(Text, nullable=True)
    categorized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    identity: Mapped[str] = mapped_column(String, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        UniqueConstraint("account_id", "identity", name="uq_transactions_account_identity"),
        Index("ix_transactions_posted_date", "posted_date"),
        Index("ix_transactions_account_amount_date", "account_id", "amount", "posted_date"),
    )


# ---------------------------
# Duplicate audit decisions
# ---------------------------


class DuplicateAuditIgnore(Base):
    """A reviewed "not a duplicate" pair, stored as ``(min(id), max(id))``."""

    __tablename__ = "duplicate_audit_ignores"

    a_transaction_id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True)
    b_transaction_id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint(
            "a_transaction_id < b_transaction_id", name="ck_duplicate_audit_ignores_ordered"
        ),
        Index("ix_duplicate_audit_ignores_b", "b_transaction_id"),
    )


__all__ = [
    "Base",
    "Account",
    "Category",
    "CategoryRule",
    "LedgerTransaction",
    "DuplicateAuditIgnore",
]
