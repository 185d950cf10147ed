# ruff: noqa: I001
"""Persistence integration for statement_ingest.

The ingest and audit code only talk to storage through the small
:class:`TransactionStore` protocol so tests (and host applications) can plug
in their own. :class:`SqlTransactionStore` implements it on top of the shared
SQLAlchemy models in ``statement_db.models.ledger``.

Each store call opens its own ``session_scope`` and commits before returning,
so a failing row never leaves a broken transaction behind for the next one.
Idempotent insertion relies on the ``(account_id, identity)`` unique
constraint and the dialect's ``INSERT ... ON CONFLICT DO NOTHING``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from statement_db.client import session_scope
from statement_db.models.ledger import (
    Account,
    CategoryRule,
    DuplicateAuditIgnore,
    LedgerTransaction,
)

from .logging_setup import get_logger
from .models import AuditRow, CanonicalTransaction, CategoryRuleSpec, pair_key

logger = get_logger(__name__)


@runtime_checkable
class TransactionStore(Protocol):
    """Storage operations consumed by the pipeline and the duplicate audit."""

    def account_exists(self, account_id: int) -> bool: ...

    def insert_if_absent(self, tx: CanonicalTransaction) -> bool: ...

    def bulk_read_for_audit(self, account_id: int | None, since: date) -> list[AuditRow]: ...

    def is_pair_ignored(self, a_id: int, b_id: int) -> bool: ...

    def ignored_pairs(self) -> set[tuple[int, int]]: ...

    def record_ignored_pair(self, a_id: int, b_id: int, reason: str | None = None) -> None: ...

    def soft_delete_transaction(self, transaction_id: int) -> bool: ...

    def load_category_rules(self) -> list[CategoryRuleSpec]: ...


def _insert_for(session: Session):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"insert-if-absent is not supported on dialect {dialect!r}")


def _transaction_values(tx: CanonicalTransaction) -> dict[str, Any]:
    values: dict[str, Any] = {
        "account_id": tx.account_id,
        "posted_date": tx.posted_date,
        "description": tx.description,
        "amount": tx.amount,
        "category": tx.category,
        "category_id": tx.category_id,
        "matched_rule_id": tx.matched_rule_id,
        "matched_rule_pattern": tx.matched_rule_pattern,
        "categorized_at": tx.categorized_at,
        "memo": tx.memo,
        "identity": tx.identity,
        "source": tx.source,
    }
    if tx.created_at is not None:
        values["created_at"] = tx.created_at
    return values


def insert_transaction_if_absent(session: Session, tx: CanonicalTransaction) -> bool:
    """Insert ``tx`` unless ``(account_id, identity)`` already exists.

    Returns ``True`` when a row was written. Commit happens at the caller.
    """

    insert = _insert_for(session)
    stmt = (
        insert(LedgerTransaction.__table__)
        .values(**_transaction_values(tx))
        .on_conflict_do_nothing(index_elements=["account_id", "identity"])
    )
    result = session.execute(stmt)
    return result.rowcount == 1


class SqlTransactionStore:
    """:class:`TransactionStore` backed by the shared SQLAlchemy models."""

    def __init__(self, database_url: str | None = None) -> None:
        # None defers to DATABASE_URL at first use.
        self.database_url = database_url

    def _scope(self):
        return session_scope(database_url=self.database_url)

    # ---- Accounts ---------------------------------------------------------

    def account_exists(self, account_id: int) -> bool:
        with self._scope() as s:
            return s.get(Account, account_id) is not None

    def create_account(self, name: str, account_type: str = "Checking") -> int:
        with self._scope() as s:
            account = Account(name=name, account_type=account_type)
            s.add(account)
            s.flush()
            return account.id

    # ---- Transactions -----------------------------------------------------

    def insert_if_absent(self, tx: CanonicalTransaction) -> bool:
        with self._scope() as s:
            return insert_transaction_if_absent(s, tx)

    def soft_delete_transaction(self, transaction_id: int) -> bool:
        with self._scope() as s:
            result = s.execute(
                update(LedgerTransaction)
                .where(LedgerTransaction.id == transaction_id)
                .where(LedgerTransaction.is_deleted.is_(False))
                .values(is_deleted=True)
            )
            return result.rowcount == 1

    def bulk_read_for_audit(self, account_id: int | None, since: date) -> list[AuditRow]:
        stmt = (
            select(
                LedgerTransaction.id,
                LedgerTransaction.account_id,
                Account.name,
                LedgerTransaction.posted_date,
                LedgerTransaction.amount,
                LedgerTransaction.description,
                LedgerTransaction.identity,
            )
            .join(Account, Account.id == LedgerTransaction.account_id)
            .where(LedgerTransaction.posted_date >= since)
            .where(LedgerTransaction.is_deleted.is_(False))
            .order_by(
                LedgerTransaction.account_id,
                LedgerTransaction.amount,
                LedgerTransaction.posted_date,
                LedgerTransaction.id,
            )
        )
        if account_id is not None:
            stmt = stmt.where(LedgerTransaction.account_id == account_id)

        with self._scope() as s:
            rows = s.execute(stmt).all()
        return [
            AuditRow(
                id=r.id,
                account_id=r.account_id,
                account_name=r.name,
                posted_date=r.posted_date,
                amount=r.amount,
                description=r.description,
                identity=r.identity,
            )
            for r in rows
        ]

    # ---- Duplicate audit ignore list --------------------------------------

    def is_pair_ignored(self, a_id: int, b_id: int) -> bool:
        lo, hi = pair_key(a_id, b_id)
        with self._scope() as s:
            return s.get(DuplicateAuditIgnore, (lo, hi)) is not None

    def ignored_pairs(self) -> set[tuple[int, int]]:
        with self._scope() as s:
            rows = s.execute(
                select(DuplicateAuditIgnore.a_transaction_id, DuplicateAuditIgnore.b_transaction_id)
            ).all()
        return {(a, b) for a, b in rows}

    def record_ignored_pair(self, a_id: int, b_id: int, reason: str | None = None) -> None:
        if a_id == b_id:
            raise ValueError("a transaction cannot be paired with itself")
        lo, hi = pair_key(a_id, b_id)
        with self._scope() as s:
            insert = _insert_for(s)
            s.execute(
                insert(DuplicateAuditIgnore.__table__)
                .values(a_transaction_id=lo, b_transaction_id=hi, reason=reason)
                .on_conflict_do_nothing(index_elements=["a_transaction_id", "b_transaction_id"])
            )
        logger.info("Recorded ignored duplicate pair (%d, %d)", lo, hi)

    # ---- Categorization ---------------------------------------------------

    def load_category_rules(self) -> list[CategoryRuleSpec]:
        with self._scope() as s:
            rules = s.execute(
                select(CategoryRule).where(CategoryRule.is_enabled.is_(True))
            ).scalars()
            return [
                CategoryRuleSpec(
                    id=r.id,
                    category_id=r.category_id,
                    pattern=r.description_pattern,
                    match_type=r.match_type,
                    priority=r.priority,
                )
                for r in rules
            ]


__all__ = [
    "TransactionStore",
    "SqlTransactionStore",
    "insert_transaction_if_absent",
]
