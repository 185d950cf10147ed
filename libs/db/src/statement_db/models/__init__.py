"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger models used by ``statement_ingest``.
"""

from .ledger import (
    Account,
    Base,
    Category,
    CategoryRule,
    DuplicateAuditIgnore,
    LedgerTransaction,
)

__all__ = [
    "Base",
    "Account",
    "Category",
    "CategoryRule",
    "DuplicateAuditIgnore",
    "LedgerTransaction",
]
