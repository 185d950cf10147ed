"""statement_db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``statement_db.models.ledger`` (re-exported for convenience)
- Engine/session helpers in ``statement_db.client``
"""

from __future__ import annotations

from .models.ledger import (
    Account,
    Base,
    Category,
    CategoryRule,
    DuplicateAuditIgnore,
    LedgerTransaction,
)

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "Account",
    "Category",
    "CategoryRule",
    "DuplicateAuditIgnore",
    "LedgerTransaction",
]
