"""Public interface for the ``statement_ingest`` package.

Bank CSV statements go in through :class:`ImportPipeline` (or the
:mod:`statement_ingest.api` helpers) and come out as canonical, idempotently
stored transactions; :class:`DuplicateAuditEngine` reports what slipped past
identity matching. Only symbol re-exports live here.
"""

from .categorization import Categorizer, NullCategorizer, RuleCategorizer
from .descriptions import jaccard_similarity, normalize_description
from .duplicates import (
    DuplicateAuditEngine,
    DuplicateAuditOptions,
    find_duplicate_candidates,
    resolve_candidate,
)
from .errors import (
    AccountNotFoundError,
    AmountFormatError,
    AuditCancelledError,
    DateFormatError,
    MissingFieldError,
    NoAdapterError,
    RowFormatError,
    StatementIngestError,
)
from .ingest import BankAdapter, ImportPipeline, default_adapters
from .models import (
    AuditRow,
    CanonicalTransaction,
    CategoryMatch,
    DuplicateCandidate,
    DuplicateType,
    ImportResult,
    Resolution,
    RowError,
)
from .normalizers import AmountSignPolicy, normalize_amount, normalize_debit_credit
from .persistence import SqlTransactionStore, TransactionStore

__all__ = [
    # Pipeline
    "ImportPipeline",
    "BankAdapter",
    "default_adapters",
    # Audit
    "DuplicateAuditEngine",
    "DuplicateAuditOptions",
    "find_duplicate_candidates",
    "resolve_candidate",
    # Collaborators
    "TransactionStore",
    "SqlTransactionStore",
    "Categorizer",
    "NullCategorizer",
    "RuleCategorizer",
    # Normalization
    "AmountSignPolicy",
    "normalize_amount",
    "normalize_debit_credit",
    "normalize_description",
    "jaccard_similarity",
    # Models
    "AuditRow",
    "CanonicalTransaction",
    "CategoryMatch",
    "DuplicateCandidate",
    "DuplicateType",
    "ImportResult",
    "Resolution",
    "RowError",
    # Errors
    "StatementIngestError",
    "RowFormatError",
    "AmountFormatError",
    "DateFormatError",
    "MissingFieldError",
    "NoAdapterError",
    "AccountNotFoundError",
    "AuditCancelledError",
]
