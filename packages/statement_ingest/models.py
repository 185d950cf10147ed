"""Value types shared by the ingest pipeline and the duplicate audit.

Everything here is an immutable ``dataclass`` (or enum) so results can be
passed between threads or folded functionally without defensive copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum

# ---------------------------------------------------------------------------
# Ingest
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """One bank row in canonical form, ready for insert-if-absent.

    ``amount`` is already signed "debit negative / credit positive" whatever
    the source bank's convention. ``identity`` is unique per ``account_id`` at
    the storage boundary.
    """

    account_id: int
    posted_date: date
    description: str
    amount: Decimal
    identity: str
    source: str
    memo: str | None = None
    category: str | None = None
    category_id: int | None = None
    matched_rule_id: int | None = None
    matched_rule_pattern: str | None = None
    categorized_at: datetime | None = None
    created_at: datetime | None = None

    def with_category(self, match: CategoryMatch, *, at: datetime) -> CanonicalTransaction:
        return replace(
            self,
            category_id=match.category_id,
            matched_rule_id=match.rule_id,
            matched_rule_pattern=match.pattern,
            categorized_at=at,
        )


@dataclass(frozen=True, slots=True)
class RowError:
    """Why a CSV row could not become a :class:`CanonicalTransaction`."""

    line_no: int
    message: str


RowResult = CanonicalTransaction | RowError


class RowStatus(StrEnum):
    INSERTED = "inserted"
    IGNORED = "ignored"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Counters for one file's ingestion.

    ``ignored`` counts rows whose identity already existed (the idempotence
    path), never errors.
    """

    inserted: int = 0
    ignored: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.ignored + self.failed

    def record(self, status: RowStatus) -> ImportResult:
        """Return a new result with ``status`` counted once more."""

        if status is RowStatus.INSERTED:
            return replace(self, inserted=self.inserted + 1)
        if status is RowStatus.IGNORED:
            return replace(self, ignored=self.ignored + 1)
        return replace(self, failed=self.failed + 1)

    def __add__(self, other: ImportResult) -> ImportResult:
        return ImportResult(
            inserted=self.inserted + other.inserted,
            ignored=self.ignored + other.ignored,
            failed=self.failed + other.failed,
        )


@dataclass(frozen=True, slots=True)
class CategoryMatch:
    category_id: int
    rule_id: int | None = None
    pattern: str | None = None


@dataclass(frozen=True, slots=True)
class CategoryRuleSpec:
    """A categorization rule as loaded from storage."""

    id: int
    category_id: int
    pattern: str
    match_type: str = "contains"
    priority: int = 100


# ---------------------------------------------------------------------------
# Duplicate audit
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuditRow:
    """Projection of a persisted transaction read by the duplicate audit."""

    id: int
    account_id: int
    posted_date: date
    amount: Decimal
    description: str
    identity: str
    account_name: str = ""


class DuplicateType(StrEnum):
    EXACT = "exact"
    NEAR = "near"


@dataclass(frozen=True, slots=True)
class DuplicateCandidate:
    """An unordered pair of transactions in one account that look duplicated.

    ``a`` is always the earlier row by ``(posted_date, id)``.
    """

    type: DuplicateType
    score: float
    reason: str
    a: AuditRow
    b: AuditRow
    account_id: int = field(init=False)
    account_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "account_id", self.a.account_id)
        object.__setattr__(self, "account_name", self.a.account_name)

    @property
    def pair_key(self) -> tuple[int, int]:
        return pair_key(self.a.id, self.b.id)


class Resolution(StrEnum):
    """Reviewer decision for a surfaced candidate pair."""

    ACCEPT = "accept"
    KEEP_A = "keep_a"
    KEEP_B = "keep_b"


def pair_key(a_id: int, b_id: int) -> tuple[int, int]:
    """Order-independent key of a transaction pair."""

    return (a_id, b_id) if a_id <= b_id else (b_id, a_id)


__all__ = [
    "CanonicalTransaction",
    "RowError",
    "RowResult",
    "RowStatus",
    "ImportResult",
    "CategoryMatch",
    "CategoryRuleSpec",
    "AuditRow",
    "DuplicateType",
    "DuplicateCandidate",
    "Resolution",
    "pair_key",
]
