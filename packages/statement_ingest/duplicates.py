"""Duplicate audit over persisted transactions.

Public surface:
- ``DuplicateAuditOptions``: tunables, with ``from_env()`` for process config.
- ``find_duplicate_candidates``: pure scan over already-loaded rows.
- ``DuplicateAuditEngine``: one bulk read from the store, then the scan.
- ``resolve_candidate``: apply a reviewer's decision to a surfaced pair.

Two passes run over the lookback window:

Exact
    Rows sharing ``(account_id, identity)``. Each group is sorted by
    ``(posted_date, id)`` and only adjacent pairs are reported, so a group of
    ``k`` rows yields ``k - 1`` candidates rather than all pairs.
Near
    Rows bucketed by ``(account_id, amount)`` with exact amount equality.
    Within a date-sorted bucket each row is compared forward until the day
    gap exceeds the window; pairs whose description Jaccard score reaches the
    threshold are reported.

Pairs on the persistent ignore list never surface. The scan stops as soon as
``max_results`` candidates exist.
"""

from __future__ import annotations

import os
import threading
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from .descriptions import jaccard_similarity, normalize_description
from .errors import AuditCancelledError
from .logging_setup import get_logger
from .models import AuditRow, DuplicateCandidate, DuplicateType, Resolution, pair_key
from .persistence import TransactionStore

logger = get_logger(__name__)

IgnoredPredicate = Callable[[int, int], bool]


@dataclass(frozen=True, slots=True)
class DuplicateAuditOptions:
    lookback_days: int = 120
    date_window_days: int = 3
    similarity_threshold: float = 0.78
    max_results: int = 200
    # None audits every account.
    account_id: int | None = None

    def __post_init__(self) -> None:
        if self.lookback_days < 0:
            raise ValueError("lookback_days must be >= 0")
        if self.date_window_days < 0:
            raise ValueError("date_window_days must be >= 0")
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be within [0, 1]")
        if self.max_results < 1:
            raise ValueError("max_results must be >= 1")

    @classmethod
    def from_env(cls, *, account_id: int | None = None) -> DuplicateAuditOptions:
        """Build options from ``SI_AUDIT_*`` variables; bad values keep the default."""

        defaults = cls()

        def _read(name: str, cast: Callable[[str], int | float], fallback):
            raw = os.getenv(name)
            if raw is None or not raw.strip():
                return fallback
            try:
                return cast(raw.strip())
            except ValueError:
                logger.warning("Ignoring invalid %s=%r", name, raw)
                return fallback

        opts = {
            "lookback_days": _read("SI_AUDIT_LOOKBACK_DAYS", int, defaults.lookback_days),
            "date_window_days": _read("SI_AUDIT_DATE_WINDOW_DAYS", int, defaults.date_window_days),
            "similarity_threshold": _read(
                "SI_AUDIT_SIMILARITY_THRESHOLD", float, defaults.similarity_threshold
            ),
            "max_results": _read("SI_AUDIT_MAX_RESULTS", int, defaults.max_results),
        }
        try:
            return cls(account_id=account_id, **opts)
        except ValueError as exc:
            logger.warning("Invalid audit settings in environment (%s); using defaults", exc)
            return cls(account_id=account_id)


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------


class _CapReached(Exception):
    pass


def _sort_key(row: AuditRow) -> tuple[date, int]:
    return (row.posted_date, row.id)


def _never_ignored(a_id: int, b_id: int) -> bool:
    return False


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise AuditCancelledError("duplicate audit cancelled")


def find_duplicate_candidates(
    rows: Iterable[AuditRow],
    options: DuplicateAuditOptions | None = None,
    *,
    is_ignored: IgnoredPredicate | None = None,
    cancel: threading.Event | None = None,
) -> list[DuplicateCandidate]:
    """Report exact and near duplicate pairs among ``rows``.

    Results list exact candidates first, then by descending score. Raises
    :class:`AuditCancelledError` when ``cancel`` is set between outer loop
    iterations; no partial results are returned.
    """

    options = options or DuplicateAuditOptions()
    is_ignored = is_ignored or _never_ignored
    items = list(rows)
    results: list[DuplicateCandidate] = []

    def emit(candidate: DuplicateCandidate) -> None:
        results.append(candidate)
        if len(results) >= options.max_results:
            raise _CapReached

    try:
        _exact_pass(items, is_ignored, cancel, emit)
        _near_pass(items, options, is_ignored, cancel, emit)
    except _CapReached:
        logger.debug("Duplicate audit stopped at max_results=%d", options.max_results)

    # Stable sort keeps scan order among equal keys.
    results.sort(key=lambda c: (c.type is not DuplicateType.EXACT, -c.score))
    return results


def _exact_pass(
    items: Sequence[AuditRow],
    is_ignored: IgnoredPredicate,
    cancel: threading.Event | None,
    emit: Callable[[DuplicateCandidate], None],
) -> None:
    groups: dict[tuple[int, str], list[AuditRow]] = defaultdict(list)
    for row in items:
        if row.identity:
            groups[(row.account_id, row.identity)].append(row)

    for group in groups.values():
        _check_cancel(cancel)
        if len(group) < 2:
            continue
        ordered = sorted(group, key=_sort_key)
        for a, b in zip(ordered, ordered[1:], strict=False):
            if is_ignored(a.id, b.id):
                continue
            emit(
                DuplicateCandidate(
                    type=DuplicateType.EXACT,
                    score=1.0,
                    reason="Same identity imported more than once (definite duplicate).",
                    a=a,
                    b=b,
                )
            )


def _near_pass(
    items: Sequence[AuditRow],
    options: DuplicateAuditOptions,
    is_ignored: IgnoredPredicate,
    cancel: threading.Event | None,
    emit: Callable[[DuplicateCandidate], None],
) -> None:
    buckets: dict[tuple[int, Decimal], list[AuditRow]] = defaultdict(list)
    for row in items:
        buckets[(row.account_id, row.amount)].append(row)

    normalized: dict[int, str] = {}

    def norm(row: AuditRow) -> str:
        value = normalized.get(row.id)
        if value is None:
            value = normalized[row.id] = normalize_description(row.description)
        return value

    for bucket in buckets.values():
        _check_cancel(cancel)
        if len(bucket) < 2:
            continue
        # The early break below is only correct on a date-sorted bucket.
        bucket.sort(key=_sort_key)
        for i, a in enumerate(bucket):
            for b in bucket[i + 1 :]:
                day_gap = (b.posted_date - a.posted_date).days
                if day_gap > options.date_window_days:
                    break
                if a.identity and a.identity == b.identity:
                    continue
                if is_ignored(a.id, b.id):
                    continue
                score = jaccard_similarity(norm(a), norm(b))
                if score < options.similarity_threshold:
                    continue
                emit(
                    DuplicateCandidate(
                        type=DuplicateType.NEAR,
                        score=score,
                        reason=(
                            f"Same amount, within {day_gap} day(s), "
                            f"similar description (score {score:.2f})."
                        ),
                        a=a,
                        b=b,
                    )
                )


# ---------------------------------------------------------------------------
# Engine + resolution
# ---------------------------------------------------------------------------


class DuplicateAuditEngine:
    """Run the duplicate audit against a :class:`TransactionStore`."""

    def __init__(self, store: TransactionStore) -> None:
        self.store = store

    def run(
        self,
        options: DuplicateAuditOptions | None = None,
        *,
        cancel: threading.Event | None = None,
        today: date | None = None,
    ) -> list[DuplicateCandidate]:
        options = options or DuplicateAuditOptions()
        since = (today or date.today()) - timedelta(days=options.lookback_days)
        _check_cancel(cancel)

        rows = self.store.bulk_read_for_audit(options.account_id, since)
        ignored = self.store.ignored_pairs()
        logger.debug(
            "Duplicate audit: %d rows since %s, %d ignored pairs", len(rows), since, len(ignored)
        )

        candidates = find_duplicate_candidates(
            rows,
            options,
            is_ignored=lambda a, b: pair_key(a, b) in ignored,
            cancel=cancel,
        )
        exact = sum(1 for c in candidates if c.type is DuplicateType.EXACT)
        logger.info(
            "Duplicate audit found %d candidate(s): %d exact, %d near",
            len(candidates),
            exact,
            len(candidates) - exact,
        )
        return candidates


def resolve_candidate(
    store: TransactionStore,
    candidate: DuplicateCandidate,
    resolution: Resolution,
    *,
    reason: str | None = None,
) -> None:
    """Apply a reviewer decision to a surfaced pair.

    ``ACCEPT`` keeps both rows; ``KEEP_A``/``KEEP_B`` soft-delete the other
    side. Either way the pair is recorded as ignored so it never resurfaces.
    """

    resolve_pair(store, candidate.a.id, candidate.b.id, resolution, reason=reason)


def resolve_pair(
    store: TransactionStore,
    a_id: int,
    b_id: int,
    resolution: Resolution,
    *,
    reason: str | None = None,
) -> None:
    if a_id == b_id:
        raise ValueError(f"cannot resolve transaction {a_id} against itself")
    if resolution is Resolution.KEEP_A:
        store.soft_delete_transaction(b_id)
    elif resolution is Resolution.KEEP_B:
        store.soft_delete_transaction(a_id)
    default_reason = {
        Resolution.ACCEPT: "not a duplicate",
        Resolution.KEEP_A: f"kept {a_id}, deleted {b_id}",
        Resolution.KEEP_B: f"kept {b_id}, deleted {a_id}",
    }[resolution]
    store.record_ignored_pair(a_id, b_id, reason or default_reason)
    logger.info("Resolved pair (%d, %d) as %s", a_id, b_id, resolution.value)


__all__ = [
    "DuplicateAuditOptions",
    "DuplicateAuditEngine",
    "find_duplicate_candidates",
    "resolve_candidate",
    "resolve_pair",
]
