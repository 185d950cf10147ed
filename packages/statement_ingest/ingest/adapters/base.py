"""Shared adapter contract and the per-row import loop.

An adapter knows one bank's CSV export: how to recognize it, which column
aliases carry each logical field, which sign convention its amounts follow and
how trustworthy its reference numbers are. Everything else (reading rows,
categorization, idempotent insertion, failure counting) lives here so each
bank module only implements :meth:`BankAdapter.build_transaction`.
"""

from __future__ import annotations

import fnmatch
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from datetime import UTC, datetime
from decimal import Decimal
from os import PathLike
from pathlib import Path

from ...categorization import Categorizer, NullCategorizer
from ...errors import MissingFieldError, RowFormatError
from ...logging_setup import get_logger
from ...models import CanonicalTransaction, ImportResult, RowError, RowResult, RowStatus
from ...normalizers import AmountSignPolicy, normalize_amount, parse_amount
from ...persistence import TransactionStore
from ..csv_rows import (
    CsvRow,
    first_nonblank_line,
    normalize_header,
    read_csv_rows,
    read_lines,
    split_header,
)

logger = get_logger(__name__)


class BankAdapter(ABC):
    """Base class for one bank's CSV export format.

    Subclasses set the class attributes below and implement
    :meth:`build_transaction`, raising :class:`RowFormatError` subclasses for
    rows that cannot be used.
    """

    #: Short tag stored on every row and used as identity prefix.
    source_tag: str = ""
    amount_policy: AmountSignPolicy = AmountSignPolicy.AS_IS
    #: Human-readable header example shown by ``formats``.
    header_hint: str = ""
    #: Columns that must all be present in the header (case-insensitive).
    header_signature: tuple[str, ...] = ()
    #: Lower-case ``fnmatch`` patterns on the file name, used only as a fallback.
    filename_hints: tuple[str, ...] = ()
    #: Whether a human-readable preamble may precede the header.
    allows_preamble: bool = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.source_tag}>"

    # ---- Recognition -----------------------------------------------------

    def matches_header(self, columns: Iterable[str]) -> bool:
        if not self.header_signature:
            return False
        present = {normalize_header(c) for c in columns}
        return all(normalize_header(c) in present for c in self.header_signature)

    def header_index(self, lines: Sequence[str]) -> int | None:
        """0-based index of this adapter's header within ``lines``, if any."""

        if self.allows_preamble:
            candidates = enumerate(lines)
        else:
            first = first_nonblank_line(lines)
            candidates = iter([first] if first is not None else [])
        for idx, line in candidates:
            if line.strip() and self.matches_header(split_header(line)):
                return idx
        return None

    def matches_filename(self, path: str | PathLike[str]) -> bool:
        p = Path(path)
        if p.suffix.lower() != ".csv":
            return False
        name = p.name.lower()
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.filename_hints)

    def recognize(self, path: str | PathLike[str]) -> bool:
        """Header signature first, file name heuristics only as a fallback."""

        p = Path(path)
        if not p.is_file():
            return False
        if self.header_index(read_lines(p)) is not None:
            return True
        return self.matches_filename(p)

    # ---- Row handling ----------------------------------------------------

    def read_rows(self, path: str | PathLike[str]) -> Iterator[CsvRow]:
        header_line = self.header_index(read_lines(path)) or 0
        return read_csv_rows(path, header_line=header_line)

    @abstractmethod
    def build_transaction(self, row: CsvRow, account_id: int) -> CanonicalTransaction:
        """Map one row to a transaction or raise :class:`RowFormatError`."""

    def parse_row(self, row: CsvRow, account_id: int) -> RowResult:
        try:
            return self.build_transaction(row, account_id)
        except RowFormatError as exc:
            return RowError(line_no=row.line_no, message=str(exc))

    def import_file(
        self,
        path: str | PathLike[str],
        account_id: int,
        *,
        store: TransactionStore,
        categorizer: Categorizer | None = None,
    ) -> ImportResult:
        """Import every row of ``path`` into ``account_id``.

        A row that fails anywhere (parsing, categorization, storage) is
        logged, counted as failed, and the loop moves on.
        """

        categorizer = categorizer or NullCategorizer()
        result = ImportResult()
        name = Path(path).name
        for row in self.read_rows(path):
            status = self._import_row(
                row, account_id, store=store, categorizer=categorizer, name=name
            )
            result = result.record(status)

        logger.info(
            "%s import of %s: inserted=%d ignored=%d failed=%d",
            self.source_tag,
            name,
            result.inserted,
            result.ignored,
            result.failed,
        )
        return result

    def _import_row(
        self,
        row: CsvRow,
        account_id: int,
        *,
        store: TransactionStore,
        categorizer: Categorizer,
        name: str,
    ) -> RowStatus:
        try:
            parsed = self.parse_row(row, account_id)
            if isinstance(parsed, RowError):
                logger.warning(
                    "%s %s line %d: %s", self.source_tag, name, parsed.line_no, parsed.message
                )
                return RowStatus.FAILED
            match = categorizer.categorize(parsed.description)
            if match is not None:
                parsed = parsed.with_category(match, at=datetime.now(UTC))
            inserted = store.insert_if_absent(parsed)
        except Exception as exc:
            logger.warning(
                "%s %s line %d: row failed: %s", self.source_tag, name, row.line_no, exc
            )
            return RowStatus.FAILED
        return RowStatus.INSERTED if inserted else RowStatus.IGNORED

    # ---- Helpers for subclasses -------------------------------------------

    @staticmethod
    def require(row: CsvRow, field: str, *aliases: str) -> str:
        """First non-blank value for ``field`` (or its aliases) or ``MissingFieldError``."""

        value = row.get_first(field, *aliases)
        if value is None:
            raise MissingFieldError(field)
        return value

    def signed_amount(self, raw: str) -> Decimal:
        return normalize_amount(parse_amount(raw), self.amount_policy)


__all__ = ["BankAdapter"]
