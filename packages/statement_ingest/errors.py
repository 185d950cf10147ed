"""Exception types raised by ``statement_ingest``.

Row-level errors (``RowFormatError`` and subclasses) describe a single CSV row
that cannot become a transaction; adapters turn them into ``RowError`` results
and count the row as failed. File-level errors abort one import call and carry
enough context to debug format recognition. An insert rejected because the
identity already exists is not an error and has no exception type.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class StatementIngestError(Exception):
    """Base class for every error raised by this package."""


# ---- Row level ---------------------------------------------------------------


class RowFormatError(StatementIngestError, ValueError):
    """A CSV row holds a value that cannot be interpreted."""


class AmountFormatError(RowFormatError):
    """An amount (or debit/credit pair) is malformed or ambiguous."""


class DateFormatError(RowFormatError):
    """A date matches none of the accepted formats."""


class MissingFieldError(RowFormatError):
    """A required column is absent or blank for this row."""

    def __init__(self, field: str) -> None:
        super().__init__(f"missing required field: {field}")
        self.field = field


# ---- File level --------------------------------------------------------------


class NoAdapterError(StatementIngestError):
    """No bank adapter recognized a file."""

    def __init__(self, path: str | Path, header: str | None, attempted: Sequence[str]) -> None:
        self.path = Path(path)
        self.header = header
        self.attempted = tuple(attempted)
        shown = header if header is not None else "<empty file>"
        super().__init__(
            f"No adapter recognized {self.path.name!r}. "
            f"Header: {shown!r}. Tried: {', '.join(self.attempted) or '(none)'}"
        )


class AccountNotFoundError(StatementIngestError):
    """The target account of an import does not exist."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"account {account_id} does not exist")
        self.account_id = account_id


# ---- Audit -------------------------------------------------------------------


class AuditCancelledError(StatementIngestError):
    """A duplicate audit scan was cancelled by the caller."""


__all__ = [
    "StatementIngestError",
    "RowFormatError",
    "AmountFormatError",
    "DateFormatError",
    "MissingFieldError",
    "NoAdapterError",
    "AccountNotFoundError",
    "AuditCancelledError",
]
