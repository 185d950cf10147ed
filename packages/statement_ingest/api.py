"""Public API and orchestration for the ``statement_ingest`` package.

These functions wire the pipeline and the duplicate audit to the SQL-backed
store so callers (the CLI, a folder watcher, a host application) need a
database URL and nothing else. Code that wants its own store or categorizer
should use :class:`~statement_ingest.ingest.ImportPipeline` and
:class:`~statement_ingest.duplicates.DuplicateAuditEngine` directly.
"""

from __future__ import annotations

import threading
from datetime import date
from os import PathLike

from .categorization import Categorizer, NullCategorizer, RuleCategorizer
from .duplicates import DuplicateAuditEngine, DuplicateAuditOptions, resolve_pair
from .ingest.pipeline import FileImportOutcome, FormatInfo, ImportPipeline
from .models import DuplicateCandidate, ImportResult, Resolution
from .persistence import SqlTransactionStore


def build_pipeline(
    *, database_url: str | None = None, categorize: bool = True
) -> ImportPipeline:
    store = SqlTransactionStore(database_url)
    categorizer: Categorizer = RuleCategorizer(store) if categorize else NullCategorizer()
    return ImportPipeline(store=store, categorizer=categorizer)


def import_csv(
    csv_path: str | PathLike[str],
    account_id: int,
    *,
    database_url: str | None = None,
    categorize: bool = True,
) -> ImportResult:
    """Import one bank CSV into ``account_id``; see :meth:`ImportPipeline.import_file`."""

    pipeline = build_pipeline(database_url=database_url, categorize=categorize)
    return pipeline.import_file(csv_path, account_id)


def import_folder(
    folder: str | PathLike[str],
    account_id: int,
    *,
    database_url: str | None = None,
    categorize: bool = True,
) -> list[FileImportOutcome]:
    pipeline = build_pipeline(database_url=database_url, categorize=categorize)
    return pipeline.import_directory(folder, account_id)


def detect_format(csv_path: str | PathLike[str]) -> str:
    """Source tag of the adapter that would import ``csv_path`` (no database needed)."""

    return build_pipeline(categorize=False).detect(csv_path).source_tag


def list_formats() -> list[FormatInfo]:
    return build_pipeline(categorize=False).describe_formats()


def audit_duplicates(
    options: DuplicateAuditOptions | None = None,
    *,
    database_url: str | None = None,
    cancel: threading.Event | None = None,
    today: date | None = None,
) -> list[DuplicateCandidate]:
    engine = DuplicateAuditEngine(SqlTransactionStore(database_url))
    return engine.run(options or DuplicateAuditOptions.from_env(), cancel=cancel, today=today)


def ignore_pair(
    a_id: int, b_id: int, *, reason: str | None = None, database_url: str | None = None
) -> None:
    """Mark a pair as "not a duplicate" so audits never report it again."""

    resolve_pair(SqlTransactionStore(database_url), a_id, b_id, Resolution.ACCEPT, reason=reason)


def resolve_duplicate(
    a_id: int,
    b_id: int,
    resolution: Resolution,
    *,
    reason: str | None = None,
    database_url: str | None = None,
) -> None:
    resolve_pair(SqlTransactionStore(database_url), a_id, b_id, resolution, reason=reason)


def create_account(
    name: str, account_type: str = "Checking", *, database_url: str | None = None
) -> int:
    return SqlTransactionStore(database_url).create_account(name, account_type)


__all__ = [
    "build_pipeline",
    "import_csv",
    "import_folder",
    "detect_format",
    "list_formats",
    "audit_duplicates",
    "ignore_pair",
    "resolve_duplicate",
    "create_account",
]
