"""Import pipeline: pick the adapter for a file and drive its row loop.

The pipeline holds no per-import state, so one instance may import different
files concurrently; idempotence comes entirely from the store's
``(account_id, identity)`` uniqueness.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from ..categorization import Categorizer, NullCategorizer
from ..errors import AccountNotFoundError, NoAdapterError, StatementIngestError
from ..logging_setup import get_logger
from ..models import ImportResult
from ..normalizers import AmountSignPolicy
from ..persistence import TransactionStore
from .adapters import BankAdapter, default_adapters
from .csv_rows import first_nonblank_line, read_lines

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FormatInfo:
    """What one adapter accepts, for display."""

    source_tag: str
    amount_policy: AmountSignPolicy
    header_hint: str
    filename_hints: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FileImportOutcome:
    """Result of one file within :meth:`ImportPipeline.import_directory`."""

    path: Path
    source_tag: str | None
    result: ImportResult | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ImportPipeline:
    def __init__(
        self,
        adapters: Sequence[BankAdapter] | None = None,
        *,
        store: TransactionStore,
        categorizer: Categorizer | None = None,
    ) -> None:
        self.adapters: tuple[BankAdapter, ...] = tuple(
            adapters if adapters is not None else default_adapters()
        )
        self.store = store
        self.categorizer = categorizer or NullCategorizer()

    # ---- Recognition -----------------------------------------------------

    def find_adapter(self, path: str | PathLike[str]) -> BankAdapter | None:
        """First adapter whose header signature matches, else first filename match.

        Header signatures are checked across every adapter before any file name
        heuristic, so a misleading file name never beats a real header.
        """

        p = Path(path)
        lines = read_lines(p)
        for adapter in self.adapters:
            if adapter.header_index(lines) is not None:
                logger.debug("%s recognized %s by header", adapter.source_tag, p.name)
                return adapter
        for adapter in self.adapters:
            if adapter.matches_filename(p):
                logger.debug("%s recognized %s by file name", adapter.source_tag, p.name)
                return adapter
        return None

    def detect(self, path: str | PathLike[str]) -> BankAdapter:
        """Like :meth:`find_adapter` but raise :class:`NoAdapterError` on no match."""

        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"CSV file not found: {p}")
        adapter = self.find_adapter(p)
        if adapter is None:
            first = first_nonblank_line(read_lines(p))
            raise NoAdapterError(
                p,
                first[1] if first is not None else None,
                [a.source_tag for a in self.adapters],
            )
        return adapter

    def describe_formats(self) -> list[FormatInfo]:
        return [
            FormatInfo(
                source_tag=a.source_tag,
                amount_policy=a.amount_policy,
                header_hint=a.header_hint,
                filename_hints=a.filename_hints,
            )
            for a in self.adapters
        ]

    # ---- Import ----------------------------------------------------------

    def import_file(self, path: str | PathLike[str], account_id: int) -> ImportResult:
        """Import one CSV file into ``account_id``.

        Raises ``FileNotFoundError``, :class:`AccountNotFoundError` or
        :class:`NoAdapterError`; row-level problems only show up in the
        ``failed`` counter.
        """

        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"CSV file not found: {p}")
        if not self.store.account_exists(account_id):
            raise AccountNotFoundError(account_id)
        adapter = self.detect(p)
        logger.info("Importing %s as %s into account %d", p.name, adapter.source_tag, account_id)
        return adapter.import_file(p, account_id, store=self.store, categorizer=self.categorizer)

    def import_directory(
        self, folder: str | PathLike[str], account_id: int
    ) -> list[FileImportOutcome]:
        """Import every ``*.csv`` in ``folder`` (name order).

        A file-level error is logged and recorded on that file's outcome; the
        remaining files are still imported.
        """

        root = Path(folder)
        if not root.is_dir():
            raise NotADirectoryError(f"not a directory: {root}")
        if not self.store.account_exists(account_id):
            raise AccountNotFoundError(account_id)

        outcomes: list[FileImportOutcome] = []
        files = sorted(p for p in root.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
        for p in files:
            try:
                adapter = self.detect(p)
                result = adapter.import_file(
                    p, account_id, store=self.store, categorizer=self.categorizer
                )
            except (StatementIngestError, OSError, UnicodeDecodeError) as exc:
                logger.error("Import of %s failed: %s", p.name, exc)
                outcomes.append(
                    FileImportOutcome(path=p, source_tag=None, result=None, error=str(exc))
                )
                continue
            outcomes.append(FileImportOutcome(path=p, source_tag=adapter.source_tag, result=result))
        return outcomes


__all__ = ["ImportPipeline", "FormatInfo", "FileImportOutcome"]
