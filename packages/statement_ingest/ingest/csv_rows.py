"""Header-keyed CSV rows for bank exports.

Parsing follows RFC 4180 via the stdlib :mod:`csv` module (quoted fields with
embedded commas and newlines, doubled quotes). Files are read as UTF-8 with an
optional BOM. Rows are produced lazily. A malformed record is logged and
skipped, and the adapter decides whether a missing field is fatal.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import islice
from os import PathLike
from pathlib import Path

from ..logging_setup import get_logger

logger = get_logger(__name__)

# How far into a file recognition looks for a header below a preamble.
HEADER_SCAN_LINES = 20


def normalize_header(name: str | None) -> str:
    return (name or "").strip().strip('"').strip().lower()


def split_header(line: str) -> list[str]:
    """Split one header line into trimmed cells (quotes removed)."""

    try:
        cells = next(csv.reader([line]), [])
    except csv.Error:
        cells = line.split(",")
    return [c.strip().strip('"').strip() for c in cells]


@dataclass(frozen=True, slots=True)
class CsvRow:
    """One data record keyed by case-insensitive header names.

    Cells missing at the end of a short row are absent (``get`` returns
    ``None``), never empty strings.
    """

    values: Mapping[str, str]
    line_no: int
    raw: tuple[str, ...] = field(default=())

    def get(self, header: str) -> str | None:
        return self.values.get(normalize_header(header))

    def get_first(self, *headers: str) -> str | None:
        """First non-blank value across candidate header names."""

        for h in headers:
            v = self.values.get(normalize_header(h))
            if v is not None and v.strip():
                return v.strip()
        return None

    def __contains__(self, header: object) -> bool:
        return isinstance(header, str) and normalize_header(header) in self.values


def _build_row(headers: Sequence[str], cells: Sequence[str], line_no: int) -> CsvRow:
    values: dict[str, str] = {}
    for key, cell in zip(headers, cells, strict=False):
        if not key or key in values:
            # Blank or repeated header: the first occurrence wins.
            continue
        values[key] = cell.strip()
    return CsvRow(values=values, line_no=line_no, raw=tuple(cells))


def iter_rows(stream: Iterable[str], *, first_line_no: int = 1) -> Iterator[CsvRow]:
    """Yield :class:`CsvRow` objects from text lines whose first record is the header.

    ``first_line_no`` is the physical line number of the header so that
    diagnostics point at the right place when a preamble was skipped.
    """

    reader = csv.reader(stream)
    offset = first_line_no - 1
    headers: list[str] | None = None
    while True:
        try:
            cells = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            logger.warning(
                "Skipping malformed CSV record near line %d: %s", reader.line_num + offset, exc
            )
            continue

        if not cells or all(not c.strip() for c in cells):
            continue
        if headers is None:
            headers = [normalize_header(c) for c in cells]
            continue
        yield _build_row(headers, cells, reader.line_num + offset)


def read_lines(path: str | PathLike[str], limit: int = HEADER_SCAN_LINES) -> list[str]:
    """Return up to ``limit`` physical lines of a file (BOM and line endings stripped)."""

    p = Path(path)
    with p.open(encoding="utf-8-sig", errors="replace", newline="") as f:
        return [line.rstrip("\r\n") for line in islice(f, limit)]


def first_nonblank_line(lines: Sequence[str]) -> tuple[int, str] | None:
    for idx, line in enumerate(lines):
        if line.strip():
            return idx, line
    return None


def locate_header(lines: Sequence[str], signature: Iterable[str]) -> int | None:
    """Index of the first line whose cells include every ``signature`` column.

    Comparison is case-insensitive. Used for exports that put a human-readable
    preamble above the real header.
    """

    wanted = {normalize_header(s) for s in signature}
    for idx, line in enumerate(lines):
        if not line.strip():
            continue
        cells = {normalize_header(c) for c in split_header(line)}
        if wanted <= cells:
            return idx
    return None


def read_csv_rows(path: str | PathLike[str], *, header_line: int = 0) -> Iterator[CsvRow]:
    """Lazily read rows from ``path`` whose header sits at 0-based ``header_line``."""

    p = Path(path)
    with p.open(encoding="utf-8-sig", errors="replace", newline="") as f:
        for _ in range(header_line):
            if not f.readline():
                return
        yield from iter_rows(f, first_line_no=header_line + 1)


def rows_from_text(text: str, *, header_line: int = 0) -> Iterator[CsvRow]:
    """Same as :func:`read_csv_rows` over in-memory text."""

    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    return iter_rows(io.StringIO("".join(lines[header_line:])), first_line_no=header_line + 1)


__all__ = [
    "CsvRow",
    "HEADER_SCAN_LINES",
    "first_nonblank_line",
    "iter_rows",
    "locate_header",
    "normalize_header",
    "read_csv_rows",
    "read_lines",
    "rows_from_text",
    "split_header",
]
