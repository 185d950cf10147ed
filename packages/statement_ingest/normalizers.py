"""Amount and date normalization shared by every bank adapter.

Banks disagree on sign conventions. Each adapter declares an
:class:`AmountSignPolicy`, and the helpers here turn its raw cells into a
``Decimal`` that follows the canonical convention: expenses negative,
credits positive.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum

from dateutil import parser as date_parser

from .errors import AmountFormatError, DateFormatError

CENT = Decimal("0.01")

# Tried in order before falling back to dateutil.
DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y%m%d",
    "%d-%b-%Y",
    "%b %d, %Y",
)

_CURRENCY_CHARS = "$€£¥"
_WS_RE = re.compile(r"\s+")


class AmountSignPolicy(StrEnum):
    AS_IS = "as_is"
    INVERT = "invert"
    DEBIT_CREDIT_COLUMNS = "debit_credit_columns"


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def parse_amount(raw: str | None) -> Decimal:
    """Parse a bank amount cell into a ``Decimal`` quantized to cents.

    Accepts currency symbols, thousands separators, a leading ``+``/``-``,
    parenthesized negatives and a trailing minus (``"12.50-"``).
    """

    if raw is None:
        raise AmountFormatError("amount is required")
    s = _WS_RE.sub("", raw)
    if not s:
        raise AmountFormatError("amount is empty")
    negative = False

    if s.endswith("-") and len(s) > 1:
        negative = True
        s = s[:-1]

    # Strip leading sign, currency symbol and surrounding parentheses until
    # stable so any ordering ("-$(1,234.56)", "$-5") is handled.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:]
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:]
            changed = True
        if s[:1] and s[0] in _CURRENCY_CHARS:
            s = s[1:]
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1]
            changed = True
        if not changed:
            break

    s = s.replace(",", "")
    if not s or not re.fullmatch(r"\d*\.?\d*", s) or s == ".":
        raise AmountFormatError(f"invalid amount: {raw!r}")
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise AmountFormatError(f"invalid amount: {raw!r}") from exc
    d = d.quantize(CENT, rounding=ROUND_HALF_UP)
    return -d if negative else d


def parse_optional_amount(raw: str | None) -> Decimal | None:
    if raw is None or not raw.strip():
        return None
    return parse_amount(raw)


def normalize_amount(value: Decimal, policy: AmountSignPolicy) -> Decimal:
    """Apply a single-column sign policy to a parsed amount."""

    if policy is AmountSignPolicy.AS_IS:
        return value
    if policy is AmountSignPolicy.INVERT:
        return -value
    raise ValueError(
        "DEBIT_CREDIT_COLUMNS needs both columns; use normalize_debit_credit() instead"
    )


def normalize_debit_credit(debit: Decimal | None, credit: Decimal | None) -> Decimal:
    """Merge a debit/credit column pair into one signed amount.

    Exactly one side must be non-zero. Blank and zero are treated alike, so
    ``(5, 5)`` and ``(None, None)`` are both format errors.
    """

    has_debit = debit is not None and debit != 0
    has_credit = credit is not None and credit != 0
    if has_debit and has_credit:
        raise AmountFormatError(f"both debit ({debit}) and credit ({credit}) are set")
    if has_debit:
        return -abs(debit)  # type: ignore[arg-type]
    if has_credit:
        return abs(credit)  # type: ignore[arg-type]
    raise AmountFormatError("neither debit nor credit is set")


def format_amount(d: Decimal) -> str:
    """Two decimals, ASCII dot, leading minus for negatives."""

    q = d.quantize(CENT, rounding=ROUND_HALF_UP)
    if q == 0:
        q = abs(q)
    return f"{q:.2f}"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _strptime_any(s: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_date(raw: str | None) -> date:
    """Parse a bank date cell.

    The explicit formats are tried against the whole value and then against
    its first whitespace token (some exports append a time). ``dateutil`` is
    the last resort and reads ambiguous values month-first.
    """

    if raw is None:
        raise DateFormatError("date is required")
    s = raw.strip()
    if not s:
        raise DateFormatError("date is empty")

    parsed = _strptime_any(s)
    if parsed is None and " " in s:
        parsed = _strptime_any(s.split()[0])
    if parsed is not None:
        return parsed

    try:
        return date_parser.parse(s, dayfirst=False).date()
    except (ValueError, OverflowError) as exc:
        raise DateFormatError(f"invalid date: {raw!r}") from exc


__all__ = [
    "AmountSignPolicy",
    "DATE_FORMATS",
    "parse_amount",
    "parse_optional_amount",
    "normalize_amount",
    "normalize_debit_credit",
    "format_amount",
    "parse_date",
]
