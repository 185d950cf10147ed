"""Adapter for American Express CSV exports, plain or "Enhanced Details".

CSV header (case-insensitive; extra columns ignored):
Date, Description, Card Member, Account #, Amount, Extended Details,
Appears On Your Statement As, Address, City/State, Zip Code, Country,
Reference, Category

The Enhanced Details export puts one or more human-readable preamble lines
above the real header; recognition and reading both start at the first line
that carries the header signature.

AmEx reports charges as positive and payments/credits as negative, the
opposite of the canonical convention, so amounts are inverted. ``Reference``
is a genuine external id and, when present, is the whole identity.
"""

from __future__ import annotations

import re

from ...identity import content_identity, reference_identity
from ...models import CanonicalTransaction
from ...normalizers import AmountSignPolicy, parse_date
from ..csv_rows import CsvRow
from .base import BankAdapter


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    # Extended Details may carry embedded newlines.
    cleaned = re.sub(r"\s+", " ", value).strip()
    return cleaned or None


class AmexCsvAdapter(BankAdapter):
    source_tag = "AMEX"
    amount_policy = AmountSignPolicy.INVERT
    header_hint = "Date, Description, Card Member, Account #, Amount"
    header_signature = ("Date", "Description", "Account #", "Amount")
    filename_hints = ("amex*", "activity.csv")
    allows_preamble = True

    def build_transaction(self, row: CsvRow, account_id: int) -> CanonicalTransaction:
        posted = parse_date(self.require(row, "Date", "Transaction Date", "Posted Date"))
        description = _clean_text(self.require(row, "Description", "Merchant", "Payee")) or ""
        amount = self.signed_amount(self.require(row, "Amount", "Charge Amount"))

        reference = row.get_first("Reference")
        if reference:
            # AmEx wraps references in quotes and a leading apostrophe.
            reference = reference.strip("'\" ")
        if reference:
            identity = reference_identity(self.source_tag, reference)
        else:
            identity = content_identity(
                self.source_tag, posted_date=posted, amount=amount, description=description
            )

        memo = _clean_text(row.get_first("Extended Details")) or _clean_text(
            row.get_first("Card Member")
        )
        return CanonicalTransaction(
            account_id=account_id,
            posted_date=posted,
            description=description,
            amount=amount,
            identity=identity,
            source=self.source_tag,
            memo=memo,
            category=row.get_first("Category"),
        )


__all__ = ["AmexCsvAdapter"]
