"""Adapter for Citi Mastercard CSV exports.

CSV header (case-insensitive):
Status, Date, Description, Debit, Credit, Member Name

Amounts arrive split into unsigned ``Debit`` and ``Credit`` columns, exactly
one of which is set per row. Citi exports carry no reference number, so the
identity is the content hash of date, amount and normalized description.
"""

from __future__ import annotations

from ...identity import content_identity
from ...models import CanonicalTransaction
from ...normalizers import (
    AmountSignPolicy,
    normalize_debit_credit,
    parse_date,
    parse_optional_amount,
)
from ..csv_rows import CsvRow
from .base import BankAdapter


class CitiCsvAdapter(BankAdapter):
    source_tag = "CITI"
    amount_policy = AmountSignPolicy.DEBIT_CREDIT_COLUMNS
    header_hint = "Status, Date, Description, Debit, Credit, Member Name"
    header_signature = ("Status", "Date", "Description", "Debit", "Credit")
    filename_hints = ("citi*",)

    def build_transaction(self, row: CsvRow, account_id: int) -> CanonicalTransaction:
        posted = parse_date(self.require(row, "Date", "Transaction Date"))
        description = self.require(row, "Description")
        amount = normalize_debit_credit(
            parse_optional_amount(row.get_first("Debit", "Debit Amount")),
            parse_optional_amount(row.get_first("Credit", "Credit Amount")),
        )

        memo_parts = [p for p in (row.get_first("Status"), row.get_first("Member Name")) if p]
        return CanonicalTransaction(
            account_id=account_id,
            posted_date=posted,
            description=description,
            amount=amount,
            identity=content_identity(
                self.source_tag, posted_date=posted, amount=amount, description=description
            ),
            source=self.source_tag,
            memo=" / ".join(memo_parts) or None,
        )


__all__ = ["CitiCsvAdapter"]
