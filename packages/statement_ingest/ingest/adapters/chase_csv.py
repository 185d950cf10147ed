"""Adapter for Chase Visa CSV exports.

CSV header (case-insensitive):
Transaction Date, Post Date, Description, Category, Type, Amount, Memo

Chase's ``Post Date`` moves between a pending and a final download of the same
statement, so it is ignored: the transaction date is both the identity basis
and the stored canonical date. Amounts already follow the canonical sign
convention.
"""

from __future__ import annotations

from ...identity import content_identity, reference_identity
from ...models import CanonicalTransaction
from ...normalizers import AmountSignPolicy, parse_date
from ..csv_rows import CsvRow
from .base import BankAdapter


class ChaseCsvAdapter(BankAdapter):
    source_tag = "CHASE"
    amount_policy = AmountSignPolicy.AS_IS
    header_hint = "Transaction Date, Post Date, Description, Category, Type, Amount, Memo"
    header_signature = ("Transaction Date", "Description", "Amount")
    filename_hints = ("chase*",)

    def build_transaction(self, row: CsvRow, account_id: int) -> CanonicalTransaction:
        txn_date = parse_date(self.require(row, "Transaction Date", "Trans Date", "Date"))
        description = self.require(row, "Description")
        amount = self.signed_amount(self.require(row, "Amount"))

        txn_id = row.get_first("Transaction ID", "TransactionId", "Id")
        if txn_id:
            identity = reference_identity(self.source_tag, txn_id)
        else:
            identity = content_identity(
                self.source_tag, posted_date=txn_date, amount=amount, description=description
            )

        return CanonicalTransaction(
            account_id=account_id,
            posted_date=txn_date,
            description=description,
            amount=amount,
            identity=identity,
            source=self.source_tag,
            memo=row.get_first("Memo"),
            category=row.get_first("Category"),
        )


__all__ = ["ChaseCsvAdapter"]
