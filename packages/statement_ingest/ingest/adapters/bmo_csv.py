"""Adapter for BMO credit card CSV exports.

CSV header (case-insensitive):
Item #, Card #, Transaction Date, POSTED DATE, TRANSACTION AMOUNT / AMOUNT,
DESCRIPTION, FI TRANSACTION REFERENCE, TRANSACTION REFERENCE NUMBER

Amounts already follow the canonical sign convention. The FI transaction
reference is only unique within a statement, so it is hashed together with
the row content rather than alone.
"""

from __future__ import annotations

from ...identity import content_identity, local_reference_identity
from ...models import CanonicalTransaction
from ...normalizers import AmountSignPolicy, parse_date
from ..csv_rows import CsvRow
from .base import BankAdapter


class BmoCsvAdapter(BankAdapter):
    source_tag = "BMO"
    amount_policy = AmountSignPolicy.AS_IS
    header_hint = "POSTED DATE, DESCRIPTION, AMOUNT, FI TRANSACTION REFERENCE, ..."
    header_signature = ("POSTED DATE", "DESCRIPTION", "AMOUNT", "FI TRANSACTION REFERENCE")
    filename_hints = ("bmo*",)

    def build_transaction(self, row: CsvRow, account_id: int) -> CanonicalTransaction:
        posted = parse_date(self.require(row, "POSTED DATE", "Date"))
        description = self.require(row, "DESCRIPTION")
        amount = self.signed_amount(self.require(row, "AMOUNT", "TRANSACTION AMOUNT"))

        reference = row.get_first("FI TRANSACTION REFERENCE") or row.get_first(
            "TRANSACTION REFERENCE NUMBER"
        )
        if reference:
            identity = local_reference_identity(
                self.source_tag,
                reference,
                posted_date=posted,
                amount=amount,
                description=description,
            )
        else:
            identity = content_identity(
                self.source_tag, posted_date=posted, amount=amount, description=description
            )

        return CanonicalTransaction(
            account_id=account_id,
            posted_date=posted,
            description=description,
            amount=amount,
            identity=identity,
            source=self.source_tag,
        )


__all__ = ["BmoCsvAdapter"]
