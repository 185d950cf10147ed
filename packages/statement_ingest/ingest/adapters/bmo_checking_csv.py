"""Adapter for BMO checking account CSV exports.

CSV header (case-insensitive):
Date, Description, Type, Amount, Check Number

The checking export has no sign or debit/credit column of its own: some
downloads sign amounts, others print every amount unsigned. An explicit sign
always wins. An unsigned amount is a debit unless the ``Type`` or description
text names a credit (deposits, payments received, refunds, interest).

Cleared checks carry a check number, which is only unique per account, so it
is hashed together with the row content.
"""

from __future__ import annotations

import re
from decimal import Decimal

from ...identity import content_identity, local_reference_identity
from ...models import CanonicalTransaction
from ...normalizers import AmountSignPolicy, parse_amount, parse_date
from ..csv_rows import CsvRow
from .base import BankAdapter

CREDIT_KEYWORDS: tuple[str, ...] = (
    "DEPOSIT",
    "PAYMENT RECEIVED",
    "REFUND",
    "THANK YOU",
    "CREDIT",
    "INTEREST",
    "REVERSAL",
    "TRANSFER IN",
)

_CREDIT_RE = re.compile(r"\b(?:" + "|".join(re.escape(k) for k in CREDIT_KEYWORDS) + r")\b")


def _has_explicit_sign(raw: str) -> bool:
    s = raw.strip()
    return s.startswith(("-", "+", "(")) or s.endswith("-") or s.startswith(("$-", "$("))


def infer_sign(raw_amount: str, *, type_text: str | None, description: str) -> Decimal:
    """Signed amount for a checking row whose amount may be unsigned."""

    value = parse_amount(raw_amount)
    if _has_explicit_sign(raw_amount):
        return value
    hint = f"{type_text or ''} {description}".upper()
    if _CREDIT_RE.search(hint):
        return abs(value)
    return -abs(value)


class BmoCheckingCsvAdapter(BankAdapter):
    source_tag = "BMO-CHK"
    # Sign comes from infer_sign(); the declared policy covers pre-signed exports.
    amount_policy = AmountSignPolicy.AS_IS
    header_hint = "Date, Description, Type, Amount, Check Number"
    header_signature = ("Date", "Description", "Amount", "Check Number")
    filename_hints = ("*check*",)

    def build_transaction(self, row: CsvRow, account_id: int) -> CanonicalTransaction:
        posted = parse_date(self.require(row, "Date", "Posted Date", "Transaction Date"))
        description = self.require(row, "Description")
        type_text = row.get_first("Type", "Transaction Type")
        amount = infer_sign(
            self.require(row, "Amount"), type_text=type_text, description=description
        )

        check_number = row.get_first("Check Number", "Check #", "Cheque Number")
        if check_number:
            identity = local_reference_identity(
                self.source_tag,
                check_number,
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
            memo=f"Check {check_number}" if check_number else type_text,
        )


__all__ = ["BmoCheckingCsvAdapter", "CREDIT_KEYWORDS", "infer_sign"]
