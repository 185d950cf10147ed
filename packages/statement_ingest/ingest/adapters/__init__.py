"""Bank CSV adapters.

:func:`default_adapters` returns them most-specific-first; the pipeline picks
the first whose header signature matches, so order matters when signatures
overlap.
"""

from __future__ import annotations

from .amex_csv import AmexCsvAdapter
from .base import BankAdapter
from .bmo_checking_csv import BmoCheckingCsvAdapter
from .bmo_csv import BmoCsvAdapter
from .chase_csv import ChaseCsvAdapter
from .citi_csv import CitiCsvAdapter


def default_adapters() -> list[BankAdapter]:
    return [
        CitiCsvAdapter(),
        BmoCsvAdapter(),
        AmexCsvAdapter(),
        ChaseCsvAdapter(),
        BmoCheckingCsvAdapter(),
    ]


__all__ = [
    "BankAdapter",
    "AmexCsvAdapter",
    "BmoCsvAdapter",
    "BmoCheckingCsvAdapter",
    "ChaseCsvAdapter",
    "CitiCsvAdapter",
    "default_adapters",
]
