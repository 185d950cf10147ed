"""Content-derived transaction identities.

An identity looks like ``"AMEX|REF|<sha256 hex>"``: the source tag, the kind
of basis that was hashed, and a SHA-256 over a deterministic JSON payload.
Three kinds exist, chosen per bank by how trustworthy its reference is:

``REF``
    A genuine external reference number, hashed alone.
``LREF``
    A weak, locally-unique reference combined with the row content.
``H``
    No reference at all: date, amount and normalized description only. Two
    genuinely distinct same-day, same-amount, same-description rows collide.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any

from .descriptions import normalize_description
from .normalizers import format_amount


class IdentityKind(StrEnum):
    REF = "REF"
    LREF = "LREF"
    H = "H"


def _digest(payload: dict[str, Any]) -> str:
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _compose(source: str, kind: IdentityKind, payload: dict[str, Any]) -> str:
    return f"{source.strip().upper()}|{kind.value}|{_digest(payload)}"


def reference_identity(source: str, reference: str) -> str:
    ref = reference.strip()
    if not ref:
        raise ValueError("reference must be non-empty")
    return _compose(source, IdentityKind.REF, {"ref": ref})


def local_reference_identity(
    source: str,
    reference: str,
    *,
    posted_date: date,
    amount: Decimal,
    description: str,
) -> str:
    ref = reference.strip()
    if not ref:
        raise ValueError("reference must be non-empty")
    payload = {
        "ref": ref,
        "date": posted_date.isoformat(),
        "amount": format_amount(amount),
        "description": normalize_description(description),
    }
    return _compose(source, IdentityKind.LREF, payload)


def content_identity(
    source: str,
    *,
    posted_date: date,
    amount: Decimal,
    description: str,
) -> str:
    payload = {
        "date": posted_date.isoformat(),
        "amount": format_amount(amount),
        "description": normalize_description(description),
    }
    return _compose(source, IdentityKind.H, payload)


def identity_kind(identity: str) -> IdentityKind | None:
    """Return the kind encoded in an identity string, if recognizable."""

    parts = identity.split("|")
    if len(parts) != 3:
        return None
    try:
        return IdentityKind(parts[1])
    except ValueError:
        return None


__all__ = [
    "IdentityKind",
    "reference_identity",
    "local_reference_identity",
    "content_identity",
    "identity_kind",
]
