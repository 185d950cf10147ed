"""Description canonicalization and token similarity.

The normalized form is embedded in identities (exact-match sensitive) and
tokenized for Jaccard similarity in the duplicate audit, so it must stay pure
and stable across runs.
"""

from __future__ import annotations

import re

_QUOTE_MAP = str.maketrans(
    {
        "‘": "'",
        "’": "'",
        "‚": "'",
        "′": "'",
        "“": '"',
        "”": '"',
        "„": '"',
        "″": '"',
    }
)

_LONG_DIGITS_RE = re.compile(r"\b\d{5,}\b")
_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_WS_RE = re.compile(r"\s+")


def normalize_description(raw: str | None) -> str:
    """Canonicalize a bank description.

    >>> normalize_description("AMAZON.COM*AB12CD3 123456789 SEATTLE WA")
    'AMAZON COM AB12CD3 SEATTLE'
    """

    if not raw:
        return ""
    s = raw.strip().translate(_QUOTE_MAP)
    # Order and phone numbers; short runs are often store codes.
    s = _LONG_DIGITS_RE.sub(" ", s)
    s = _NON_WORD_RE.sub(" ", s)
    s = _WS_RE.sub(" ", s).strip().upper()

    tokens = s.split(" ") if s else []
    if len(tokens) >= 2 and len(tokens[-1]) == 2 and tokens[-1].isalpha():
        # Trailing state code
        tokens.pop()
    return " ".join(tokens)


def description_tokens(normalized: str) -> frozenset[str]:
    return frozenset(t for t in normalized.split() if len(t) >= 2)


def jaccard_similarity(a: str, b: str) -> float:
    """Token-set Jaccard similarity of two normalized descriptions."""

    if not a.strip() or not b.strip():
        return 0.0
    if a == b:
        return 1.0
    ta = description_tokens(a)
    tb = description_tokens(b)
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)


__all__ = ["normalize_description", "description_tokens", "jaccard_similarity"]
