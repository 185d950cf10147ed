"""Categorization collaborator used during import.

The pipeline only needs ``categorize(description) -> CategoryMatch | None``.
:class:`RuleCategorizer` is a thin default over the ``category_rules`` table:
it is not a rule engine, just ordered substring matching.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from .logging_setup import get_logger
from .models import CategoryMatch, CategoryRuleSpec

logger = get_logger(__name__)

RULE_CACHE_SECONDS = 300.0

# Lower rank wins when priorities tie.
_MATCH_TYPE_RANK = {"exact": 0, "starts_with": 1, "contains": 2}
_WS_RE = re.compile(r"\s+")


@runtime_checkable
class Categorizer(Protocol):
    def categorize(self, description: str) -> CategoryMatch | None: ...


class RuleSource(Protocol):
    def load_category_rules(self) -> list[CategoryRuleSpec]: ...


class NullCategorizer:
    """Never matches; imports leave every row uncategorized."""

    def categorize(self, description: str) -> CategoryMatch | None:
        return None


def _match_key(text: str) -> str:
    return _WS_RE.sub(" ", text).strip().upper()


def _rule_sort_key(rule: CategoryRuleSpec) -> tuple[int, int, int, int]:
    return (
        -rule.priority,
        _MATCH_TYPE_RANK.get(rule.match_type, len(_MATCH_TYPE_RANK)),
        -len(rule.pattern),
        rule.id,
    )


def match_rules(description: str, rules: Sequence[CategoryRuleSpec]) -> CategoryMatch | None:
    """Return the first matching rule in precedence order.

    Precedence: higher ``priority`` first, then ``exact`` before
    ``starts_with`` before ``contains``, then the longer pattern.
    """

    text = _match_key(description)
    if not text:
        return None
    for rule in sorted(rules, key=_rule_sort_key):
        pattern = _match_key(rule.pattern)
        if not pattern:
            continue
        if rule.match_type == "exact":
            hit = text == pattern
        elif rule.match_type == "starts_with":
            hit = text.startswith(pattern)
        else:
            hit = pattern in text
        if hit:
            return CategoryMatch(
                category_id=rule.category_id, rule_id=rule.id, pattern=rule.pattern
            )
    return None


class RuleCategorizer:
    """Match descriptions against enabled category rules, cached in memory.

    Rules are reloaded from ``source`` after ``ttl_seconds``; call
    :meth:`invalidate` after editing rules to reload immediately.
    """

    def __init__(
        self,
        source: RuleSource,
        *,
        ttl_seconds: float = RULE_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._clock = clock
        self._rules: list[CategoryRuleSpec] | None = None
        self._loaded_at = 0.0

    def _get_rules(self) -> list[CategoryRuleSpec]:
        now = self._clock()
        if self._rules is None or now - self._loaded_at >= self._ttl:
            self._rules = sorted(self._source.load_category_rules(), key=_rule_sort_key)
            self._loaded_at = now
            logger.debug("Loaded %d category rules", len(self._rules))
        return self._rules

    def invalidate(self) -> None:
        self._rules = None

    def categorize(self, description: str) -> CategoryMatch | None:
        if not description or not description.strip():
            return None
        return match_rules(description, self._get_rules())


__all__ = [
    "Categorizer",
    "NullCategorizer",
    "RuleCategorizer",
    "RULE_CACHE_SECONDS",
    "match_rules",
]
