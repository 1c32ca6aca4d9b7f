"""doc_scout.tokens: token estimation and the global token ledger.

Tokens here are a budgeting unit, not billing: the estimate blends
``chars / 4`` and ``words / 0.75`` and rounds the average up.
"""
from __future__ import annotations

import math
import re
from typing import Dict

__all__ = ["estimate_tokens", "would_exceed", "TokenAccountant"]

_WS_RE = re.compile(r"\s+")


def estimate_tokens(text: str) -> int:
    """Deterministic token estimate of *text*; 0 for empty text."""
    if not text:
        return 0
    char_count = len(text)
    word_count = len(_WS_RE.split(text))
    return math.ceil((char_count / 4 + word_count / 0.75) / 2)


def would_exceed(spent: int, to_add: int, ceiling: int) -> bool:
    return spent + to_add > ceiling


class TokenAccountant:
    """Running total of accepted tokens against a ceiling.

    The orchestrator is the only writer: workers hand their pages back and the
    coordinating coroutine calls :meth:`try_commit` one page at a time, so the
    check and the commit happen without an intervening suspension point.
    """

    def __init__(self, ceiling: int) -> None:
        if ceiling <= 0:
            raise ValueError("ceiling must be > 0")
        self.ceiling = ceiling
        self.spent = 0
        self.per_page: Dict[str, int] = {}

    def would_exceed(self, to_add: int) -> bool:
        return would_exceed(self.spent, to_add, self.ceiling)

    def record(self, delta: int, url: str | None = None) -> None:
        if delta < 0:
            raise ValueError("token delta must be >= 0")
        self.spent += delta
        if url is not None:
            self.per_page[url] = self.per_page.get(url, 0) + delta

    def try_commit(self, url: str, tokens: int) -> bool:
        """Record *tokens* for *url* unless that would cross the ceiling."""
        if self.would_exceed(tokens):
            return False
        self.record(tokens, url)
        return True

    def fraction_spent(self) -> float:
        return self.spent / self.ceiling

    @property
    def remaining(self) -> int:
        return max(0, self.ceiling - self.spent)
