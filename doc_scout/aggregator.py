"""doc_scout.aggregator: token usage report of a crawl run."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from doc_scout.crawler.models import Page


@dataclass(slots=True)
class PageTokens:
    """Token usage of one accepted page."""

    title: str
    url: str
    tokens: int
    final_tokens: int
    shrink_state: str


@dataclass(slots=True)
class TokenReport:
    """Totals and per-page breakdown; ``tokens`` is what the ledger was charged."""

    total_tokens: int = 0
    pages_processed: int = 0
    average_tokens_per_page: int = 0
    largest_page: Optional[PageTokens] = None
    smallest_page: Optional[PageTokens] = None
    per_page: List[PageTokens] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def build_token_report(pages: Sequence[Page], charged: Mapping[str, int]) -> TokenReport:
    """Build the report from triaged *pages* and the ledger's per-URL charges."""
    per_page = [
        PageTokens(
            title=p.title,
            url=p.url,
            tokens=charged.get(p.url, p.token_count),
            final_tokens=p.token_count,
            shrink_state=p.shrink_state.value,
        )
        for p in pages
    ]
    total = sum(e.tokens for e in per_page)
    report = TokenReport(
        total_tokens=total,
        pages_processed=len(per_page),
        average_tokens_per_page=round(total / len(per_page)) if per_page else 0,
        per_page=per_page,
    )
    if per_page:
        # first occurrence wins on ties
        report.largest_page = max(per_page, key=lambda e: e.tokens)
        report.smallest_page = min(per_page, key=lambda e: e.tokens)
    return report


__all__ = ["PageTokens", "TokenReport", "build_token_report"]
