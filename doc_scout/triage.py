"""doc_scout.triage: post-crawl shrinking of oversized pages.

Thresholds are fractions of the per-page ceiling:

* ``<= 0.5``  – page kept as is;
* ``> 0.75`` – structural reduction (keyword sections only);
* otherwise  – external summary, structural reduction if that fails or no
  summarizer is configured.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from doc_scout.crawler.models import Page, ShrinkState
from doc_scout.logger import logger
from doc_scout.summarizer import Summarizer

__all__ = [
    "KEEP_RATIO",
    "REDUCE_RATIO",
    "SECTION_KEYWORDS",
    "REDUCTION_NOTICE",
    "split_sections",
    "reduce_sections",
    "triage",
    "triage_pages",
]

KEEP_RATIO = 0.5
REDUCE_RATIO = 0.75
SECTION_KEYWORDS = (
    "api", "method", "function", "class", "interface",
    "parameter", "return", "example", "usage",
)
REDUCTION_NOTICE = "> Note: This page was automatically reduced to focus on key content.\n\n"
_MIN_SECTIONS = 3

_HEADING_SPLIT_RE = re.compile(r"(?=^#{1,3} )", re.MULTILINE)


def split_sections(text: str) -> List[str]:
    """Split Markdown at level 1-3 headings; text before the first heading is a section too."""
    return [s for s in _HEADING_SPLIT_RE.split(text) if s.strip()]


def reduce_sections(page: Page) -> Page:
    """Keep keyword sections, backfilled with the opening sections for context."""
    body = page.content
    if body.startswith(REDUCTION_NOTICE):
        body = body[len(REDUCTION_NOTICE):]
    sections = split_sections(body)

    kept = [i for i, s in enumerate(sections) if any(k in s.lower() for k in SECTION_KEYWORDS)]
    if len(kept) < _MIN_SECTIONS and len(sections) > _MIN_SECTIONS:
        kept = sorted(set(kept) | set(range(_MIN_SECTIONS)))

    reduced = REDUCTION_NOTICE + "\n\n".join(sections[i].strip() for i in kept)
    logger.info("Reduced page %s from %d tokens", page.title, page.token_count)
    return page.with_content(reduced, ShrinkState.REDUCED)


async def triage(page: Page, per_page_ceiling: int, summarizer: Optional[Summarizer] = None) -> Page:
    """Return *page* unchanged, reduced or summarized depending on its size."""
    if page.token_count <= KEEP_RATIO * per_page_ceiling:
        return page
    if page.token_count > REDUCE_RATIO * per_page_ceiling or summarizer is None:
        return reduce_sections(page)

    logger.info("Summarizing page %s (%d tokens)", page.title, page.token_count)
    try:
        summary = await summarizer.summarize(page.title, page.content)
    except Exception as exc:  # any collaborator failure falls back to reduction
        logger.warning("Failed to summarize page %s: %s", page.title, exc)
        return reduce_sections(page)
    return page.with_content(summary, ShrinkState.SUMMARIZED)


async def triage_pages(
    pages: Sequence[Page], per_page_ceiling: int, summarizer: Optional[Summarizer] = None
) -> List[Page]:
    oversized = sum(1 for p in pages if p.token_count > KEEP_RATIO * per_page_ceiling)
    logger.info("Found %d pages that exceed token thresholds", oversized)
    return [await triage(p, per_page_ceiling, summarizer) for p in pages]
