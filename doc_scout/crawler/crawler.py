"""
Round-based breadth-first crawl of a documentation site under a token budget.

Each round pops at most ``concurrency`` URLs from the frontier, marks them
visited, processes them concurrently and only then commits the results: the
token ledger, the result list and the frontier are touched by the
coordinating coroutine alone, in dispatch order.
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Callable, Deque, Iterable, List, Optional, Sequence, Set, Tuple
from urllib.parse import urlparse

from doc_scout.aggregator import TokenReport, build_token_report
from doc_scout.cache import CacheStore
from doc_scout.config import CrawlConfig
from doc_scout.crawler.fetcher import Transport
from doc_scout.crawler.link_extractor import filter_links, resolve_anchors
from doc_scout.crawler.models import Anchor, ApiSignature, CodeExample, CrawlStatus, Page
from doc_scout.logger import logger
from doc_scout.parser.content_extractor import extract_api_signatures, extract_code_examples
from doc_scout.parser.html_parser import extract_title, html_to_markdown
from doc_scout.summarizer import Summarizer
from doc_scout.tokens import TokenAccountant, estimate_tokens, would_exceed
from doc_scout.triage import triage_pages
from doc_scout.utils import infer_library_name, remove_duplicates

__all__ = (
    "CrawlConfigError",
    "CrawlDependencies",
    "CrawlState",
    "CrawlResult",
    "CrawlOrchestrator",
)

#: share of the total budget after which no new links are queued
BUDGET_SOFT_STOP = 0.9


class CrawlConfigError(ValueError):
    """Invalid crawl input; raised before any page is fetched."""


@dataclass(slots=True)
class CrawlDependencies:
    """Collaborators of one orchestrator. Only transport and cache are mandatory."""

    transport: Transport
    cache: CacheStore
    summarizer: Optional[Summarizer] = None
    to_text: Callable[[str], str] = html_to_markdown
    extract_title: Callable[[str], str] = extract_title
    extract_code_examples: Callable[[str], Sequence[CodeExample]] = extract_code_examples
    extract_api_signatures: Callable[[str], Sequence[ApiSignature]] = extract_api_signatures
    extract_links: Callable[[str, str], Sequence[Anchor]] = resolve_anchors
    filter_links: Callable[..., List[str]] = filter_links


@dataclass(slots=True)
class CrawlState:
    """Visited set, FIFO frontier and ledger of a single run."""

    accountant: TokenAccountant
    page_limit: int
    frontier: Deque[str] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    dispatch_order: List[str] = field(default_factory=list)
    pages_visited: int = 0
    _queued: Set[str] = field(default_factory=set)

    def enqueue(self, url: str) -> bool:
        if url in self.visited or url in self._queued:
            return False
        self.frontier.append(url)
        self._queued.add(url)
        return True

    def next_batch(self, size: int) -> List[str]:
        """Pop up to *size* unvisited URLs and mark them visited."""
        batch: List[str] = []
        while self.frontier and len(batch) < size:
            url = self.frontier.popleft()
            self._queued.discard(url)
            if url in self.visited:
                continue
            self.visited.add(url)
            self.dispatch_order.append(url)
            batch.append(url)
        self.pages_visited += len(batch)
        return batch

    def clear_frontier(self) -> None:
        self.frontier.clear()
        self._queued.clear()


@dataclass(slots=True)
class _Outcome:
    url: str
    page: Optional[Page] = None
    from_cache: bool = False


@dataclass(slots=True)
class CrawlResult:
    """Accepted (and triaged) pages in dispatch order plus the token report."""

    pages: List[Page]
    report: TokenReport
    stop_reason: CrawlStatus
    library_name: str
    pages_visited: int
    visited: Tuple[str, ...]
    frontier: Tuple[str, ...]


class CrawlOrchestrator:
    """Drives fetch, cache, relevance filter, ledger and triage for one crawl."""

    def __init__(self, deps: CrawlDependencies) -> None:
        self.deps = deps
        self.status = CrawlStatus.IDLE

    @staticmethod
    def _validate(seed_urls: Iterable[str]) -> List[str]:
        seeds = remove_duplicates([str(u).strip() for u in seed_urls if u and str(u).strip()])
        if not seeds:
            raise CrawlConfigError("At least one documentation URL or entry point is required")
        for url in seeds:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                raise CrawlConfigError(f"Invalid URL: {url}")
        return seeds

    async def run(self, seed_urls: Sequence[str], config: CrawlConfig) -> CrawlResult:
        """Crawl from *seed_urls*; the first seed is the anchor URL."""
        seeds = self._validate(seed_urls)
        anchor = seeds[0]
        library_name = config.library_name or infer_library_name(anchor)

        state = CrawlState(accountant=TokenAccountant(config.max_total_tokens), page_limit=config.max_pages)
        for url in seeds:
            state.enqueue(url)

        self.status = CrawlStatus.RUNNING
        logger.info(
            "Crawling %s docs from %s (limit %d pages, %d tokens per page, %d total)",
            library_name, anchor, config.max_pages, config.max_tokens_per_page, config.max_total_tokens,
        )
        start = time.monotonic()
        accepted: List[Page] = []
        budget_stop = False

        while state.frontier and state.pages_visited < state.page_limit:
            size = min(config.concurrency, state.page_limit - state.pages_visited)
            first_index = state.pages_visited
            batch = state.next_batch(size)
            if not batch:
                break
            snapshot = state.accountant.spent
            for offset, url in enumerate(batch, start=1):
                logger.info("Processing page %d/%d: %s", first_index + offset, state.page_limit, url)

            outcomes = await asyncio.gather(
                *(self._process(url, snapshot, config) for url in batch)
            )
            round_pages = await self._commit(outcomes, state)
            accepted.extend(round_pages)

            if config.crawl_links and state.accountant.fraction_spent() < BUDGET_SOFT_STOP:
                for page in round_pages:
                    for link in self._in_scope_links(page, anchor, library_name, config):
                        state.enqueue(link)

            if state.accountant.spent > BUDGET_SOFT_STOP * state.accountant.ceiling:
                logger.info(
                    "Approaching token limit (%d / %d). Stopping crawl.",
                    state.accountant.spent, state.accountant.ceiling,
                )
                state.clear_frontier()
                budget_stop = True

        if budget_stop:
            self.status = CrawlStatus.BUDGET_EXHAUSTED
        elif state.frontier and state.pages_visited >= state.page_limit:
            self.status = CrawlStatus.PAGE_LIMIT_REACHED
        else:
            self.status = CrawlStatus.COMPLETED
        stop_reason = self.status
        remaining = tuple(state.frontier)

        self.status = CrawlStatus.FINALIZING
        pages = await triage_pages(accepted, config.max_tokens_per_page, self.deps.summarizer)
        report = build_token_report(pages, state.accountant.per_page)
        await self.deps.cache.flush_all()
        self.status = CrawlStatus.DONE

        duration = time.monotonic() - start
        logger.info(
            "Done (%s): %d pages, %d tokens in %.2f s",
            stop_reason.value, report.pages_processed, report.total_tokens, duration,
        )
        return CrawlResult(
            pages=pages,
            report=report,
            stop_reason=stop_reason,
            library_name=library_name,
            pages_visited=state.pages_visited,
            visited=tuple(state.dispatch_order),
            frontier=remaining,
        )

    async def _commit(self, outcomes: Sequence[_Outcome], state: CrawlState) -> List[Page]:
        """Charge the ledger page by page and cache freshly fetched pages."""
        pages: List[Page] = []
        for outcome in outcomes:
            page = outcome.page
            if page is None:
                continue
            if not state.accountant.try_commit(outcome.url, page.token_count):
                logger.warning(
                    "Skipping %s as it would exceed token limits (%d tokens, %d remaining)",
                    outcome.url, page.token_count, state.accountant.remaining,
                )
                continue
            if not outcome.from_cache:
                try:
                    await self.deps.cache.put(outcome.url, page)
                except Exception as exc:
                    logger.warning("Failed to cache %s: %s", outcome.url, exc)
            pages.append(page)
        return pages

    def _in_scope_links(self, page: Page, anchor: str, library_name: str, config: CrawlConfig) -> List[str]:
        """Filter the raw links of *page* with this run's anchor, library and variant mode."""
        try:
            return self.deps.filter_links(
                "", page.url, anchor, library_name, config.single_language_version,
                anchors=page.outbound_links,
            )
        except Exception as exc:
            logger.warning("Error filtering links of %s: %s", page.url, exc)
            return []

    async def _process(self, url: str, spent_snapshot: int, config: CrawlConfig) -> _Outcome:
        try:
            if not config.skip_cache and await self.deps.cache.has(url):
                cached = await self.deps.cache.get(url)
                if cached is not None:
                    logger.debug("Using cached version of %s", url)
                    if cached.token_count <= 0:
                        cached = replace(cached, token_count=estimate_tokens(cached.content))
                    return _Outcome(url, cached, from_cache=True)

            html = await self.deps.transport.fetch(url)
            content = self.deps.to_text(html)
            tokens = estimate_tokens(content)
            if would_exceed(spent_snapshot, tokens, config.max_total_tokens):
                logger.warning("Skipping %s as it would exceed token limits (%d tokens)", url, tokens)
                return _Outcome(url)

            links = self.deps.extract_links(html, url)
            page = Page.build(
                url,
                self.deps.extract_title(html),
                content,
                outbound_links=links,
                code_examples=self.deps.extract_code_examples(html),
                api_signatures=self.deps.extract_api_signatures(html),
            )
            return _Outcome(url, page)
        except Exception as exc:  # one page never aborts the batch
            logger.warning("Error processing %s: %s", url, exc)
            return _Outcome(url)
