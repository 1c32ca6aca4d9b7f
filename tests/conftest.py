# File: tests/conftest.py
from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pytest

from doc_scout.cache import MemoryCacheStore
from doc_scout.config import CrawlConfig
from doc_scout.crawler.crawler import CrawlDependencies, CrawlOrchestrator
from doc_scout.crawler.fetcher import FetchError
from doc_scout.summarizer import SummarizationError


class FakeTransport:
    """Serves HTML from a dict and records every requested URL."""

    def __init__(self, pages: Dict[str, str]) -> None:
        self.pages = pages
        self.calls: List[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, "HTTP 404", status=404)
        return self.pages[url]


class FakeSummarizer:
    def __init__(self, reply: str = "short summary", fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail
        self.calls: List[str] = []

    async def summarize(self, title: str, text: str) -> str:
        self.calls.append(title)
        if self.fail:
            raise SummarizationError("boom")
        return self.reply


def html_page(title: str, body: str = "", links: Optional[Dict[str, str]] = None) -> str:
    """Small documentation page with anchors ``{href: text}``."""
    anchors = "".join(f'<a href="{href}">{text}</a>' for href, text in (links or {}).items())
    return f"<html><head><title>{title}</title></head><body><h1>{title}</h1><p>{body}</p>{anchors}</body></html>"


@pytest.fixture()
def make_config() -> Callable[..., CrawlConfig]:
    def _make(**overrides) -> CrawlConfig:
        params = dict(library_name="widgets", max_pages=10, concurrency=3)
        params.update(overrides)
        return CrawlConfig(**params)

    return _make


@pytest.fixture()
def memory_cache() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture()
def make_orchestrator(memory_cache) -> Callable[..., CrawlOrchestrator]:
    def _make(transport, cache=None, summarizer=None) -> CrawlOrchestrator:
        deps = CrawlDependencies(
            transport=transport,
            cache=cache if cache is not None else memory_cache,
            summarizer=summarizer,
        )
        return CrawlOrchestrator(deps)

    return _make
