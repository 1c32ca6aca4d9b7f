"""doc_scout.engine: wiring of real collaborators and output files for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from doc_scout.cache import JsonCacheStore
from doc_scout.config import CrawlConfig
from doc_scout.crawler.crawler import CrawlDependencies, CrawlOrchestrator, CrawlResult
from doc_scout.crawler.fetcher import Fetcher, open_session
from doc_scout.logger import logger
from doc_scout.report.json_report import render_json, render_token_report
from doc_scout.report.markdown_report import render_reference
from doc_scout.summarizer import OpenAISummarizer, Summarizer
from doc_scout.utils import build_seed_urls, safe_slug

__all__ = ["OutputPaths", "build_summarizer", "start_crawl", "write_outputs"]


@dataclass(slots=True)
class OutputPaths:
    reference_path: Path
    data_path: Path
    token_report_path: Path


def build_summarizer(config: CrawlConfig) -> Optional[Summarizer]:
    """Summarizer when an API key is available, None otherwise."""
    api_key = config.resolved_api_key()
    if not api_key:
        logger.info("No summarizer API key configured; oversized pages will be reduced structurally")
        return None
    return OpenAISummarizer(api_key=api_key, model=config.summarizer_model)


async def start_crawl(config: CrawlConfig, seed_urls: Optional[Sequence[str]] = None) -> CrawlResult:
    """Run one crawl with an aiohttp transport and the on-disk cache."""
    seeds = list(seed_urls) if seed_urls else build_seed_urls(config.doc_urls, config.entry_point)
    cache = JsonCacheStore(config.cache_dir)
    summarizer = build_summarizer(config)
    async with open_session(config.timeout, config.user_agent) as session:
        deps = CrawlDependencies(
            transport=Fetcher(session, retry_times=config.retry_times, backoff_factor=config.backoff_factor),
            cache=cache,
            summarizer=summarizer,
        )
        return await CrawlOrchestrator(deps).run(seeds, config)


def write_outputs(result: CrawlResult, config: CrawlConfig) -> OutputPaths:
    """Write data, token report and reference under ``output_dir/<slug>/``."""
    slug = safe_slug(result.library_name)
    target = Path(config.output_dir) / slug
    paths = OutputPaths(
        reference_path=render_reference(
            result.pages,
            result.library_name,
            target / f"{slug}-reference.md",
            focus_on_api=config.focus_on_api,
            include_examples=config.include_examples,
        ),
        data_path=render_json(result.pages, target / f"{slug}-data.json"),
        token_report_path=render_token_report(result.report, target / f"{slug}-token-report.json"),
    )
    logger.info("Reference saved to %s", paths.reference_path)
    return paths
