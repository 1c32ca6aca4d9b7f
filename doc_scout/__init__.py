"""
DocScout package initializer.
Defines package version and exposes the crawl orchestrator.
"""
__version__ = "0.1.0"

from doc_scout.crawler.crawler import CrawlDependencies, CrawlOrchestrator, CrawlResult

__all__ = ["__version__", "CrawlDependencies", "CrawlOrchestrator", "CrawlResult"]
