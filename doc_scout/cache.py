"""doc_scout.cache: persistence of processed pages between crawl runs.

The orchestrator only relies on :class:`CacheStore`; :class:`JsonCacheStore`
keeps every entry in memory and writes a single ``cache.json`` on
:meth:`~JsonCacheStore.flush_all`. Entries written after the last flush are
lost if the process dies before it.
"""
from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable

from doc_scout.crawler.models import Page
from doc_scout.logger import logger

__all__ = ["CacheStore", "JsonCacheStore", "MemoryCacheStore", "cache_key"]


def cache_key(url: str) -> str:
    """Filesystem- and JSON-safe key derived from *url*; distinct URLs get distinct keys."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")


@runtime_checkable
class CacheStore(Protocol):
    async def has(self, url: str) -> bool: ...

    async def get(self, url: str) -> Optional[Page]: ...

    async def put(self, url: str, page: Page) -> None: ...

    async def flush_all(self) -> None: ...


class MemoryCacheStore:
    """Process-local cache, used when nothing should touch the disk."""

    def __init__(self) -> None:
        self._pages: Dict[str, Page] = {}

    async def has(self, url: str) -> bool:
        return url in self._pages

    async def get(self, url: str) -> Optional[Page]:
        return self._pages.get(url)

    async def put(self, url: str, page: Page) -> None:
        self._pages[url] = page

    async def flush_all(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._pages)


class JsonCacheStore:
    """Load-all / flush-all cache backed by ``<cache_dir>/cache.json``."""

    FILENAME = "cache.json"

    def __init__(self, cache_dir: Union[str, Path]) -> None:
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.cache_dir / self.FILENAME
        self._entries: Dict[str, Dict[str, Any]] = {}
        self.load()

    def load(self) -> None:
        """Read every entry from disk. A missing or corrupt file yields an empty cache."""
        if not self.path.is_file():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load cache %s: %s", self.path, exc)
            return
        pages = data.get("pages") if isinstance(data, dict) else None
        if not isinstance(pages, dict):
            logger.warning("Cache %s has no 'pages' mapping, ignoring it", self.path)
            return
        self._entries = {k: v for k, v in pages.items() if isinstance(v, dict)}
        logger.info("Loaded cache with %d pages", len(self._entries))

    async def has(self, url: str) -> bool:
        return cache_key(url) in self._entries

    async def get(self, url: str) -> Optional[Page]:
        raw = self._entries.get(cache_key(url))
        if raw is None:
            return None
        try:
            page = Page.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed cache entry for %s: %s", url, exc)
            return None
        if page.url != url:
            logger.warning("Cache entry for %s belongs to %s, ignoring it", url, page.url)
            return None
        return page

    async def put(self, url: str, page: Page) -> None:
        self._entries[cache_key(url)] = page.to_dict()

    async def flush_all(self) -> None:
        payload = {"pages": self._entries}
        try:
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save cache %s: %s", self.path, exc)

    def __len__(self) -> int:
        return len(self._entries)
