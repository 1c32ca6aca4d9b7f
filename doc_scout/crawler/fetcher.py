# doc_scout/crawler/fetcher.py
"""
Fetcher module: HTTP GET of documentation pages with retry/backoff.

Failures surface as :class:`FetchError`; the orchestrator turns them into
"page yields nothing".
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from doc_scout.logger import logger

__all__ = ("FetchError", "Transport", "Fetcher", "RETRY_STATUS", "open_session")

RETRY_STATUS: Sequence[int] = (408, 413, 429, 500, 502, 503, 504)
_TEXT_TYPES = ("html", "xml", "text/plain")


class FetchError(Exception):
    """A page could not be fetched (status, content type or network)."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.status = status


class Transport(Protocol):
    async def fetch(self, url: str) -> str: ...


def open_session(timeout: float, user_agent: str) -> ClientSession:
    """Session configured the way :class:`Fetcher` expects it."""
    return ClientSession(
        timeout=ClientTimeout(total=timeout),
        headers={"User-Agent": user_agent},
        raise_for_status=False,
    )


class Fetcher:
    """Handles HTTP fetching with retries/backoff on transient errors."""

    def __init__(
        self,
        session: ClientSession,
        retry_times: int = 2,
        backoff_factor: float = 1.0,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.retry_times = retry_times
        self.backoff_factor = backoff_factor
        self._retry_status = tuple(retry_status)

    async def fetch(self, url: str) -> str:
        """
        Return the body of *url*.

        Raises FetchError on a non-2xx status, a non-text content type, a
        timeout, or once retries on retryable statuses / client errors run out.
        """
        attempts = 0
        while True:
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self._retry_status:
                        raise ClientError(f"retryable status {resp.status}")
                    if not 200 <= resp.status < 300:
                        raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                    ctype = resp.headers.get("Content-Type", "").lower()
                    if ctype and not any(t in ctype for t in _TEXT_TYPES):
                        raise FetchError(url, f"unsupported content type {ctype!r}", status=resp.status)
                    return await resp.text()
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(url, "timeout") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise FetchError(url, str(exc)) from exc
                backoff = min(self.backoff_factor * 2**attempts, 60)
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)
