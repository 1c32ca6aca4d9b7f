"""doc_scout.utils: seed list assembly, library name inference and slugs."""

from __future__ import annotations

import re
from typing import Collection, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from doc_scout.logger import logger

__all__: Sequence[str] = (
    "remove_duplicates",
    "build_seed_urls",
    "infer_library_name",
    "safe_slug",
)

_DOC_WORDS_RE = re.compile(r"\b(?:docs|documentation|api|reference)\b", re.IGNORECASE)
_SLUG_RE = re.compile(r"[^a-z0-9]")


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Remove duplicate URLs, keeping order."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def build_seed_urls(doc_urls: Iterable[object], entry_point: Optional[object] = None) -> List[str]:
    """Entry point first (when given), then the documentation URLs, without repeats."""
    seeds = [str(u) for u in doc_urls]
    if entry_point is not None:
        seeds.insert(0, str(entry_point))
    return remove_duplicates(seeds)


def infer_library_name(url: str) -> str:
    """Guess a library name from a documentation URL.

    ``https://www.foo.dev/`` gives ``Foo``; a meaningful last (or first) path
    segment wins over the host, e.g. ``https://x.io/docs/requests`` gives
    ``Requests``.
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
    except ValueError as exc:
        logger.warning("Could not extract library name from URL %s: %s", url, exc)
        return "Library"

    host_parts = host.split(".")
    name = host_parts[1] if host_parts[0] == "www" and len(host_parts) > 2 else host_parts[0]

    path_parts = [p for p in parsed.path.split("/") if p]
    if path_parts:
        last = path_parts[-1]
        first = path_parts[0] if len(path_parts) > 1 else None
        if "." not in last and len(last) > 2:
            name = last
        elif first and len(first) > 2:
            name = first

    name = _DOC_WORDS_RE.sub("", name.replace("-", " "), count=1).strip()
    if name:
        return name[0].upper() + name[1:]
    return host_parts[0] or "Library"


def safe_slug(name: str) -> str:
    return _SLUG_RE.sub("-", name.lower())
