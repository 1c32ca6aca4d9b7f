"""
Link extraction and relevance filtering for DocScout.

:func:`filter_links` decides which anchors of a page are worth crawling: same
host as the anchor URL, same locale/version variant (optionally), and a path
or anchor text that looks like documentation.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from doc_scout.crawler.models import Anchor

__all__ = (
    "RELEVANT_KEYWORDS",
    "Anchor",
    "VariantAnchor",
    "extract_anchors",
    "resolve_anchors",
    "infer_variant",
    "filter_links",
)

RELEVANT_KEYWORDS: Sequence[str] = ("api", "reference", "doc", "guide", "example", "tutorial")

_LOCALE_RE = re.compile(r"^[a-z]{2}$")
# v2, v3.1, v2.x, 3.1, 2.x; bare numbers (error codes, ids) are not versions
_VERSION_RE = re.compile(r"^v\d+(?:\.\d+|\.x)?$|^\d+\.(?:\d+|x)$")


@dataclass(frozen=True, slots=True)
class VariantAnchor:
    """Locale and version tokens inferred from the anchor URL path."""

    locale: Optional[str] = None
    version: Optional[str] = None

    def admits(self, path: str) -> bool:
        """False if *path* names another locale or version than the anchor."""
        for part in _segments(path):
            if self.locale and _LOCALE_RE.match(part) and part != self.locale:
                return False
            if self.version and _VERSION_RE.match(part) and part != self.version:
                return False
        return True


def _segments(path: str) -> List[str]:
    return [p for p in path.split("/") if p]


def extract_anchors(html: str) -> List[Anchor]:
    """All ``<a href>`` elements of *html*, in document order."""
    soup = BeautifulSoup(html, "html.parser")
    anchors: List[Anchor] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str) or not href_val.strip():
            continue
        anchors.append(Anchor(href=href_val.strip(), text=tag.get_text(" ", strip=True)))
    return anchors


def resolve_anchors(html: str, page_url: str) -> List[Anchor]:
    """Anchors of *html* with ``href`` made absolute against *page_url*.

    Duplicates are kept; links that cannot be resolved are dropped.
    """
    resolved: List[Anchor] = []
    for anchor in extract_anchors(html):
        try:
            href = urljoin(page_url, anchor.href)
        except ValueError:
            continue
        resolved.append(Anchor(href=href, text=anchor.text))
    return resolved


def infer_variant(anchor_url: str) -> VariantAnchor:
    """First two-letter segment is the locale, first version-like segment the version."""
    parts = _segments(urlparse(anchor_url).path)
    locale = next((p for p in parts if _LOCALE_RE.match(p)), None)
    version = next((p for p in parts if _VERSION_RE.match(p)), None)
    return VariantAnchor(locale=locale, version=version)


def _is_relevant(path: str, text: str, library: str) -> bool:
    path = path.lower()
    text = text.lower()
    if any(k in path or k in text for k in RELEVANT_KEYWORDS):
        return True
    return bool(library) and library in path


def filter_links(
    html: str,
    page_url: str,
    anchor_url: str,
    library_name: str,
    single_variant: bool = True,
    anchors: Optional[Iterable[Anchor]] = None,
) -> List[str]:
    """
    Return in-scope absolute URLs linked from *html*.

    Links are resolved against *page_url*; host and variant checks use
    *anchor_url*. Unparseable links are dropped silently. The result keeps the
    order of first occurrence and contains no duplicates. Pass *anchors*
    (e.g. a cached page's ``outbound_links``) to skip parsing *html*.
    """
    anchor_host = urlparse(anchor_url).hostname
    variant = infer_variant(anchor_url) if single_variant else VariantAnchor()
    library = (library_name or "").lower()

    seen: set[str] = set()
    links: List[str] = []
    for anchor in anchors if anchors is not None else extract_anchors(html):
        try:
            absolute, _ = urldefrag(urljoin(page_url, anchor.href))
            parsed = urlparse(absolute)
            host = parsed.hostname
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https") or host != anchor_host:
            continue
        if not variant.admits(parsed.path):
            continue
        if not _is_relevant(parsed.path, anchor.text, library):
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links
