"""HTML normalization for DocScout.

Raw documentation HTML is turned into Markdown-like text:

* chrome elements (navigation, footers, scripts …) are dropped with BeautifulSoup;
* the remaining markup is converted by html2text with ATX headings, so that
  triage can later split the text at ``#`` heading boundaries;
* blank-line runs are collapsed and trailing whitespace removed.

Both helpers are best-effort and never raise on malformed markup.
"""
from __future__ import annotations

import re
from collections.abc import Sequence

import html2text
from bs4 import BeautifulSoup, Comment

from doc_scout.logger import logger

__all__: Sequence[str] = ("REMOVED_ELEMENTS", "extract_title", "clean_html", "html_to_markdown")

REMOVED_ELEMENTS: Sequence[str] = (
    "script", "style", "noscript", "iframe", "canvas", "svg",
    "footer", "aside", "nav", "header",
)

_BLANK_RUN_RE = re.compile(r"\n{3,}")
_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_TAG_RE = re.compile(r"<[^>]*>")


def extract_title(html: str) -> str:
    """``<title>`` text or ``"Untitled Page"``."""
    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    return title or "Untitled Page"


def clean_html(html: str) -> str:
    """Drop chrome elements and comments, keep the documentation body."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(list(REMOVED_ELEMENTS)):
        element.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    body = soup.body or soup
    return str(body)


def _converter() -> html2text.HTML2Text:
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ignore_images = True
    converter.ignore_links = False
    converter.inline_links = True
    converter.wrap_links = False
    return converter


def _postprocess(text: str) -> str:
    text = _TRAILING_WS_RE.sub("", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


def html_to_markdown(html: str) -> str:
    """Convert documentation HTML to Markdown text."""
    if not html:
        return ""
    try:
        return _postprocess(_converter().handle(clean_html(html)))
    except Exception as exc:  # html2text has no narrow error type
        logger.warning("Failed to convert HTML to Markdown: %s", exc)
        return _postprocess(_TAG_RE.sub("", html))
