"""Extraction of code examples and API signatures from documentation HTML.

All functions are pure and best-effort: no match means an empty list.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import List, Optional, TypeVar

from bs4 import BeautifulSoup
from bs4.element import Tag

from doc_scout.crawler.models import ApiSignature, CodeExample, Page

__all__: Sequence[str] = (
    "extract_code_examples",
    "extract_api_signatures",
    "filter_api_pages",
)

_CODE_SELECTOR = "pre, code, .highlight, .code-example"
_LANG_CLASS_RE = re.compile(r"(?:language|lang|syntax)-(\w+)", re.IGNORECASE)
_CALL_LIKE_RE = re.compile(r"^[\w.]+(:|=|\()")
_WS_RE = re.compile(r"\s+")
_HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_API_PAGE_KEYWORDS = ("api", "reference", "method", "function", "class", "interface")
_MIN_CODE_LEN = 10


def _clean(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _classes(tag: Tag) -> str:
    value = tag.get("class") or []
    return " ".join(value) if isinstance(value, list) else str(value)


def _language(tag: Tag) -> str:
    for candidate in (tag, *[c for c in tag.find_all(["code", "pre"])]):
        classes = _classes(candidate)
        match = _LANG_CLASS_RE.search(classes)
        if match:
            return match.group(1).lower()
        for attr in ("data-language", "data-lang", "language", "lang"):
            value = candidate.get(attr)
            if isinstance(value, str) and value:
                return value.lower()
    return ""


def _description(tag: Tag) -> str:
    prev = tag.find_previous_sibling(_HEADINGS + ["p"])
    if prev is not None:
        return _clean(prev.get_text(" "))
    parent = tag.parent
    if isinstance(parent, Tag):
        heading = parent.find(_HEADINGS)
        if heading is not None:
            return _clean(heading.get_text(" "))
    return ""


def extract_code_examples(html: str) -> List[CodeExample]:
    """Code blocks of at least 10 characters, outermost element only."""
    soup = BeautifulSoup(html, "html.parser")
    examples: List[CodeExample] = []
    seen: set[str] = set()
    for tag in soup.select(_CODE_SELECTOR):
        # nested <pre><code>: the outer block already covers it
        if tag.find_parent(["pre", "code"]) is not None:
            continue
        if tag.find_parent(class_=["highlight", "code-example"]) is not None:
            continue
        code = tag.get_text().strip()
        if len(code) < _MIN_CODE_LEN or code in seen:
            continue
        seen.add(code)
        examples.append(CodeExample(code=code, language=_language(tag), description=_description(tag)))
    return examples


def _next_sibling_matching(heading: Tag, names: List[str], classes: List[str]) -> Optional[Tag]:
    for sibling in heading.find_next_siblings():
        if sibling.name in _HEADINGS:
            return None
        if sibling.name in names:
            return sibling
        if any(c in _classes(sibling).split() for c in classes):
            return sibling
    return None


def extract_api_signatures(html: str) -> List[ApiSignature]:
    """API entries: headings followed by a signature block, or call-shaped headings."""
    soup = BeautifulSoup(html, "html.parser")
    signatures: List[ApiSignature] = []
    for heading in soup.find_all(_HEADINGS):
        heading_text = _clean(heading.get_text(" "))
        lowered = heading_text.lower()
        if not heading_text or len(heading_text) > 100:
            continue
        if "introduction" in lowered or "getting started" in lowered:
            continue

        signature = ""
        code = _next_sibling_matching(heading, ["pre", "code"], ["signature", "function-signature"])
        if code is not None:
            signature = _clean(code.get_text(" "))
        if not signature and (("(" in heading_text and ")" in heading_text) or _CALL_LIKE_RE.match(heading_text)):
            signature = heading_text
        if not signature:
            continue

        desc = _next_sibling_matching(heading, ["p"], [])
        params_block = _next_sibling_matching(heading, [], ["params", "parameters"])
        parameters: tuple[str, ...] = ()
        if params_block is not None:
            parameters = tuple(_clean(p.get_text(" ")) for p in params_block.find_all(["li", "tr"]))

        signatures.append(
            ApiSignature(
                name=heading_text,
                signature=signature,
                description=_clean(desc.get_text(" ")) if desc is not None else "",
                parameters=parameters,
            )
        )
    return signatures


P = TypeVar("P", bound=Page)


def filter_api_pages(pages: Sequence[P]) -> List[P]:
    """Pages that look like API reference material.

    Falls back to every page when fewer than two match out of more than two.
    """
    def is_api(page: Page) -> bool:
        url = page.url.lower()
        title = (page.title or "").lower()
        return (
            any(k in url for k in _API_PAGE_KEYWORDS)
            or any(k in title for k in _API_PAGE_KEYWORDS)
            or bool(page.api_signatures)
        )

    selected = [p for p in pages if is_api(p)]
    if len(selected) < 2 and len(pages) > 2:
        return list(pages)
    return selected
