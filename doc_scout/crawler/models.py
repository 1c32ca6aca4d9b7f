# doc_scout/crawler/models.py
"""
Data models for the DocScout crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from doc_scout.tokens import estimate_tokens


class ShrinkState(str, Enum):
    """Which triage path produced the current page content."""

    ORIGINAL = "original"
    REDUCED = "reduced"
    SUMMARIZED = "summarized"


class CrawlStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    BUDGET_EXHAUSTED = "budget_exhausted"
    PAGE_LIMIT_REACHED = "page_limit_reached"
    FINALIZING = "finalizing"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class Anchor:
    """An ``<a href>`` of a page: link target and visible text."""

    href: str
    text: str = ""


@dataclass(frozen=True, slots=True)
class CodeExample:
    code: str
    language: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class ApiSignature:
    name: str
    signature: str
    description: str = ""
    parameters: Tuple[str, ...] = ()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _anchor(raw: Any) -> Anchor:
    # older cache files stored bare URL strings
    if isinstance(raw, str):
        return Anchor(href=raw)
    return Anchor(href=raw["href"], text=str(raw.get("text") or ""))


@dataclass(frozen=True, slots=True)
class Page:
    """One crawled URL after normalization.

    Instances are immutable; use :meth:`with_content` to obtain a copy with a
    new body so that ``token_count`` is always recomputed together with it.
    ``outbound_links`` holds every anchor of the page, resolved to absolute
    URLs but not yet filtered, so each crawl applies its own relevance rules.
    """

    url: str
    title: str
    content: str
    token_count: int
    outbound_links: Tuple[Anchor, ...] = ()
    code_examples: Tuple[CodeExample, ...] = ()
    api_signatures: Tuple[ApiSignature, ...] = ()
    shrink_state: ShrinkState = ShrinkState.ORIGINAL
    fetched_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def build(
        cls,
        url: str,
        title: str,
        content: str,
        *,
        outbound_links: Sequence[Anchor] = (),
        code_examples: Sequence[CodeExample] = (),
        api_signatures: Sequence[ApiSignature] = (),
        fetched_at: Optional[datetime] = None,
    ) -> Page:
        return cls(
            url=url,
            title=title,
            content=content,
            token_count=estimate_tokens(content),
            outbound_links=tuple(outbound_links),
            code_examples=tuple(code_examples),
            api_signatures=tuple(api_signatures),
            fetched_at=fetched_at or _utcnow(),
        )

    def with_content(self, content: str, state: ShrinkState) -> Page:
        return replace(self, content=content, token_count=estimate_tokens(content), shrink_state=state)

    # Serialization (cache payloads) -----------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["outbound_links"] = [asdict(a) for a in self.outbound_links]
        data["code_examples"] = [asdict(c) for c in self.code_examples]
        data["api_signatures"] = [
            {**asdict(s), "parameters": list(s.parameters)} for s in self.api_signatures
        ]
        data["shrink_state"] = self.shrink_state.value
        data["fetched_at"] = self.fetched_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Page:
        """Rebuild a page from :meth:`to_dict` output.

        Raises KeyError, TypeError or ValueError on a malformed payload.
        """
        content = data["content"]
        if not isinstance(content, str) or not isinstance(data["url"], str):
            raise TypeError("url and content must be strings")
        token_count = data.get("token_count") or 0
        if not isinstance(token_count, int) or token_count <= 0:
            token_count = estimate_tokens(content)
        fetched_raw = data.get("fetched_at")
        fetched_at = datetime.fromisoformat(fetched_raw) if fetched_raw else _utcnow()
        return cls(
            url=data["url"],
            title=str(data.get("title") or ""),
            content=content,
            token_count=token_count,
            outbound_links=tuple(_anchor(a) for a in data.get("outbound_links") or ()),
            code_examples=tuple(CodeExample(**c) for c in data.get("code_examples") or ()),
            api_signatures=tuple(
                ApiSignature(
                    name=s["name"],
                    signature=s["signature"],
                    description=s.get("description", ""),
                    parameters=tuple(s.get("parameters") or ()),
                )
                for s in data.get("api_signatures") or ()
            ),
            shrink_state=ShrinkState(data.get("shrink_state", ShrinkState.ORIGINAL.value)),
            fetched_at=fetched_at,
        )


__all__ = ["ShrinkState", "CrawlStatus", "Anchor", "CodeExample", "ApiSignature", "Page"]
