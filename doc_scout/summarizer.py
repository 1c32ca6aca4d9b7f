"""doc_scout.summarizer: optional text-shrinking collaborator used by triage.

:class:`OpenAISummarizer` calls a chat completion model once per page. It does
not retry; triage falls back to structural reduction on any failure.
"""
from __future__ import annotations

from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

__all__ = ["Summarizer", "SummarizationError", "OpenAISummarizer", "SUMMARY_NOTICE"]

SUMMARY_NOTICE = "> Note: This is an AI-generated summary of the original documentation page.\n\n"

_PROMPT = """Please create a concise summary of this library documentation page.
Focus only on the API details, function signatures, and key examples.
Preserve code blocks and important technical details.
Remove any redundant explanations or introductory material.
Format your response in Markdown.

# {title}

{text}"""


class SummarizationError(Exception):
    """The summarizer could not produce a summary."""


class Summarizer(Protocol):
    async def summarize(self, title: str, text: str) -> str: ...


class OpenAISummarizer:
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 8192,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if not api_key and client is None:
            raise ValueError("API key is required for OpenAISummarizer")
        self.model = model
        self.max_tokens = max_tokens
        # max_retries=0: fallback is the caller's decision
        self._client = client or AsyncOpenAI(api_key=api_key, max_retries=0)

    async def summarize(self, title: str, text: str) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": _PROMPT.format(title=title, text=text)}],
            )
        except OpenAIError as exc:
            raise SummarizationError(f"Failed to generate page summary: {exc}") from exc
        choices = completion.choices or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise SummarizationError("Summarizer returned an empty response")
        return SUMMARY_NOTICE + content.strip()
