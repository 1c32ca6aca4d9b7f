from types import SimpleNamespace

import pytest
from openai import OpenAIError

from doc_scout.summarizer import SUMMARY_NOTICE, OpenAISummarizer, SummarizationError


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.mark.asyncio()
async def test_summary_is_prefixed_with_notice():
    completions = FakeCompletions(content="  ## Widget\nshort  ")
    summarizer = OpenAISummarizer("", model="m", client=fake_client(completions))

    text = await summarizer.summarize("Widget", "long body")

    assert text == SUMMARY_NOTICE + "## Widget\nshort"
    request = completions.requests[0]
    assert request["model"] == "m"
    assert "# Widget" in request["messages"][0]["content"]


@pytest.mark.asyncio()
async def test_api_error_becomes_summarization_error():
    summarizer = OpenAISummarizer("", client=fake_client(FakeCompletions(error=OpenAIError("quota"))))
    with pytest.raises(SummarizationError):
        await summarizer.summarize("Widget", "body")


@pytest.mark.asyncio()
async def test_empty_reply_is_an_error():
    summarizer = OpenAISummarizer("", client=fake_client(FakeCompletions(content="   ")))
    with pytest.raises(SummarizationError):
        await summarizer.summarize("Widget", "body")


def test_api_key_required_without_client():
    with pytest.raises(ValueError):
        OpenAISummarizer("")
