# Transport tests against a local aiohttp application
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from doc_scout.crawler.fetcher import Fetcher, FetchError, open_session


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def docs_server(unused_tcp_port: int) -> AsyncIterator[tuple[str, dict]]:
    app = web.Application()
    calls = {"flaky": 0, "down": 0}

    async def handle_page(_):
        return web.Response(text="<h1>Guide</h1>", content_type="text/html")

    async def handle_flaky(_):
        calls["flaky"] += 1
        if calls["flaky"] <= 2:
            return web.Response(status=503)
        return web.Response(text="<h1>Recovered</h1>", content_type="text/html")

    async def handle_down(_):
        calls["down"] += 1
        return web.Response(status=500)

    async def handle_pdf(_):
        return web.Response(body=b"%PDF-1.4", content_type="application/pdf")

    app.router.add_get("/docs/guide", handle_page)
    app.router.add_get("/docs/flaky", handle_flaky)
    app.router.add_get("/docs/down", handle_down)
    app.router.add_get("/docs/manual.pdf", handle_pdf)

    async for url in _serve_app(app, unused_tcp_port):
        yield url, calls


@pytest.mark.asyncio()
async def test_fetch_returns_html(docs_server):
    base, _ = docs_server
    async with open_session(5.0, "TestAgent/1.0") as session:
        html = await Fetcher(session).fetch(f"{base}/docs/guide")
    assert "<h1>Guide</h1>" in html


@pytest.mark.asyncio()
async def test_fetch_404_raises(docs_server):
    base, _ = docs_server
    async with open_session(5.0, "TestAgent/1.0") as session:
        with pytest.raises(FetchError) as excinfo:
            await Fetcher(session).fetch(f"{base}/docs/missing")
    assert excinfo.value.status == 404


@pytest.mark.asyncio()
async def test_fetch_retries_transient_errors(docs_server):
    base, calls = docs_server
    async with open_session(5.0, "TestAgent/1.0") as session:
        html = await Fetcher(session, retry_times=3, backoff_factor=0).fetch(f"{base}/docs/flaky")
    assert "Recovered" in html
    assert calls["flaky"] == 3


@pytest.mark.asyncio()
async def test_fetch_gives_up_after_retries(docs_server):
    base, calls = docs_server
    async with open_session(5.0, "TestAgent/1.0") as session:
        with pytest.raises(FetchError):
            await Fetcher(session, retry_times=1, backoff_factor=0).fetch(f"{base}/docs/down")
    assert calls["down"] == 2


@pytest.mark.asyncio()
async def test_fetch_rejects_binary_content(docs_server):
    base, _ = docs_server
    async with open_session(5.0, "TestAgent/1.0") as session:
        with pytest.raises(FetchError):
            await Fetcher(session).fetch(f"{base}/docs/manual.pdf")
