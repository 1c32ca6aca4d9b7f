"""CLI tests with click.testing.CliRunner; the crawl itself is patched out."""
import asyncio
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import doc_scout.cli as cli_module
from doc_scout.aggregator import build_token_report
from doc_scout.cli import cli
from doc_scout.crawler.crawler import CrawlConfigError, CrawlResult
from doc_scout.crawler.models import CrawlStatus, Page
from doc_scout.engine import OutputPaths


def fake_result() -> CrawlResult:
    page = Page.build("https://docs.test/api/a", "A", "body text")
    return CrawlResult(
        pages=[page],
        report=build_token_report([page], {page.url: page.token_count}),
        stop_reason=CrawlStatus.COMPLETED,
        library_name="Widgets",
        pages_visited=1,
        visited=(page.url,),
        frontier=(),
    )


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def captured(monkeypatch):
    """Patch start_crawl / write_outputs and record the effective config."""
    seen = {}

    async def fake_crawl(cfg):
        seen["config"] = cfg
        return fake_result()

    def fake_outputs(result, cfg):
        return OutputPaths(Path("ref.md"), Path("data.json"), Path("report.json"))

    monkeypatch.setattr(cli_module, "start_crawl", fake_crawl)
    monkeypatch.setattr(cli_module, "write_outputs", fake_outputs)
    return seen


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "DocScout" in result.output


def test_show_config_reads_file(tmp_path):
    cfg_file = tmp_path / "crawl.json"
    cfg_file.write_text(json.dumps({"max_pages": 4, "api_key": "secret"}), encoding="utf-8")

    result = CliRunner().invoke(cli, ["--log-level", "ERROR", "--config", str(cfg_file), "config"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["max_pages"] == 4
    assert "api_key" not in data


def test_crawl_applies_options(captured):
    result = CliRunner().invoke(
        cli,
        [
            "--log-level", "ERROR",
            "crawl", "https://docs.test/api/a",
            "--name", "widgets", "--pages", "3", "--skip-cache", "--multi-version", "--no-crawl-links",
        ],
    )

    assert result.exit_code == 0, result.output
    cfg = captured["config"]
    assert str(cfg.entry_point) == "https://docs.test/api/a"
    assert cfg.library_name == "widgets"
    assert cfg.max_pages == 3
    assert cfg.skip_cache is True
    assert cfg.single_language_version is False
    assert cfg.crawl_links is False
    assert "Analyzed 1 pages (completed)" in result.output
    assert "Reference saved to: ref.md" in result.output


def test_crawl_json_prints_token_report(captured):
    result = CliRunner().invoke(cli, ["--log-level", "ERROR", "crawl", "https://docs.test/api/a", "--json"])

    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["pages_processed"] == 1
    assert report["largest_page"]["url"] == "https://docs.test/api/a"


def test_invalid_option_value_fails(captured):
    result = CliRunner().invoke(cli, ["--log-level", "ERROR", "crawl", "https://docs.test/", "--pages", "0"])
    assert result.exit_code != 0
    assert "Invalid options" in result.output


def test_configuration_error_exits_non_zero(monkeypatch):
    async def no_seeds(cfg):
        raise CrawlConfigError("At least one documentation URL or entry point is required")

    monkeypatch.setattr(cli_module, "start_crawl", no_seeds)
    result = CliRunner().invoke(cli, ["--log-level", "ERROR", "crawl"])

    assert result.exit_code == 1
    assert "At least one documentation URL" in result.output


def test_crawl_timeout(monkeypatch):
    async def slow(cfg):
        await asyncio.sleep(2)
        return fake_result()

    monkeypatch.setattr(cli_module, "start_crawl", slow)
    result = CliRunner().invoke(
        cli, ["--log-level", "ERROR", "crawl", "https://docs.test/", "--crawl-timeout", "0.1"]
    )

    assert result.exit_code != 0
    assert "did not finish" in result.output
