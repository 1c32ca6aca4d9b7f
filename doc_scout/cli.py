# === FILE: doc_scout/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point of DocScout.

Commands:
  crawl     Crawl documentation URLs and write the reference files
  config    Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml when present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

Example:
  doc-scout crawl https://www.python-httpx.org/api/ --name httpx --pages 20
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict

import click
from pydantic import ValidationError

from doc_scout import __version__
from doc_scout.config import CrawlConfig, load_config
from doc_scout.engine import start_crawl, write_outputs
from doc_scout.logger import init_logging, logger

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _override(cfg: CrawlConfig, updates: Dict[str, Any]) -> CrawlConfig:
    """Validated copy of *cfg* with non-None *updates* applied."""
    data = cfg.model_dump()
    data.update({k: v for k, v in updates.items() if v is not None})
    return CrawlConfig(**data)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="DocScout, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML or JSON config file.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Log file (stderr only when omitted)",
)
@click.option(
    "--log-format", "log_format",
    default="%(asctime)s %(levelname)s %(message)s",
    show_default=True,
    help="Logging format string",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """DocScout: budgeted documentation crawler."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f"Failed to load configuration: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.argument("urls", nargs=-1)
@click.option("--name", "library_name", default=None, help="Library name (inferred from the URL otherwise)")
@click.option("--pages", "max_pages", type=int, default=None, help="Maximum number of pages to crawl")
@click.option("--concurrency", type=int, default=None, help="Pages fetched in parallel")
@click.option("--max-tokens-per-page", type=int, default=None, help="Per-page token ceiling")
@click.option("--max-total-tokens", type=int, default=None, help="Total token budget")
@click.option("--skip-cache", is_flag=True, help="Ignore cached pages")
@click.option("--multi-version", is_flag=True, help="Allow other language/version variants")
@click.option("--no-crawl-links", is_flag=True, help="Only fetch the given URLs")
@click.option(
    "--output", "-o", "output_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory for results",
)
@click.option("--json", "as_json", is_flag=True, help="Print the token report as JSON")
@click.option("--crawl-timeout", "crawl_timeout", type=float, default=None, help="Timeout of the whole crawl (seconds)")
@click.pass_context
def crawl(
    ctx, urls, library_name, max_pages, concurrency, max_tokens_per_page, max_total_tokens,
    skip_cache, multi_version, no_crawl_links, output_dir, as_json, crawl_timeout,
):
    """Crawl documentation and write reference, data and token report."""
    try:
        cfg = _override(
            ctx.obj["config"],
            {
                "doc_urls": list(urls) or None,
                "entry_point": urls[0] if urls else None,
                "library_name": library_name,
                "max_pages": max_pages,
                "concurrency": concurrency,
                "max_tokens_per_page": max_tokens_per_page,
                "max_total_tokens": max_total_tokens,
                "skip_cache": True if skip_cache else None,
                "single_language_version": False if multi_version else None,
                "crawl_links": False if no_crawl_links else None,
                "output_dir": output_dir,
            },
        )
    except ValidationError as e:
        print_error(f"Invalid options: {e}")

    logger.info("Starting crawl of %d URL(s)", len(cfg.doc_urls))
    try:
        if crawl_timeout:
            result = asyncio.run(asyncio.wait_for(start_crawl(cfg), timeout=crawl_timeout))
        else:
            result = asyncio.run(start_crawl(cfg))
        paths = write_outputs(result, cfg)
    except asyncio.TimeoutError:
        print_error(f"Crawl did not finish within {crawl_timeout} seconds")
    except Exception as e:
        print_error(f"Crawl failed: {e}")

    if as_json:
        click.echo(result.report.json(pretty=True))
        return
    click.echo(f"Analyzed {result.report.pages_processed} pages ({result.stop_reason.value})")
    click.echo(f"Used {result.report.total_tokens} tokens")
    click.echo(f"Reference saved to: {paths.reference_path}")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj["config"]
    click.echo(json.dumps(cfg.model_dump(mode="json", exclude={"api_key"}), indent=2, ensure_ascii=False))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
