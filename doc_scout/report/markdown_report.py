"""doc_scout.report.markdown_report: Markdown reference document rendered with Jinja2."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader

from doc_scout.crawler.models import Page
from doc_scout.parser.content_extractor import filter_api_pages

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "reference.md.j2"


def build_reference(
    pages: Sequence[Page],
    library_name: str,
    *,
    focus_on_api: bool = True,
    include_examples: bool = True,
    template_dir: Optional[Union[Path, str]] = None,
) -> str:
    """Render the reference document for *pages* and return it as text.

    Args:
        pages: triaged pages of a crawl, in crawl order.
        library_name: name used in the document header.
        focus_on_api: keep only API-oriented pages (see ``filter_api_pages``).
        include_examples: add the collected code examples.
        template_dir: directory with ``reference.md.j2``; the bundled template by default.
    """
    env = Environment(
        loader=FileSystemLoader(str(template_dir or DEFAULT_TEMPLATE_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template(TEMPLATE_NAME)

    selected = filter_api_pages(pages) if focus_on_api else list(pages)
    context: dict[str, Any] = {
        "library_name": library_name,
        "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "pages": selected,
        "signatures": [s for p in selected for s in p.api_signatures],
        "examples": [e for p in selected for e in p.code_examples] if include_examples else [],
    }
    return template.render(**context)


def render_reference(
    pages: Sequence[Page],
    library_name: str,
    output_path: Union[Path, str],
    **options: Any,
) -> Path:
    """Render the reference and save it to *output_path*."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(build_reference(pages, library_name, **options), encoding="utf-8")
    return output_path
