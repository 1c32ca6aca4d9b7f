# doc_scout/report/json_report.py

"""
JSON outputs of a DocScout crawl.

* ``render_json`` – one compact record per page (url, title, shrink state, tokens);
* ``render_token_report`` – the :class:`~doc_scout.aggregator.TokenReport`.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from doc_scout.aggregator import TokenReport
from doc_scout.crawler.models import Page, ShrinkState


def page_records(pages: Sequence[Page]) -> List[Dict[str, Any]]:
    return [
        {
            "url": page.url,
            "title": page.title,
            "was_summarized": page.shrink_state is ShrinkState.SUMMARIZED,
            "was_reduced": page.shrink_state is ShrinkState.REDUCED,
            "token_count": page.token_count,
        }
        for page in pages
    ]


def _dump(data: Any, output_path: Path | str) -> Path:
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return output


def render_json(pages: Sequence[Page], output_path: Path | str) -> Path:
    """
    Save the page list as JSON to *output_path* and return the path.

    Example:
    ```python
    from doc_scout.report.json_report import render_json
    data_path = render_json(result.pages, 'library-docs/httpx/httpx-data.json')
    ```
    """
    return _dump(page_records(pages), output_path)


def render_token_report(report: TokenReport, output_path: Path | str) -> Path:
    return _dump(report.to_dict(), output_path)
