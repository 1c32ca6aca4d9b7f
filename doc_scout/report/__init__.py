"""doc_scout.report: output writers (JSON data, token report, Markdown reference)."""

from __future__ import annotations

from doc_scout.report.json_report import render_json, render_token_report
from doc_scout.report.markdown_report import build_reference, render_reference

__all__ = ["render_json", "render_token_report", "build_reference", "render_reference"]
