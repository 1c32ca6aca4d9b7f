# === FILE: doc_scout/config.py ===
"""
Loading and validation of the DocScout crawl configuration.
Pydantic describes the schema and checks the data.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)

_API_KEY_ENV = "OPENAI_API_KEY"


class CrawlConfig(BaseModel):
    """Settings for one documentation crawl."""
    model_config = ConfigDict(extra="forbid")

    doc_urls: List[HttpUrl] = Field(default_factory=list, description="Seed documentation URLs.")
    entry_point: Optional[HttpUrl] = Field(None, description="Anchor URL, crawled first.")
    library_name: Optional[str] = Field(None, description="Library name; inferred from the anchor when empty.")

    crawl_links: bool = Field(True, description="Follow relevant links found on crawled pages.")
    max_pages: int = Field(10, ge=1, description="Hard limit on dispatched pages.")
    concurrency: int = Field(3, ge=1, description="Pages fetched in parallel per round.")
    max_tokens_per_page: int = Field(50_000, gt=0, description="Per-page ceiling used by triage.")
    max_total_tokens: int = Field(200_000, gt=0, description="Global token budget for the crawl.")
    skip_cache: bool = Field(False, description="Bypass cached pages.")
    single_language_version: bool = Field(True, description="Stay on the anchor's locale and version.")

    focus_on_api: bool = Field(True, description="Reference keeps API-oriented pages only.")
    include_examples: bool = Field(True, description="Reference includes code examples.")

    timeout: float = Field(30.0, gt=0, description="Timeout for one request (seconds).")
    retry_times: int = Field(2, ge=0, description="Retries on retryable statuses and network errors.")
    backoff_factor: float = Field(1.0, ge=0, description="Multiplier of the exponential retry delay.")
    user_agent: str = Field("DocScoutBot/1.0", min_length=1, description="User-Agent header.")

    cache_dir: Path = Field(Path("doc-analyzer-cache"), description="Directory of the page cache.")
    output_dir: Path = Field(Path("library-docs"), description="Directory for generated files.")

    summarizer_model: str = Field("gpt-4o-mini", min_length=1, description="Model used for page summaries.")
    api_key: Optional[str] = Field(None, repr=False, description="Summarizer API key.")

    @field_validator("library_name", mode="before")
    def _blank_library_name(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def resolved_api_key(self) -> Optional[str]:
        """Explicit key first, then the environment."""
        return self.api_key or os.environ.get(_API_KEY_ENV) or None


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Read YAML or JSON and return a validated CrawlConfig.

    Without an explicit path, ``configs/default.yaml`` is used when present and
    the built-in defaults otherwise. A missing explicit path raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlConfig(**data)


__all__ = ["CrawlConfig", "load_config"]
