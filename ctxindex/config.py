"""Configuration loading for ctxindex (.ctxindex.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".ctxindex.yml"


@dataclass
class HostingConfig:
    """Remote repository hosting endpoints and credentials."""

    api_base_url: str = "https://api.github.com"
    raw_base_url: str = "https://raw.githubusercontent.com"
    token: Optional[str] = None
    user_agent: str = "ctxindex/0.1"
    request_timeout: float = 30.0


@dataclass
class RetrievalConfig:
    """Budgets applied by the multi-phase file retriever."""

    max_files: int = 50
    token_limit: int = 50000
    truncate_chars: int = 200000


@dataclass
class CrawlerConfig:
    max_pages: int = 10
    window: int = 40


@dataclass
class CtxIndexConfig:
    """Represents the settings defined in .ctxindex.yml."""

    root: Path
    hosting: HostingConfig = field(default_factory=HostingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    log_file: Optional[Path] = None


_TOKEN_ENV_KEYS = ("CTXINDEX_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


def load_config(config_path: Path | None = None) -> CtxIndexConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    hosting = HostingConfig()
    hosting_data = _as_dict(data.get("hosting"))
    if hosting_data:
        hosting.api_base_url = (_as_str(hosting_data.get("api_base_url")) or hosting.api_base_url).rstrip("/")
        hosting.raw_base_url = (_as_str(hosting_data.get("raw_base_url")) or hosting.raw_base_url).rstrip("/")
        hosting.token = _as_str(hosting_data.get("token"))
        hosting.user_agent = _as_str(hosting_data.get("user_agent")) or hosting.user_agent
        timeout = _as_float(hosting_data.get("request_timeout"))
        if timeout is not None and timeout > 0:
            hosting.request_timeout = timeout
    if hosting.token is None:
        hosting.token = _first_env_value(_TOKEN_ENV_KEYS)

    retrieval = RetrievalConfig()
    retrieval_data = _as_dict(data.get("retrieval"))
    if retrieval_data:
        retrieval.max_files = _positive_int(retrieval_data.get("max_files"), retrieval.max_files)
        retrieval.token_limit = _positive_int(retrieval_data.get("token_limit"), retrieval.token_limit)
        retrieval.truncate_chars = _positive_int(
            retrieval_data.get("truncate_chars"), retrieval.truncate_chars
        )

    crawler = CrawlerConfig()
    crawler_data = _as_dict(data.get("crawler"))
    if crawler_data:
        crawler.max_pages = _positive_int(crawler_data.get("max_pages"), crawler.max_pages)
        crawler.window = _positive_int(crawler_data.get("window"), crawler.window)

    log_file = None
    logging_data = _as_dict(data.get("logging"))
    log_file_str = _as_str(logging_data.get("file")) if logging_data else None
    if log_file_str:
        log_file = root / log_file_str

    return CtxIndexConfig(
        root=root,
        hosting=hosting,
        retrieval=retrieval,
        crawler=crawler,
        log_file=log_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _positive_int(value: Any, default: int) -> int:
    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        return default
    return parsed


__all__ = [
    "CONFIG_FILENAME",
    "CrawlerConfig",
    "CtxIndexConfig",
    "HostingConfig",
    "RetrievalConfig",
    "load_config",
]
