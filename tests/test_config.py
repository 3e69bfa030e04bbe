"""Tests for ctxindex.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from ctxindex.config import CrawlerConfig, CtxIndexConfig, HostingConfig, RetrievalConfig, load_config
from ctxindex.errors import ConfigError


@pytest.fixture(autouse=True)
def _clear_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("CTXINDEX_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN"):
        monkeypatch.delenv(key, raising=False)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CtxIndexConfig)
    assert config.root == tmp_path.resolve()
    assert config.hosting == HostingConfig()
    assert config.retrieval == RetrievalConfig(max_files=50, token_limit=50000, truncate_chars=200000)
    assert config.crawler == CrawlerConfig(max_pages=10, window=40)
    assert config.log_file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".ctxindex.yml"
    config_file.write_text(
        """
hosting:
  api_base_url: "https://ghe.example.com/api/v3/"
  raw_base_url: "https://raw.ghe.example.com"
  token: "secret"
  request_timeout: 12
retrieval:
  max_files: 20
  token_limit: 1000
crawler:
  max_pages: 3
logging:
  file: "logs/run.jsonl"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.hosting.api_base_url == "https://ghe.example.com/api/v3"
    assert config.hosting.raw_base_url == "https://raw.ghe.example.com"
    assert config.hosting.token == "secret"
    assert config.hosting.request_timeout == 12.0
    assert config.retrieval.max_files == 20
    assert config.retrieval.token_limit == 1000
    assert config.retrieval.truncate_chars == 200000
    assert config.crawler.max_pages == 3
    assert config.crawler.window == 40
    assert config.log_file == tmp_path.resolve() / "logs/run.jsonl"


def test_invalid_numbers_fall_back_to_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / ".ctxindex.yml"
    config_file.write_text("retrieval:\n  max_files: -3\n  token_limit: many\ncrawler:\n  window: true\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.retrieval.max_files == 50
    assert config.retrieval.token_limit == 50000
    assert config.crawler.window == 40


def test_token_falls_back_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")

    assert load_config(tmp_path).hosting.token == "from-env"


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / ".ctxindex.yml"
    config_file.write_text("hosting: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / ".ctxindex.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)
