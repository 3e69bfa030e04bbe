"""CLI parser and command behaviour tests."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import pytest

from ctxindex import cli
from ctxindex.cli import _build_parser


def _run(argv: list[str], capsys: pytest.CaptureFixture[str]) -> Any:
    cli.main(argv)
    return json.loads(capsys.readouterr().out)


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "analyze", "acme/widget"])

    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["analyze", "acme/widget", "--verbose"])

    assert args.verbose is True
    assert args.phase == "all"
    assert args.no_registry is False


def test_cli_rejects_unknown_phase() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["analyze", "acme/widget", "--phase", "everything"])


def test_extract_infers_kind_from_file_name(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "index.d.ts"
    source.write_text("export declare function chunk(size: number): void;\n", encoding="utf-8")

    payload = _run(["--config", str(tmp_path), "extract", str(source)], capsys)

    assert payload["success"] is True
    assert [api["signature"] for api in payload["apis"]] == ["chunk(size: number)"]


def test_extract_exits_non_zero_on_malformed_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    manifest = tmp_path / "package.json"
    manifest.write_text("{broken", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path), "extract", str(manifest)])

    assert excinfo.value.code == 1
    assert json.loads(capsys.readouterr().out)["success"] is False


def test_parse_reads_stdin(tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("# Usage\nrun it\n"))

    payload = _run(["--config", str(tmp_path), "parse", "-"], capsys)

    assert payload["sections"] == [{"heading": "Usage", "level": 1, "content": "run it"}]


def test_analyze_emits_report(tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    class _Report:
        success = True

        def to_dict(self) -> dict[str, Any]:
            return {"repo": "acme/widget", "success": True}

    class _Pipeline:
        def __init__(self, config, *, log) -> None:
            self.config = config

        def run(self, repo, phase, max_files, *, crawl, query_registry):
            calls.append(
                {"repo": repo, "phase": phase, "max_files": max_files, "crawl": crawl, "query_registry": query_registry}
            )
            return _Report()

    monkeypatch.setattr(cli, "ContextIndexPipeline", _Pipeline)

    payload = _run(
        ["--config", str(tmp_path), "analyze", "acme/widget", "--phase", "types", "--max-files", "3", "--no-registry"],
        capsys,
    )

    assert payload == {"repo": "acme/widget", "success": True}
    assert calls == [{"repo": "acme/widget", "phase": "types", "max_files": 3, "crawl": False, "query_registry": False}]


def test_invalid_config_exits(tmp_path: Path) -> None:
    (tmp_path / ".ctxindex.yml").write_text("- a list\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path), "parse", "-"])

    assert excinfo.value.code == 1
