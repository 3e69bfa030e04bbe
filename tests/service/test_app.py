"""Tests for the FastAPI service mode."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from ctxindex.assembler import OutputAssembler
from ctxindex.errors import TransientFetchError
from ctxindex.service import create_app


class _StubReport:
    def __init__(self, repo: str) -> None:
        self.repo = repo

    def to_dict(self) -> dict[str, Any]:
        return {"repo": self.repo, "success": True, "apis": []}


class _StubPipeline:
    def __init__(self) -> None:
        self.assembler = OutputAssembler()
        self.run_calls: list[dict[str, object]] = []

    def run(self, repo: str, phase: str = "all", max_files: int | None = None, *, crawl: bool = False, query_registry: bool = True):
        self.run_calls.append(
            {"repo": repo, "phase": phase, "max_files": max_files, "crawl": crawl, "query_registry": query_registry}
        )
        if repo == "broken/host":
            raise TransientFetchError("upstream unavailable", status=503)
        if phase not in ("docs", "types", "source", "all"):
            raise ValueError(f"Unknown retrieval phase {phase!r}")
        return _StubReport(repo)


@pytest.fixture
def pipeline() -> _StubPipeline:
    return _StubPipeline()


@pytest.fixture
def client(pipeline: _StubPipeline) -> TestClient:
    return TestClient(create_app(lambda: pipeline))  # type: ignore[arg-type, return-value]


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_passes_options_to_pipeline(client: TestClient, pipeline: _StubPipeline) -> None:
    response = client.post("/analyze", json={"repo": "acme/widget", "phase": "docs", "max_files": 5, "crawl": True})

    assert response.status_code == 200
    assert response.json()["repo"] == "acme/widget"
    assert pipeline.run_calls == [
        {"repo": "acme/widget", "phase": "docs", "max_files": 5, "crawl": True, "query_registry": True}
    ]


def test_analyze_maps_errors_to_status_codes(client: TestClient) -> None:
    invalid = client.post("/analyze", json={"repo": "acme/widget", "phase": "everything"})
    upstream = client.post("/analyze", json={"repo": "broken/host"})

    assert invalid.status_code == 400
    assert "everything" in invalid.json()["detail"]
    assert upstream.status_code == 502
    assert upstream.json()["detail"] == "upstream unavailable"


def test_extract_endpoint(client: TestClient) -> None:
    response = client.post("/extract", json={"content": "* `foo(x)` - does foo\n", "kind": "md"})

    assert response.status_code == 200
    assert response.json() == {
        "apis": [{"signature": "foo(x)", "description": "does foo", "category": "inline"}],
        "success": True,
    }


def test_extract_reports_malformed_manifest(client: TestClient) -> None:
    response = client.post("/extract", json={"content": "{", "kind": "manifest"})

    assert response.json() == {"apis": [], "success": False}


def test_parse_endpoint(client: TestClient) -> None:
    response = client.post("/parse", json={"text": "# A\nbody\n```\ncode\n```\n"})

    body = response.json()
    assert body["sections"] == [{"heading": "A", "level": 1, "content": "body"}]
    assert body["code_blocks"] == ["code"]


def test_render_endpoint(client: TestClient) -> None:
    response = client.post(
        "/render",
        json={
            "repo_name": "widget",
            "repo_url": "https://github.com/acme/widget",
            "purpose": "Builds widgets.",
            "apis": [{"signature": "make(opts)", "description": "Creates a widget"}],
        },
    )

    markdown = response.json()["markdown"]
    assert markdown.startswith("## widget - Condensed Context Index\n\n## Overall Purpose\nBuilds widgets.\n")
    assert "make(opts) - Creates a widget\n" in markdown


def test_request_validation(client: TestClient) -> None:
    response = client.post("/extract", json={"content": "x"})

    assert response.status_code == 422
