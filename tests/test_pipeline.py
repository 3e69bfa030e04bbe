from __future__ import annotations

import json

from ctxindex.assembler import Concept
from ctxindex.pipeline import ContextIndexPipeline, SummaryProse
from tests._fixtures.fake_hosting import FakeHostingClient, entry

README = (
    "# Widget\n"
    "\n"
    "## API\n"
    "* `make(opts)` - builds a widget\n"
    "\n"
    "```js\n"
    "const w = new Widget({ size: 2 });\n"
    "w.render();\n"
    "```\n"
)


def _client() -> FakeHostingClient:
    return FakeHostingClient(
        metadata={"name": "widget", "homepage": "https://widget.dev"},
        languages={"JavaScript": 100},
        readme="# Widget\n",
        directories={"": [entry("package.json"), entry("README.md")]},
        files={
            ("main", "README.md"): README,
            ("main", "package.json"): json.dumps({"name": "widget", "main": "index.js"}),
            ("main", "index.js"): "function make(opts) {\n}\n",
        },
        pages={
            "https://registry.npmjs.org/widget": {
                "name": "widget",
                "dist-tags": {"latest": "1.0.0"},
                "versions": {"1.0.0": {"description": "Widgets"}},
            },
            "https://widget.dev": "<h2>make</h2><pre>make(opts)</pre><p>Builds.</p>",
        },
    )


def _pipeline(client: FakeHostingClient) -> ContextIndexPipeline:
    return ContextIndexPipeline(client=client)  # type: ignore[arg-type]


def test_run_collects_every_source() -> None:
    report = _pipeline(_client()).run("https://github.com/acme/widget", crawl=True)

    assert report.success
    assert [item.path for item in report.retrieval.files] == ["README.md", "package.json", "index.js"]
    assert list(report.documents) == ["README.md"]
    assert report.documents["README.md"].sections[1].heading == "API"

    signatures = [api.signature for api in report.apis]
    assert "make(opts)" in signatures
    assert "main" in signatures
    assert len(signatures) == len(set(signatures))

    assert [item["class_name"] for item in report.code_patterns.instantiations] == ["Widget"]
    assert report.registry is not None and report.registry.success
    assert report.registry.package_info.version == "1.0.0"
    assert report.crawl is not None
    assert [api.name for api in report.crawl.apis] == ["make"]

    payload = json.loads(json.dumps(report.to_dict()))
    assert payload["repo"] == "acme/widget"
    assert payload["profile"]["primary_language"] == "javascript"


def test_registry_and_crawl_are_optional() -> None:
    client = _client()

    report = _pipeline(client).run("acme/widget", query_registry=False)

    assert report.registry is None
    assert report.crawl is None
    assert not any(kind in ("json", "get") and "npmjs" in url for kind, url in client.calls)
    assert ("get", "https://widget.dev") not in client.calls


def test_failed_resolution_stops_the_run() -> None:
    client = FakeHostingClient(metadata=None)

    report = _pipeline(client).run("acme/widget")

    assert report.success is False
    assert report.retrieval.files == []
    assert report.apis == []
    assert [kind for kind, _ in client.calls] == ["repository"]


def test_render_uses_collected_apis_unless_overridden() -> None:
    pipeline = _pipeline(_client())
    report = pipeline.run("acme/widget", phase="source", query_registry=False)

    prose = SummaryProse(purpose="Builds widgets.", concepts=[Concept("Widgets", "Reusable parts")])
    markdown = pipeline.render(report, prose)

    assert markdown.startswith("## widget - Condensed Context Index\n")
    assert "Widgets - Reusable parts\n" in markdown
    assert "main - Main entry: index.js\n" in markdown
    assert markdown.endswith("(https://github.com/acme/widget) for exhaustive details.\n")

    override = SummaryProse.from_dict(
        {"purpose": "p", "apis": [{"signature": "make(opts)", "description": "Builds one"}]}
    )
    assert "main - Main entry" not in pipeline.render(report, override)
    assert "make(opts) - Builds one\n" in pipeline.render(report, override)


def test_maven_projects_skip_the_registry_query() -> None:
    client = FakeHostingClient(
        metadata={"name": "widget"},
        languages={"Java": 100},
        readme="# Widget\n",
        directories={"": [entry("pom.xml")]},
        files={("main", "README.md"): "# Widget\n\nUse `Widget.build()` to start.\n"},
    )

    report = _pipeline(client).run("acme/widget")

    assert report.profile.package_manager is not None
    assert report.profile.package_manager.name == "maven"
    assert any(source.kind == "registry" for source in report.profile.documentation_sources)
    assert report.registry is None
    assert not any(kind == "json" for kind, _ in client.calls)
