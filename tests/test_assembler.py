from __future__ import annotations

import json
from pathlib import Path

from ctxindex.assembler import Concept, OutputAssembler, Pattern
from ctxindex.logging import ExecutionLog
from ctxindex.models import ApiSignature

EXPECTED = (
    "## widget - Condensed Context Index\n"
    "\n"
    "## Overall Purpose\n"
    "Builds widgets.\n"
    "\n"
    "## Core Concepts & Capabilities\n"
    "Widgets - Reusable parts\n"
    "\n"
    "## Key APIs / Components / Configuration\n"
    "make(opts) - Creates a widget\n"
    "\n"
    "## Common Patterns & Best Practices / Pitfalls\n"
    "Reuse - Keep one instance\n"
    "\n"
    "This index summarizes the core concepts, APIs, and patterns for widget. "
    "Consult the full source documentation (https://github.com/acme/widget) for exhaustive details.\n"
)


def test_render_matches_expected_layout() -> None:
    markdown = OutputAssembler().render(
        "widget",
        "https://github.com/acme/widget",
        "Builds widgets.",
        [Concept("Widgets", "Reusable parts")],
        [ApiSignature("make(opts)", "Creates a widget")],
        [Pattern("Reuse", "Keep one instance")],
    )

    assert markdown == EXPECTED


def test_render_accepts_mappings_and_is_deterministic() -> None:
    assembler = OutputAssembler()
    arguments = (
        "widget",
        "https://github.com/acme/widget",
        "Builds widgets.",
        [{"name": "Widgets", "description": "Reusable parts"}],
        [{"signature": "make(opts)", "description": "Creates a widget"}],
        [{"pattern": "Reuse", "description": "Keep one instance"}],
    )

    assert assembler.render(*arguments) == assembler.render(*arguments) == EXPECTED


def test_empty_sections_keep_headings() -> None:
    markdown = OutputAssembler().render("widget", "https://github.com/acme/widget", "Builds widgets.", [], [], [])

    assert "## Core Concepts & Capabilities\n## Key APIs / Components / Configuration\n" in markdown
    assert "## Common Patterns & Best Practices / Pitfalls\nThis index summarizes" in markdown


def test_custom_templates_directory_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "context_index.md.j2").write_text("# {{ repo_name }}\n", encoding="utf-8")

    markdown = OutputAssembler(templates_dir=tmp_path).render("widget", "url", "p", [], [], [])

    assert markdown == "# widget\n"


def test_render_records_counts(tmp_path: Path) -> None:
    log = ExecutionLog(tmp_path / "run.log")

    OutputAssembler(log=log).render("widget", "url", "p", [Concept("a", "b")], [], [])

    entry = json.loads((tmp_path / "run.log").read_text().splitlines()[-1])
    assert entry["component"] == "generate-output"
    assert entry["concept_count"] == 1
    assert entry["api_count"] == 0
