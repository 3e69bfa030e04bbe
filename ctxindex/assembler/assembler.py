"""Deterministic markdown rendering of the condensed context index."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from jinja2 import Environment, FileSystemLoader

from ..logging import ExecutionLog

TEMPLATE_NAME = "context_index.md.j2"


@dataclass(frozen=True)
class Concept:
    name: str
    description: str


@dataclass(frozen=True)
class Pattern:
    pattern: str
    description: str


def _entries(items: Iterable[Any], *fields: str) -> List[Dict[str, str]]:
    """Normalise mappings and attribute objects into plain dicts for the template."""
    entries: List[Dict[str, str]] = []
    for item in items:
        if isinstance(item, Mapping):
            entries.append({name: str(item.get(name, "")) for name in fields})
        else:
            entries.append({name: str(getattr(item, name, "")) for name in fields})
    return entries


class OutputAssembler:
    """Renders the four-section context index from summarizer output.

    Rendering is pure: the same arguments always produce the same bytes.
    """

    def __init__(self, templates_dir: Path | None = None, log: ExecutionLog | None = None) -> None:
        self.log = log or ExecutionLog()
        self._env = self._create_env(templates_dir)

    def render(
        self,
        repo_name: str,
        repo_url: str,
        purpose: str,
        concepts: Iterable[Concept | Mapping[str, str]],
        apis: Iterable[Any],
        patterns: Iterable[Pattern | Mapping[str, str]],
    ) -> str:
        concept_entries = _entries(concepts, "name", "description")
        api_entries = _entries(apis, "signature", "description")
        pattern_entries = _entries(patterns, "pattern", "description")

        template = self._env.get_template(TEMPLATE_NAME)
        markdown = template.render(
            repo_name=repo_name,
            repo_url=repo_url,
            purpose=purpose,
            concepts=concept_entries,
            apis=api_entries,
            patterns=pattern_entries,
        )
        self.log.record(
            "generate-output",
            "rendered",
            repo_name=repo_name,
            concept_count=len(concept_entries),
            api_count=len(api_entries),
            pattern_count=len(pattern_entries),
            markdown_length=len(markdown),
        )
        return markdown

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


__all__ = ["Concept", "OutputAssembler", "Pattern", "TEMPLATE_NAME"]
