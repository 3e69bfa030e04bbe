"""Structural markdown parsing into flat sections, code blocks and links."""

from __future__ import annotations

import re
from typing import List, Optional

from .logging import ExecutionLog
from .models import MarkdownSection, ParsedMarkdown

_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_FENCE_OPEN = re.compile(r"^[ \t]*(`{3,}|~{3,})")

OUTSIDE_CODE = "outside"
INSIDE_CODE = "inside"


class MarkdownParser:
    """Line-oriented state machine over a markdown document.

    Headings never nest: every heading opens a new flat section. Lines inside
    fenced code are collected into ``code_blocks`` and never reach a section
    body.
    """

    def __init__(self, log: ExecutionLog | None = None) -> None:
        self._log = log or ExecutionLog()

    def parse(self, text: str) -> ParsedMarkdown:
        result = ParsedMarkdown()
        state = OUTSIDE_CODE
        code_buffer: List[str] = []
        heading: Optional[tuple[str, int]] = None
        body: List[str] = []
        fence = ""

        for line in text.split("\n"):
            if state == INSIDE_CODE:
                if _closes(line, fence):
                    result.code_blocks.append("\n".join(code_buffer))
                    code_buffer = []
                    state = OUTSIDE_CODE
                    continue
            else:
                opening = _FENCE_OPEN.match(line)
                if opening:
                    fence = opening.group(1)
                    state = INSIDE_CODE
                    continue

            if state == INSIDE_CODE:
                code_buffer.append(line)
                continue

            result.links.extend(match.group(2) for match in _LINK.finditer(line))

            heading_match = _HEADING.match(line)
            if heading_match:
                if heading is not None:
                    result.sections.append(_close_section(heading, body))
                heading = (heading_match.group(2).strip(), len(heading_match.group(1)))
                body = []
                continue

            if heading is not None:
                body.append(line)

        if state == INSIDE_CODE and code_buffer:
            result.code_blocks.append("\n".join(code_buffer))
        if heading is not None:
            result.sections.append(_close_section(heading, body))

        self._log.record(
            "parse-markdown",
            "parsed",
            content_length=len(text),
            sections=len(result.sections),
            code_blocks=len(result.code_blocks),
            links=len(result.links),
        )
        return result


def parse_markdown(text: str, *, log: ExecutionLog | None = None) -> ParsedMarkdown:
    """Parse ``text`` into ordered sections, code blocks and link targets."""
    return MarkdownParser(log).parse(text)


def _closes(line: str, fence: str) -> bool:
    """A closing fence repeats the opening character at least as many times."""
    stripped = line.strip()
    return len(stripped) >= len(fence) and set(stripped) == {fence[0]}


def _close_section(heading: tuple[str, int], body: List[str]) -> MarkdownSection:
    title, level = heading
    start, end = 0, len(body)
    while start < end and not body[start].strip():
        start += 1
    while end > start and not body[end - 1].strip():
        end -= 1
    return MarkdownSection(heading=title, level=level, content="\n".join(body[start:end]))


__all__ = ["INSIDE_CODE", "OUTSIDE_CODE", "MarkdownParser", "parse_markdown"]
