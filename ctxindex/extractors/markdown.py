"""Signature passes for markdown and reStructuredText documentation."""

from __future__ import annotations

import re
from typing import Iterator

from ..models import ApiSignature
from .base import make_signature, regex_pass

_FENCED_BLOCK = re.compile(r"(?:```|~~~)[\w+-]*[^\n]*\n(.*?)(?:```|~~~)", re.DOTALL)
_CODE_CALL = re.compile(r"([A-Za-z_$][\w.$]*)\s*\([^()\n]*\)")
_CODE_SCOPE = re.compile(r"([A-Za-z_]\w*)::\w+")
_CODE_MEMBER = re.compile(r"([A-Za-z_$][\w$]*)\.[A-Za-z_$][\w$]*")

_INLINE_CODE = re.compile(
    r"`(?P<sig>[A-Za-z_$][\w.$:]*(?P<call>\([^`\n]*\))?)`\**"
    r"(?:[ \t]*[-–—:][ \t]*(?P<desc>[^\n]+))?"
)
_LIST_ITEM = re.compile(
    r"^[ \t]*(?:[*+-]|\d+\.)[ \t]+(?:`(?P<code>[^`\n]+)`|\*\*(?P<bold>[^*\n]+)\*\*)"
    r"[ \t]*[-–—:][ \t]*(?P<desc>.+)$",
    re.MULTILINE,
)
_TABLE_ROW = re.compile(r"^[ \t]*\|[ \t]*`?(?P<sig>[^|`\n]+?)`?[ \t]*\|(?P<desc>[^|\n]*)\|", re.MULTILINE)
_API_HEADING = re.compile(
    r"^#{2,4}[ \t]+`?(?P<sig>[A-Za-z_$][\w.$]*(?:\([^)`\n]*\))?)`?[ \t]*$", re.MULTILINE
)
_RST_DIRECTIVE = re.compile(r"^\.\.[ \t]+(?:py:)?(function|class|method)::[ \t]+(.+)$", re.MULTILINE)

_DESCRIPTION_LIMIT = 200


def _name_of(signature: str) -> str:
    return signature.split("(", 1)[0].strip()


def _clean_description(text: str | None, default: str) -> str:
    if not text:
        return default
    cleaned = text.strip().strip("*_ ")
    return cleaned[:_DESCRIPTION_LIMIT] if cleaned else default


def fenced_code_calls(text: str) -> Iterator[ApiSignature]:
    """Call-like tokens and accessors appearing inside fenced code blocks."""
    for block in _FENCED_BLOCK.finditer(text):
        code = block.group(1)
        for pattern in (_CODE_CALL, _CODE_SCOPE, _CODE_MEMBER):
            for match in pattern.finditer(code):
                signature = match.group(0).strip()
                if signature.startswith(("//", "#")):
                    continue
                api = make_signature(match.group(1), signature, "Extracted from code block", "code-block")
                if api is not None:
                    yield api


def inline_code_spans(text: str) -> Iterator[ApiSignature]:
    """Inline code that is call-shaped, or any identifier followed by a description."""
    for match in _INLINE_CODE.finditer(text):
        signature = match.group("sig")
        description = match.group("desc")
        if match.group("call") is None and not description:
            continue
        api = make_signature(
            _name_of(signature),
            signature,
            _clean_description(description, "API method"),
            "inline",
        )
        if api is not None:
            yield api


def list_items(text: str) -> Iterator[ApiSignature]:
    """Bullet or numbered items labelled with inline code or bold text."""
    for match in _LIST_ITEM.finditer(text):
        label = (match.group("code") or match.group("bold") or "").strip()
        api = make_signature(
            _name_of(label),
            label,
            _clean_description(match.group("desc"), "API method"),
            "list",
        )
        if api is not None:
            yield api


def table_rows(text: str) -> Iterator[ApiSignature]:
    """Table rows whose first cell looks like a call or accessor."""
    for match in _TABLE_ROW.finditer(text):
        signature = match.group("sig").strip()
        if not any(marker in signature for marker in ("(", ".", "::")):
            continue
        if set(signature) <= set("-:| "):
            continue
        api = make_signature(
            _name_of(signature),
            signature,
            _clean_description(match.group("desc"), "API method"),
            "table",
        )
        if api is not None:
            yield api


def api_headings(text: str) -> Iterator[ApiSignature]:
    """Level 2-4 headings shaped like a qualified identifier or call."""
    for match in _API_HEADING.finditer(text):
        signature = match.group("sig")
        if "." not in signature and "(" not in signature:
            continue
        api = make_signature(_name_of(signature), signature, "API section", "header")
        if api is not None:
            yield api


rst_directives = regex_pass(
    _RST_DIRECTIVE,
    lambda match: match.group(2),
    description=lambda match: f"Python {match.group(1)}",
    category="directive",
    name_group=2,
)

MARKDOWN_PASSES = (fenced_code_calls, inline_code_spans, list_items, table_rows, api_headings)
RST_PASSES = MARKDOWN_PASSES + (rst_directives,)

__all__ = [
    "MARKDOWN_PASSES",
    "RST_PASSES",
    "api_headings",
    "fenced_code_calls",
    "inline_code_spans",
    "list_items",
    "rst_directives",
    "table_rows",
]
