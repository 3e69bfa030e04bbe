"""Shared helpers for signature pattern passes."""

from __future__ import annotations

import re
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Set

from ..models import ApiSignature

PatternPass = Callable[[str], Iterable[ApiSignature]]

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100

_WHITESPACE = re.compile(r"\s+")


def squash(text: str) -> str:
    """Collapse runs of whitespace (including newlines) into single spaces."""
    return _WHITESPACE.sub(" ", text).strip()


def valid_name(name: str) -> bool:
    return MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH


def make_signature(
    name: str,
    signature: str,
    description: str,
    category: Optional[str],
) -> Optional[ApiSignature]:
    """Return an ApiSignature, or None when the captured name is out of bounds."""
    name = name.strip()
    signature = squash(signature)
    if not valid_name(name) or not signature:
        return None
    return ApiSignature(signature=signature, description=description.strip(), category=category)


def regex_pass(
    pattern: str | re.Pattern[str],
    render: Callable[[re.Match[str]], str],
    *,
    description: str | Callable[[re.Match[str]], str],
    category: str,
    name_group: int | str = 1,
    exclude: Sequence[str] = (),
    flags: int = 0,
) -> PatternPass:
    """Build a pass that emits one signature per regex match.

    ``render`` turns a match into the signature text; ``name_group`` selects the
    captured name used for length validation and the ``exclude`` list.
    """
    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
    excluded = frozenset(exclude)

    def _pass(text: str) -> Iterator[ApiSignature]:
        for match in compiled.finditer(text):
            name = match.group(name_group) or ""
            if name in excluded:
                continue
            label = description(match) if callable(description) else description
            api = make_signature(name, render(match), label, category)
            if api is not None:
                yield api

    _pass.__name__ = f"{category}_pass"
    return _pass


def dedupe(apis: Iterable[ApiSignature]) -> List[ApiSignature]:
    """Drop repeated signature strings, keeping the first occurrence in order."""
    seen: Set[str] = set()
    unique: List[ApiSignature] = []
    for api in apis:
        if api.signature in seen:
            continue
        seen.add(api.signature)
        unique.append(api)
    return unique


def merge_signatures(*groups: Iterable[ApiSignature]) -> List[ApiSignature]:
    """Union extraction results from several files and re-deduplicate."""
    return dedupe(api for group in groups for api in group)


__all__ = [
    "MAX_NAME_LENGTH",
    "MIN_NAME_LENGTH",
    "PatternPass",
    "dedupe",
    "make_signature",
    "merge_signatures",
    "regex_pass",
    "squash",
    "valid_name",
]
