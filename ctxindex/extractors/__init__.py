"""Signature extraction strategies keyed by declared content kind."""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..errors import MalformedInputError
from ..logging import ExecutionLog
from ..models import ApiSignature, ExtractionResult
from .base import PatternPass, dedupe, merge_signatures
from .code_patterns import CodePatterns, extract_code_patterns
from .languages import (
    CPP_PASSES,
    CSHARP_PASSES,
    GO_PASSES,
    JAVA_PASSES,
    KOTLIN_PASSES,
    PHP_PASSES,
    PYTHON_PASSES,
    RUBY_PASSES,
    RUST_PASSES,
    SWIFT_PASSES,
)
from .manifest import MANIFEST_PASSES
from .markdown import MARKDOWN_PASSES, RST_PASSES
from .script import JAVASCRIPT_PASSES, TYPESCRIPT_PASSES

STRATEGIES: Dict[str, Tuple[PatternPass, ...]] = {
    "markdown": MARKDOWN_PASSES,
    "rst": RST_PASSES,
    "typescript": TYPESCRIPT_PASSES,
    "javascript": JAVASCRIPT_PASSES,
    "python": PYTHON_PASSES,
    "java": JAVA_PASSES,
    "rust": RUST_PASSES,
    "go": GO_PASSES,
    "ruby": RUBY_PASSES,
    "cpp": CPP_PASSES,
    "csharp": CSHARP_PASSES,
    "php": PHP_PASSES,
    "swift": SWIFT_PASSES,
    "kotlin": KOTLIN_PASSES,
    "manifest": MANIFEST_PASSES,
}

KIND_ALIASES: Dict[str, str] = {
    "md": "markdown",
    "markdown": "markdown",
    "mdx": "markdown",
    "rst": "rst",
    "d.ts": "typescript",
    "ts": "typescript",
    "tsx": "typescript",
    "typescript": "typescript",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "javascript",
    "javascript": "javascript",
    "py": "python",
    "pyi": "python",
    "python": "python",
    "java": "java",
    "rs": "rust",
    "rust": "rust",
    "go": "go",
    "rb": "ruby",
    "ruby": "ruby",
    "c": "cpp",
    "cc": "cpp",
    "cpp": "cpp",
    "cxx": "cpp",
    "h": "cpp",
    "hh": "cpp",
    "hpp": "cpp",
    "cs": "csharp",
    "csharp": "csharp",
    "php": "php",
    "swift": "swift",
    "kt": "kotlin",
    "kts": "kotlin",
    "kotlin": "kotlin",
    "json": "manifest",
    "manifest": "manifest",
    "package.json": "manifest",
}


def normalize_kind(kind: str) -> str | None:
    """Map a declared content kind (extension or language name) to a strategy key."""
    return KIND_ALIASES.get(kind.strip().lower().lstrip("."))


def extract_signatures(content: str, kind: str) -> ExtractionResult:
    """Run every pass registered for ``kind`` and deduplicate by signature.

    Unknown kinds produce an empty, successful result. A malformed manifest
    yields ``success=False`` and no signatures.
    """
    strategy = normalize_kind(kind)
    if strategy is None:
        return ExtractionResult(apis=[], success=True)

    collected: List[ApiSignature] = []
    try:
        for pattern_pass in STRATEGIES[strategy]:
            collected.extend(pattern_pass(content))
    except MalformedInputError:
        return ExtractionResult(apis=[], success=False)
    return ExtractionResult(apis=dedupe(collected), success=True)


class SignatureExtractor:
    """Logs extraction calls around :func:`extract_signatures`."""

    def __init__(self, log: ExecutionLog | None = None) -> None:
        self._log = log or ExecutionLog()

    def extract(self, content: str, kind: str) -> ExtractionResult:
        self._log.record("extract-apis", "start", kind=kind, content_length=len(content))
        result = extract_signatures(content, kind)
        if not result.success:
            self._log.error("extract-apis", "malformed input", kind=kind)
        else:
            self._log.record("extract-apis", "done", kind=kind, apis_found=len(result.apis))
        return result


__all__ = [
    "CodePatterns",
    "KIND_ALIASES",
    "STRATEGIES",
    "SignatureExtractor",
    "dedupe",
    "extract_code_patterns",
    "extract_signatures",
    "merge_signatures",
    "normalize_kind",
]
