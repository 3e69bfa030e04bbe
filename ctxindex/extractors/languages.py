"""Per-language signature passes for general-purpose source files."""

from __future__ import annotations

import re

from .base import regex_pass, squash

_M = re.MULTILINE

_STATEMENT_KEYWORDS = ("if", "for", "while", "switch", "catch", "return", "new", "throw", "else", "using", "lock", "foreach")


def _named(keyword: str):
    return lambda match: f"{keyword} {match.group(1)}"


def _call(prefix: str = ""):
    def render(match: re.Match[str]) -> str:
        return f"{prefix}{match.group(1)}({squash(match.group(2) or '')})"

    return render


def _with_return(prefix: str, arrow: str = " -> "):
    def render(match: re.Match[str]) -> str:
        base = f"{prefix}{match.group(1)}({squash(match.group(2) or '')})"
        returns = squash(match.group(3) or "")
        return f"{base}{arrow}{returns}" if returns else base

    return render


# Python

PYTHON_PASSES = (
    regex_pass(
        r"^[ \t]*class\s+([A-Za-z]\w*)(?:\([^)]*\))?\s*:",
        _named("class"),
        description="Python class",
        category="class",
        flags=_M,
    ),
    regex_pass(
        r"^[ \t]*(?:async\s+)?def\s+((?!_(?!_init__))\w+)\s*\(([^)]*)\)(?:\s*->\s*([^:]+?))?\s*:",
        _with_return("def "),
        description="Python function",
        category="function",
        flags=_M,
    ),
    regex_pass(
        r"^[ \t]*@([A-Za-z_][\w.]*)",
        lambda match: f"@{match.group(1)}",
        description="Python decorator",
        category="decorator",
        flags=_M,
    ),
)

# Java

JAVA_PASSES = (
    regex_pass(
        r"(?:(?:public|private|protected|abstract|static|final|sealed)\s+)*class\s+(\w+)",
        _named("class"),
        description="Java class",
        category="class",
    ),
    regex_pass(
        r"(?:(?:public|private|protected)\s+)?interface\s+(\w+)",
        _named("interface"),
        description="Java interface",
        category="interface",
    ),
    regex_pass(
        r"(?:(?:public|private|protected|static)\s+)*enum\s+(\w+)",
        _named("enum"),
        description="Java enum",
        category="enum",
    ),
    regex_pass(
        r"^[ \t]*(?:(?:public|protected|private|static|final|abstract|synchronized|default|native)\s+)*"
        r"(?!return\b|new\b|throw\b|else\b)[\w<>\[\]?,.]+(?:\s*<[^>]*>)?\s+(\w+)\s*\(([^)]*)\)\s*(?:throws\s+[\w.,\s]+)?[{;]",
        _call(),
        description="Java method",
        category="method",
        exclude=_STATEMENT_KEYWORDS,
        flags=_M,
    ),
    regex_pass(
        r"^[ \t]*@(\w+)",
        lambda match: f"@{match.group(1)}",
        description="Java annotation",
        category="annotation",
        flags=_M,
    ),
)

# Rust

RUST_PASSES = (
    regex_pass(r"pub(?:\([^)]*\))?\s+struct\s+(\w+)", _named("struct"), description="Rust struct", category="struct"),
    regex_pass(r"pub(?:\([^)]*\))?\s+enum\s+(\w+)", _named("enum"), description="Rust enum", category="enum"),
    regex_pass(
        r"pub(?:\([^)]*\))?\s+(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?fn\s+(\w+)\s*(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*->\s*([^{;]+?))?\s*(?:where\b|[{;])",
        _with_return("fn "),
        description="Rust function",
        category="function",
    ),
    regex_pass(r"pub(?:\([^)]*\))?\s+trait\s+(\w+)", _named("trait"), description="Rust trait", category="trait"),
    regex_pass(r"pub(?:\([^)]*\))?\s+type\s+(\w+)", _named("type"), description="Rust type alias", category="type"),
    regex_pass(r"macro_rules!\s*(\w+)", lambda match: f"{match.group(1)}!", description="Rust macro", category="macro"),
)

# Go

GO_PASSES = (
    regex_pass(
        r"func\s+(?:\([^)]*\)\s+)?(\w+)\s*(?:\[[^\]]*\])?\s*\(([^)]*)\)",
        _call("func "),
        description="Go function",
        category="function",
    ),
    regex_pass(
        r"type\s+(\w+)\s+(?:struct|interface|func|map|\[|\*|\w+)",
        _named("type"),
        description="Go type",
        category="type",
    ),
)

# Ruby


def _ruby_method(match: re.Match[str]) -> str:
    params = squash(match.group(2) or "")
    return f"def {match.group(1)}({params})" if params else f"def {match.group(1)}"


RUBY_PASSES = (
    regex_pass(r"class\s+([A-Z]\w*(?:::\w+)*)(?:\s*<\s*[\w:]+)?", _named("class"), description="Ruby class", category="class"),
    regex_pass(r"module\s+([A-Z]\w*(?:::\w+)*)", _named("module"), description="Ruby module", category="module"),
    regex_pass(
        r"def\s+(?:self\.)?(\w+[?!=]?)(?:\(([^)]*)\))?",
        _ruby_method,
        description="Ruby method",
        category="method",
    ),
    regex_pass(
        r"attr_(?:reader|writer|accessor)\s+:(\w+)",
        lambda match: f"attr {match.group(1)}",
        description="Ruby attribute",
        category="attribute",
    ),
)

# C / C++

CPP_PASSES = (
    regex_pass(r"\bclass\s+(\w+)\s*(?:final\s*)?[:{]", _named("class"), description="C++ class", category="class"),
    regex_pass(r"\bstruct\s+(\w+)\s*[:{]", _named("struct"), description="C++ struct", category="struct"),
    regex_pass(
        r"template\s*<[^>]+>\s*(?:class|struct)\s+(\w+)",
        _named("template"),
        description="C++ template",
        category="template",
    ),
    regex_pass(r"\bnamespace\s+(\w+)\s*\{", _named("namespace"), description="C++ namespace", category="namespace"),
)

# C#

CSHARP_PASSES = (
    regex_pass(
        r"(?:(?:public|private|protected|internal|static|sealed|abstract|partial)\s+)*class\s+(\w+)",
        _named("class"),
        description="C# class",
        category="class",
    ),
    regex_pass(
        r"(?:(?:public|private|protected|internal)\s+)?interface\s+(\w+)",
        _named("interface"),
        description="C# interface",
        category="interface",
    ),
    regex_pass(
        r"^[ \t]*(?:(?:public|private|protected|internal|static|virtual|override|abstract|async|sealed)\s+)+"
        r"[\w<>\[\]?,.]+\s+(\w+)\s*(?:<[^>]*>)?\s*\(([^)]*)\)",
        _call(),
        description="C# method",
        category="method",
        exclude=_STATEMENT_KEYWORDS,
        flags=_M,
    ),
    regex_pass(
        r"(?:(?:public|private|protected|internal|static|virtual|override)\s+)+[\w<>\[\]?,.]+\s+(\w+)\s*\{\s*get",
        lambda match: f"property {match.group(1)}",
        description="C# property",
        category="property",
    ),
)

# PHP

PHP_PASSES = (
    regex_pass(
        r"\bclass\s+(\w+)(?:\s+extends\s+\w+)?(?:\s+implements\s+[\w,\s\\]+)?",
        _named("class"),
        description="PHP class",
        category="class",
    ),
    regex_pass(
        r"(?:(?:public|private|protected|static|final|abstract)\s+)*function\s+(\w+)\s*\(([^)]*)\)",
        _call("function "),
        description="PHP function",
        category="function",
    ),
    regex_pass(r"\btrait\s+(\w+)", _named("trait"), description="PHP trait", category="trait"),
    regex_pass(r"\binterface\s+(\w+)", _named("interface"), description="PHP interface", category="interface"),
)

# Swift

SWIFT_PASSES = (
    regex_pass(
        r"(?:(?:public|open|internal|final)\s+)*(class|struct|protocol|enum|extension|actor)\s+(\w+)",
        lambda match: f"{match.group(1)} {match.group(2)}",
        description=lambda match: f"Swift {match.group(1)}",
        category="type",
        name_group=2,
    ),
    regex_pass(
        r"(?:(?:public|open|internal|static|class|mutating|override)\s+)*func\s+(\w+)\s*(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*(?:async\s+)?(?:throws\s+)?->\s*([^{\n]+?))?\s*(?:\{|$)",
        _with_return("func "),
        description="Swift function",
        category="function",
        flags=_M,
    ),
)

# Kotlin

KOTLIN_PASSES = (
    regex_pass(
        r"(?:(?:public|open|internal|data|sealed|abstract|enum)\s+)*(class|interface|object)\s+(\w+)",
        lambda match: f"{match.group(1)} {match.group(2)}",
        description=lambda match: f"Kotlin {match.group(1)}",
        category="type",
        name_group=2,
    ),
    regex_pass(
        r"fun\s+(?:<[^>]*>\s*)?(?:[\w.]+\.)?(\w+)\s*\(([^)]*)\)(?:\s*:\s*([^={\n]+?))?\s*(?:[={]|$)",
        _with_return("fun ", ": "),
        description="Kotlin function",
        category="function",
        flags=_M,
    ),
)

__all__ = [
    "CPP_PASSES",
    "CSHARP_PASSES",
    "GO_PASSES",
    "JAVA_PASSES",
    "KOTLIN_PASSES",
    "PHP_PASSES",
    "PYTHON_PASSES",
    "RUBY_PASSES",
    "RUST_PASSES",
    "SWIFT_PASSES",
]
