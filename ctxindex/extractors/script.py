"""Signature passes for TypeScript declarations and JavaScript sources."""

from __future__ import annotations

import re
from typing import Iterator

from ..models import ApiSignature
from .base import make_signature, regex_pass, squash

_IDENT = r"[A-Za-z_$][\w$]*"

_TS_FUNCTION = re.compile(
    rf"(?:export\s+)?(?:declare\s+)?(?:function\s+)?({_IDENT})\s*(<[^<>()]*(?:<[^<>()]*>[^<>()]*)*>)?\s*\(([^)]*)\)\s*:\s*([^;{{]+)"
)
_TS_ARROW_PROPERTY = re.compile(rf"({_IDENT})\s*:\s*\(([^)]*)\)\s*=>\s*([^;,}}]+)")
_TS_EXPORT = re.compile(
    rf"export\s+(?:declare\s+)?(?:default\s+)?(?:abstract\s+)?"
    rf"(?:function|const|let|var|class|interface|type|enum|namespace)\s+({_IDENT})"
)

_CONTROL_FLOW = (
    "if",
    "for",
    "while",
    "switch",
    "catch",
    "return",
    "function",
    "with",
    "constructor",
)


def typed_functions(text: str) -> Iterator[ApiSignature]:
    """Function-shaped declarations carrying an explicit return annotation."""
    for match in _TS_FUNCTION.finditer(text):
        name = match.group(1)
        if name in _CONTROL_FLOW:
            continue
        generics = match.group(2) or ""
        params = squash(match.group(3))
        api = make_signature(
            name,
            f"{name}{generics}({params})",
            f"Returns {squash(match.group(4))}",
            "function",
        )
        if api is not None:
            yield api


def arrow_properties(text: str) -> Iterator[ApiSignature]:
    """Properties typed as arrow functions, e.g. ``map: (fn: F) => T[]``."""
    for match in _TS_ARROW_PROPERTY.finditer(text):
        name = match.group(1)
        api = make_signature(
            name,
            f"{name}({squash(match.group(2))})",
            f"Returns {squash(match.group(3))}",
            "method",
        )
        if api is not None:
            yield api


def exported_declarations(text: str) -> Iterator[ApiSignature]:
    """Exported names not already described by a function or property signature."""
    covered = [api.signature for api in typed_functions(text)]
    covered.extend(api.signature for api in arrow_properties(text))
    for match in _TS_EXPORT.finditer(text):
        name = match.group(1)
        if any(name in signature for signature in covered):
            continue
        api = make_signature(name, name, "Exported entity", "export")
        if api is not None:
            yield api


js_functions = regex_pass(
    rf"(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*({_IDENT})\s*\(([^)]*)\)",
    lambda match: f"{match.group(1)}({squash(match.group(2))})",
    description="Function",
    category="function",
)

js_arrow_bindings = regex_pass(
    rf"(?:export\s+)?(?:const|let|var)\s+({_IDENT})\s*=\s*(?:async\s+)?\(([^)]*)\)\s*=>",
    lambda match: f"{match.group(1)}({squash(match.group(2))})",
    description="Arrow function",
    category="function",
)

js_object_methods = regex_pass(
    rf"({_IDENT})\s*:\s*(?:async\s+)?function\s*\*?\s*\(([^)]*)\)",
    lambda match: f"{match.group(1)}({squash(match.group(2))})",
    description="Method",
    category="method",
)

js_class_methods = regex_pass(
    rf"(?:static\s+)?(?:async\s+)?(?:get\s+|set\s+)?({_IDENT})\s*\(([^)]*)\)\s*\{{",
    lambda match: f"{match.group(1)}({squash(match.group(2))})",
    description="Class method",
    category="method",
    exclude=_CONTROL_FLOW,
)

TYPESCRIPT_PASSES = (typed_functions, arrow_properties, exported_declarations)
JAVASCRIPT_PASSES = (js_functions, js_arrow_bindings, js_object_methods, js_class_methods)

__all__ = [
    "JAVASCRIPT_PASSES",
    "TYPESCRIPT_PASSES",
    "arrow_properties",
    "exported_declarations",
    "js_arrow_bindings",
    "js_class_methods",
    "js_functions",
    "js_object_methods",
    "typed_functions",
]
