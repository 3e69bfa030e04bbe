"""Usage patterns (instantiations, method calls, configuration calls) in code blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

_INSTANTIATION = re.compile(r"new\s+([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)\s*\(")
_METHOD_CALL = re.compile(r"([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)\s*\.\s*([A-Za-z0-9_]+)\s*\(")
_CONFIGURATION = re.compile(r"([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)\s*\(\s*\{[^}]*\}")


@dataclass
class CodePatterns:
    instantiations: List[Dict[str, str]] = field(default_factory=list)
    method_calls: List[Dict[str, str]] = field(default_factory=list)
    configurations: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            "instantiations": list(self.instantiations),
            "method_calls": list(self.method_calls),
            "configurations": list(self.configurations),
        }


def extract_code_patterns(code_blocks: Iterable[str]) -> CodePatterns:
    """Collect distinct usage patterns across ``code_blocks`` in first-seen order."""
    patterns = CodePatterns()
    seen_classes: Set[str] = set()
    seen_calls: Set[Tuple[str, str]] = set()
    seen_configs: Set[str] = set()

    for block in code_blocks:
        for match in _INSTANTIATION.finditer(block):
            class_name = match.group(1)
            if class_name in seen_classes:
                continue
            seen_classes.add(class_name)
            patterns.instantiations.append(
                {"class_name": class_name, "description": f"Creates a new instance of {class_name}"}
            )

        for match in _METHOD_CALL.finditer(block):
            key = (match.group(1), match.group(2))
            if key in seen_calls:
                continue
            seen_calls.add(key)
            patterns.method_calls.append(
                {
                    "object_name": key[0],
                    "method_name": key[1],
                    "description": f"Calls the {key[1]} method on {key[0]}",
                }
            )

        for match in _CONFIGURATION.finditer(block):
            function_name = match.group(1)
            if function_name in seen_configs:
                continue
            seen_configs.add(function_name)
            patterns.configurations.append(
                {"function_name": function_name, "description": f"Configures {function_name} with options"}
            )

    return patterns


__all__ = ["CodePatterns", "extract_code_patterns"]
