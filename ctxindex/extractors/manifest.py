"""Export entries declared by a package.json manifest."""

from __future__ import annotations

import json
from typing import Any, Iterator

from ..errors import MalformedInputError
from ..models import ApiSignature
from .base import make_signature


def load_manifest(text: str) -> dict[str, Any]:
    """Parse manifest JSON, raising MalformedInputError for anything but an object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Malformed package manifest: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError("Package manifest must be a JSON object")
    return data


def _flatten_exports(key: str, value: Any) -> Iterator[ApiSignature]:
    if isinstance(value, str):
        signature = "default export" if key == "." else key
        api = make_signature(signature, signature, f"Exported from {value}", "export")
        if api is not None:
            yield api
    elif isinstance(value, dict):
        for child_key, child_value in value.items():
            # "." prefixed keys are subpaths; anything else is a condition of the current subpath.
            child = str(child_key)
            yield from _flatten_exports(child if child.startswith(".") else key, child_value)
    elif isinstance(value, list):
        for item in value:
            yield from _flatten_exports(key, item)


def manifest_exports(text: str) -> Iterator[ApiSignature]:
    """Flatten ``exports`` and surface ``main`` and ``types`` as export entries."""
    data = load_manifest(text)

    exports = data.get("exports")
    if exports is not None:
        yield from _flatten_exports(".", exports)

    main = data.get("main")
    if isinstance(main, str) and main:
        yield ApiSignature(signature="main", description=f"Main entry: {main}", category="export")

    types = data.get("types") or data.get("typings")
    if isinstance(types, str) and types:
        yield ApiSignature(signature="types", description=f"TypeScript definitions: {types}", category="export")


MANIFEST_PASSES = (manifest_exports,)

__all__ = ["MANIFEST_PASSES", "load_manifest", "manifest_exports"]
