"""Each pattern pass is a pure function and is tested on its own."""

from __future__ import annotations

from ctxindex.extractors.code_patterns import extract_code_patterns
from ctxindex.extractors.markdown import api_headings, fenced_code_calls, inline_code_spans, list_items, table_rows


def test_fenced_code_calls_scopes_and_members() -> None:
    text = "```js\nconst x = widget.create({ a: 1 });\nStore::open\n```\n"

    apis = list(fenced_code_calls(text))

    assert [api.signature for api in apis] == ["widget.create({ a: 1 })", "Store::open", "widget.create"]
    assert {api.category for api in apis} == {"code-block"}


def test_inline_code_with_bold_wrapper_and_description() -> None:
    apis = list(inline_code_spans("**`init(opts)`**: sets up the client"))

    assert [(api.signature, api.description) for api in apis] == [("init(opts)", "sets up the client")]


def test_inline_identifier_without_description_is_ignored() -> None:
    assert list(inline_code_spans("Set `debug` to true.")) == []


def test_list_items_with_code_or_bold_labels() -> None:
    apis = list(list_items("- **retry** - retries the call\n1. `close()`: closes\n- plain item\n"))

    assert [(api.signature, api.description) for api in apis] == [
        ("retry", "retries the call"),
        ("close()", "closes"),
    ]


def test_table_rows_require_call_or_accessor_shape() -> None:
    text = "| Method | Description |\n| --- | --- |\n| `get(key)` | Fetch a value |\n| plain | nope |\n"

    apis = list(table_rows(text))

    assert [(api.signature, api.description) for api in apis] == [("get(key)", "Fetch a value")]


def test_api_headings_need_dot_or_parens() -> None:
    apis = list(api_headings("## client.get(key)\n### Overview\n#### `Store.open`\n# top.level\n"))

    assert [api.signature for api in apis] == ["client.get(key)", "Store.open"]


def test_code_patterns_are_deduplicated() -> None:
    blocks = [
        "const c = new Client({ key: 1 });\nc.connect();\nc.connect();",
        "configure({ debug: true })",
    ]

    patterns = extract_code_patterns(blocks)

    assert [item["class_name"] for item in patterns.instantiations] == ["Client"]
    assert [(item["object_name"], item["method_name"]) for item in patterns.method_calls] == [("c", "connect")]
    assert [item["function_name"] for item in patterns.configurations] == ["Client", "configure"]
