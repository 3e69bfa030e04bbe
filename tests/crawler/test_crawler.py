from __future__ import annotations

import json
from pathlib import Path

from bs4 import BeautifulSoup

from ctxindex.crawler import GENERIC_PROFILE, DocumentationCrawler, extract_links, extract_page_apis, select_profile
from ctxindex.logging import ExecutionLog
from tests._fixtures.fake_hosting import FakeHostingClient, transient

START = "https://widget.example/docs/"
NEXT = "https://widget.example/docs/api/next.html"

START_PAGE = """
<html><body>
<h2>createWidget</h2>
<pre><code>createWidget(options)</code></pre>
<p>Creates a widget.</p>
<h2>destroy</h2>
<p>Tears down.</p>
<h3>1.0</h3>
<a href="/docs/api/next.html#top">Next</a>
<a href="https://other.example/blog">Blog</a>
<a href="mailto:team@widget.example">Mail</a>
</body></html>
"""

NEXT_PAGE = """
<html><body>
<h2>createWidget</h2>
<pre>createWidget(options)</pre>
<h2>update</h2>
<pre>update(props)</pre>
<div class="description">Applies props.</div>
<a href="/docs/">Back</a>
</body></html>
"""


def test_crawl_follows_links_and_deduplicates() -> None:
    client = FakeHostingClient(pages={START: START_PAGE, NEXT: NEXT_PAGE})

    result = DocumentationCrawler(client).crawl(START)  # type: ignore[arg-type]

    assert result.success
    assert result.pages_scraped == 2
    assert [(api.name, api.signature, api.description) for api in result.apis] == [
        ("createWidget", "createWidget(options)", "Creates a widget."),
        ("destroy", "destroy", "Tears down."),
        ("update", "update(props)", "Applies props."),
    ]
    assert {api.category for api in result.apis} == {"generic"}
    assert result.apis[2].source_url == NEXT
    assert [call[1] for call in client.calls] == [START, NEXT]


def test_crawl_stops_at_page_budget() -> None:
    client = FakeHostingClient(pages={START: START_PAGE, NEXT: NEXT_PAGE})

    result = DocumentationCrawler(client).crawl(START, max_pages=1)  # type: ignore[arg-type]

    assert result.pages_scraped == 1
    assert [api.name for api in result.apis] == ["createWidget", "destroy"]
    assert client.calls == [("get", START)]


def test_failed_pages_are_logged_and_skipped(tmp_path: Path) -> None:
    log = ExecutionLog(tmp_path / "run.log")
    client = FakeHostingClient(pages={START: transient()})

    result = DocumentationCrawler(client, log).crawl(START)  # type: ignore[arg-type]

    assert result.success is False
    assert result.error == "No APIs found"
    assert result.pages_scraped == 0
    entries = [json.loads(line) for line in (tmp_path / "run.log").read_text().splitlines()]
    errors = [item for item in entries if item["event"] == "error"]
    assert errors[0]["component"] == "scrape-documentation"
    assert errors[0]["context"]["url"] == START


def test_known_site_profile_is_selected() -> None:
    profile = select_profile("https://react.dev/reference/react/useState")
    html = (
        "<h1>useState</h1><p>useState is a React Hook.</p>"
        "<pre><code>const [state, setState] = useState(initialState)</code></pre>"
        '<a href="/reference/react/useEffect">useEffect</a><a href="/learn">Learn</a>'
    )
    soup = BeautifulSoup(html, "html.parser")

    apis = extract_page_apis(soup, "https://react.dev/reference/react/useState", profile)

    assert profile.structure == "react-style"
    assert [(api.signature, api.description) for api in apis] == [
        ("const [state, setState] = useState(initialState)", "useState is a React Hook."),
    ]
    assert extract_links(soup, "https://react.dev/reference/react/useState", profile) == [
        "https://react.dev/reference/react/useEffect",
    ]


def test_unknown_hosts_use_generic_profile() -> None:
    assert select_profile("https://widget.example/docs") is GENERIC_PROFILE
    assert select_profile("https://widget.readthedocs.io/en/latest/").structure == "sphinx-style"


def test_search_window_limits_lookahead() -> None:
    html = "<h2>connect</h2>" + "<span>filler</span>" * 5 + "<pre>connect(host)</pre><p>Opens.</p>"
    soup = BeautifulSoup(html, "html.parser")

    narrow = extract_page_apis(soup, START, GENERIC_PROFILE, window=3)
    wide = extract_page_apis(soup, START, GENERIC_PROFILE, window=10)

    assert (narrow[0].signature, narrow[0].description) == ("connect", "API method")
    assert (wide[0].signature, wide[0].description) == ("connect(host)", "Opens.")


def test_long_descriptions_are_truncated() -> None:
    soup = BeautifulSoup("<h2>render</h2><p>" + "x" * 500 + "</p>", "html.parser")

    apis = extract_page_apis(soup, START, GENERIC_PROFILE)

    assert len(apis[0].description) == 200


def test_unresolvable_links_are_skipped(tmp_path: Path) -> None:
    log = ExecutionLog(tmp_path / "run.log")
    page = (
        "<h2>createWidget</h2><pre>createWidget(options)</pre>"
        '<a href="http://[broken/docs/api">Broken</a>'
        '<a href="/docs/api/next.html">Next</a>'
    )
    client = FakeHostingClient(pages={START: page, NEXT: NEXT_PAGE})

    result = DocumentationCrawler(client, log).crawl(START, max_pages=5)  # type: ignore[arg-type]

    assert result.success
    assert result.pages_scraped == 2
    assert [api.name for api in result.apis] == ["createWidget", "update"]
    entries = [json.loads(line) for line in (tmp_path / "run.log").read_text().splitlines()]
    errors = [item for item in entries if item["event"] == "error"]
    assert errors[0]["context"]["href"] == "http://[broken/docs/api"
