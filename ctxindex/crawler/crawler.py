"""Breadth-first crawl of a documentation website collecting API entries."""

from __future__ import annotations

import re
from collections import deque
from typing import Deque, List, Optional, Set, Tuple
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from ..errors import CtxIndexError
from ..hosting import HttpClient
from ..hosting.client import HTML_ACCEPT
from ..logging import ExecutionLog, get_logger
from ..models import CrawledApi, CrawlResult
from .profiles import SiteProfile, select_profile

_COMPONENT = "scrape-documentation"
_LABEL_START = re.compile(r"^[A-Za-z_$]")

DEFAULT_WINDOW = 40
DESCRIPTION_LIMIT = 200
DEFAULT_DESCRIPTION = "API method"


def _valid_label(label: str) -> bool:
    return 2 <= len(label) <= 100 and bool(_LABEL_START.match(label))


def extract_page_apis(soup: BeautifulSoup, page_url: str, profile: SiteProfile, window: int = DEFAULT_WINDOW) -> List[CrawledApi]:
    """API entries on one parsed page, in document order."""
    methods = soup.select(profile.method_selector)
    method_ids = {id(element) for element in methods}
    signature_ids = {id(element) for element in soup.select(profile.signature_selector)}
    description_ids = {id(element) for element in soup.select(profile.description_selector)}

    apis: List[CrawledApi] = []
    for method in methods:
        label = method.get_text(" ", strip=True)
        if not _valid_label(label):
            continue

        signature: Optional[str] = None
        description: Optional[str] = None
        for element in method.find_all_next(True, limit=window):
            if id(element) in method_ids:
                break
            if signature is None and id(element) in signature_ids:
                signature = element.get_text(strip=True) or None
            elif description is None and id(element) in description_ids:
                description = element.get_text(" ", strip=True)[:DESCRIPTION_LIMIT] or None
            if signature is not None and description is not None:
                break

        apis.append(
            CrawledApi(
                name=label,
                signature=signature or label,
                description=description or DEFAULT_DESCRIPTION,
                source_url=page_url,
                category=profile.structure,
            )
        )
    return apis


def extract_links(
    soup: BeautifulSoup, page_url: str, profile: SiteProfile, log: ExecutionLog | None = None
) -> List[str]:
    """Absolute http(s) links worth following, fragments removed.

    Hrefs that cannot be resolved into a URL are skipped and, when ``log`` is
    given, recorded there.
    """
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        if not isinstance(anchor, Tag):
            continue
        href = str(anchor["href"])
        if not profile.wants_link(href):
            continue
        try:
            absolute, _ = urldefrag(urljoin(page_url, href))
            scheme = urlparse(absolute).scheme
        except ValueError as exc:
            if log is not None:
                log.error(_COMPONENT, exc, url=page_url, href=href)
            continue
        if scheme in ("http", "https"):
            links.append(absolute)
    return links


class DocumentationCrawler:
    """Visits up to ``max_pages`` pages starting at a documentation URL."""

    def __init__(self, client: HttpClient | None = None, log: ExecutionLog | None = None, window: int = DEFAULT_WINDOW) -> None:
        self.client = client or HttpClient()
        self.log = log or ExecutionLog()
        self.window = window
        self.logger = get_logger("crawler")

    def crawl(self, url: str, max_pages: int = 10, language: str | None = None) -> CrawlResult:
        self.log.record(_COMPONENT, "start", url=url, max_pages=max_pages, language=language)
        profile = select_profile(url)

        visited: Set[str] = set()
        frontier: Deque[str] = deque([url])
        queued: Set[str] = {url}
        seen: Set[Tuple[str, str]] = set()
        apis: List[CrawledApi] = []
        pages_scraped = 0

        while frontier and pages_scraped < max_pages:
            current = frontier.popleft()
            queued.discard(current)
            if current in visited:
                continue
            visited.add(current)

            try:
                html = self.client.get_text(current, accept=HTML_ACCEPT)
            except CtxIndexError as exc:
                self.log.error(_COMPONENT, exc, url=current)
                continue
            pages_scraped += 1

            soup = BeautifulSoup(html, "html.parser")
            page_apis = extract_page_apis(soup, current, profile, self.window)
            for api in page_apis:
                key = (api.name, api.signature)
                if key not in seen:
                    seen.add(key)
                    apis.append(api)

            if pages_scraped < max_pages:
                for link in extract_links(soup, current, profile, self.log):
                    if link not in visited and link not in queued:
                        queued.add(link)
                        frontier.append(link)

            self.log.record(_COMPONENT, "scraped_page", url=current, apis_found=len(page_apis))

        result = CrawlResult(apis=apis, pages_scraped=pages_scraped, success=bool(apis))
        if not apis:
            result.error = "No APIs found"
        self.log.record(_COMPONENT, "done", url=url, total_apis=len(apis), pages_scraped=pages_scraped)
        return result


__all__ = ["DocumentationCrawler", "extract_links", "extract_page_apis"]
