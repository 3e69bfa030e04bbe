"""HTTP access to the repository host and to arbitrary documentation endpoints."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import HostingConfig
from ..errors import MalformedInputError, NotFoundError, TransientFetchError

_REPO_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?(?:github\.com[/:])?(?P<owner>[A-Za-z0-9_.-]+)/(?P<name>[A-Za-z0-9_.-]+?)(?:\.git)?(?:/.*)?$"
)

JSON_ACCEPT = "application/vnd.github.v3+json"
RAW_ACCEPT = "application/vnd.github.v3.raw"
HTML_ACCEPT = "text/html,application/xhtml+xml"


@dataclass(frozen=True)
class RepoRef:
    """Owner/name pair identifying a hosted repository."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.slug}"


def parse_repo(identifier: str) -> RepoRef:
    """Parse ``https://github.com/owner/name``, ``owner/name`` and similar forms."""
    cleaned = identifier.strip().rstrip("/")
    match = _REPO_PATTERN.match(cleaned)
    if not match:
        raise ValueError(f"Not a repository identifier: {identifier!r}")
    return RepoRef(owner=match.group("owner"), name=match.group("name"))


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    path: str
    type: str
    download_url: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    @property
    def is_file(self) -> bool:
        return self.type == "file"


class HttpClient:
    """Minimal GET client built on urllib.

    A 404 raises :class:`NotFoundError`; any other HTTP error or network
    failure raises :class:`TransientFetchError`.
    """

    def __init__(self, config: HostingConfig | None = None) -> None:
        self.config = config or HostingConfig()

    def get_bytes(self, url: str, *, accept: str | None = None, headers: Mapping[str, str] | None = None) -> bytes:
        request_headers: Dict[str, str] = {"User-Agent": self.config.user_agent}
        if accept:
            request_headers["Accept"] = accept
        if headers:
            request_headers.update(headers)
        http_request = Request(url, headers=request_headers, method="GET")
        try:
            with urlopen(http_request, timeout=self.config.request_timeout) as response:  # type: ignore[arg-type]
                return response.read()
        except HTTPError as exc:
            if exc.code == 404:
                raise NotFoundError(f"Not found: {url}", url=url, status=404) from exc
            raise TransientFetchError(
                f"Request to {url} failed with status {exc.code}: {exc.reason}",
                url=url,
                status=exc.code,
            ) from exc
        except URLError as exc:
            raise TransientFetchError(f"Request to {url} failed: {exc.reason}", url=url) from exc
        except (OSError, ValueError) as exc:
            raise TransientFetchError(f"Request to {url} failed: {exc}", url=url) from exc

    def get_text(self, url: str, *, accept: str | None = None, headers: Mapping[str, str] | None = None) -> str:
        return self.get_bytes(url, accept=accept, headers=headers).decode("utf-8", errors="replace")

    def get_json(self, url: str, *, accept: str | None = "application/json", headers: Mapping[str, str] | None = None) -> Any:
        text = self.get_text(url, accept=accept, headers=headers)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"{url} returned invalid JSON") from exc


class GitHubClient(HttpClient):
    """Repository metadata, listings and raw file content from GitHub."""

    def _api_headers(self) -> Dict[str, str]:
        if self.config.token:
            return {"Authorization": f"token {self.config.token}"}
        return {}

    def _api_url(self, ref: RepoRef, suffix: str = "") -> str:
        base = f"{self.config.api_base_url.rstrip('/')}/repos/{ref.owner}/{ref.name}"
        return f"{base}/{suffix}" if suffix else base

    def repository(self, ref: RepoRef) -> Dict[str, Any]:
        data = self.get_json(self._api_url(ref), accept=JSON_ACCEPT, headers=self._api_headers())
        if not isinstance(data, dict):
            raise MalformedInputError(f"Unexpected repository payload for {ref.slug}")
        return data

    def languages(self, ref: RepoRef) -> Dict[str, int]:
        data = self.get_json(self._api_url(ref, "languages"), accept=JSON_ACCEPT, headers=self._api_headers())
        if not isinstance(data, dict):
            raise MalformedInputError(f"Unexpected languages payload for {ref.slug}")
        return {str(name): int(size) for name, size in data.items() if isinstance(size, (int, float))}

    def readme(self, ref: RepoRef) -> str:
        return self.get_text(self._api_url(ref, "readme"), accept=RAW_ACCEPT, headers=self._api_headers())

    def list_directory(self, ref: RepoRef, path: str = "") -> List[DirectoryEntry]:
        suffix = f"contents/{quote(path.strip('/'))}" if path.strip("/") else "contents"
        data = self.get_json(self._api_url(ref, suffix), accept=JSON_ACCEPT, headers=self._api_headers())
        if not isinstance(data, list):
            # A file path returns a single object instead of a listing.
            return []
        entries: List[DirectoryEntry] = []
        for item in data:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                continue
            entries.append(
                DirectoryEntry(
                    name=item["name"],
                    path=str(item.get("path") or item["name"]),
                    type=str(item.get("type") or "file"),
                    download_url=item.get("download_url") if isinstance(item.get("download_url"), str) else None,
                )
            )
        return entries

    def raw_url(self, ref: RepoRef, branch: str, path: str) -> str:
        return f"{self.config.raw_base_url.rstrip('/')}/{ref.owner}/{ref.name}/{branch}/{path.lstrip('/')}"

    def raw_file(self, ref: RepoRef, branch: str, path: str) -> str:
        return self.get_text(self.raw_url(ref, branch, path))

    def file_exists(self, ref: RepoRef, branch: str, path: str) -> bool:
        """Check a raw path; only a 404 counts as absent."""
        try:
            self.get_bytes(self.raw_url(ref, branch, path))
        except NotFoundError:
            return False
        return True


__all__ = [
    "DirectoryEntry",
    "GitHubClient",
    "HttpClient",
    "RepoRef",
    "parse_repo",
]
