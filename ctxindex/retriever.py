"""Multi-phase retrieval of documentation, type definition and entry-point files."""

from __future__ import annotations

import json
import math
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .config import RetrievalConfig
from .errors import CtxIndexError, NotFoundError
from .hosting import DirectoryEntry, GitHubClient, RepoRef, parse_repo
from .logging import ExecutionLog, get_logger
from .models import PHASES, FetchedFile, RetrievalResult

_COMPONENT = "fetch-all-docs"

BRANCHES = ("main", "master")
BRANCH_MARKER = "README.md"

DOC_CANDIDATES: Tuple[str, ...] = (
    "README.md",
    "readme.md",
    "README.rst",
    "API.md",
    "api.md",
    "REFERENCE.md",
    "reference.md",
    "docs/API.md",
    "docs/api.md",
    "docs/reference.md",
    "docs/getting-started.md",
    "docs/quick-start.md",
    "documentation.md",
    "DOCUMENTATION.md",
    "USAGE.md",
    "GUIDE.md",
)

TYPE_CANDIDATES: Tuple[str, ...] = (
    "index.d.ts",
    "types/index.d.ts",
    "dist/index.d.ts",
    "lib/index.d.ts",
    "typings/index.d.ts",
    "types.d.ts",
)

SOURCE_CANDIDATES: Tuple[str, ...] = (
    "package.json",
    "index.js",
    "index.ts",
    "src/index.js",
    "src/index.ts",
    "lib/index.js",
    "dist/index.js",
    "main.js",
    "main.ts",
)

CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "docs": DOC_CANDIDATES,
    "types": TYPE_CANDIDATES,
    "source": SOURCE_CANDIDATES,
    "all": DOC_CANDIDATES + TYPE_CANDIDATES + SOURCE_CANDIDATES,
}

DENYLIST: Tuple[str, ...] = (
    "CHANGELOG.md",
    "CONTRIBUTING.md",
    "CODE_OF_CONDUCT.md",
    "SECURITY.md",
    "LICENSE",
    "LICENSE.md",
    "PATENTS",
    ".github",
    "HISTORY.md",
    "CHANGES.md",
    "NEWS.md",
    "CHANGELOG",
)

DOC_DIRECTORIES = ("docs", "documentation", "doc", "api-docs")
TYPE_DIRECTORIES = ("", "types", "typings", "dist", "lib", "@types")
PACKAGE_ENTRY_FILES = ("index.d.ts", "index.ts", "index.js")
MANIFEST_NAME = "package.json"


def is_denied(path: str) -> bool:
    """Case-insensitive substring match against the non-API file denylist."""
    upper = path.upper()
    return any(entry.upper() in upper for entry in DENYLIST)


def declared_kind(path: str) -> str:
    name = posixpath.basename(path)
    if name == MANIFEST_NAME:
        return "manifest"
    lowered = name.lower()
    if lowered.endswith(".d.ts"):
        return "d.ts"
    _, ext = posixpath.splitext(lowered)
    return ext[1:] if ext else "unknown"


def estimate_tokens(content: str) -> int:
    return math.ceil(len(content) / 4)


def build_fetched_file(path: str, content: str, settings: RetrievalConfig | None = None) -> FetchedFile:
    """Wrap ``content`` applying the token budget; package manifests are never truncated."""
    settings = settings or RetrievalConfig()
    tokens = estimate_tokens(content)
    kind = declared_kind(path)
    if tokens > settings.token_limit and kind != "manifest":
        return FetchedFile(
            path=path,
            content=content[: settings.truncate_chars],
            kind=kind,
            estimated_tokens=tokens,
            truncated=True,
            original_size=len(content),
        )
    return FetchedFile(path=path, content=content, kind=kind, estimated_tokens=tokens)


@dataclass
class _Run:
    ref: RepoRef
    branch: str
    max_files: int
    files: List[FetchedFile] = field(default_factory=list)
    paths: Set[str] = field(default_factory=set)

    @property
    def full(self) -> bool:
        return len(self.files) >= self.max_files

    def add(self, item: FetchedFile) -> None:
        self.files.append(item)
        self.paths.add(posixpath.normpath(item.path))


class FileRetriever:
    """Fetches candidate files phase by phase within a file budget."""

    def __init__(
        self,
        client: GitHubClient | None = None,
        log: ExecutionLog | None = None,
        settings: RetrievalConfig | None = None,
    ) -> None:
        self.client = client or GitHubClient()
        self.log = log or ExecutionLog()
        self.settings = settings or RetrievalConfig()
        self.logger = get_logger("retriever")

    def resolve_branch(self, ref: RepoRef) -> str:
        """Return the first branch whose README is reachable, defaulting to ``main``."""
        for branch in BRANCHES:
            try:
                if self.client.file_exists(ref, branch, BRANCH_MARKER):
                    return branch
            except CtxIndexError as exc:
                self.log.error(_COMPONENT, exc, action="detect_branch", branch=branch)
        return BRANCHES[0]

    def fetch_file(self, repo: str | RepoRef, path: str) -> Optional[FetchedFile]:
        """Fetch one file, trying ``main`` then ``master``."""
        ref = repo if isinstance(repo, RepoRef) else parse_repo(repo)
        for branch in BRANCHES:
            try:
                content = self.client.raw_file(ref, branch, path)
            except NotFoundError:
                self.log.record("fetch-repo-content", "not_found", path=path, branch=branch)
                continue
            except CtxIndexError as exc:
                self.log.error("fetch-repo-content", exc, path=path, branch=branch)
                continue
            self.log.record("fetch-repo-content", "fetched", path=path, branch=branch, content_length=len(content))
            return build_fetched_file(path, content, self.settings)
        return None

    def retrieve(self, repo: str | RepoRef, phase: str = "all", max_files: int | None = None) -> RetrievalResult:
        if phase not in PHASES:
            raise ValueError(f"Unknown retrieval phase {phase!r}; expected one of {', '.join(PHASES)}")
        budget = max_files if max_files is not None else self.settings.max_files
        ref = repo if isinstance(repo, RepoRef) else parse_repo(repo)
        self.log.record(_COMPONENT, "start", repo=ref.slug, phase=phase, max_files=budget)

        run = _Run(ref=ref, branch=self.resolve_branch(ref), max_files=budget)
        for path in CANDIDATES[phase]:
            if run.full:
                break
            if is_denied(path):
                self.log.record(_COMPONENT, "skipped", path=path)
                continue
            self._fetch_raw(run, path)

        if phase in ("docs", "all"):
            self._doc_directories(run)
        if phase in ("types", "all"):
            self._type_directories(run)
            self._monorepo_packages(run)
        if phase in ("source", "all"):
            self._manifest_entries(run)

        result = RetrievalResult(files=run.files, success=bool(run.files))
        if not result.success:
            result.error = "No documentation files found"
        self.log.record(
            _COMPONENT,
            "done",
            repo=ref.slug,
            phase=phase,
            files=result.total_found,
            total_size=sum(len(item.content) for item in run.files),
        )
        return result

    def _fetch_raw(self, run: _Run, path: str) -> bool:
        try:
            content = self.client.raw_file(run.ref, run.branch, path)
        except NotFoundError:
            self.logger.debug("Not found: %s", path)
            return False
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, path=path)
            return False
        return self._accept(run, path, content)

    def _fetch_entry(self, run: _Run, entry: DirectoryEntry, path: str) -> bool:
        url = entry.download_url or self.client.raw_url(run.ref, run.branch, path)
        try:
            content = self.client.get_text(url)
        except NotFoundError:
            self.logger.debug("Not found: %s", path)
            return False
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, file=entry.name)
            return False
        return self._accept(run, path, content)

    def _accept(self, run: _Run, path: str, content: str) -> bool:
        item = build_fetched_file(path, content, self.settings)
        if item.truncated:
            self.log.warning(
                _COMPONENT,
                "truncated",
                path=path,
                tokens=item.estimated_tokens,
                original_size=item.original_size,
            )
        run.add(item)
        self.log.record(_COMPONENT, "fetched_file", path=path, content_length=len(content), tokens=item.estimated_tokens)
        return True

    def _list(self, run: _Run, directory: str) -> Optional[List[DirectoryEntry]]:
        try:
            return self.client.list_directory(run.ref, directory)
        except NotFoundError:
            return None
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="list_directory", directory=directory or "/")
            return None

    def _doc_directories(self, run: _Run) -> None:
        for directory in DOC_DIRECTORIES:
            if run.full:
                return
            for entry in self._list(run, directory) or []:
                if run.full:
                    return
                if not entry.is_file or not entry.name.lower().endswith((".md", ".rst")):
                    continue
                path = f"{directory}/{entry.name}"
                if path in run.paths:
                    continue
                if is_denied(path):
                    self.log.record(_COMPONENT, "skipped", path=path)
                    continue
                self._fetch_entry(run, entry, path)

    def _type_directories(self, run: _Run) -> None:
        for directory in TYPE_DIRECTORIES:
            if run.full:
                return
            for entry in self._list(run, directory) or []:
                if run.full:
                    return
                if not entry.is_file or not entry.name.endswith(".d.ts"):
                    continue
                path = f"{directory}/{entry.name}" if directory else entry.name
                if path in run.paths or is_denied(path):
                    continue
                self._fetch_entry(run, entry, path)

    def _monorepo_packages(self, run: _Run) -> None:
        if run.full:
            return
        packages = self._list(run, "packages")
        if not packages:
            return
        self.log.record(_COMPONENT, "monorepo", packages=len(packages))
        for package in packages:
            if run.full:
                return
            if not package.is_dir:
                continue
            base = f"packages/{package.name}"
            manifest_path = f"{base}/{MANIFEST_NAME}"
            if manifest_path in run.paths or not self._fetch_raw(run, manifest_path):
                continue
            for entry in self._list(run, base) or []:
                if run.full:
                    return
                if entry.is_file and entry.name in PACKAGE_ENTRY_FILES:
                    path = f"{base}/{entry.name}"
                    if path not in run.paths:
                        self._fetch_entry(run, entry, path)

    def _manifest_entries(self, run: _Run) -> None:
        manifest = next((item for item in run.files if item.path == MANIFEST_NAME), None)
        if manifest is None:
            return
        if manifest.truncated:
            self.log.record(_COMPONENT, "skipped_manifest", reason="truncated")
            return
        try:
            data = json.loads(manifest.content)
        except json.JSONDecodeError as exc:
            self.log.error(_COMPONENT, exc, action="parse_package_json")
            return
        if not isinstance(data, dict):
            self.log.error(_COMPONENT, "package.json is not an object", action="parse_package_json")
            return

        main_file = data.get("main") or data.get("module") or data.get("browser")
        types_file = data.get("types") or data.get("typings")
        for target in (main_file, types_file):
            if run.full:
                return
            if isinstance(target, str) and target and posixpath.normpath(target) not in run.paths:
                self._fetch_raw(run, target)


__all__ = [
    "BRANCHES",
    "CANDIDATES",
    "DENYLIST",
    "FileRetriever",
    "build_fetched_file",
    "declared_kind",
    "estimate_tokens",
    "is_denied",
]
