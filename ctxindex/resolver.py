"""Repository profiling: languages, documentation sources, package manager and layout."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import CtxIndexError
from .hosting import DirectoryEntry, GitHubClient, RepoRef, parse_repo
from .logging import ExecutionLog, get_logger
from .models import (
    DocumentationSource,
    LanguageShare,
    PackageManagerBinding,
    ProjectStructure,
    RepositoryProfile,
)

_COMPONENT = "analyze-repository"

_DOC_URL_PATTERN = re.compile(r"https?://[\w.-]+\.(?:io|dev|com|org|net)/(?:docs?|api|reference)", re.IGNORECASE)
_URL_PATTERN = re.compile(r"https?://[^\s)>\]]+")


@dataclass(frozen=True)
class ManifestRule:
    """Maps a root file (``*`` suffix globs allowed) to a package manager."""

    pattern: str
    name: str
    registry: str

    def matches(self, filename: str) -> bool:
        if self.pattern.startswith("*"):
            return filename.endswith(self.pattern[1:])
        return filename == self.pattern


PACKAGE_MANAGERS: Tuple[ManifestRule, ...] = (
    ManifestRule("package.json", "npm", "https://registry.npmjs.org/"),
    ManifestRule("Cargo.toml", "cargo", "https://crates.io/"),
    ManifestRule("pom.xml", "maven", "https://search.maven.org/"),
    ManifestRule("build.gradle", "gradle", "https://search.maven.org/"),
    ManifestRule("requirements.txt", "pip", "https://pypi.org/"),
    ManifestRule("setup.py", "pip", "https://pypi.org/"),
    ManifestRule("pyproject.toml", "pip", "https://pypi.org/"),
    ManifestRule("go.mod", "go", "https://pkg.go.dev/"),
    ManifestRule("Gemfile", "bundler", "https://rubygems.org/"),
    ManifestRule("*.gemspec", "gem", "https://rubygems.org/"),
    ManifestRule("composer.json", "composer", "https://packagist.org/"),
    ManifestRule("Package.swift", "spm", "https://swiftpackageindex.com/"),
    ManifestRule("*.csproj", "nuget", "https://www.nuget.org/"),
)

DOC_SITES: Dict[str, Tuple[str, ...]] = {
    "javascript": ("npmjs.com", "unpkg.com", "jsdelivr.com", "nodejs.org"),
    "typescript": ("npmjs.com", "unpkg.com", "jsdelivr.com", "typescriptlang.org"),
    "python": ("readthedocs.io", "pypi.org", "python.org", "sphinx-doc.org"),
    "java": ("javadoc.io", "maven.org", "docs.oracle.com"),
    "rust": ("docs.rs", "crates.io", "rust-lang.org"),
    "go": ("pkg.go.dev", "godoc.org", "golang.org"),
    "ruby": ("rubydoc.info", "rubygems.org", "ruby-doc.org"),
    "c++": ("cppreference.com", "cplusplus.com", "doxygen.org"),
    "cpp": ("cppreference.com", "cplusplus.com", "doxygen.org"),
    "c#": ("docs.microsoft.com", "nuget.org"),
    "csharp": ("docs.microsoft.com", "nuget.org"),
    "php": ("php.net", "packagist.org", "phpdoc.org"),
    "swift": ("developer.apple.com", "swiftpackageindex.com"),
    "kotlin": ("kotlinlang.org", "dokka.dev"),
}

DOC_DIRECTORIES = ("docs", "documentation", "doc", "api")
GENERATED_DOC_MARKERS = ("javadoc", "rustdoc", "godoc", "yard", "doxygen", "sphinx")
WORKSPACE_MANIFESTS = ("lerna.json", "rush.json", "pnpm-workspace.yaml", "nx.json")
PACKAGE_DIRECTORIES = ("packages", "libs", "modules", "components")
TEST_DIRECTORIES = ("test", "tests", "spec", "specs", "__tests__")
EXAMPLE_DIRECTORIES = ("examples", "example", "demo", "demos", "samples")
MAIN_PATHS = ("src", "lib", "app")


def language_shares(histogram: Dict[str, int]) -> List[LanguageShare]:
    """Convert a byte histogram into rounded percentages, largest first."""
    total = sum(histogram.values())
    if total <= 0:
        return []
    shares = [LanguageShare(name=name, percentage=round(size / total * 100)) for name, size in histogram.items()]
    return sorted(shares, key=lambda share: share.percentage, reverse=True)


def readme_doc_urls(readme: str, primary_language: str) -> List[str]:
    """Documentation-shaped URLs and known documentation hosts linked from a readme."""
    urls: List[str] = []
    for match in _DOC_URL_PATTERN.finditer(readme):
        url = _URL_PATTERN.match(readme, match.start())
        if url is not None:
            urls.append(url.group(0))
    for site in DOC_SITES.get(primary_language, ()):
        if site not in readme:
            continue
        site_pattern = re.compile(rf"https?://[\w.-]*{re.escape(site)}[/\w.-]*", re.IGNORECASE)
        match = site_pattern.search(readme)
        if match is not None:
            urls.append(match.group(0))
    seen: set[str] = set()
    unique: List[str] = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            unique.append(url)
    return unique


def classify_structure(entries: Sequence[DirectoryEntry]) -> ProjectStructure:
    """Classify the repository layout from its root listing (package names filled in later)."""
    file_names = {entry.name.lower() for entry in entries}
    dir_names = {entry.name.lower() for entry in entries if entry.is_dir}

    is_monorepo = any(name in file_names for name in WORKSPACE_MANIFESTS) or "packages" in dir_names
    is_multi_package = any(name in dir_names for name in PACKAGE_DIRECTORIES)
    if is_monorepo:
        kind = "monorepo"
    elif is_multi_package:
        kind = "multi-package"
    else:
        kind = "standard"

    main_path = next((f"{name}/" for name in MAIN_PATHS if name in dir_names), None)
    return ProjectStructure(
        kind=kind,
        main_path=main_path,
        has_docs=any(name in dir_names for name in DOC_DIRECTORIES),
        has_tests=any(name in dir_names for name in TEST_DIRECTORIES),
        has_examples=any(name in dir_names for name in EXAMPLE_DIRECTORIES),
    )


class RepositoryResolver:
    """Builds a :class:`RepositoryProfile` from the hosting API.

    Only the repository metadata call is fatal. Every other remote failure
    degrades the corresponding part of the profile and is logged.
    """

    def __init__(self, client: GitHubClient | None = None, log: ExecutionLog | None = None) -> None:
        self.client = client or GitHubClient()
        self.log = log or ExecutionLog()
        self.logger = get_logger("resolver")

    def resolve(self, repo: str | RepoRef) -> RepositoryProfile:
        self.log.record(_COMPONENT, "start", repo=str(repo))
        try:
            ref = repo if isinstance(repo, RepoRef) else parse_repo(repo)
            metadata = self.client.repository(ref)
        except (CtxIndexError, ValueError) as exc:
            self.log.error(_COMPONENT, exc, repo=str(repo))
            return RepositoryProfile(
                primary_language="unknown",
                structure=ProjectStructure(),
                success=False,
                error=str(exc),
            )

        languages = self._languages(ref)
        primary_language = languages[0].name.lower() if languages else "unknown"

        sources: List[DocumentationSource] = []
        homepage = metadata.get("homepage")
        if isinstance(homepage, str) and homepage.startswith(("http://", "https://")):
            sources.append(DocumentationSource(kind="website", locator=homepage, priority=1))
        if metadata.get("has_wiki"):
            sources.append(DocumentationSource(kind="wiki", locator=f"{ref.url}/wiki", priority=3))

        sources.extend(self._readme_sources(ref, primary_language))

        package_name = str(metadata.get("name") or ref.name)
        entries = self._root_entries(ref)
        package_manager: Optional[PackageManagerBinding] = None
        if entries is not None:
            package_manager, root_sources = self._root_sources(entries, package_name)
            sources.extend(root_sources)

        structure = self._structure(ref, entries)
        sources.sort(key=lambda source: source.priority)

        profile = RepositoryProfile(
            primary_language=primary_language,
            languages=languages,
            documentation_sources=sources,
            package_manager=package_manager,
            structure=structure,
        )
        self.log.record(
            _COMPONENT,
            "done",
            repo=ref.slug,
            primary_language=primary_language,
            sources=len(sources),
            structure=structure.kind,
        )
        return profile

    def _languages(self, ref: RepoRef) -> List[LanguageShare]:
        try:
            histogram = self.client.languages(ref)
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_languages", repo=ref.slug)
            return []
        return language_shares(histogram)

    def _readme_sources(self, ref: RepoRef, primary_language: str) -> List[DocumentationSource]:
        try:
            readme = self.client.readme(ref)
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_readme", repo=ref.slug)
            return []
        sources = [DocumentationSource(kind="readme", locator="README.md", priority=2)]
        for url in readme_doc_urls(readme, primary_language):
            sources.append(DocumentationSource(kind="website", locator=url, priority=1))
        return sources

    def _root_entries(self, ref: RepoRef) -> Optional[List[DirectoryEntry]]:
        try:
            return self.client.list_directory(ref)
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_contents", repo=ref.slug)
            return None

    def _root_sources(
        self, entries: Sequence[DirectoryEntry], package_name: str
    ) -> Tuple[Optional[PackageManagerBinding], List[DocumentationSource]]:
        names = [entry.name for entry in entries]
        sources: List[DocumentationSource] = []
        binding: Optional[PackageManagerBinding] = None

        for rule in PACKAGE_MANAGERS:
            if any(rule.matches(name) for name in names):
                binding = PackageManagerBinding(name=rule.name, registry=rule.registry, package_name=package_name)
                sources.append(
                    DocumentationSource(kind="registry", locator=f"{rule.registry}{package_name}", priority=2)
                )
                break

        lowered = [name.lower() for name in names]
        if any(name in DOC_DIRECTORIES for name in lowered):
            sources.append(DocumentationSource(kind="source", locator="docs/", priority=4))
        if any(marker in name for name in lowered for marker in GENERATED_DOC_MARKERS):
            sources.append(DocumentationSource(kind="generated", locator="generated-docs/", priority=3))
        return binding, sources

    def _structure(self, ref: RepoRef, entries: Optional[List[DirectoryEntry]]) -> ProjectStructure:
        if entries is None:
            return ProjectStructure()
        structure = classify_structure(entries)
        has_packages_dir = any(entry.is_dir and entry.name.lower() == "packages" for entry in entries)
        if structure.kind == "monorepo" and has_packages_dir:
            try:
                listing = self.client.list_directory(ref, "packages")
            except CtxIndexError as exc:
                self.log.error(_COMPONENT, exc, action="list_packages", repo=ref.slug)
            else:
                structure.packages = [entry.name for entry in listing if entry.is_dir]
        return structure


__all__ = [
    "DOC_SITES",
    "ManifestRule",
    "PACKAGE_MANAGERS",
    "RepositoryResolver",
    "classify_structure",
    "language_shares",
    "readme_doc_urls",
]
