"""Package registry metadata and API hints (npm, PyPI, crates.io, RubyGems, Go, Maven)."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from .errors import CtxIndexError, MalformedInputError
from .hosting import HttpClient
from .hosting.client import HTML_ACCEPT
from .logging import ExecutionLog, get_logger
from .models import ApiSignature
from .extractors import dedupe

_COMPONENT = "fetch-registry-docs"

README_LIMIT = 50000

NPM_REGISTRY = "https://registry.npmjs.org"
UNPKG = "https://unpkg.com"
PYPI = "https://pypi.org/pypi"
CRATES = "https://crates.io/api/v1/crates"
DOCS_RS = "https://docs.rs"
RUBYGEMS = "https://rubygems.org/api/v1/gems"
RUBYDOC = "https://rubydoc.info/gems"
GO_PROXY = "https://proxy.golang.org"
PKG_GO_DEV = "https://pkg.go.dev"
MAVEN_SEARCH = "https://search.maven.org/solrsearch/select"
JAVADOC = "https://javadoc.io/doc"

# Package manager names reported by the resolver mapped to registry keys.
# Maven and Gradle are absent: their bindings carry the repository name, not
# the groupId:artifactId coordinates a Maven search needs.
PACKAGE_MANAGER_REGISTRIES: Dict[str, str] = {
    "npm": "npm",
    "pip": "pypi",
    "cargo": "cargo",
    "bundler": "rubygems",
    "gem": "rubygems",
    "go": "go",
}

_RST_DIRECTIVES = (
    (re.compile(r"^\.\. function::\s+(.+)$", re.MULTILINE), "Python function", "function"),
    (re.compile(r"^\.\. class::\s+(.+)$", re.MULTILINE), "Python class", "class"),
    (re.compile(r"^\.\. method::\s+(.+)$", re.MULTILINE), "Python method", "method"),
)
_README_FENCE = re.compile(r"```\w*\n([\s\S]*?)```")
_README_PATTERNS = (
    re.compile(r"(?:function|def|fn|func)\s+(\w+)\s*\([^)]*\)"),
    re.compile(r"(\w+)\s*:\s*\([^)]*\)\s*=>"),
    re.compile(r"class\s+(\w+)"),
    re.compile(r"interface\s+(\w+)"),
)


@dataclass
class PackageInfo:
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    documentation: Optional[str] = None


@dataclass
class RegistryDocs:
    """What a registry knows about a package."""

    package_info: PackageInfo
    readme: Optional[str] = None
    apis: List[ApiSignature] = field(default_factory=list)
    types: Optional[str] = None
    success: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_info": asdict(self.package_info),
            "readme": self.readme,
            "apis": [api.to_dict() for api in self.apis],
            "types": self.types,
            "success": self.success,
            "error": self.error,
        }


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def types_package(name: str) -> str:
    """DefinitelyTyped package name, e.g. ``@scope/pkg`` becomes ``@types/scope__pkg``."""
    return "@types/" + name.replace("@", "", 1).replace("/", "__", 1)


def rst_directive_apis(text: str) -> List[ApiSignature]:
    apis: List[ApiSignature] = []
    for pattern, description, category in _RST_DIRECTIVES:
        for match in pattern.finditer(text):
            apis.append(ApiSignature(signature=match.group(1).strip(), description=description, category=category))
    return apis


def readme_code_apis(readme: str) -> List[ApiSignature]:
    """Definition-shaped snippets found inside fenced README code blocks."""
    apis: List[ApiSignature] = []
    for block in _README_FENCE.finditer(readme):
        code = block.group(1)
        for pattern in _README_PATTERNS:
            for match in pattern.finditer(code):
                apis.append(ApiSignature(signature=match.group(0), description="Extracted from README", category="readme"))
    return apis


def heading_apis(html: str, kinds: Dict[str, tuple[str, str]]) -> List[ApiSignature]:
    """Signatures from ``<h3>`` headings whose text starts with one of ``kinds``.

    ``kinds`` maps a keyword (``fn``, ``struct``, ...) to its description and category.
    """
    soup = BeautifulSoup(html, "html.parser")
    apis: List[ApiSignature] = []
    for heading in soup.find_all("h3"):
        text = heading.get_text(" ", strip=True)
        if text.startswith("pub "):
            text = text[4:]
        keyword, _, rest = text.partition(" ")
        if keyword not in kinds or not rest:
            continue
        name = re.match(r"[\w.]+", rest)
        if name is None:
            continue
        description, category = kinds[keyword]
        apis.append(ApiSignature(signature=f"{keyword} {name.group(0)}", description=description, category=category))
    return apis


class RegistryDocsFetcher:
    """Queries a package registry for metadata, readme, types and API hints."""

    def __init__(self, client: HttpClient | None = None, log: ExecutionLog | None = None) -> None:
        self.client = client or HttpClient()
        self.log = log or ExecutionLog()
        self.logger = get_logger("registry")
        self._handlers: Dict[str, Callable[[str, RegistryDocs, bool], None]] = {
            "npm": self._npm,
            "pypi": self._pypi,
            "cargo": self._cargo,
            "rubygems": self._rubygems,
            "go": self._go,
            "maven": self._maven,
        }

    @property
    def registries(self) -> List[str]:
        return list(self._handlers)

    def fetch(self, package: str, registry: str, include_types: bool = True) -> RegistryDocs:
        self.log.record(_COMPONENT, "start", package=package, registry=registry)
        docs = RegistryDocs(package_info=PackageInfo(name=package))
        handler = self._handlers.get(registry)
        if handler is None:
            docs.error = f"Registry {registry} is not supported"
            self.log.error(_COMPONENT, docs.error, package=package, registry=registry)
            return docs

        try:
            handler(package, docs, include_types)
        except (CtxIndexError, ValueError, KeyError, TypeError) as exc:
            self.log.error(_COMPONENT, exc, package=package, registry=registry)
            return RegistryDocs(package_info=PackageInfo(name=package), error=str(exc))

        if docs.readme and not docs.apis:
            docs.apis = readme_code_apis(docs.readme)
        if docs.readme:
            docs.readme = docs.readme[:README_LIMIT]
        docs.apis = dedupe(docs.apis)
        docs.success = True
        self.log.record(
            _COMPONENT,
            "done",
            package=package,
            registry=registry,
            has_readme=bool(docs.readme),
            has_types=bool(docs.types),
            api_count=len(docs.apis),
        )
        return docs

    def _json(self, url: str) -> Dict[str, Any]:
        data = self.client.get_json(url)
        if not isinstance(data, dict):
            raise MalformedInputError(f"{url} did not return a JSON object")
        return data

    def _npm(self, package: str, docs: RegistryDocs, include_types: bool) -> None:
        data = self._json(f"{NPM_REGISTRY}/{quote(package, safe='@')}")
        versions = _mapping(data.get("versions"))
        latest = _mapping(data.get("dist-tags")).get("latest") or (list(versions)[-1] if versions else None)
        version_data = _mapping(versions.get(latest)) if latest else {}
        repository = version_data.get("repository")
        repository_url = repository.get("url") if isinstance(repository, dict) else repository
        docs.package_info = PackageInfo(
            name=str(data.get("name") or package),
            version=latest,
            description=version_data.get("description"),
            homepage=version_data.get("homepage"),
            repository=repository_url,
            documentation=version_data.get("homepage") or repository_url,
        )
        docs.readme = version_data.get("readme") or data.get("readme")
        if include_types:
            docs.types = self._npm_types(package)

    def _npm_types(self, package: str) -> Optional[str]:
        name = types_package(package)
        try:
            data = self._json(f"{NPM_REGISTRY}/{quote(name, safe='@')}")
            latest = _mapping(data.get("dist-tags")).get("latest")
            if not latest:
                return None
            return self.client.get_text(f"{UNPKG}/{name}@{latest}/index.d.ts")
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_types", package=package)
            return None

    def _pypi(self, package: str, docs: RegistryDocs, include_types: bool) -> None:
        info = self._json(f"{PYPI}/{quote(package)}/json").get("info") or {}
        project_urls = info.get("project_urls") or {}
        docs.package_info = PackageInfo(
            name=str(info.get("name") or package),
            version=info.get("version"),
            description=info.get("summary"),
            homepage=info.get("home_page"),
            repository=project_urls.get("Source") or project_urls.get("Repository"),
            documentation=info.get("docs_url") or project_urls.get("Documentation"),
        )
        docs.readme = info.get("description")
        if docs.readme and info.get("description_content_type") == "text/x-rst":
            docs.apis = rst_directive_apis(docs.readme)

    def _cargo(self, package: str, docs: RegistryDocs, include_types: bool) -> None:
        crate = self._json(f"{CRATES}/{quote(package)}").get("crate") or {}
        docs_url = f"{DOCS_RS}/{package}"
        docs.package_info = PackageInfo(
            name=str(crate.get("name") or package),
            version=crate.get("max_version"),
            description=crate.get("description"),
            homepage=crate.get("homepage"),
            repository=crate.get("repository"),
            documentation=crate.get("documentation") or docs_url,
        )
        docs.readme = crate.get("readme")
        try:
            html = self.client.get_text(f"{docs_url}/latest/{package}/", accept=HTML_ACCEPT)
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_docs_rs", package=package)
            return
        docs.apis = heading_apis(
            html,
            {
                "struct": ("Rust struct", "struct"),
                "fn": ("Rust function", "function"),
                "trait": ("Rust trait", "trait"),
            },
        )

    def _rubygems(self, package: str, docs: RegistryDocs, include_types: bool) -> None:
        data = self._json(f"{RUBYGEMS}/{quote(package)}.json")
        docs.package_info = PackageInfo(
            name=str(data.get("name") or package),
            version=data.get("version"),
            description=data.get("info"),
            homepage=data.get("homepage_uri"),
            repository=data.get("source_code_uri"),
            documentation=data.get("documentation_uri") or f"{RUBYDOC}/{package}",
        )

    def _go(self, package: str, docs: RegistryDocs, include_types: bool) -> None:
        page_url = f"{PKG_GO_DEV}/{package}"
        docs.package_info = PackageInfo(
            name=package,
            description=f"Go package {package}",
            homepage=page_url,
            repository=f"https://{package}" if "." in package.split("/", 1)[0] else None,
            documentation=page_url,
        )
        try:
            latest = self._json(f"{GO_PROXY}/{package}/@latest")
            docs.package_info.version = latest.get("Version")
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_go_proxy", package=package)
        try:
            html = self.client.get_text(page_url, accept=HTML_ACCEPT)
        except CtxIndexError as exc:
            self.log.error(_COMPONENT, exc, action="fetch_go_docs", package=package)
            return
        docs.apis = heading_apis(
            html,
            {
                "func": ("Go function", "function"),
                "type": ("Go type", "type"),
            },
        )

    def _maven(self, package: str, docs: RegistryDocs, include_types: bool) -> None:
        group, _, artifact = package.partition(":")
        if not group or not artifact:
            raise ValueError("Maven packages require format: groupId:artifactId")
        query = quote(f'g:"{group}" AND a:"{artifact}"')
        data = self._json(f"{MAVEN_SEARCH}?q={query}&wt=json")
        found = (data.get("response") or {}).get("docs") or []
        if not found:
            return
        latest = found[0]
        docs.package_info = PackageInfo(
            name=f"{latest.get('g', group)}:{latest.get('a', artifact)}",
            version=latest.get("latestVersion"),
            description=f"Maven package {latest.get('a', artifact)}",
            homepage=f"https://search.maven.org/artifact/{group}/{artifact}",
            repository=latest.get("repositoryUrl"),
            documentation=f"{JAVADOC}/{group}/{artifact}",
        )


__all__ = [
    "PACKAGE_MANAGER_REGISTRIES",
    "PackageInfo",
    "RegistryDocs",
    "RegistryDocsFetcher",
    "heading_apis",
    "readme_code_apis",
    "rst_directive_apis",
    "types_package",
]
