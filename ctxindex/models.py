"""Core data models shared across ctxindex components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

SOURCE_KINDS = ("website", "wiki", "readme", "source", "registry", "generated")
STRUCTURE_KINDS = ("monorepo", "standard", "multi-package")
PHASES = ("docs", "types", "source", "all")


@dataclass(frozen=True)
class DocumentationSource:
    """A place where documentation for the repository can be found."""

    kind: str
    locator: str
    priority: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FetchedFile:
    """Raw content of one repository file retrieved during a phase."""

    path: str
    content: str
    kind: str
    estimated_tokens: int
    truncated: bool = False
    original_size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ApiSignature:
    """Short rendering of a callable or type entity."""

    signature: str
    description: str
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MarkdownSection:
    """Flat markdown section keyed by its heading."""

    heading: str
    level: int
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ParsedMarkdown:
    """Structural view of a markdown document."""

    sections: List[MarkdownSection] = field(default_factory=list)
    code_blocks: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sections": [section.to_dict() for section in self.sections],
            "code_blocks": list(self.code_blocks),
            "links": list(self.links),
        }


@dataclass
class ProjectStructure:
    """Layout classification of the repository root."""

    kind: str = "standard"
    main_path: Optional[str] = None
    packages: Optional[List[str]] = None
    has_docs: bool = False
    has_tests: bool = False
    has_examples: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LanguageShare:
    name: str
    percentage: int


@dataclass(frozen=True)
class PackageManagerBinding:
    name: str
    registry: str
    package_name: Optional[str] = None


@dataclass
class RepositoryProfile:
    """Everything the resolver learned about a repository."""

    primary_language: str
    languages: List[LanguageShare] = field(default_factory=list)
    documentation_sources: List[DocumentationSource] = field(default_factory=list)
    package_manager: Optional[PackageManagerBinding] = None
    structure: ProjectStructure = field(default_factory=ProjectStructure)
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_language": self.primary_language,
            "languages": [asdict(language) for language in self.languages],
            "documentation_sources": [source.to_dict() for source in self.documentation_sources],
            "package_manager": asdict(self.package_manager) if self.package_manager else None,
            "structure": self.structure.to_dict(),
            "success": self.success,
            "error": self.error,
        }


@dataclass
class RetrievalResult:
    files: List[FetchedFile] = field(default_factory=list)
    success: bool = False
    error: Optional[str] = None

    @property
    def total_found(self) -> int:
        return len(self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [item.to_dict() for item in self.files],
            "success": self.success,
            "error": self.error,
            "total_found": self.total_found,
        }


@dataclass
class ExtractionResult:
    apis: List[ApiSignature] = field(default_factory=list)
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"apis": [api.to_dict() for api in self.apis], "success": self.success}


@dataclass(frozen=True)
class CrawledApi:
    """API record scraped from a documentation website."""

    name: str
    signature: str
    description: str
    source_url: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CrawlResult:
    apis: List[CrawledApi] = field(default_factory=list)
    pages_scraped: int = 0
    success: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apis": [api.to_dict() for api in self.apis],
            "pages_scraped": self.pages_scraped,
            "success": self.success,
            "error": self.error,
        }


__all__ = [
    "ApiSignature",
    "CrawlResult",
    "CrawledApi",
    "DocumentationSource",
    "ExtractionResult",
    "FetchedFile",
    "LanguageShare",
    "MarkdownSection",
    "PHASES",
    "PackageManagerBinding",
    "ParsedMarkdown",
    "ProjectStructure",
    "RepositoryProfile",
    "RetrievalResult",
    "SOURCE_KINDS",
    "STRUCTURE_KINDS",
]
