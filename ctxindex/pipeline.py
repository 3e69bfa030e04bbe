"""End-to-end orchestration: resolve, retrieve, parse, extract, crawl and query registries."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .assembler import Concept, OutputAssembler, Pattern
from .config import CtxIndexConfig, load_config
from .crawler import DocumentationCrawler
from .extractors import CodePatterns, SignatureExtractor, extract_code_patterns, merge_signatures
from .hosting import GitHubClient, RepoRef, parse_repo
from .logging import ExecutionLog, get_logger
from .markdown import parse_markdown
from .models import ApiSignature, CrawlResult, ParsedMarkdown, RepositoryProfile, RetrievalResult
from .registry import PACKAGE_MANAGER_REGISTRIES, RegistryDocs, RegistryDocsFetcher
from .resolver import RepositoryResolver
from .retriever import FileRetriever

MARKDOWN_KINDS = ("md", "markdown", "mdx", "rst")


@dataclass
class PipelineReport:
    """Everything gathered for one repository, ready for the external summarizer."""

    repo: RepoRef
    profile: RepositoryProfile
    retrieval: RetrievalResult = field(default_factory=RetrievalResult)
    documents: Dict[str, ParsedMarkdown] = field(default_factory=dict)
    apis: List[ApiSignature] = field(default_factory=list)
    code_patterns: CodePatterns = field(default_factory=CodePatterns)
    crawl: Optional[CrawlResult] = None
    registry: Optional[RegistryDocs] = None

    @property
    def success(self) -> bool:
        return self.profile.success and self.retrieval.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repo": self.repo.slug,
            "repo_url": self.repo.url,
            "success": self.success,
            "profile": self.profile.to_dict(),
            "retrieval": self.retrieval.to_dict(),
            "documents": {path: parsed.to_dict() for path, parsed in self.documents.items()},
            "apis": [api.to_dict() for api in self.apis],
            "code_patterns": self.code_patterns.to_dict(),
            "crawl": self.crawl.to_dict() if self.crawl else None,
            "registry": self.registry.to_dict() if self.registry else None,
        }


@dataclass
class SummaryProse:
    """Prose produced by the downstream summarizer for the final index."""

    purpose: str
    concepts: List[Concept] = field(default_factory=list)
    patterns: List[Pattern] = field(default_factory=list)
    apis: Optional[List[ApiSignature]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SummaryProse":
        apis = data.get("apis")
        return cls(
            purpose=str(data.get("purpose") or ""),
            concepts=[Concept(name=str(item["name"]), description=str(item["description"])) for item in data.get("concepts") or []],
            patterns=[
                Pattern(pattern=str(item["pattern"]), description=str(item["description"]))
                for item in data.get("patterns") or []
            ],
            apis=(
                [ApiSignature(signature=str(item["signature"]), description=str(item["description"])) for item in apis]
                if apis is not None
                else None
            ),
        )


class ContextIndexPipeline:
    """Coordinates the components that build a context index for one repository."""

    def __init__(
        self,
        config: CtxIndexConfig | None = None,
        *,
        log: ExecutionLog | None = None,
        client: GitHubClient | None = None,
        resolver: RepositoryResolver | None = None,
        retriever: FileRetriever | None = None,
        extractor: SignatureExtractor | None = None,
        crawler: DocumentationCrawler | None = None,
        registry: RegistryDocsFetcher | None = None,
        assembler: OutputAssembler | None = None,
    ) -> None:
        self.config = config or CtxIndexConfig(root=Path.cwd())
        self.log = log or ExecutionLog(self.config.log_file)
        self.client = client or GitHubClient(self.config.hosting)
        self.resolver = resolver or RepositoryResolver(self.client, self.log)
        self.retriever = retriever or FileRetriever(self.client, self.log, self.config.retrieval)
        self.extractor = extractor or SignatureExtractor(self.log)
        self.crawler = crawler or DocumentationCrawler(self.client, self.log, self.config.crawler.window)
        self.registry = registry or RegistryDocsFetcher(self.client, self.log)
        self.assembler = assembler or OutputAssembler(log=self.log)
        self.logger = get_logger("pipeline")

    @classmethod
    def from_path(cls, path: Path | None = None) -> "ContextIndexPipeline":
        return cls(load_config(path))

    def run(
        self,
        repo: str | RepoRef,
        phase: str = "all",
        max_files: int | None = None,
        *,
        crawl: bool = False,
        query_registry: bool = True,
    ) -> PipelineReport:
        ref = repo if isinstance(repo, RepoRef) else parse_repo(repo)
        self.logger.info("Building context index for %s", ref.slug)

        profile = self.resolver.resolve(ref)
        report = PipelineReport(repo=ref, profile=profile)
        if not profile.success:
            self.logger.warning("Repository resolution failed for %s: %s", ref.slug, profile.error)
            return report

        report.retrieval = self.retriever.retrieve(ref, phase, max_files)
        self.logger.debug("Retrieved %d files", report.retrieval.total_found)

        groups: List[List[ApiSignature]] = []
        code_blocks: List[str] = []
        for item in report.retrieval.files:
            if item.kind in MARKDOWN_KINDS:
                parsed = parse_markdown(item.content, log=self.log)
                report.documents[item.path] = parsed
                code_blocks.extend(parsed.code_blocks)
            result = self.extractor.extract(item.content, item.kind)
            if result.success:
                groups.append(result.apis)

        if query_registry:
            report.registry = self._query_registry(profile)
            if report.registry is not None and report.registry.success:
                groups.append(report.registry.apis)

        report.apis = merge_signatures(*groups)
        report.code_patterns = extract_code_patterns(code_blocks)

        if crawl:
            report.crawl = self._crawl(profile)

        self.logger.info(
            "Context index for %s: %d files, %d signatures",
            ref.slug,
            report.retrieval.total_found,
            len(report.apis),
        )
        return report

    def render(self, report: PipelineReport, prose: SummaryProse) -> str:
        apis: Iterable[ApiSignature] = prose.apis if prose.apis is not None else report.apis
        return self.assembler.render(
            report.repo.name,
            report.repo.url,
            prose.purpose,
            prose.concepts,
            apis,
            prose.patterns,
        )

    def _query_registry(self, profile: RepositoryProfile) -> Optional[RegistryDocs]:
        binding = profile.package_manager
        if binding is None or not binding.package_name:
            return None
        if not any(source.kind == "registry" for source in profile.documentation_sources):
            return None
        registry = PACKAGE_MANAGER_REGISTRIES.get(binding.name)
        if registry is None:
            self.logger.debug("No registry client for package manager %s", binding.name)
            return None
        return self.registry.fetch(binding.package_name, registry)

    def _crawl(self, profile: RepositoryProfile) -> Optional[CrawlResult]:
        website = next((source for source in profile.documentation_sources if source.kind == "website"), None)
        if website is None:
            self.logger.debug("No documentation website to crawl")
            return None
        return self.crawler.crawl(
            website.locator,
            max_pages=self.config.crawler.max_pages,
            language=profile.primary_language,
        )


__all__ = ["ContextIndexPipeline", "PipelineReport", "SummaryProse"]
