"""FastAPI application entrypoint for ctxindex service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..assembler import Concept, Pattern
from ..errors import CtxIndexError
from ..extractors import extract_signatures
from ..markdown import parse_markdown
from ..models import ApiSignature
from ..pipeline import ContextIndexPipeline, PipelineReport


class AnalyzeRequest(BaseModel):
    repo: str
    phase: str = "all"
    max_files: Optional[int] = None
    crawl: bool = False
    query_registry: bool = True


class ExtractRequest(BaseModel):
    content: str
    kind: str


class SignatureModel(BaseModel):
    signature: str
    description: str
    category: Optional[str] = None


class ExtractResponse(BaseModel):
    apis: List[SignatureModel]
    success: bool


class ParseRequest(BaseModel):
    text: str


class ConceptModel(BaseModel):
    name: str
    description: str


class PatternModel(BaseModel):
    pattern: str
    description: str


class RenderRequest(BaseModel):
    repo_name: str
    repo_url: str
    purpose: str
    concepts: List[ConceptModel] = []
    apis: List[SignatureModel] = []
    patterns: List[PatternModel] = []


class RenderResponse(BaseModel):
    markdown: str


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> ContextIndexPipeline:
    return ContextIndexPipeline.from_path()


def create_app(
    pipeline_factory: Callable[[], ContextIndexPipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing ctxindex operations."""

    app = FastAPI(title="ctxindex Service", version="0.1.0")

    async def get_pipeline() -> ContextIndexPipeline:
        # Lazy-instantiate per request to keep state predictable.
        return pipeline_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        pipeline: ContextIndexPipeline = Depends(get_pipeline),
    ) -> Dict[str, Any]:
        def _run() -> PipelineReport:
            return pipeline.run(
                payload.repo,
                payload.phase,
                payload.max_files,
                crawl=payload.crawl,
                query_registry=payload.query_registry,
            )

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run)
        return report.to_dict()

    @app.post("/extract", response_model=ExtractResponse)
    async def extract(payload: ExtractRequest) -> ExtractResponse:
        result = extract_signatures(payload.content, payload.kind)
        return ExtractResponse(
            apis=[SignatureModel(**api.to_dict()) for api in result.apis],
            success=result.success,
        )

    @app.post("/parse")
    async def parse(payload: ParseRequest) -> Dict[str, Any]:
        return parse_markdown(payload.text).to_dict()

    @app.post("/render", response_model=RenderResponse)
    async def render(
        payload: RenderRequest,
        pipeline: ContextIndexPipeline = Depends(get_pipeline),
    ) -> RenderResponse:
        markdown = pipeline.assembler.render(
            payload.repo_name,
            payload.repo_url,
            payload.purpose,
            [Concept(name=item.name, description=item.description) for item in payload.concepts],
            [ApiSignature(signature=item.signature, description=item.description) for item in payload.apis],
            [Pattern(pattern=item.pattern, description=item.description) for item in payload.patterns],
        )
        return RenderResponse(markdown=markdown)

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(CtxIndexError)
    async def ctxindex_error_handler(
        _: Any, exc: CtxIndexError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
