from __future__ import annotations

"""FastAPI application entrypoint for the NLWeb conversational agent."""

from dataclasses import asdict
from datetime import datetime, timezone
import logging
import time
import uuid

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from nlweb_agent.agents.mcp import MCPDispatcher
from nlweb_agent.app.dependencies import (
    get_health_service,
    get_index,
    get_mcp_dispatcher,
    get_orchestrator,
    get_pipeline,
)
from nlweb_agent.app.health import UNHEALTHY
from nlweb_agent.app.metrics import metrics_middleware, metrics_response, record_query_outcome
from nlweb_agent.app.schemas import (
    AskMetadata,
    AskRequest,
    AskResponse,
    ErrorResponse,
    IndexStatusResponse,
    IngestRequest,
    IngestResponse,
    MCPRequest,
    QueryMetadataModel,
    QueryRequest,
    QueryResponse,
    SamplingConfig,
    SourceItem,
)
from nlweb_agent.app.settings import settings
from nlweb_agent.loaders.api import ContentFetchError, fetch_content, fetched_metadata
from nlweb_agent.rag import errors
from nlweb_agent.rag.errors import QueryError
from nlweb_agent.rag.orchestrator import QueryOrchestrator
from nlweb_agent.rag.pipeline import NLWebPipeline
from nlweb_agent.rag.types import SourceSnippet

logger = logging.getLogger(__name__)

app = FastAPI(title="NLWeb Agent", version=settings.version)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_TITLES = {
    errors.VALIDATION: "Validation Error",
    errors.UNAUTHORIZED: "Authentication Error",
    errors.RATE_LIMITED: "Rate Limit Exceeded",
    errors.UPSTREAM_UNAVAILABLE: "Upstream Service Error",
    errors.GENERIC: "Upstream Service Error",
    errors.INTERNAL: "Internal Server Error",
}


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


def _validate_environment() -> None:
    """Log configuration problems at startup without refusing to boot."""
    problems = settings.validation_errors()
    if problems:
        logger.warning("environment_validation_failed", extra={"errors": problems})
        return
    logger.info(
        "environment_validation_passed",
        extra={"environment": settings.app_env, "port": settings.port},
    )


_configure_logging()
_validate_environment()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _source_items(sources: list[SourceSnippet]) -> list[SourceItem]:
    return [SourceItem(**asdict(source)) for source in sources]


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_requests(request: Request, call_next):
    """Feed request outcomes into the health metrics."""
    response = await call_next(request)
    if not request.url.path.startswith("/health"):
        get_health_service().record_request(200 <= response.status_code < 400)
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    """Render pipeline errors with a sanitized message."""
    remote_kind = getattr(exc, "remote_kind", None)
    title = _ERROR_TITLES.get(remote_kind or exc.kind, "Internal Server Error")
    body = ErrorResponse(
        error=title,
        message=exc.message,
        kind=exc.kind,
        remote_kind=remote_kind,
        timestamp=_timestamp(),
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response(get_index().count)


@app.get("/health")
async def health() -> JSONResponse:
    """Aggregate health check."""
    payload = get_health_service().status()
    status_code = 503 if payload["status"] == UNHEALTHY else 200
    return JSONResponse(status_code=status_code, content=payload)


@app.get("/health/index", response_model=IndexStatusResponse)
async def index_status() -> IndexStatusResponse:
    """Return the content index status without side effects."""
    return IndexStatusResponse(**get_health_service().index_status())


@app.post(
    "/api/query",
    response_model=QueryResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def query(
    request: QueryRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
) -> QueryResponse:
    """Answer a question through the enrichment and generation pipeline."""
    start = time.perf_counter()
    try:
        result = await orchestrator.process(request.query, request.context)
    except QueryError as exc:
        record_query_outcome(getattr(exc, "remote_kind", None) or exc.kind)
        raise
    record_query_outcome("success")
    metadata = result.metadata
    return QueryResponse(
        response=result.text,
        timestamp=_timestamp(),
        metadata=QueryMetadataModel(
            model=metadata.model,
            processing_time_ms=metadata.processing_time_ms,
            total_processing_time_ms=int((time.perf_counter() - start) * 1000),
            tokens_used=metadata.tokens_used,
            query_type=metadata.query_type,
            config=SamplingConfig(**metadata.config),
            sources=_source_items(metadata.sources),
        ),
    )


@app.post("/api/nlweb/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    pipeline: NLWebPipeline = Depends(get_pipeline),
) -> AskResponse:
    """Answer from the local index only."""
    response = pipeline.ask(request.question, request.max_results)
    return AskResponse(
        answer=response.answer,
        sources=_source_items(response.sources),
        metadata=AskMetadata(
            query=response.query,
            processing_time_ms=response.processing_time_ms,
            total_sources=response.total_sources,
        ),
    )


@app.post("/api/nlweb/ingest", response_model=IngestResponse)
async def ingest(
    request: IngestRequest,
    pipeline: NLWebPipeline = Depends(get_pipeline),
) -> IngestResponse:
    """Ingest raw content, or fetch and ingest a URL."""
    if request.content:
        document = pipeline.ingest(request.content, request.metadata)
    elif request.url:
        try:
            fetched = await fetch_content(
                request.url,
                timeout=settings.fetch_timeout,
                max_bytes=settings.fetch_max_bytes,
            )
        except ContentFetchError as exc:
            logger.error("content_fetch_failed", extra={"detail": str(exc)})
            raise HTTPException(status_code=502, detail="Failed to fetch content") from exc
        document = pipeline.ingest(fetched.content, fetched_metadata(fetched, request.metadata))
    else:
        raise HTTPException(status_code=400, detail="Missing required parameter: content")
    return IngestResponse(
        success=True,
        id=document.doc_id,
        title=document.title,
        message="Content ingested successfully",
    )


@app.post("/api/nlweb/mcp")
async def mcp(
    request: MCPRequest,
    dispatcher: MCPDispatcher = Depends(get_mcp_dispatcher),
) -> JSONResponse:
    """Model Context Protocol entrypoint."""
    response = dispatcher.handle(request.method, request.params)
    status_code = 400 if response.error is not None else 200
    return JSONResponse(status_code=status_code, content=response.to_dict())


@app.get("/api/nlweb/stats")
async def stats() -> dict[str, int | str]:
    """Return content index stats."""
    return get_index().stats()


def run() -> None:
    """Serve the API on the configured port."""
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
