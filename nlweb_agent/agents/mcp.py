from __future__ import annotations

"""Model Context Protocol style dispatcher over the NLWeb pipeline."""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
import logging
from typing import Any

from nlweb_agent.rag.pipeline import NLWebPipeline, NLWebResponse

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class MCPResponse:
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"result": self.result}


class MCPDispatcher:
    """Dispatch ask, ingest, search and health methods."""

    def __init__(self, pipeline: NLWebPipeline) -> None:
        self._pipeline = pipeline
        self._handlers = {
            "ask": self._ask,
            "ingest": self._ingest,
            "search": self._search,
            "health": self._health,
        }

    @property
    def methods(self) -> list[str]:
        return sorted(self._handlers)

    def handle(self, method: str, params: dict[str, Any] | None = None) -> MCPResponse:
        handler = self._handlers.get(method)
        if handler is None:
            return MCPResponse(error=f"Unknown method: {method}")
        try:
            return handler(params or {})
        except Exception as exc:
            logger.exception("mcp_request_failed", extra={"method": method})
            return MCPResponse(error=f"MCP request failed: {type(exc).__name__}")

    def _ask(self, params: dict[str, Any]) -> MCPResponse:
        question = params.get("question")
        if not question:
            return _missing("question")
        limit = params.get("maxResults") or params.get("max_results") or DEFAULT_LIMIT
        return MCPResponse(result=serialize_response(self._pipeline.ask(question, int(limit))))

    def _ingest(self, params: dict[str, Any]) -> MCPResponse:
        content = params.get("content")
        if not content:
            return _missing("content")
        metadata = params.get("metadata")
        document = self._pipeline.ingest(
            content, metadata if isinstance(metadata, dict) else None
        )
        return MCPResponse(result={"success": True, "id": document.doc_id})

    def _search(self, params: dict[str, Any]) -> MCPResponse:
        query = params.get("query")
        if not query:
            return _missing("query")
        limit = int(params.get("limit") or DEFAULT_LIMIT)
        results = self._pipeline.retrieve(query, limit)
        return MCPResponse(
            result=[
                {
                    "id": item.document.doc_id,
                    "url": item.document.url,
                    "title": item.document.title,
                    "content": item.document.content,
                    "description": item.document.description,
                    "relevance": item.score,
                }
                for item in results
            ]
        )

    def _health(self, params: dict[str, Any]) -> MCPResponse:
        return MCPResponse(
            result={
                "status": "healthy",
                "indexed_document_count": self._pipeline.index.count,
                "methods": self.methods,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )


def serialize_response(response: NLWebResponse) -> dict[str, Any]:
    return {
        "answer": response.answer,
        "sources": [asdict(source) for source in response.sources],
        "metadata": {
            "query": response.query,
            "processing_time_ms": response.processing_time_ms,
            "total_sources": response.total_sources,
        },
    }


def _missing(name: str) -> MCPResponse:
    return MCPResponse(error=f"Missing required parameter: {name}")
