from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from nlweb_agent.index.inmemory import ContentIndex
from nlweb_agent.rag.answerer import SynthesizingAnswerer
from nlweb_agent.rag.highlights import to_source_snippet
from nlweb_agent.rag.types import Document, SearchResult, SourceSnippet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NLWebResponse:
    answer: str
    sources: list[SourceSnippet]
    query: str
    processing_time_ms: int

    @property
    def total_sources(self) -> int:
        return len(self.sources)


@dataclass
class NLWebPipeline:
    index: ContentIndex
    answerer: SynthesizingAnswerer = field(default_factory=SynthesizingAnswerer)
    max_results: int = 5

    def ingest(self, content: str, metadata: dict[str, Any] | None = None) -> Document:
        return self.index.ingest(content, metadata)

    def retrieve(self, question: str, max_results: int | None = None) -> list[SearchResult]:
        return self.index.search(question, max_results or self.max_results)

    def ask(self, question: str, max_results: int | None = None) -> NLWebResponse:
        start = time.perf_counter()
        results = self.retrieve(question, max_results)
        answer = self.answerer.generate(question, results)
        sources = [to_source_snippet(result, question) for result in results]
        processing_time = int((time.perf_counter() - start) * 1000)
        logger.info(
            "nlweb_ask_complete",
            extra={
                "query_length": len(question),
                "sources": len(sources),
                "processing_time_ms": processing_time,
            },
        )
        return NLWebResponse(
            answer=answer,
            sources=sources,
            query=question,
            processing_time_ms=processing_time,
        )
