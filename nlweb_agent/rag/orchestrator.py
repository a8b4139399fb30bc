from __future__ import annotations

"""Query orchestration: validate, enrich, classify, generate."""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from nlweb_agent.agents.router import QueryClassifier
from nlweb_agent.rag.enricher import ContextEnricher
from nlweb_agent.rag.errors import InternalError, QueryError
from nlweb_agent.rag.guardrails import validate_query_input
from nlweb_agent.rag.llm import ResponseGenerator
from nlweb_agent.rag.profiles import ProfileOverrides, resolve_profile
from nlweb_agent.rag.types import SourceSnippet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryMetadata:
    model: str
    processing_time_ms: int
    tokens_used: int | None
    query_type: str
    config: dict[str, float | int]
    sources: list[SourceSnippet] = field(default_factory=list)


@dataclass(frozen=True)
class QueryResult:
    text: str
    metadata: QueryMetadata


@dataclass
class QueryOrchestrator:
    enricher: ContextEnricher
    generator: ResponseGenerator
    classifier: QueryClassifier = field(default_factory=QueryClassifier)
    overrides: ProfileOverrides = field(default_factory=ProfileOverrides)

    async def process(self, raw_query: Any, context: Any = None) -> QueryResult:
        """Run a raw query through the pipeline; errors are typed by kind."""
        start = time.perf_counter()
        try:
            question = validate_query_input({"query": raw_query, "context": context})
            enrichment = self.enricher.enrich_with_sources(question)
            decision = self.classifier.route(question)
            profile = resolve_profile(decision.profile, self.overrides)
            logger.info(
                "query_received",
                extra={
                    "query_length": len(question),
                    "query_hash": hashlib.sha256(question.encode("utf-8")).hexdigest(),
                    "query_type": decision.profile,
                    "route_reason": decision.reason,
                    "model": profile.model,
                    "enriched": enrichment.applied,
                },
            )
            generated = await self.generator.generate(enrichment.text, profile)
        except QueryError as exc:
            logger.warning(
                "query_failed",
                extra={
                    "kind": exc.kind,
                    "remote_kind": getattr(exc, "remote_kind", None),
                    "elapsed_ms": _elapsed_ms(start),
                },
            )
            raise
        except Exception as exc:
            logger.exception("query_failed_unexpected", extra={"elapsed_ms": _elapsed_ms(start)})
            raise InternalError() from exc

        processing_time = _elapsed_ms(start)
        logger.info(
            "query_completed",
            extra={
                "processing_time_ms": processing_time,
                "tokens_used": generated.tokens_used,
                "answer_length": len(generated.text),
            },
        )
        return QueryResult(
            text=generated.text,
            metadata=QueryMetadata(
                model=generated.model,
                processing_time_ms=processing_time,
                tokens_used=generated.tokens_used,
                query_type=decision.profile,
                config={
                    "temperature": profile.temperature,
                    "top_p": profile.top_p,
                    "max_tokens": profile.max_tokens,
                },
                sources=enrichment.sources,
            ),
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
