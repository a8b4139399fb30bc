from __future__ import annotations

"""Append locally retrieved NLWeb context to user questions."""

import logging
from dataclasses import dataclass, field

from nlweb_agent.index.inmemory import ContentIndex
from nlweb_agent.rag.highlights import to_source_snippet
from nlweb_agent.rag.types import SourceSnippet

logger = logging.getLogger(__name__)

CONTEXT_HEADER = "Relevant web context from NLWeb:"
ENRICHMENT_MAX_RESULTS = 3


@dataclass(frozen=True)
class Enrichment:
    text: str
    sources: list[SourceSnippet] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return bool(self.sources)


@dataclass
class ContextEnricher:
    index: ContentIndex
    max_results: int = ENRICHMENT_MAX_RESULTS

    def enrich(self, question: str) -> str:
        """Return the question, augmented with matching context when found."""
        return self.enrich_with_sources(question).text

    def enrich_with_sources(self, question: str) -> Enrichment:
        try:
            results = self.index.search(question, self.max_results)
            sources = [to_source_snippet(result, question) for result in results]
        except Exception as exc:
            logger.warning("enrichment_failed", extra={"detail": type(exc).__name__})
            return Enrichment(text=question)
        if not sources:
            return Enrichment(text=question)
        context_text = "\n\n".join(f"[{source.title}] {source.snippet}" for source in sources)
        logger.info("enrichment_applied", extra={"sources": len(sources)})
        return Enrichment(text=f"{question}\n\n{CONTEXT_HEADER}\n{context_text}", sources=sources)
