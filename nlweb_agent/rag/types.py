from __future__ import annotations

"""Core data types for indexed content, retrieval and generation."""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class StructuredContent:
    """Payload for content that parsed as JSON."""
    data: Any
    discriminator: str | None = None


@dataclass(frozen=True)
class PlainTextContent:
    """Payload marker for content stored verbatim."""


ContentPayload = Union[StructuredContent, PlainTextContent]


@dataclass(frozen=True)
class Document:
    """Unit of ingested content held by the content index."""
    doc_id: str
    url: str
    title: str
    content: str
    description: str | None = None
    payload: ContentPayload = field(default_factory=PlainTextContent)

    @property
    def is_structured(self) -> bool:
        return isinstance(self.payload, StructuredContent)


@dataclass(frozen=True)
class SearchResult:
    """Document paired with its relevance for a specific query."""
    document: Document
    score: float


@dataclass(frozen=True)
class SourceSnippet:
    """Caller-facing view of a retrieval result."""
    title: str
    url: str
    snippet: str
    relevance_score: float


@dataclass(frozen=True)
class GenerationResult:
    """Text generated by the remote model plus usage metadata."""
    text: str
    model: str
    tokens_used: int | None
    elapsed_ms: int
