from __future__ import annotations

"""In-memory content index with keyword relevance scoring."""

import logging
import secrets
import string
import threading
import time
from typing import Any, Iterable

from nlweb_agent.loaders.content import parse_content
from nlweb_agent.rag.types import Document, SearchResult

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 3
TITLE_BOOST = 0.5
_ID_ALPHABET = string.digits + string.ascii_lowercase
_STRIP_CHARS = string.punctuation + "‘’“”"


def generate_content_id() -> str:
    """Build a time-based identifier with a random base-36 suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"content_{int(time.time() * 1000)}_{suffix}"


def query_terms(query: str) -> tuple[list[str], int]:
    """Return match terms and the qualifying-word count for a query."""
    words = [word for word in query.lower().split() if len(word) >= MIN_WORD_LENGTH]
    terms = [word.strip(_STRIP_CHARS) for word in words]
    return terms, len(words)


def relevance_score(terms: list[str], word_count: int, document: Document) -> float:
    """Score a document against query terms, normalized into [0, 1]."""
    if word_count <= 0:
        return 0.0
    title = document.title.lower()
    haystack = f"{title} {document.content.lower()}"
    score = 0.0
    for term in terms:
        if not term:
            continue
        if term in haystack:
            score += 1.0
        if term in title:
            score += TITLE_BOOST
    return min(score / word_count, 1.0)


class ContentIndex:
    """Append-only document store searched by linear keyword scan."""

    def __init__(self, seed: Iterable[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._documents: list[Document] = []
        for raw in seed or ():
            self.ingest(raw, {"type": "demo"})
        logger.info("content_index_initialized", extra={"documents": self.count})

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def documents(self) -> list[Document]:
        with self._lock:
            return list(self._documents)

    def ingest(self, raw_content: str, metadata: dict[str, Any] | None = None) -> Document:
        """Parse and append content; malformed input is stored as plain text."""
        parsed = parse_content(raw_content, metadata)
        document = Document(
            doc_id=generate_content_id(),
            url=parsed.url,
            title=parsed.title,
            content=parsed.content,
            description=parsed.description,
            payload=parsed.payload,
        )
        with self._lock:
            self._documents.append(document)
        logger.info(
            "content_ingested",
            extra={
                "doc_id": document.doc_id,
                "content_length": len(parsed.content),
                "structured": document.is_structured,
            },
        )
        return document

    def search(self, query: str, max_results: int = 5) -> list[SearchResult]:
        """Return documents ranked by keyword relevance; never raises."""
        try:
            terms, word_count = query_terms(query)
            if word_count == 0 or max_results <= 0:
                return []
            scored: list[SearchResult] = []
            for document in self.documents():
                score = relevance_score(terms, word_count, document)
                if score > 0:
                    scored.append(SearchResult(document=document, score=score))
            scored.sort(key=lambda item: item.score, reverse=True)
            results = scored[:max_results]
        except Exception:
            logger.exception("content_search_failed")
            return []
        logger.info(
            "retrieval_complete",
            extra={"results": len(results), "query_length": len(query)},
        )
        return results

    def stats(self) -> dict[str, int | str]:
        return {"backend": "memory", "document_count": self.count}

    def health(self) -> dict[str, str | bool]:
        return {"backend": "memory", "ok": True}
