from __future__ import annotations

"""Snippet extraction for retrieved content."""

import re

from nlweb_agent.rag.types import SearchResult, SourceSnippet

SNIPPET_CHARS = 200
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def extract_snippet(content: str, query: str, max_chars: int = SNIPPET_CHARS) -> str:
    """Pick the first sentence mentioning the query's lead word."""
    tokens = query.lower().split()
    lead = tokens[0] if tokens else ""
    for sentence in _SENTENCE_SPLIT_RE.split(content):
        cleaned = sentence.strip()
        if cleaned and lead in cleaned.lower():
            return cleaned[:max_chars] + "..."
    return content[:max_chars] + "..."


def to_source_snippet(result: SearchResult, query: str) -> SourceSnippet:
    document = result.document
    return SourceSnippet(
        title=document.title,
        url=document.url,
        snippet=extract_snippet(document.content, query),
        relevance_score=result.score,
    )
