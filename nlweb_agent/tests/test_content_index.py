from __future__ import annotations

import json

from nlweb_agent.index.inmemory import ContentIndex, query_terms
from nlweb_agent.index.seed import default_documents
from nlweb_agent.loaders.content import parse_content
from nlweb_agent.rag.types import PlainTextContent, StructuredContent


def test_seeded_index_holds_default_documents() -> None:
    index = ContentIndex(seed=default_documents())
    titles = [document.title for document in index.documents()]
    assert titles == ["AI Development Guide", "Modern Web Development", "Introduction to NLWeb"]
    assert all(document.url.startswith("https://example.com/") for document in index.documents())


def test_schema_org_content_is_structured() -> None:
    parsed = parse_content(
        json.dumps(
            {
                "@type": "Article",
                "name": "Test",
                "description": "AI is useful.",
                "url": "https://x",
            }
        )
    )
    assert parsed.title == "Test"
    assert parsed.url == "https://x"
    assert parsed.content == "AI is useful."
    assert parsed.description == "AI is useful."
    assert isinstance(parsed.payload, StructuredContent)
    assert parsed.payload.discriminator == "Article"


def test_json_without_discriminator_is_stringified() -> None:
    parsed = parse_content(json.dumps({"rows": [1, 2]}), {"title": "Rows", "url": "https://rows"})
    assert parsed.title == "Rows"
    assert parsed.url == "https://rows"
    assert parsed.content == '{"rows": [1, 2]}'
    assert isinstance(parsed.payload, StructuredContent)
    assert parsed.payload.discriminator is None


def test_malformed_json_degrades_to_plain_text() -> None:
    raw = '{ "unclosed": "object"'
    parsed = parse_content(raw, {"type": "test"})
    assert parsed.content == raw
    assert parsed.title == "Untitled"
    assert parsed.url == "unknown"
    assert isinstance(parsed.payload, PlainTextContent)


def test_ingest_assigns_unique_ids_and_never_deduplicates() -> None:
    index = ContentIndex()
    first = index.ingest("same text", {"title": "Same"})
    second = index.ingest("same text", {"title": "Same"})
    assert first.doc_id != second.doc_id
    assert first.doc_id.startswith("content_")
    assert index.count == 2


def test_search_finds_document_by_title_word() -> None:
    index = ContentIndex(seed=default_documents())
    index.ingest("Employees must book flights early.", {"title": "Travel Policy"})

    results = index.search("travel rules", max_results=3)

    assert results
    assert results[0].document.title == "Travel Policy"
    assert results[0].score > 0


def test_search_returns_empty_for_unknown_words() -> None:
    index = ContentIndex(seed=default_documents())
    assert index.search("quantum physics relativity") == []


def test_short_words_only_yield_no_matches() -> None:
    index = ContentIndex(seed=default_documents())
    assert query_terms("is a an")[1] == 0
    assert index.search("is a an") == []


def test_scores_are_normalized() -> None:
    index = ContentIndex(seed=default_documents())
    index.ingest("web web web", {"title": "Web Web"})
    for query in ("web", "web development frameworks", "AI development guide", "nlweb mcp ???"):
        for result in index.search(query, max_results=10):
            assert 0.0 < result.score <= 1.0


def test_title_matches_are_boosted() -> None:
    index = ContentIndex()
    index.ingest("alpha appears in the body", {"title": "Other"})
    index.ingest("body text", {"title": "Alpha"})
    results = index.search("alpha beta", max_results=5)
    assert [result.document.title for result in results] == ["Alpha", "Other"]
    assert results[0].score == 0.75
    assert results[1].score == 0.5


def test_ties_preserve_ingestion_order_and_cap_results() -> None:
    index = ContentIndex()
    for idx in range(5):
        index.ingest(f"widget number {idx}", {"title": f"Doc {idx}"})
    results = index.search("widget", max_results=3)
    assert [result.document.title for result in results] == ["Doc 0", "Doc 1", "Doc 2"]


def test_trailing_punctuation_does_not_block_matches() -> None:
    index = ContentIndex()
    index.ingest(
        json.dumps(
            {"@type": "Article", "name": "Test", "description": "AI is useful.", "url": "https://x"}
        )
    )
    results = index.search("What is AI?")
    assert len(results) == 1
    assert results[0].score == 0.5


def test_search_never_raises() -> None:
    index = ContentIndex()
    index.ingest("text", {"title": "Doc"})
    assert index.search(None) == []  # type: ignore[arg-type]


def test_oversized_integer_degrades_to_plain_text() -> None:
    raw = "1" * 5000
    document = ContentIndex().ingest(raw)
    assert document.content == raw
    assert isinstance(document.payload, PlainTextContent)


def test_deeply_nested_json_degrades_to_plain_text() -> None:
    raw = "[" * 100000
    document = ContentIndex().ingest(raw, {"title": "Brackets"})
    assert document.content == raw
    assert document.title == "Brackets"
    assert isinstance(document.payload, PlainTextContent)


def test_non_string_payloads_never_raise() -> None:
    index = ContentIndex()
    empty = index.ingest(None)  # type: ignore[arg-type]
    undecodable = index.ingest(b"\xff\xfe not json")  # type: ignore[arg-type]
    text = index.ingest("plain notes about gardening".encode("utf-8"))  # type: ignore[arg-type]

    assert empty.content == ""
    assert isinstance(empty.payload, PlainTextContent)
    assert isinstance(undecodable.payload, PlainTextContent)
    assert text.content == "plain notes about gardening"
    assert index.count == 3
    assert index.search("gardening")[0].document.doc_id == text.doc_id
