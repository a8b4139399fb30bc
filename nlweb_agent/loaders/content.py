from __future__ import annotations

"""Parse raw ingested content (Schema.org JSON, JSON, plain text)."""

import json
from dataclasses import dataclass
from typing import Any

from nlweb_agent.rag.types import ContentPayload, PlainTextContent, StructuredContent

UNKNOWN_URL = "unknown"
UNTITLED = "Untitled"
_BODY_FIELDS = ("articleBody", "text", "content", "description")


@dataclass(frozen=True)
class ParsedContent:
    url: str
    title: str
    content: str
    description: str | None
    payload: ContentPayload


def parse_content(raw: str, metadata: dict[str, Any] | None = None) -> ParsedContent:
    meta = metadata or {}
    # ValueError covers JSONDecodeError, undecodable bytes and oversized integers.
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError):
        return ParsedContent(
            url=_text(meta.get("url")) or UNKNOWN_URL,
            title=_text(meta.get("title")) or UNTITLED,
            content=_plain_text(raw),
            description=_text(meta.get("description")),
            payload=PlainTextContent(),
        )
    if isinstance(data, dict):
        discriminator = data.get("@type") or data.get("type")
        if discriminator:
            return _schema_org(data, str(discriminator), meta)
    body = data if isinstance(data, str) else _dump(data)
    return ParsedContent(
        url=_text(meta.get("url")) or UNKNOWN_URL,
        title=_text(meta.get("title")) or UNTITLED,
        content=body,
        description=_text(meta.get("description")),
        payload=StructuredContent(data=data),
    )


def _schema_org(data: dict[str, Any], discriminator: str, meta: dict[str, Any]) -> ParsedContent:
    body = next(
        (_text(data.get(name)) for name in _BODY_FIELDS if _text(data.get(name))),
        None,
    )
    return ParsedContent(
        url=_text(data.get("url")) or _text(meta.get("url")) or UNKNOWN_URL,
        title=_text(data.get("name")) or _text(data.get("title")) or UNTITLED,
        content=body or _dump(data),
        description=_text(data.get("description")),
        payload=StructuredContent(data=data, discriminator=discriminator),
    )


def _plain_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return "" if raw is None else str(raw)


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _dump(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)
