from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import httpx


class ContentFetchError(RuntimeError):
    pass


@dataclass(frozen=True)
class FetchedContent:
    url: str
    content: str
    content_type: str


async def fetch_content(
    url: str,
    timeout: float,
    max_bytes: int,
    client: httpx.AsyncClient | None = None,
) -> FetchedContent:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ContentFetchError("Only absolute http(s) URLs can be fetched")
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
    try:
        response = await client.get(url)
        response.raise_for_status()
        body = response.content
        if max_bytes and len(body) > max_bytes:
            raise ContentFetchError("Fetched content exceeds maximum size limit")
        return FetchedContent(
            url=url,
            content=body.decode(response.encoding or "utf-8", errors="ignore"),
            content_type=response.headers.get("content-type", ""),
        )
    except httpx.HTTPError as exc:
        raise ContentFetchError(str(exc)) from exc
    finally:
        if owns_client and client is not None:
            await client.aclose()


def fetched_metadata(fetched: FetchedContent, metadata: dict[str, Any] | None) -> dict[str, Any]:
    merged = dict(metadata or {})
    merged.setdefault("url", fetched.url)
    merged.setdefault("content_type", fetched.content_type)
    return merged
