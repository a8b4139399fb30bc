from __future__ import annotations

"""Response generation against an OpenAI-compatible chat completions API."""

from dataclasses import dataclass
import logging
import time
from typing import Protocol

import httpx

from nlweb_agent.rag import errors
from nlweb_agent.rag.errors import RemoteServiceError
from nlweb_agent.rag.profiles import GenerationProfile
from nlweb_agent.rag.types import GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"

_SYSTEM_PROMPT = (
    "You are an intelligent AI assistant with access to a comprehensive knowledge base "
    "through NLWeb. You provide helpful, accurate, and contextual responses based on both "
    "your training data and the web context provided.\n\n"
    "When web context is available from NLWeb, use it to enhance your responses with "
    "current, relevant information from trusted sources. Always cite sources when providing "
    "factual information.\n\n"
    "If you don't have enough context to answer a question, be honest about it and suggest "
    "alternatives. Keep responses clear, concise, and well-formatted. Use markdown when "
    "appropriate for better readability.\n\n"
    "You can reference information from the NLWeb knowledge base which includes content "
    "from various websites and structured data sources."
)


def base_system_prompt() -> str:
    """Return the fixed system instruction sent with every request."""
    return _SYSTEM_PROMPT


class ResponseGenerator(Protocol):
    async def generate(self, prompt: str, profile: GenerationProfile) -> GenerationResult:
        ...


@dataclass(frozen=True)
class OpenAIGenerator:
    """Generator backed by OpenAI chat completions."""
    api_key: str | None
    base_url: str = DEFAULT_OPENAI_BASE_URL
    system_prompt: str = _SYSTEM_PROMPT
    transport: httpx.AsyncBaseTransport | None = None

    async def generate(self, prompt: str, profile: GenerationProfile) -> GenerationResult:
        """Send the prompt with the profile's sampling parameters."""
        if not self.api_key:
            raise RemoteServiceError("OpenAI API key is required", errors.UNAUTHORIZED)
        payload = {
            "model": profile.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": profile.max_tokens,
            "temperature": profile.temperature,
            "top_p": profile.top_p,
            "frequency_penalty": profile.frequency_penalty,
            "presence_penalty": profile.presence_penalty,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=profile.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(
                    f"{self.base_url.rstrip('/')}/chat/completions",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            _log_failure(profile, "timeout", exc)
            raise RemoteServiceError("OpenAI API request timed out", errors.GENERIC) from exc
        except httpx.HTTPStatusError as exc:
            _log_failure(profile, "http_status", exc, exc.response.status_code)
            raise _status_error(exc.response.status_code) from exc
        except (httpx.HTTPError, ValueError) as exc:
            _log_failure(profile, "transport", exc)
            raise RemoteServiceError(
                "Failed to process query with OpenAI API", errors.GENERIC
            ) from exc

        content = _extract_content(data)
        if not content:
            logger.error("llm_empty_response", extra={"model": profile.model})
            raise RemoteServiceError("No response received from OpenAI API", errors.GENERIC)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return GenerationResult(
            text=content.strip(),
            model=str(data.get("model") or profile.model),
            tokens_used=_extract_usage(data),
            elapsed_ms=elapsed_ms,
        )


def _status_error(status_code: int) -> RemoteServiceError:
    """Map an HTTP status from the provider to a typed remote error."""
    if status_code in {401, 403}:
        return RemoteServiceError("Invalid OpenAI API key", errors.UNAUTHORIZED)
    if status_code == 429:
        return RemoteServiceError("OpenAI API rate limit exceeded", errors.RATE_LIMITED)
    if status_code >= 500:
        return RemoteServiceError("OpenAI API service error", errors.UPSTREAM_UNAVAILABLE)
    return RemoteServiceError("Failed to process query with OpenAI API", errors.GENERIC)


def _extract_content(data: object) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content")
    if not isinstance(content, str):
        return ""
    return content.strip()


def _extract_usage(data: dict) -> int | None:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    total = usage.get("total_tokens")
    return total if isinstance(total, int) else None


def _log_failure(
    profile: GenerationProfile,
    reason: str,
    exc: Exception,
    status_code: int | None = None,
) -> None:
    logger.error(
        "llm_request_failed",
        extra={
            "model": profile.model,
            "reason": reason,
            "status_code": status_code,
            "detail": type(exc).__name__,
        },
    )
