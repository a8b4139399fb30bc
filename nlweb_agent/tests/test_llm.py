from __future__ import annotations

import json

import httpx
import pytest

from nlweb_agent.rag import errors
from nlweb_agent.rag.errors import RemoteServiceError
from nlweb_agent.rag.llm import OpenAIGenerator, base_system_prompt
from nlweb_agent.rag.profiles import PROFILES

pytestmark = pytest.mark.anyio


def completion(content: str | None, usage: dict | None = None) -> dict:
    payload = {
        "model": "gpt-3.5-turbo",
        "choices": [{"message": {"role": "assistant", "content": content}}],
    }
    if usage is not None:
        payload["usage"] = usage
    return payload


async def test_generate_returns_trimmed_text_and_usage() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=completion("  Hello there  ", {"total_tokens": 42}))

    generator = OpenAIGenerator(
        api_key="sk-test", base_url="http://llm.test/v1", transport=httpx.MockTransport(handler)
    )
    result = await generator.generate("Say hello", PROFILES["analytical"])

    assert result.text == "Hello there"
    assert result.tokens_used == 42
    assert result.model == "gpt-3.5-turbo"
    assert str(seen[0].url) == "http://llm.test/v1/chat/completions"
    assert seen[0].headers["authorization"] == "Bearer sk-test"
    body = json.loads(seen[0].content)
    assert body["messages"][0] == {"role": "system", "content": base_system_prompt()}
    assert body["messages"][1] == {"role": "user", "content": "Say hello"}
    assert body["temperature"] == 0.3
    assert body["top_p"] == 0.7
    assert body["frequency_penalty"] == 0.3
    assert body["max_tokens"] == 400


async def test_missing_usage_is_optional() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=completion("ok")))
    generator = OpenAIGenerator(api_key="sk-test", transport=transport)
    result = await generator.generate("prompt", PROFILES["fast"])
    assert result.tokens_used is None


@pytest.mark.parametrize(
    ("status", "remote_kind"),
    [
        (401, errors.UNAUTHORIZED),
        (429, errors.RATE_LIMITED),
        (500, errors.UPSTREAM_UNAVAILABLE),
        (503, errors.UPSTREAM_UNAVAILABLE),
        (400, errors.GENERIC),
    ],
)
async def test_status_codes_map_to_remote_kinds(status: int, remote_kind: str) -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(status, json={"error": {"message": "secret detail"}})
    )
    generator = OpenAIGenerator(api_key="sk-test", transport=transport)
    with pytest.raises(RemoteServiceError) as excinfo:
        await generator.generate("prompt", PROFILES["default"])
    assert excinfo.value.remote_kind == remote_kind
    assert "secret detail" not in excinfo.value.message


async def test_empty_reply_is_a_remote_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=completion("   ")))
    generator = OpenAIGenerator(api_key="sk-test", transport=transport)
    with pytest.raises(RemoteServiceError) as excinfo:
        await generator.generate("prompt", PROFILES["default"])
    assert excinfo.value.remote_kind == errors.GENERIC


async def test_timeout_is_a_remote_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    generator = OpenAIGenerator(api_key="sk-test", transport=httpx.MockTransport(handler))
    with pytest.raises(RemoteServiceError) as excinfo:
        await generator.generate("prompt", PROFILES["default"])
    assert excinfo.value.remote_kind == errors.GENERIC
    assert excinfo.value.status_code == 502
    assert "timed out" in excinfo.value.message


async def test_missing_key_fails_without_network_call() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=completion("unused"))

    generator = OpenAIGenerator(api_key=None, transport=httpx.MockTransport(handler))
    with pytest.raises(RemoteServiceError) as excinfo:
        await generator.generate("prompt", PROFILES["default"])
    assert excinfo.value.remote_kind == errors.UNAUTHORIZED
    assert calls == []
