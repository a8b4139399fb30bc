from __future__ import annotations

from functools import lru_cache

from nlweb_agent.agents.mcp import MCPDispatcher
from nlweb_agent.agents.router import QueryClassifier
from nlweb_agent.app.health import HealthService
from nlweb_agent.app.settings import settings
from nlweb_agent.index.inmemory import ContentIndex
from nlweb_agent.index.seed import default_documents
from nlweb_agent.rag.enricher import ContextEnricher
from nlweb_agent.rag.llm import OpenAIGenerator, ResponseGenerator
from nlweb_agent.rag.orchestrator import QueryOrchestrator
from nlweb_agent.rag.pipeline import NLWebPipeline


@lru_cache
def get_index() -> ContentIndex:
    return ContentIndex(seed=default_documents() if settings.seed_content else None)


@lru_cache
def get_pipeline() -> NLWebPipeline:
    return NLWebPipeline(index=get_index())


@lru_cache
def get_mcp_dispatcher() -> MCPDispatcher:
    return MCPDispatcher(get_pipeline())


@lru_cache
def get_generator() -> ResponseGenerator:
    return OpenAIGenerator(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
    )


@lru_cache
def get_orchestrator() -> QueryOrchestrator:
    return QueryOrchestrator(
        enricher=ContextEnricher(index=get_index()),
        generator=get_generator(),
        classifier=QueryClassifier(),
        overrides=settings.profile_overrides,
    )


@lru_cache
def get_health_service() -> HealthService:
    return HealthService(settings=settings, index_provider=get_index)


def reset_pipeline_cache() -> None:
    for cached in (
        get_index,
        get_pipeline,
        get_mcp_dispatcher,
        get_generator,
        get_orchestrator,
        get_health_service,
    ):
        cached.cache_clear()
