from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    query: Any = None
    context: Any = None


class SourceItem(BaseModel):
    title: str
    url: str
    snippet: str
    relevance_score: float


class SamplingConfig(BaseModel):
    temperature: float
    top_p: float
    max_tokens: int


class QueryMetadataModel(BaseModel):
    model: str
    processing_time_ms: int
    total_processing_time_ms: int
    tokens_used: int | None = None
    query_type: str
    config: SamplingConfig
    sources: list[SourceItem] = Field(default_factory=list)


class QueryResponse(BaseModel):
    success: bool = True
    response: str
    timestamp: str
    metadata: QueryMetadataModel


class ErrorResponse(BaseModel):
    error: str
    message: str
    kind: str
    remote_kind: str | None = None
    timestamp: str


class AskRequest(BaseModel):
    question: str = Field(min_length=1)
    context: str | None = None
    max_results: int | None = Field(default=None, ge=1, le=50)


class AskMetadata(BaseModel):
    query: str
    processing_time_ms: int
    total_sources: int


class AskResponse(BaseModel):
    answer: str
    sources: list[SourceItem]
    metadata: AskMetadata


class IngestRequest(BaseModel):
    content: str | None = None
    url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class IngestResponse(BaseModel):
    success: bool
    id: str
    title: str
    message: str


class MCPRequest(BaseModel):
    method: str = Field(min_length=1)
    params: dict[str, Any] | None = None


class IndexStatusResponse(BaseModel):
    status: str
    indexed_document_count: int
    timestamp: str
