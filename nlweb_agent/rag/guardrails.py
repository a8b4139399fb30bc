from __future__ import annotations

"""Input guardrails applied to user questions before any processing."""

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from nlweb_agent.metadata.audit import AuditEvent, hash_actor, record_event
from nlweb_agent.rag.errors import ValidationError

MAX_QUERY_LENGTH = 1000

_HARMFUL_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"exec\s*\(", re.IGNORECASE),
    re.compile(r"system\s*\(", re.IGNORECASE),
    re.compile(r"shell_exec\s*\(", re.IGNORECASE),
    re.compile(r"passthru\s*\(", re.IGNORECASE),
)
_TAG_RE = re.compile(r"<[^>]*>")
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)


class QueryContext(BaseModel):
    """Optional context accompanying a query."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    nlweb_results: list[Any] | None = Field(default=None, alias="nlwebResults")
    user_id: str | None = Field(default=None, alias="userId")
    session_id: str | None = Field(default=None, alias="sessionId")


def contains_harmful_content(value: str) -> bool:
    """Return True when the text matches any unsafe-content pattern."""
    return any(pattern.search(value) for pattern in _HARMFUL_PATTERNS)


def parse_query_context(context: Any) -> QueryContext | None:
    """Validate the optional context shape."""
    if context is None:
        return None
    if isinstance(context, QueryContext):
        return context
    if not isinstance(context, Mapping):
        raise ValidationError('"context" must be an object', rule="context_shape")
    try:
        return QueryContext.model_validate(dict(context))
    except PydanticValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "context"
            for error in exc.errors()
        )
        raise ValidationError(
            f'"context" has invalid fields: {fields}', rule="context_shape"
        ) from exc


def validate_query_input(candidate: Any) -> str:
    """Validate a candidate query object and return the trimmed question."""
    has_context = isinstance(candidate, Mapping) and candidate.get("context") is not None
    try:
        question, context = _validate(candidate)
    except ValidationError as exc:
        query = candidate.get("query") if isinstance(candidate, Mapping) else None
        record_event(
            AuditEvent(
                event_type="input_validation",
                status="failed",
                detail={
                    "rule": exc.rule,
                    "input_type": type(query).__name__,
                    "query_length": len(query) if isinstance(query, str) else None,
                    "has_context": has_context,
                },
            )
        )
        raise
    record_event(
        AuditEvent(
            event_type="input_validation",
            status="passed",
            actor=hash_actor(context.user_id if context else None),
            detail={"query_length": len(question), "has_context": context is not None},
        )
    )
    return question


def _validate(candidate: Any) -> tuple[str, QueryContext | None]:
    if not isinstance(candidate, Mapping):
        raise ValidationError('"query" is required', rule="required")
    if "query" not in candidate or candidate["query"] is None:
        raise ValidationError('"query" is required', rule="required")
    query = candidate["query"]
    if not isinstance(query, str):
        raise ValidationError('"query" must be a string', rule="type")
    question = query.strip()
    if not question:
        raise ValidationError('"query" is not allowed to be empty', rule="min_length")
    if len(question) > MAX_QUERY_LENGTH:
        raise ValidationError(
            f'"query" length must be less than or equal to {MAX_QUERY_LENGTH} characters long',
            rule="max_length",
        )
    if contains_harmful_content(question):
        record_event(
            AuditEvent(
                event_type="harmful_query_detected",
                status="blocked",
                detail={"query_length": len(question)},
                security=True,
            )
        )
        raise ValidationError(
            "Query contains potentially harmful content", rule="unsafe_content"
        )
    context = parse_query_context(candidate.get("context"))
    return question, context


def sanitize_string(value: Any) -> str:
    """Strip markup, script schemes and inline handlers from text."""
    if not isinstance(value, str):
        return ""
    cleaned = _TAG_RE.sub("", value)
    cleaned = _JS_SCHEME_RE.sub("", cleaned)
    cleaned = _HANDLER_RE.sub("", cleaned)
    return cleaned.strip()


def truncate_string(value: str, max_length: int) -> str:
    """Trim text to max_length, ending with an ellipsis when cut."""
    if len(value) <= max_length:
        return value
    return value[: max(max_length - 3, 0)] + "..."
