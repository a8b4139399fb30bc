from __future__ import annotations

"""Keyword routing of questions to generation profiles."""

from dataclasses import dataclass
import re

CREATIVE = "creative"
ANALYTICAL = "analytical"
QUALITY = "quality"
FAST = "fast"

_CREATIVE_RE = re.compile(r"\b(story|poem|write|create|imagine|fiction|creative)\b")
_ANALYTICAL_RE = re.compile(
    r"\b(analyze|research|data|statistics|facts?|compare|explain|how|why|what)\b"
)
_QUESTION_RE = re.compile(r"\b(how|what|why|when|where|who)\b")


@dataclass(frozen=True)
class RouteDecision:
    """Routing decision result."""
    profile: str
    reason: str


class QueryClassifier:
    """Rule-based classifier, checked in priority order."""

    def route(self, query: str) -> RouteDecision:
        lowered = query.lower()
        if _CREATIVE_RE.search(lowered):
            return RouteDecision(profile=CREATIVE, reason="creative_keyword")
        if _ANALYTICAL_RE.search(lowered):
            return RouteDecision(profile=ANALYTICAL, reason="analytical_keyword")
        if "?" in lowered or _QUESTION_RE.search(lowered):
            return RouteDecision(profile=QUALITY, reason="question")
        return RouteDecision(profile=FAST, reason="default_fast")
