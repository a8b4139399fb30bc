from __future__ import annotations

"""Local answer synthesis for NLWeb ask responses (no LLM call)."""

from dataclasses import dataclass

from nlweb_agent.rag.guardrails import sanitize_string, truncate_string
from nlweb_agent.rag.types import SearchResult

QUESTION_ECHO_CHARS = 200


@dataclass
class SynthesizingAnswerer:
    """Stitch a templated answer from the matched documents."""
    excerpt_chars: int = 200

    def generate(self, question: str, results: list[SearchResult]) -> str:
        # Ask questions skip query validation, so the echoed copy is cleaned.
        echoed = truncate_string(sanitize_string(question), QUESTION_ECHO_CHARS)
        if not results:
            return (
                f'No indexed content in the NLWeb knowledge base matched "{echoed}". '
                "Try rephrasing the question or ingesting related content."
            )
        context_text = "\n\n".join(
            f"From {result.document.title}: {self._excerpt(result.document.content)}"
            for result in results
        )
        return (
            f'Based on the available information, here\'s what I found regarding "{echoed}":\n\n'
            f"{context_text}\n\n"
            "This information is derived from the indexed content in the NLWeb knowledge base. "
            "For more specific details, you may want to visit the source websites directly."
        )

    def _excerpt(self, text: str) -> str:
        return text[: self.excerpt_chars] + "..."
