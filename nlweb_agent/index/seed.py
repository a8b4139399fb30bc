from __future__ import annotations

"""Fixed demo content loaded into the index at process start."""

import json

DEFAULT_CONTENT: tuple[dict[str, str], ...] = (
    {
        "@type": "WebPage",
        "url": "https://example.com/ai-guide",
        "name": "AI Development Guide",
        "text": (
            "Artificial Intelligence development requires careful consideration of ethical "
            "implications, data quality, and model performance. Modern AI systems use large "
            "language models trained on vast datasets to perform tasks like text generation, "
            "code completion, and question answering."
        ),
        "description": "Comprehensive guide to AI development best practices",
    },
    {
        "@type": "WebPage",
        "url": "https://example.com/web-dev",
        "name": "Modern Web Development",
        "text": (
            "Web development has evolved significantly with the advent of modern frameworks, "
            "responsive design principles, and progressive web applications. Key technologies "
            "include React, Node.js, TypeScript, and CSS Grid."
        ),
        "description": "Overview of current web development technologies and practices",
    },
    {
        "@type": "WebPage",
        "url": "https://example.com/nlweb-intro",
        "name": "Introduction to NLWeb",
        "text": (
            "NLWeb transforms traditional websites into conversational interfaces using natural "
            "language processing. It leverages Schema.org structured data and acts as an MCP "
            "server for AI agent integration."
        ),
        "description": "Learn about NLWeb and its capabilities",
    },
)


def default_documents() -> list[str]:
    """Return the seed set serialized the way clients submit content."""
    return [json.dumps(item) for item in DEFAULT_CONTENT]
