from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from nlweb_agent.rag.llm import DEFAULT_OPENAI_BASE_URL
from nlweb_agent.rag.profiles import ProfileOverrides

load_dotenv()

_ALLOWED_ENVIRONMENTS = {"development", "production", "test"}


def _optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _optional_int(name: str) -> int | None:
    value = _optional(name)
    return int(value) if value is not None else None


def _optional_float(name: str) -> float | None:
    value = _optional(name)
    return float(value) if value is not None else None


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = _optional("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL)
    openai_model: str | None = _optional("OPENAI_MODEL")
    openai_max_tokens: int | None = _optional_int("OPENAI_MAX_TOKENS")
    openai_temperature: float | None = _optional_float("OPENAI_TEMPERATURE")
    openai_timeout_ms: int | None = _optional_int("OPENAI_TIMEOUT_MS")
    seed_content: bool = _flag("NLWEB_SEED_CONTENT", "true")
    fetch_timeout: float = float(os.getenv("NLWEB_FETCH_TIMEOUT", "15"))
    fetch_max_bytes: int = int(os.getenv("NLWEB_FETCH_MAX_BYTES", "1048576"))
    app_env: str = os.getenv("APP_ENV", "development").strip().lower()
    port: int = int(os.getenv("PORT", "3001"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    metrics_enabled: bool = _flag("METRICS_ENABLED", "true")
    version: str = os.getenv("APP_VERSION", "1.0.0")

    @property
    def profile_overrides(self) -> ProfileOverrides:
        return ProfileOverrides(
            model=self.openai_model,
            max_tokens=self.openai_max_tokens,
            temperature=self.openai_temperature,
            timeout_ms=self.openai_timeout_ms,
        )

    @property
    def cors_origins(self) -> list[str]:
        """Any origin outside production; none in production."""
        return [] if self.app_env == "production" else ["*"]

    @property
    def openai_key_configured(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.startswith("sk-"))

    def validation_errors(self) -> list[str]:
        problems: list[str] = []
        if not self.openai_api_key:
            problems.append("OPENAI_API_KEY is required")
        elif not self.openai_api_key.startswith("sk-"):
            problems.append('OPENAI_API_KEY must start with "sk-"')
        if not 1 <= self.port <= 65535:
            problems.append("PORT must be between 1 and 65535")
        if self.app_env not in _ALLOWED_ENVIRONMENTS:
            problems.append(
                "APP_ENV must be one of " + ", ".join(sorted(_ALLOWED_ENVIRONMENTS))
            )
        if not isinstance(logging.getLevelName(self.log_level.strip().upper()), int):
            problems.append(f"LOG_LEVEL is not a known level: {self.log_level}")
        return problems


settings = Settings()
