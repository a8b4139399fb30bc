from __future__ import annotations

"""Named sampling profiles for the remote language model."""

from dataclasses import dataclass, replace


class ProfileConfigError(ValueError):
    """Raised when a resolved profile has out-of-range parameters."""
    pass


@dataclass(frozen=True)
class GenerationProfile:
    """Bundle of language-model sampling parameters."""
    name: str
    model: str
    max_tokens: int
    temperature: float
    top_p: float
    frequency_penalty: float
    presence_penalty: float
    timeout_ms: int

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass(frozen=True)
class ProfileOverrides:
    """Explicit environment-level overrides layered on any profile."""
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    timeout_ms: int | None = None


DEFAULT_PROFILE = GenerationProfile(
    name="default",
    model="gpt-3.5-turbo",
    max_tokens=500,
    temperature=0.7,
    top_p=0.9,
    frequency_penalty=0.1,
    presence_penalty=0.1,
    timeout_ms=30000,
)

PROFILES: dict[str, GenerationProfile] = {
    "default": DEFAULT_PROFILE,
    "fast": replace(
        DEFAULT_PROFILE,
        name="fast",
        max_tokens=300,
        temperature=0.5,
        top_p=0.8,
        frequency_penalty=0.0,
        presence_penalty=0.0,
    ),
    "quality": replace(
        DEFAULT_PROFILE,
        name="quality",
        model="gpt-4",
        max_tokens=800,
        temperature=0.8,
        top_p=0.95,
        frequency_penalty=0.2,
        presence_penalty=0.2,
    ),
    "creative": replace(
        DEFAULT_PROFILE,
        name="creative",
        max_tokens=600,
        temperature=0.9,
        top_p=0.95,
        frequency_penalty=-0.1,
        presence_penalty=0.3,
    ),
    "analytical": replace(
        DEFAULT_PROFILE,
        name="analytical",
        max_tokens=400,
        temperature=0.3,
        top_p=0.7,
        frequency_penalty=0.3,
        presence_penalty=0.1,
    ),
}


def resolve_profile(name: str | None, overrides: ProfileOverrides | None = None) -> GenerationProfile:
    """Select a named profile and apply any explicit overrides."""
    profile = PROFILES.get((name or "default").strip().lower(), DEFAULT_PROFILE)
    if overrides is not None:
        changes = {
            key: value
            for key, value in (
                ("model", overrides.model),
                ("max_tokens", overrides.max_tokens),
                ("temperature", overrides.temperature),
                ("timeout_ms", overrides.timeout_ms),
            )
            if value is not None
        }
        if changes:
            profile = replace(profile, **changes)
    validate_profile(profile)
    return profile


def validate_profile(profile: GenerationProfile) -> None:
    if not profile.model or not isinstance(profile.model, str):
        raise ProfileConfigError("model must be a non-empty string")
    if not 1 <= profile.max_tokens <= 4096:
        raise ProfileConfigError("max_tokens must be between 1 and 4096")
    if not 0 <= profile.temperature <= 2:
        raise ProfileConfigError("temperature must be between 0 and 2")
    if not 0 <= profile.top_p <= 1:
        raise ProfileConfigError("top_p must be between 0 and 1")
    if not -2 <= profile.frequency_penalty <= 2:
        raise ProfileConfigError("frequency_penalty must be between -2 and 2")
    if not -2 <= profile.presence_penalty <= 2:
        raise ProfileConfigError("presence_penalty must be between -2 and 2")
    if not 1000 <= profile.timeout_ms <= 120000:
        raise ProfileConfigError("timeout_ms must be between 1000 and 120000")
