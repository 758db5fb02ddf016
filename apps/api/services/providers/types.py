"""AI provider contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from analysis.models import ProviderKind
from config import Settings, is_placeholder_key


PROVIDER_PRIORITY: tuple = ("openai", "claude", "gemini", "grok")

AuthScheme = Literal["bearer", "x-api-key", "query-key"]

PROVIDER_ALIASES: Dict[str, Optional[str]] = {
    "openai": "openai",
    "chatgpt": "openai",
    "gpt": "openai",
    "claude": "claude",
    "anthropic": "claude",
    "gemini": "gemini",
    "google": "gemini",
    "grok": "grok",
    "xai": "grok",
    "x": "grok",
    "auto": None,
}


class ProviderError(RuntimeError):
    """Base class for a single provider call failing."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ProviderAuthError(ProviderError):
    """Raised when a provider has no credential or rejects it."""


class ProviderHTTPError(ProviderError):
    """Raised on a non-2xx response, a transport failure or an unreadable body."""


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its timeout."""


class NoProviderConfiguredError(RuntimeError):
    """Raised when no AI provider has a credential."""


class AllProvidersFailedError(RuntimeError):
    """Raised when every configured provider failed for one request."""

    def __init__(
        self,
        last_error: ProviderError,
        failures: Optional[List["ProviderFailure"]] = None,
    ) -> None:
        super().__init__(f"All AI providers failed; last provider {last_error.provider}: {last_error}")
        self.last_error = last_error
        self.last_provider = last_error.provider
        self.failures = list(failures or [])


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    error: ProviderError


@dataclass(frozen=True)
class ProviderConfig:
    kind: ProviderKind
    endpoint: str
    auth_scheme: AuthScheme
    model: str
    api_key: str = field(default="", repr=False)
    timeout_seconds: float = 60.0
    max_tokens: int = 1500
    temperature: float = 0.7
    api_version: Optional[str] = None

    def is_configured(self) -> bool:
        return not is_placeholder_key(self.api_key)


def normalize_provider_name(name: Optional[str]) -> Optional[ProviderKind]:
    """
    Map a user-supplied provider name or alias to a provider kind.

    Returns None for "auto" or an empty value.

    Raises:
        ValueError: if the name is not a known provider.
    """
    if name is None:
        return None
    key = name.strip().lower()
    if not key:
        return None
    if key not in PROVIDER_ALIASES:
        raise ValueError(f"Unknown AI provider: {name}")
    return PROVIDER_ALIASES[key]


def build_provider_configs(settings: Settings) -> Dict[str, ProviderConfig]:
    """Create the read-only provider registry from settings."""
    common = {
        "timeout_seconds": float(settings.AI_PROVIDER_TIMEOUT_SECONDS),
        "max_tokens": int(settings.AI_MAX_TOKENS),
        "temperature": float(settings.AI_TEMPERATURE),
    }
    gemini_model = settings.GEMINI_MODEL
    return {
        "openai": ProviderConfig(
            kind="openai",
            endpoint=settings.OPENAI_ENDPOINT,
            auth_scheme="bearer",
            model=settings.OPENAI_MODEL,
            api_key=settings.OPENAI_API_KEY,
            **common,
        ),
        "claude": ProviderConfig(
            kind="claude",
            endpoint=settings.CLAUDE_ENDPOINT,
            auth_scheme="x-api-key",
            model=settings.CLAUDE_MODEL,
            api_key=settings.ANTHROPIC_API_KEY,
            api_version=settings.ANTHROPIC_VERSION,
            **common,
        ),
        "gemini": ProviderConfig(
            kind="gemini",
            endpoint=f"{settings.GEMINI_ENDPOINT_BASE.rstrip('/')}/{gemini_model}:generateContent",
            auth_scheme="query-key",
            model=gemini_model,
            api_key=settings.GOOGLE_API_KEY,
            **common,
        ),
        "grok": ProviderConfig(
            kind="grok",
            endpoint=settings.GROK_ENDPOINT,
            auth_scheme="bearer",
            model=settings.GROK_MODEL,
            api_key=settings.GROK_API_KEY,
            **common,
        ),
    }
