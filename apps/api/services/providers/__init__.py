"""Public AI provider utilities."""

from services.providers.adapters import ProviderAdapter, build_request, extract_text
from services.providers.router import AnalysisAttempt, ProviderRouter, build_provider_router
from services.providers.types import (
    PROVIDER_PRIORITY,
    AllProvidersFailedError,
    NoProviderConfiguredError,
    ProviderAuthError,
    ProviderConfig,
    ProviderError,
    ProviderFailure,
    ProviderHTTPError,
    ProviderTimeoutError,
    build_provider_configs,
    normalize_provider_name,
)

__all__ = [
    "PROVIDER_PRIORITY",
    "AllProvidersFailedError",
    "AnalysisAttempt",
    "NoProviderConfiguredError",
    "ProviderAdapter",
    "ProviderAuthError",
    "ProviderConfig",
    "ProviderError",
    "ProviderFailure",
    "ProviderHTTPError",
    "ProviderRouter",
    "ProviderTimeoutError",
    "build_provider_configs",
    "build_provider_router",
    "build_request",
    "extract_text",
    "normalize_provider_name",
]
