"""
Provider selection with sequential fallback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import httpx

from analysis.models import CanonicalResult, Post
from config import Settings
from services.providers.adapters import ProviderAdapter, build_adapters
from services.providers.types import (
    PROVIDER_PRIORITY,
    AllProvidersFailedError,
    NoProviderConfiguredError,
    ProviderError,
    ProviderFailure,
    build_provider_configs,
    normalize_provider_name,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisAttempt:
    provider: str
    results: List[CanonicalResult] = field(default_factory=list)
    failures: List[ProviderFailure] = field(default_factory=list)


class ProviderRouter:
    """
    Registry of provider adapters.

    Holds no per-request state, so one instance is shared by every request.
    """

    def __init__(self, adapters: Optional[Iterable[ProviderAdapter]] = None, default_provider: Optional[str] = None):
        self._adapters: Dict[str, ProviderAdapter] = {}
        for adapter in adapters or ():
            self.register(adapter)
        self.default_provider = normalize_provider_name(default_provider)

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> Optional[ProviderAdapter]:
        return self._adapters.get(name)

    def configured_providers(self) -> List[str]:
        """Configured provider names in priority order."""
        return [
            name
            for name in PROVIDER_PRIORITY
            if name in self._adapters and self._adapters[name].is_configured()
        ]

    def resolve_order(self, preferred_provider: Optional[str] = None) -> List[str]:
        """
        Attempt order for one request: the preferred provider when configured,
        then every other configured provider in priority order.

        Raises:
            ValueError: if ``preferred_provider`` is not a known provider name.
        """
        configured = self.configured_providers()
        preferred = normalize_provider_name(preferred_provider)
        if preferred is None:
            preferred = self.default_provider
        if preferred in configured:
            return [preferred] + [name for name in configured if name != preferred]
        if preferred is not None and preferred_provider is not None:
            logger.info("Preferred provider %s is not configured; using priority order", preferred)
        return configured

    async def analyze_with_report(
        self,
        prompt: str,
        preferred_provider: Optional[str] = None,
        post: Optional[Post] = None,
    ) -> AnalysisAttempt:
        order = self.resolve_order(preferred_provider)
        if not order:
            raise NoProviderConfiguredError("No AI provider is configured")

        failures: List[ProviderFailure] = []
        for name in order:
            adapter = self._adapters[name]
            try:
                raw = await adapter.analyze(prompt)
            except ProviderError as exc:
                logger.warning(
                    "Provider %s failed (status=%s): %s",
                    name,
                    exc.status_code,
                    exc,
                )
                failures.append(ProviderFailure(provider=name, error=exc))
                continue
            results = adapter.normalize(raw, post)
            if failures:
                logger.info("Provider %s succeeded after %d fallback(s)", name, len(failures))
            return AnalysisAttempt(provider=name, results=results, failures=failures)

        last = failures[-1]
        logger.error(
            "All AI providers failed (%s); last provider %s",
            ", ".join(failure.provider for failure in failures),
            last.provider,
        )
        raise AllProvidersFailedError(last.error, failures)

    async def analyze(
        self,
        prompt: str,
        preferred_provider: Optional[str] = None,
        post: Optional[Post] = None,
    ) -> List[CanonicalResult]:
        attempt = await self.analyze_with_report(prompt, preferred_provider, post)
        return attempt.results

    def provider_status(self) -> Dict[str, Dict[str, bool]]:
        return {
            name: {
                "registered": name in self._adapters,
                "configured": name in self._adapters and self._adapters[name].is_configured(),
                "preferred": name == self.default_provider,
            }
            for name in PROVIDER_PRIORITY
        }


def build_provider_router(settings: Settings, client: Optional[httpx.AsyncClient] = None) -> ProviderRouter:
    """Wire one adapter per provider from settings."""
    adapters = build_adapters(build_provider_configs(settings), client=client)
    try:
        default_provider = normalize_provider_name(settings.DEFAULT_AI_PROVIDER)
    except ValueError:
        logger.warning("Ignoring unknown DEFAULT_AI_PROVIDER=%s", settings.DEFAULT_AI_PROVIDER)
        default_provider = None
    return ProviderRouter(adapters.values(), default_provider=default_provider)
