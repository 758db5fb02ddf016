"""Viral post analysis across AI providers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from analysis.enhancer import ResultEnhancer
from analysis.models import AnalysisMode, CanonicalResult, Post
from analysis.prompts import build_prompt
from services.providers.router import AnalysisAttempt, ProviderRouter

logger = logging.getLogger(__name__)


async def _analyze_one(
    post: Post,
    router: ProviderRouter,
    mode: AnalysisMode,
    preferred_provider: Optional[str],
) -> AnalysisAttempt:
    prompt = build_prompt([post], mode)
    return await router.analyze_with_report(prompt, preferred_provider, post)


async def gather_in_order(coros: Sequence[Any]) -> List[Any]:
    """Run coroutines concurrently; on the first failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def analyze_posts_service(
    posts: Sequence[Post],
    router: ProviderRouter,
    enhancer: ResultEnhancer,
    *,
    preferred_provider: Optional[str] = None,
    mode: AnalysisMode = "full",
    max_posts: int = 5,
) -> Dict[str, Any]:
    """
    Analyze each post with one provider call and enhance the answers.

    Results keep the order of the input posts.

    Raises:
        ValueError: when no posts are given or the provider name is unknown.
        NoProviderConfiguredError: when no AI provider has a key.
        AllProvidersFailedError: when any post exhausted every provider.
    """
    if not posts:
        raise ValueError("At least one post is required")
    # Fail fast on an unknown provider before any network call.
    router.resolve_order(preferred_provider)

    selected = list(posts)[:max_posts]
    if len(posts) > len(selected):
        logger.info("Analyzing first %d of %d posts", len(selected), len(posts))

    attempts: List[AnalysisAttempt] = await gather_in_order(
        [_analyze_one(post, router, mode, preferred_provider) for post in selected]
    )

    results: List[CanonicalResult] = []
    for attempt in attempts:
        results.extend(enhancer.enhance_many(attempt.results))

    recovered = sum(1 for result in results if result.parse_recovery_used)
    if recovered:
        logger.warning("Parse recovery used for %d of %d results", recovered, len(results))

    return {
        "success": True,
        "provider": attempts[0].provider,
        "analysisType": mode,
        "count": len(results),
        "results": [result.to_payload() for result in results],
    }
