import asyncio
import random

import pytest

from analysis.enhancer import ResultEnhancer
from analysis.models import Post
from services.analysis import analyze_posts_service, gather_in_order
from services.providers import (
    AllProvidersFailedError,
    NoProviderConfiguredError,
    ProviderHTTPError,
    ProviderRouter,
)
from services.providers.router import AnalysisAttempt
from analysis.parser import parse

from provider_fakes import FakeAdapter, failing_adapter


def _posts(count):
    return [Post(id=f"post-{i}", title=f"Post {i}", metrics={"views": 100 * (i + 1)}) for i in range(count)]


@pytest.fixture
def enhancer():
    return ResultEnhancer(random.Random(1))


class ScriptedRouter:
    """Router double whose per-post behaviour is keyed by post id."""

    def __init__(self, delays=None, failures=(), hangs=()):
        self.delays = delays or {}
        self.failures = set(failures)
        self.hangs = set(hangs)
        self.cancelled = []
        self.seen = []

    def resolve_order(self, preferred_provider=None):
        return ["openai"]

    async def analyze_with_report(self, prompt, preferred_provider=None, post=None):
        self.seen.append(post.id)
        try:
            if post.id in self.hangs:
                await asyncio.Event().wait()
            await asyncio.sleep(self.delays.get(post.id, 0))
        except asyncio.CancelledError:
            self.cancelled.append(post.id)
            raise
        if post.id in self.failures:
            raise AllProvidersFailedError(ProviderHTTPError("openai", "boom", 500))
        result = parse('{"whyViral": "%s"}' % post.id, post, "openai")
        return AnalysisAttempt(provider="openai", results=[result])


@pytest.mark.asyncio
async def test_results_keep_input_order(enhancer):
    router = ScriptedRouter(delays={"post-0": 0.05, "post-1": 0.0, "post-2": 0.02})

    response = await analyze_posts_service(_posts(3), router, enhancer)

    assert [r["postId"] for r in response["results"]] == ["post-0", "post-1", "post-2"]
    assert [r["analysis"]["whyViral"] for r in response["results"]] == ["post-0", "post-1", "post-2"]


@pytest.mark.asyncio
async def test_posts_are_truncated_to_max(enhancer):
    router = ScriptedRouter()

    response = await analyze_posts_service(_posts(8), router, enhancer, max_posts=5)

    assert response["count"] == 5
    assert sorted(router.seen) == [f"post-{i}" for i in range(5)]


@pytest.mark.asyncio
async def test_failure_cancels_remaining_posts(enhancer):
    router = ScriptedRouter(failures={"post-0"}, hangs={"post-1", "post-2"})

    with pytest.raises(AllProvidersFailedError):
        await analyze_posts_service(_posts(3), router, enhancer)

    assert sorted(router.cancelled) == ["post-1", "post-2"]


@pytest.mark.asyncio
async def test_results_are_enhanced_and_shaped_for_clients(enhancer):
    router = ProviderRouter([failing_adapter("openai"), FakeAdapter("claude")])

    response = await analyze_posts_service(_posts(1), router, enhancer, mode="quick")

    assert response["success"] is True
    assert response["provider"] == "claude"
    assert response["analysisType"] == "quick"
    result = response["results"][0]
    assert result["enhanced"] is True
    assert result["enhancedAt"]
    assert result["provider"] == "claude"
    assert result["originalPost"]["title"] == "Post 0"
    shoot = result["analysis"]["shootIdeas"][0]
    assert shoot["technical"]["settings"]["shutterSpeed"].startswith("1/")
    assert [step["step"] for step in result["analysis"]["prOutline"]] == [1, 2]


@pytest.mark.asyncio
async def test_quick_mode_prompt_is_sent(enhancer):
    adapter = FakeAdapter("openai")
    router = ProviderRouter([adapter])

    await analyze_posts_service(_posts(2), router, enhancer, mode="quick")

    assert len(adapter.prompts) == 2
    assert all("concise" in prompt for prompt in adapter.prompts)


@pytest.mark.asyncio
async def test_no_provider_configured_propagates(enhancer):
    router = ProviderRouter([FakeAdapter("openai", configured=False)])

    with pytest.raises(NoProviderConfiguredError):
        await analyze_posts_service(_posts(1), router, enhancer)


@pytest.mark.asyncio
async def test_unknown_provider_fails_before_any_call(enhancer):
    adapter = FakeAdapter("openai")
    router = ProviderRouter([adapter])

    with pytest.raises(ValueError):
        await analyze_posts_service(_posts(1), router, enhancer, preferred_provider="llama")
    assert adapter.prompts == []


@pytest.mark.asyncio
async def test_empty_posts_rejected(enhancer):
    with pytest.raises(ValueError):
        await analyze_posts_service([], ScriptedRouter(), enhancer)


@pytest.mark.asyncio
async def test_gather_in_order_returns_values_in_order():
    async def value(v, delay):
        await asyncio.sleep(delay)
        return v

    assert await gather_in_order([value("a", 0.03), value("b", 0.0), value("c", 0.01)]) == ["a", "b", "c"]
