import random
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from analysis.enhancer import ResultEnhancer
from main import app
from routers import rate_limit
from routers.analysis import get_provider_router, get_result_enhancer
from services.providers import ProviderRouter


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest.fixture
def use_provider_router():
    """Install a provider router built from fake adapters for the app."""

    def _install(*adapters, default_provider: Optional[str] = None) -> ProviderRouter:
        router = ProviderRouter(adapters, default_provider=default_provider)
        app.dependency_overrides[get_provider_router] = lambda: router
        return router

    app.dependency_overrides[get_result_enhancer] = lambda: ResultEnhancer(random.Random(0))
    yield _install
    app.dependency_overrides.pop(get_provider_router, None)
    app.dependency_overrides.pop(get_result_enhancer, None)


@pytest_asyncio.fixture
async def api_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
