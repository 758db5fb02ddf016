"""
Analysis router.
"""

import logging
import random
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import Field, field_validator

from analysis.enhancer import ResultEnhancer
from analysis.models import AnalysisMode, CamelModel, Post
from config import settings
from routers.rate_limit import rate_limit
from services.analysis import analyze_posts_service
from services.providers import ProviderRouter, build_provider_router, normalize_provider_name

router = APIRouter()
logger = logging.getLogger(__name__)


def get_provider_router(request: Request) -> ProviderRouter:
    """Shared provider router, built on first use when the lifespan did not run."""
    provider_router = getattr(request.app.state, "provider_router", None)
    if provider_router is None:
        client = getattr(request.app.state, "http_client", None)
        provider_router = build_provider_router(settings, client=client)
        request.app.state.provider_router = provider_router
    return provider_router


def get_result_enhancer(request: Request) -> ResultEnhancer:
    enhancer = getattr(request.app.state, "result_enhancer", None)
    if enhancer is None:
        enhancer = ResultEnhancer(random.Random(settings.DEMO_RANDOM_SEED))
        request.app.state.result_enhancer = enhancer
    return enhancer


class AnalyzeRequest(CamelModel):
    posts: List[Post] = Field(min_length=1)
    provider: Optional[str] = None
    analysis_type: AnalysisMode = "full"

    @field_validator("provider")
    @classmethod
    def _known_provider(cls, value: Optional[str]) -> Optional[str]:
        normalize_provider_name(value)
        return value


@router.post("/analyze")
async def analyze_posts(
    payload: AnalyzeRequest,
    provider_router: ProviderRouter = Depends(get_provider_router),
    enhancer: ResultEnhancer = Depends(get_result_enhancer),
    _rate_limit: None = Depends(
        rate_limit("analyze", settings.ANALYZE_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS)
    ),
):
    """
    Analyze viral posts with the preferred AI provider, falling back to the others.

    Provider failures never reach the client; exhaustion becomes a 503.
    """
    return await analyze_posts_service(
        payload.posts,
        provider_router,
        enhancer,
        preferred_provider=payload.provider,
        mode=payload.analysis_type,
        max_posts=settings.MAX_POSTS_PER_ANALYSIS,
    )


@router.get("/providers")
async def list_providers(provider_router: ProviderRouter = Depends(get_provider_router)):
    """Registration and configuration status of every AI provider."""
    status = provider_router.provider_status()
    return {
        "providers": status,
        "configured": provider_router.configured_providers(),
        "priority": list(status),
    }
