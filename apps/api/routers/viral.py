"""
Viral content discovery router.
"""

import random
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from analysis.models import CamelModel, Platform, PostQuery
from config import settings
from ingestion.demo import DemoPostGenerator
from ingestion.sources import LivePostSource, build_live_source
from routers.rate_limit import rate_limit
from services.viral import fetch_viral_posts_service

router = APIRouter()


def get_demo_generator(request: Request) -> DemoPostGenerator:
    generator = getattr(request.app.state, "demo_generator", None)
    if generator is None:
        generator = DemoPostGenerator(random.Random(settings.DEMO_RANDOM_SEED))
        request.app.state.demo_generator = generator
    return generator


def get_live_source(request: Request) -> LivePostSource:
    source = getattr(request.app.state, "live_source", None)
    if source is None:
        source = build_live_source(settings, client=getattr(request.app.state, "http_client", None))
        request.app.state.live_source = source
    return source


class FetchViralRequest(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    niche: str = Field(min_length=1, max_length=100)
    platform: Platform
    time_range: Optional[Literal["24h", "7d", "30d"]] = None
    limit: int = Field(default=10, ge=1, le=50)


@router.post("/fetch-viral")
async def fetch_viral(
    payload: FetchViralRequest,
    live_source: LivePostSource = Depends(get_live_source),
    demo_generator: DemoPostGenerator = Depends(get_demo_generator),
    _rate_limit: None = Depends(
        rate_limit("fetch", settings.FETCH_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS)
    ),
):
    """Fetch viral posts for a niche; unavailable platforms serve demo posts."""
    query = PostQuery(
        niche=payload.niche,
        platform=payload.platform,
        limit=payload.limit,
        time_range=payload.time_range or "7d",
    )
    return await fetch_viral_posts_service(query, live_source, demo_generator)
