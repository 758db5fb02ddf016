"""Viral post discovery with demo fallback."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol

from analysis.models import Post, PostQuery
from ingestion.demo import DemoPostGenerator
from ingestion.types import SourceUnavailableError

logger = logging.getLogger(__name__)


class PostSource(Protocol):
    async def get_posts(self, query: PostQuery) -> List[Post]:
        ...


async def fetch_viral_posts_service(
    query: PostQuery,
    live_source: PostSource,
    demo_generator: DemoPostGenerator,
) -> Dict[str, Any]:
    """
    Fetch posts for a niche from the live source for its platform.

    An unavailable source never fails the request; demo posts take its place.
    """
    posts: List[Post]
    source = "live"
    if query.platform == "demo":
        posts = demo_generator.generate(query.niche, query.limit)
        source = "demo"
    else:
        try:
            posts = await live_source.get_posts(query)
        except SourceUnavailableError as exc:
            logger.warning("Post source %s unavailable, serving demo posts: %s", exc.platform, exc)
            posts = demo_generator.generate(query.niche, query.limit)
            source = "demo"

    return {
        "success": True,
        "platform": query.platform,
        "niche": query.niche,
        "source": source,
        "count": len(posts),
        "results": [post.model_dump(mode="json", by_alias=True) for post in posts],
    }
