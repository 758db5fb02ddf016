"""
Per-platform dispatch for live post sources.
"""

from typing import Dict, List, Optional

import httpx

from analysis.models import Post, PostQuery
from config import Settings, is_placeholder_key
from ingestion.tiktok import TikTokPostSource
from ingestion.types import SourceUnavailableError
from ingestion.youtube import YouTubePostSource


class StubPostSource:
    """Platform without a discovery API integration; always unavailable."""

    def __init__(self, platform: str, credential: str, setup_hint: str):
        self.platform = platform
        self._credential = credential
        self._setup_hint = setup_hint

    async def get_posts(self, query: PostQuery) -> List[Post]:
        if is_placeholder_key(self._credential):
            raise SourceUnavailableError(self.platform, f"{self.platform.capitalize()} credential not configured")
        raise SourceUnavailableError(self.platform, f"{self.platform.capitalize()} content discovery is unavailable: {self._setup_hint}")


class LivePostSource:
    """Routes a query to the source for its platform."""

    def __init__(self, sources: Dict[str, object]):
        self._sources = dict(sources)

    @property
    def platforms(self) -> List[str]:
        return sorted(self._sources)

    async def get_posts(self, query: PostQuery) -> List[Post]:
        source = self._sources.get(query.platform)
        if source is None:
            raise SourceUnavailableError(query.platform, f"No live source for platform {query.platform}")
        posts = await source.get_posts(query)
        return posts[: query.limit]


def _key(value: str) -> str:
    return "" if is_placeholder_key(value) else value.strip()


def build_live_source(settings: Settings, client: Optional[httpx.AsyncClient] = None) -> LivePostSource:
    return LivePostSource({
        "youtube": YouTubePostSource(api_key=_key(settings.YOUTUBE_API_KEY)),
        "tiktok": TikTokPostSource(
            api_key=_key(settings.TIKTOK_RAPIDAPI_KEY),
            host=settings.TIKTOK_RAPIDAPI_HOST,
            client=client,
            timeout_seconds=settings.SOURCE_TIMEOUT_SECONDS,
        ),
        "instagram": StubPostSource(
            "instagram",
            settings.INSTAGRAM_ACCESS_TOKEN,
            "the Instagram Graph API needs an approved OAuth app",
        ),
        "linkedin": StubPostSource(
            "linkedin",
            settings.LINKEDIN_API_KEY,
            "the LinkedIn API needs OAuth 2.0 organization access",
        ),
    })
