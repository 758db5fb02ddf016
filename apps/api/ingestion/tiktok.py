"""
TikTok search through the RapidAPI gateway.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from analysis.models import Post, PostMetrics, PostQuery
from ingestion.types import SourceUnavailableError

logger = logging.getLogger(__name__)

TIKTOK_SEARCH_COUNT = 10


def _created_at(value: Any) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _count(stats: Dict[str, Any], key: str) -> int:
    try:
        return max(int(stats.get(key) or 0), 0)
    except (TypeError, ValueError):
        return 0


def video_to_post(video: Dict[str, Any]) -> Optional[Post]:
    """Map one RapidAPI search hit to a post; hits without an id are skipped."""
    video_id = str(video.get("id") or "").strip()
    if not video_id:
        return None
    stats = video.get("stats") or {}
    author = video.get("author") or {}
    text = str(video.get("desc") or "")
    return Post(
        id=video_id,
        platform="tiktok",
        title=text,
        description=text,
        url=str(video.get("webVideoUrl") or ""),
        thumbnail_url=str(video.get("cover") or ""),
        author=str(author.get("nickname") or "Unknown") if isinstance(author, dict) else "Unknown",
        published_at=_created_at(video.get("createTime")),
        metrics=PostMetrics(
            views=_count(stats, "playCount"),
            likes=_count(stats, "diggCount"),
            comments=_count(stats, "commentCount"),
            shares=_count(stats, "shareCount"),
        ),
    )


class TikTokPostSource:
    platform = "tiktok"

    def __init__(
        self,
        api_key: str = "",
        host: str = "tiktok-api6.p.rapidapi.com",
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 15.0,
    ):
        self._api_key = api_key
        self._host = host
        self._client = client
        self._timeout = httpx.Timeout(timeout_seconds)

    async def _get(self, url: str, params: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, params=params, headers=headers, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(url, params=params, headers=headers)

    async def get_posts(self, query: PostQuery) -> List[Post]:
        """
        Search TikTok videos for the niche.

        Raises:
            SourceUnavailableError: missing key, transport failure or non-2xx response.
        """
        if not self._api_key:
            raise SourceUnavailableError("tiktok", "TikTok API key not configured")

        headers = {"X-RapidAPI-Key": self._api_key, "X-RapidAPI-Host": self._host}
        params = {"keywords": query.niche, "count": min(query.limit, TIKTOK_SEARCH_COUNT)}
        try:
            response = await self._get(f"https://{self._host}/search", params, headers)
        except httpx.HTTPError as e:
            raise SourceUnavailableError("tiktok", f"TikTok API transport error: {e.__class__.__name__}") from e

        if not response.is_success:
            raise SourceUnavailableError("tiktok", f"TikTok API error {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise SourceUnavailableError("tiktok", "TikTok API returned a non-JSON body") from e

        videos = data.get("videos") if isinstance(data, dict) else None
        posts = []
        for video in videos or []:
            if not isinstance(video, dict):
                continue
            post = video_to_post(video)
            if post is not None:
                posts.append(post)
        logger.info("TikTok search for %r returned %d posts", query.niche, len(posts))
        return posts
