"""
YouTube Data API client for finding the most viewed recent videos in a niche.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from analysis.models import Post, PostMetrics, PostQuery, utcnow
from ingestion.types import SourceUnavailableError, published_after

logger = logging.getLogger(__name__)

YOUTUBE_BATCH_SIZE = 50


class YouTubeClient:
    """Client for interacting with YouTube Data API v3."""

    def __init__(self, api_key: Optional[str] = None, service: Any = None):
        """
        Initialize YouTube client.

        Args:
            api_key: API key for public data access
            service: Prebuilt discovery resource (tests pass a fake here)
        """
        if service is not None:
            self.youtube = service
        elif api_key:
            self.youtube = build("youtube", "v3", developerKey=api_key, cache_discovery=False)
        else:
            raise ValueError("Either api_key or service must be provided")

    def search_viral_videos(
        self,
        niche: str,
        time_range: str = "7d",
        max_results: int = 10,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Search videos for a niche, most viewed first, published inside the time range.

        Returns:
            List of video dicts with: id, title, description, channel_title,
            published_at, thumbnail_url
        """
        niche = (niche or "").strip()
        if not niche:
            return []

        max_results = max(1, min(max_results, YOUTUBE_BATCH_SIZE))
        after = published_after(time_range, now or utcnow())

        response = self.youtube.search().list(
            part="snippet",
            q=niche,
            type="video",
            order="viewCount",
            publishedAfter=after.strftime("%Y-%m-%dT%H:%M:%SZ"),
            maxResults=max_results,
        ).execute()

        videos = []
        for item in response.get("items", []):
            video_id = item.get("id", {}).get("videoId")
            if not video_id:
                continue
            snippet = item.get("snippet", {})
            videos.append({
                "id": video_id,
                "title": snippet.get("title", ""),
                "description": snippet.get("description", ""),
                "channel_title": snippet.get("channelTitle", ""),
                "published_at": snippet.get("publishedAt") or None,
                "thumbnail_url": snippet.get("thumbnails", {}).get("high", {}).get("url", ""),
            })
        return videos

    def get_video_statistics(self, video_ids: List[str]) -> Dict[str, Dict[str, int]]:
        """
        Get view/like/comment counts for videos.

        Returns:
            Dict mapping video_id to: views, likes, comments
        """
        result = {}

        for i in range(0, len(video_ids), YOUTUBE_BATCH_SIZE):
            batch = video_ids[i:i + YOUTUBE_BATCH_SIZE]
            response = self.youtube.videos().list(
                part="statistics",
                id=",".join(batch),
            ).execute()

            for item in response.get("items", []):
                stats = item.get("statistics", {})
                result[item["id"]] = {
                    "views": int(stats.get("viewCount", 0)),
                    "likes": int(stats.get("likeCount", 0)),
                    "comments": int(stats.get("commentCount", 0)),
                }

        return result

    def fetch_viral_posts(self, query: PostQuery, now: Optional[datetime] = None) -> List[Post]:
        """
        Search and enrich videos into posts.

        Raises:
            SourceUnavailableError: on any YouTube API error or when the API
                cannot be reached.
        """
        try:
            videos = self.search_viral_videos(query.niche, query.time_range, query.limit, now=now)
            stats = self.get_video_statistics([video["id"] for video in videos])
        except HttpError as e:
            raise SourceUnavailableError("youtube", f"YouTube API error: {e}") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise SourceUnavailableError("youtube", f"YouTube API unreachable: {e}") from e

        return [
            Post(
                id=video["id"],
                platform="youtube",
                title=video["title"],
                description=video["description"],
                url=f"https://www.youtube.com/watch?v={video['id']}",
                thumbnail_url=video["thumbnail_url"],
                author=video["channel_title"],
                published_at=video["published_at"],
                metrics=PostMetrics(**stats.get(video["id"], {})),
            )
            for video in videos
        ]


class YouTubePostSource:
    """Async wrapper running the blocking discovery client in a worker thread."""

    platform = "youtube"

    def __init__(self, api_key: str = "", client: Optional[YouTubeClient] = None):
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> YouTubeClient:
        if self._client is None:
            if not self._api_key:
                raise SourceUnavailableError("youtube", "YouTube API key not configured")
            self._client = YouTubeClient(api_key=self._api_key)
        return self._client

    async def get_posts(self, query: PostQuery) -> List[Post]:
        client = self._get_client()
        return await asyncio.to_thread(client.fetch_viral_posts, query)
