"""
Synthetic viral posts used whenever a live source is unavailable.
"""

import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from urllib.parse import quote

from analysis.models import Post, PostMetrics, utcnow

DEMO_AUTHOR = "Demo Creator"
DEMO_LOOKBACK = timedelta(days=7)

DEMO_TEMPLATES = (
    {
        "title": "Revolutionary {niche} technique that's changing the industry",
        "description": "Discover how this simple {niche} approach is transforming businesses worldwide. Thread 🧵",
        "metrics": {"views": 125000, "likes": 8500, "shares": 2100, "comments": 450},
    },
    {
        "title": "POV: You're mastering {niche} in 2025",
        "description": "The exact steps I took to go from beginner to expert in {niche}. Save this for later!",
        "metrics": {"views": 89000, "likes": 6200, "shares": 1800, "comments": 320},
    },
    {
        "title": "The {niche} mistake 90% of people make",
        "description": "After analyzing 1000+ {niche} cases, here's what separates success from failure...",
        "metrics": {"views": 156000, "likes": 12300, "shares": 3400, "comments": 890},
    },
    {
        "title": "{niche} transformation in just 30 days",
        "description": "Before and after results that will blow your mind. Here's exactly how we did it:",
        "metrics": {"views": 203000, "likes": 15600, "shares": 4200, "comments": 1100},
    },
    {
        "title": "Why {niche} experts are switching to this method",
        "description": "The traditional approach is dead. Here's what's replacing it in 2025...",
        "metrics": {"views": 98000, "likes": 7800, "shares": 2300, "comments": 560},
    },
)


class DemoPostGenerator:
    """
    Builds the fixed demo posts for a niche.

    Only the publish dates are random; pass a seeded ``random.Random`` and a
    fixed ``now`` for reproducible output.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._rng = rng or random.Random()
        self._now = now or utcnow

    def generate(self, niche: str, limit: Optional[int] = None) -> List[Post]:
        now = self._now()
        batch = int(now.timestamp() * 1000)
        thumbnail = f"https://via.placeholder.com/640x360?text={quote(niche, safe='')}"

        posts = []
        for index, template in enumerate(DEMO_TEMPLATES):
            age = DEMO_LOOKBACK * self._rng.random()
            posts.append(
                Post(
                    id=f"demo-{batch}-{index}",
                    platform="demo",
                    title=template["title"].format(niche=niche),
                    description=template["description"].format(niche=niche),
                    url="#",
                    thumbnail_url=thumbnail,
                    author=DEMO_AUTHOR,
                    published_at=now - age,
                    metrics=PostMetrics(**template["metrics"]),
                )
            )
        if limit is not None:
            posts = posts[: max(limit, 0)]
        return posts
