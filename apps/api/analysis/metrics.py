"""
Engagement metrics for viral posts.
"""

from typing import Any, Mapping


MAX_ENGAGEMENT_RATE = 100.0


def _as_int(value: Any) -> int:
    if value in (None, ""):
        return 0
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def calculate_engagement_rate(metrics: Mapping[str, Any]) -> float:
    """
    Weighted engagement rate used for every platform except TikTok.

    (likes + 2 * comments) / views, as a percentage capped at 100.
    """
    views = _as_int(metrics.get("views"))
    if views == 0:
        return 0.0
    likes = _as_int(metrics.get("likes"))
    comments = _as_int(metrics.get("comments"))
    rate = ((likes + comments * 2) / views) * 100
    return round(min(rate, MAX_ENGAGEMENT_RATE), 2)


def calculate_tiktok_engagement_rate(metrics: Mapping[str, Any]) -> float:
    """TikTok weights shares and comments more heavily than likes."""
    views = _as_int(metrics.get("views"))
    if views == 0:
        return 0.0
    likes = _as_int(metrics.get("likes"))
    shares = _as_int(metrics.get("shares"))
    comments = _as_int(metrics.get("comments"))
    rate = ((likes + shares * 2 + comments * 3) / views) * 100
    return round(min(rate, MAX_ENGAGEMENT_RATE), 2)


def engagement_rate_for(platform: str, metrics: Mapping[str, Any]) -> float:
    if platform == "tiktok":
        return calculate_tiktok_engagement_rate(metrics)
    return calculate_engagement_rate(metrics)
