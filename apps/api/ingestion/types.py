"""Post source contracts."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict

TIME_RANGE_DELTAS: Dict[str, timedelta] = {
    "24h": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_TIME_RANGE = "7d"


class SourceUnavailableError(RuntimeError):
    """Raised when a live post source is unconfigured or its upstream fails."""

    def __init__(self, platform: str, message: str) -> None:
        super().__init__(message)
        self.platform = platform


def published_after(time_range: str, now: datetime) -> datetime:
    """Lower bound for the publish date of a time range; unknown ranges use 7 days."""
    return now - TIME_RANGE_DELTAS.get(time_range, TIME_RANGE_DELTAS[DEFAULT_TIME_RANGE])
