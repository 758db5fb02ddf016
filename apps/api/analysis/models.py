"""
Analysis models and schemas.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .metrics import engagement_rate_for


Platform = Literal["youtube", "tiktok", "instagram", "linkedin", "demo"]
ProviderKind = Literal["openai", "claude", "gemini", "grok"]
AnalysisMode = Literal["full", "quick"]
ParseMode = Literal["json", "heuristic", "raw"]

MAX_SHOOT_IDEAS = 5
MAX_KEY_TAKEAWAYS = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Snake-case fields in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostMetrics(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)
    shares: int = Field(default=0, ge=0)


class Post(CamelModel):
    """A social-media content record. Immutable once built."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    platform: Platform = "demo"
    title: str = ""
    description: str = ""
    url: str = ""
    thumbnail_url: str = ""
    author: str = ""
    published_at: Optional[datetime] = None
    metrics: PostMetrics = Field(default_factory=PostMetrics)
    engagement_rate: float = Field(default=0.0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _derive_engagement_rate(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("engagementRate") is not None or data.get("engagement_rate") is not None:
            return data
        metrics = data.get("metrics") or {}
        if isinstance(metrics, BaseModel):
            metrics = metrics.model_dump()
        platform = str(data.get("platform") or "demo")
        return {**data, "engagement_rate": engagement_rate_for(platform, metrics)}


class CameraSettings(CamelModel):
    aperture: str
    shutter_speed: str
    iso: str
    white_balance: str


class ShootTechnical(CamelModel):
    lighting: str = ""
    angle: str = ""
    composition: str = ""
    equipment: List[str] = Field(default_factory=list)
    settings: Optional[CameraSettings] = None


class ShootIdea(CamelModel):
    """Structured photography shoot concept."""

    title: str = ""
    description: str
    technical: Optional[ShootTechnical] = None
    references: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)


class PRStep(CamelModel):
    """Structured PR campaign step."""

    step: int = Field(default=0, ge=0)
    title: str = ""
    description: str
    timeline: str = ""
    actions: List[str] = Field(default_factory=list)
    targets: List[str] = Field(default_factory=list)
    templates: List[str] = Field(default_factory=list)
    metrics: List[str] = Field(default_factory=list)


class ViralAnalysis(CamelModel):
    why_viral: str = ""
    shoot_ideas: List[Union[ShootIdea, str]] = Field(default_factory=list)
    pr_outline: List[Union[PRStep, str]] = Field(default_factory=list)
    key_takeaways: List[str] = Field(default_factory=list)

    @field_validator("shoot_ideas")
    @classmethod
    def _cap_shoot_ideas(cls, value: List[Union[ShootIdea, str]]) -> List[Union[ShootIdea, str]]:
        return value[:MAX_SHOOT_IDEAS]

    @field_validator("key_takeaways")
    @classmethod
    def _cap_key_takeaways(cls, value: List[str]) -> List[str]:
        return value[:MAX_KEY_TAKEAWAYS]


class OriginalPostSummary(CamelModel):
    title: str = ""
    platform: Optional[str] = None
    metrics: PostMetrics = Field(default_factory=PostMetrics)
    engagement_rate: float = 0.0

    @classmethod
    def from_post(cls, post: Post) -> "OriginalPostSummary":
        return cls(
            title=post.title,
            platform=post.platform,
            metrics=post.metrics,
            engagement_rate=post.engagement_rate,
        )


class CanonicalResult(CamelModel):
    """One provider answer, normalized independently of the vendor."""

    post_id: Optional[str] = None
    provider: ProviderKind
    title: Optional[str] = None
    original_post: Optional[OriginalPostSummary] = None
    analysis: ViralAnalysis = Field(default_factory=ViralAnalysis)
    full_response: Optional[str] = None
    parse_mode: ParseMode = "json"
    parse_recovery_used: bool = False
    enhanced: bool = False
    enhanced_at: Optional[datetime] = None
    timestamp: datetime = Field(default_factory=utcnow)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PostQuery(CamelModel):
    niche: str = Field(min_length=1)
    platform: Platform
    limit: int = Field(default=5, ge=1, le=50)
    time_range: Literal["24h", "7d", "30d"] = "7d"
