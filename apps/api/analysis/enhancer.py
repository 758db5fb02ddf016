"""
Enhancement of terse provider output into detailed shoot and PR plans.
"""

import random
from typing import List, Optional, Sequence, Union
from urllib.parse import quote

from .models import (
    CameraSettings,
    CanonicalResult,
    PRStep,
    ShootIdea,
    ShootTechnical,
    ViralAnalysis,
    utcnow,
)


LIGHTING = (
    "Golden hour with warm backlighting creating a halo effect",
    "Soft natural light through sheer curtains for ethereal mood",
    "Dramatic side lighting with deep shadows for contrast",
    "Studio setup with key light at 45° and fill light for balance",
    "Blue hour twilight with ambient city lights",
    "High-key lighting for bright, airy feel",
    "Low-key lighting for moody, dramatic atmosphere",
)

ANGLES = (
    "Low angle shot from ground level for heroic perspective",
    "Bird's eye view from directly above for unique composition",
    "Dutch angle (tilted) for dynamic energy",
    "Eye-level for natural, relatable perspective",
    "Over-the-shoulder for intimate viewpoint",
    "Worm's eye view looking up through elements",
    "Profile shot at 90° for dramatic silhouette",
)

COMPOSITION = (
    "Rule of thirds with subject at intersection points",
    "Leading lines drawing eye to focal point",
    "Frame within frame using natural elements",
    "Negative space for minimalist impact",
    "Symmetrical balance for harmony",
    "Golden spiral for natural flow",
    "Depth layers with foreground, middle, background",
)

EQUIPMENT = (
    "85mm lens for flattering portrait compression",
    "24mm wide angle for environmental context",
    "50mm for natural perspective",
    "Reflector to fill shadows",
    "Diffuser for soft light",
    "Tripod for stability",
    "ND filter for motion blur in daylight",
)

APERTURES = ("1.4", "2.8", "4", "5.6", "8")
SHUTTER_SPEEDS = ("60", "125", "250", "500", "1000")
ISO_VALUES = ("100", "200", "400", "800")
WHITE_BALANCE = ("Daylight", "Cloudy", "Shade", "Custom")

SHOOT_TIPS = (
    "Scout location during similar time/weather conditions",
    "Bring backup equipment and batteries",
    "Take test shots to dial in settings",
    "Capture multiple variations of each setup",
)

DEFAULT_SHOOT_IDEAS = (
    "Hero product shot with lifestyle context",
    "Behind-the-scenes documentary style",
    "User testimonial with authentic emotion",
)

PR_TIMELINES = (
    "Day 1-2",
    "Day 3-5",
    "Day 6-10",
    "Day 11-14",
    "Day 15-21",
    "Day 22-30",
)

PRESS_RELEASE_TEMPLATE = """FOR IMMEDIATE RELEASE

[HEADLINE]

[CITY, Date] - [Lead paragraph with who, what, where, when, why]

[Body paragraph 1 - Expand on the news]

[Body paragraph 2 - Include quote from key person]

[Body paragraph 3 - Additional details and context]

About [Company Name]
[Company boilerplate]

Contact:
[Name]
[Title]
[Email]
[Phone]"""

OUTREACH_EMAIL_TEMPLATE = """Subject: [Compelling subject line]

Hi [Name],

I noticed you recently covered [relevant topic] and thought you might be interested in [your news].

[Brief pitch - 2-3 sentences]

Key points:
• [Point 1]
• [Point 2]
• [Point 3]

Would you like more information or high-res images?

Best regards,
[Your name]"""

SOCIAL_POST_TEMPLATE = """🚀 [Attention-grabbing opener]

[Main message - 1-2 sentences]

✅ [Benefit 1]
✅ [Benefit 2]
✅ [Benefit 3]

[Call to action]

#[Hashtag1] #[Hashtag2] #[Hashtag3]"""

TITLE_MAX_CHARS = 50
KEYWORD_MIN_CHARS = 5
DEFAULT_KEYWORD = "photography"


def extract_title(text: str) -> str:
    """Text up to the first period, at most 50 characters."""
    end = min(text.find("."), TITLE_MAX_CHARS)
    return text[:end] if end > 0 else text[:TITLE_MAX_CHARS]


def extract_keyword(text: str) -> str:
    for word in text.split(" "):
        if len(word) >= KEYWORD_MIN_CHARS:
            return word
    return DEFAULT_KEYWORD


def timeline_for_step(order: int) -> str:
    index = min(max(order, 1) - 1, len(PR_TIMELINES) - 1)
    return PR_TIMELINES[index]


def actions_for_step(text: str) -> List[str]:
    keywords = text.lower()
    if "press" in keywords or "release" in keywords:
        return ["Draft compelling headline", "Write newsworthy lead", "Include relevant quotes", "Add multimedia assets"]
    if "social" in keywords or "media" in keywords:
        return ["Create engaging content", "Design eye-catching visuals", "Use relevant hashtags", "Engage with audience"]
    if "email" in keywords or "outreach" in keywords:
        return ["Research contact list", "Personalize messages", "Follow up strategically", "Track responses"]
    return ["Define objectives", "Execute plan", "Monitor progress", "Optimize based on results"]


def targets_for_step(text: str) -> List[str]:
    keywords = text.lower()
    if "media" in keywords or "journalist" in keywords:
        return ["@TechCrunch", "@TheVerge", "@Wired", "Industry reporters"]
    if "influencer" in keywords:
        return [
            "Micro-influencers (10K-100K followers)",
            "Industry thought leaders",
            "Brand ambassadors",
            "Content creators",
        ]
    if "social" in keywords:
        return ["Twitter/X audience", "LinkedIn professionals", "Instagram community", "Facebook groups"]
    return ["Target audience segment", "Key stakeholders", "Industry community"]


def templates_for_step(text: str) -> List[str]:
    keywords = text.lower()
    if "press" in keywords and "release" in keywords:
        return [PRESS_RELEASE_TEMPLATE]
    if "email" in keywords or "outreach" in keywords:
        return [OUTREACH_EMAIL_TEMPLATE]
    if "social" in keywords:
        return [SOCIAL_POST_TEMPLATE]
    return []


def metrics_for_step(text: str) -> List[str]:
    keywords = text.lower()
    if "press" in keywords or "media" in keywords:
        return ["Media mentions", "Reach", "Share of voice"]
    if "social" in keywords:
        return ["Engagement rate", "Follower growth", "Click-through rate"]
    if "email" in keywords:
        return ["Open rate", "Response rate", "Conversion rate"]
    return ["Completion rate", "Quality score", "ROI"]


def default_pr_campaign() -> List[PRStep]:
    return [
        PRStep(
            step=1,
            title="Draft Press Release",
            description="Create compelling press release with key messages",
            timeline="Day 1-2",
            actions=[
                "Write headline and lead paragraph",
                "Include 2-3 key quotes",
                "Add company boilerplate",
                "Prepare high-res images",
            ],
            targets=["Press release distribution services", "Company blog"],
            templates=[PRESS_RELEASE_TEMPLATE],
            metrics=["Press release views", "Media pickups"],
        ),
        PRStep(
            step=2,
            title="Media Outreach",
            description="Contact relevant journalists and influencers",
            timeline="Day 3-5",
            actions=[
                "Research relevant media contacts",
                "Personalize pitch emails",
                "Send initial outreach",
                "Schedule follow-ups",
            ],
            targets=["@techcrunch", "@forbes", "@businessinsider", "Industry-specific publications"],
            templates=[OUTREACH_EMAIL_TEMPLATE],
            metrics=["Email open rate", "Response rate", "Meeting scheduled"],
        ),
        PRStep(
            step=3,
            title="Social Media Campaign",
            description="Launch coordinated social media push",
            timeline="Day 6-14",
            actions=[
                "Create content calendar",
                "Design visual assets",
                "Schedule posts across platforms",
                "Engage with responses",
            ],
            targets=["Twitter/X", "LinkedIn", "Instagram", "Facebook"],
            templates=[SOCIAL_POST_TEMPLATE],
            metrics=["Reach", "Engagement rate", "Click-through rate"],
        ),
        PRStep(
            step=4,
            title="Monitor and Measure",
            description="Track results and optimize",
            timeline="Day 15-30",
            actions=[
                "Monitor media mentions",
                "Track website traffic",
                "Analyze social metrics",
                "Prepare campaign report",
            ],
            targets=["Google Analytics", "Social media analytics", "Media monitoring tools"],
            templates=[],
            metrics=["Total reach", "Media value", "Lead generation", "ROI"],
        ),
    ]


class ResultEnhancer:
    """
    Expands plain-string shoot ideas and PR steps into structured plans.

    The random source only picks descriptive content. The number of ideas
    and steps depends on the input alone.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def enhance(self, result: CanonicalResult) -> CanonicalResult:
        """Return an enhanced copy of ``result``; the input is left untouched."""
        analysis = result.analysis
        enhanced_analysis = ViralAnalysis(
            why_viral=analysis.why_viral,
            shoot_ideas=self.enhance_shoot_ideas(analysis.shoot_ideas),
            pr_outline=self.enhance_pr_outline(analysis.pr_outline),
            key_takeaways=list(analysis.key_takeaways),
        )
        return result.model_copy(
            update={
                "analysis": enhanced_analysis,
                "enhanced": True,
                "enhanced_at": utcnow(),
            }
        )

    def enhance_many(self, results: Sequence[CanonicalResult]) -> List[CanonicalResult]:
        return [self.enhance(result) for result in results]

    def enhance_shoot_ideas(self, ideas: Sequence[Union[ShootIdea, str]]) -> List[ShootIdea]:
        if not ideas:
            return [self.describe_shoot(idea) for idea in DEFAULT_SHOOT_IDEAS]
        return [
            idea.model_copy(deep=True) if isinstance(idea, ShootIdea) else self.describe_shoot(idea)
            for idea in ideas
        ]

    def describe_shoot(self, idea: str) -> ShootIdea:
        lighting = self._rng.choice(LIGHTING)
        angle = self._rng.choice(ANGLES)
        composition = self._rng.choice(COMPOSITION)
        equipment = self._rng.sample(EQUIPMENT, 2)
        base = idea.strip().rstrip(".")

        return ShootIdea(
            title=extract_title(idea),
            description=(
                f"{base}. Shot with {_lower_first(lighting)}. "
                f"Camera positioned at {_lower_first(angle)}. "
                f"Composed using {_lower_first(composition)}."
            ),
            technical=ShootTechnical(
                lighting=lighting,
                angle=angle,
                composition=composition,
                equipment=equipment,
                settings=self.camera_settings(),
            ),
            references=[
                f"https://pinterest.com/search/pins/?q={quote(idea, safe='')}",
                f"https://unsplash.com/s/photos/{quote(extract_keyword(idea), safe='')}",
            ],
            tips=list(SHOOT_TIPS),
        )

    def camera_settings(self) -> CameraSettings:
        return CameraSettings(
            aperture=f"f/{self._rng.choice(APERTURES)}",
            shutter_speed=f"1/{self._rng.choice(SHUTTER_SPEEDS)}",
            iso=self._rng.choice(ISO_VALUES),
            white_balance=self._rng.choice(WHITE_BALANCE),
        )

    def enhance_pr_outline(self, steps: Sequence[Union[PRStep, str]]) -> List[PRStep]:
        if not steps:
            return default_pr_campaign()
        enhanced: List[PRStep] = []
        for order, step in enumerate(steps, start=1):
            if isinstance(step, PRStep):
                enhanced.append(step.model_copy(update={
                    "step": order,
                    "timeline": step.timeline or timeline_for_step(order),
                }))
            else:
                enhanced.append(self.describe_pr_step(step, order))
        return enhanced

    def describe_pr_step(self, text: str, order: int) -> PRStep:
        return PRStep(
            step=order,
            title=extract_title(text),
            description=text,
            timeline=timeline_for_step(order),
            actions=actions_for_step(text),
            targets=targets_for_step(text),
            templates=templates_for_step(text),
            metrics=metrics_for_step(text),
        )


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]
