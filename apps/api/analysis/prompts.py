"""
Prompt construction for viral post analysis.
"""

from typing import List, Sequence

from .models import Post


SYSTEM_PROMPT = (
    "You are a social media content analyst specializing in viral content, "
    "photography direction, and PR strategy."
)

QUICK_DIRECTIVE = "Provide a concise analysis focusing on the key insights. Keep every answer short."
FULL_DIRECTIVE = (
    "Provide comprehensive, detailed analysis with specific examples and actionable "
    "recommendations. Be as specific as possible."
)

ANALYSIS_SECTIONS = """Provide the following analysis:

1. WHY IT'S VIRAL (2-3 sentences explaining the viral factors)

2. PHOTOGRAPHY SHOOT IDEAS (exactly 5 specific, actionable shoot concepts inspired by this content):
   - Include specific camera angles, lighting, and composition details
   - Mention equipment and settings when relevant
   - Be vivid and descriptive

3. PR CAMPAIGN OUTLINE (step-by-step PR strategy to amplify similar content):
   - Include specific platforms and influencer targets
   - Provide timeline and metrics to track
   - Include draft templates where applicable

4. KEY TAKEAWAYS (exactly 3 bullet points of lessons for content creators)"""

JSON_SCHEMA_REQUEST = """Respond with a JSON object only, using this structure:
{
  "whyViral": "string",
  "shootIdeas": ["string", "string", "string", "string", "string"],
  "prOutline": ["string"],
  "keyTakeaways": ["string", "string", "string"]
}"""


def _format_post(index: int, post: Post) -> str:
    m = post.metrics
    lines = [
        f"Post {index}:",
        f"Title: {post.title}",
        f"Description: {post.description or 'N/A'}",
        f"Platform: {post.platform or 'Unknown'}",
        f"Metrics: Views: {m.views}, Likes: {m.likes}, Comments: {m.comments}, Shares: {m.shares}",
        f"Engagement Rate: {post.engagement_rate}%",
    ]
    return "\n".join(lines)


def build_prompt(posts: Sequence[Post], mode: str = "full") -> str:
    """
    Render the analysis instruction for one or more posts.

    Deterministic for identical input. The posts are read, never altered.

    Raises:
        ValueError: on an empty post list or an unknown mode.
    """
    if mode not in ("full", "quick"):
        raise ValueError(f"Unsupported analysis mode: {mode}")
    if not posts:
        raise ValueError("At least one post is required to build a prompt")

    noun = "post" if len(posts) == 1 else "posts"
    parts: List[str] = [f"Analyze this viral social media {noun} and provide detailed insights:"]
    for index, post in enumerate(posts, start=1):
        parts.append(_format_post(index, post))
    parts.append(ANALYSIS_SECTIONS)
    parts.append(JSON_SCHEMA_REQUEST)
    parts.append(QUICK_DIRECTIVE if mode == "quick" else FULL_DIRECTIVE)
    return "\n\n".join(parts)
