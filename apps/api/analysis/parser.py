"""
Structured extraction of viral analysis from free-text model replies.

Models rarely return exactly the JSON they were asked for, so parsing walks a
fixed ladder and the first rung that produces something wins:

1. strip a single surrounding Markdown code fence;
2. parse the text (or its first bracket-delimited span) as JSON;
3. split the text into headed sections and classify each by keyword;
4. keep the raw text, with placeholder list entries.

Parsing is total: any input, including empty or truncated text, yields a
CanonicalResult. Results from rungs 3 and 4 are flagged with
``parse_recovery_used`` so parser health can be monitored.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from .models import (
    MAX_KEY_TAKEAWAYS,
    MAX_SHOOT_IDEAS,
    CanonicalResult,
    OriginalPostSummary,
    PRStep,
    Post,
    ShootIdea,
    ViralAnalysis,
)

logger = logging.getLogger(__name__)

RAW_PREVIEW_CHARS = 200

SHOOT_PLACEHOLDER = "See full analysis for detailed shoot ideas"
PR_PLACEHOLDER = "See full analysis for PR strategy"
TAKEAWAY_PLACEHOLDER = "See full analysis for key takeaways"
FORMAT_ERROR_SUMMARY = "Analysis completed but formatting error occurred"

WHY_VIRAL_KEYS = ("whyViral", "why_viral", "whyItsViral", "viralFactors")
SHOOT_IDEA_KEYS = ("shootIdeas", "shoot_ideas", "photographyShootIdeas", "shootSpecs")
PR_OUTLINE_KEYS = ("prOutline", "pr_outline", "prCampaign", "prCampaignOutline", "prStrategy")
TAKEAWAY_KEYS = ("keyTakeaways", "key_takeaways", "takeaways", "lessons")
ENTRY_TEXT_KEYS = ("description", "idea", "text", "title", "action", "step")

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")

# A heading is an upper-case label, optionally numbered or markdown-decorated,
# ending in a colon, an opening parenthesis or the end of the line. A numbered
# label in any case also counts when it names a section and ends in a colon.
# Numbered PR steps without such a label are not headings.
_SECTION_KEYWORD = r"(?:viral|photo|shoot|\bpr\b|campaign|takeaway|lesson)"
_HEADING = (
    r"[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*)?(?:"
    r"(?:\d+\.[ \t]*)?(?:\*\*)?[A-Z][A-Z'’&/ -]{3,}(?:\*\*)?[ \t]*(?::|\(|$)"
    r"|\d+\.[ \t]*(?:\*\*)?(?i:[^\n:]{0,60}?" + _SECTION_KEYWORD + r"[^\n:]{0,60}?)(?:\*\*)?[ \t]*:"
    r")"
)
_SECTION_SPLIT = re.compile(r"\n(?=" + _HEADING + r")", re.MULTILINE)
_HEADING_LINE = re.compile(r"^" + _HEADING)
_BULLET_SPLIT = re.compile(r"\n[ \t]*[-•*][ \t]*")
_BULLET_OR_NUMBER_SPLIT = re.compile(r"\n[ \t]*(?:[-•*]|\d+[.)])[ \t]*")
_LEADING_BULLET = re.compile(r"^[ \t]*[-•*][ \t]+")
_PR_WORD = re.compile(r"\bpr\b")


def strip_code_fence(text: str) -> str:
    """Remove one leading and one trailing Markdown fence, if present."""
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _bracket_span(text: str) -> Optional[str]:
    starts = [idx for idx in (text.find("{"), text.find("[")) if idx != -1]
    if not starts:
        return None
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    return text[start:end + 1]


def _load_json(text: str) -> Optional[Any]:
    candidates = [text]
    span = _bracket_span(text)
    if span and span != text:
        candidates.append(span)
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    return None


def _result_items(data: Any) -> Optional[List[Dict[str, Any]]]:
    """Return the per-result objects of a decoded reply, or None if unusable."""
    if isinstance(data, dict):
        results = data.get("results")
        if isinstance(results, list):
            data = results
        else:
            return [data]
    if isinstance(data, list):
        items = [item for item in data if isinstance(item, dict)]
        if data and not items:
            return None
        return items
    return None


def _lookup(sources: Iterable[Dict[str, Any]], keys: Tuple[str, ...]) -> Any:
    for source in sources:
        for key in keys:
            if key in source and source[key] is not None:
                return source[key]
    return None


def _entry_text(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        for key in ENTRY_TEXT_KEYS:
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return json.dumps(entry, ensure_ascii=False)
    return str(entry)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return [value]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return " ".join(_entry_text(item) for item in value)
    return _entry_text(value)


def _shoot_entry(entry: Any) -> Any:
    if isinstance(entry, dict):
        try:
            return ShootIdea.model_validate(entry)
        except ValidationError:
            return _entry_text(entry)
    return _entry_text(entry)


def _pr_entry(entry: Any) -> Any:
    if isinstance(entry, dict):
        try:
            return PRStep.model_validate(entry)
        except ValidationError:
            return _entry_text(entry)
    return _entry_text(entry)


def _analysis_from_item(item: Dict[str, Any]) -> ViralAnalysis:
    nested = item.get("analysis")
    sources = [nested, item] if isinstance(nested, dict) else [item]
    return ViralAnalysis(
        why_viral=_as_text(_lookup(sources, WHY_VIRAL_KEYS)),
        shoot_ideas=[_shoot_entry(e) for e in _as_list(_lookup(sources, SHOOT_IDEA_KEYS))][:MAX_SHOOT_IDEAS],
        pr_outline=[_pr_entry(e) for e in _as_list(_lookup(sources, PR_OUTLINE_KEYS))],
        key_takeaways=[_entry_text(e) for e in _as_list(_lookup(sources, TAKEAWAY_KEYS))][:MAX_KEY_TAKEAWAYS],
    )


def _classify(lowered: str) -> Optional[str]:
    # Precedence is fixed: viral, then photo/shoot, then pr/campaign, then takeaway.
    if "viral" in lowered:
        return "why_viral"
    if "photo" in lowered or "shoot" in lowered:
        return "shoot_ideas"
    if _PR_WORD.search(lowered) or "campaign" in lowered:
        return "pr_outline"
    if "takeaway" in lowered or "lesson" in lowered:
        return "key_takeaways"
    return None


def classify_section(section: str) -> Optional[str]:
    """Classify by the heading line first, then by the whole section."""
    stripped = section.strip()
    heading = stripped.split("\n", 1)[0]
    return _classify(heading.lower()) or _classify(stripped.lower())


def _strip_label(section: str) -> str:
    text = section.strip()
    first, _, rest = text.partition("\n")
    if ":" in first:
        first = first.split(":", 1)[1].strip()
        return "\n".join(part for part in (first, rest.strip()) if part)
    if _HEADING_LINE.match(first):
        return rest.strip()
    return text


def _split_items(section: str, splitter: "re.Pattern[str]") -> List[str]:
    pieces = splitter.split(section.strip())
    # The first piece is the heading, unless the section opens with a bullet.
    head, items = pieces[0], pieces[1:]
    leading = _LEADING_BULLET.match(head)
    if leading:
        items.insert(0, head[leading.end():])
    return [piece.strip() for piece in items if piece.strip()]


def is_headed(section: str) -> bool:
    return bool(_HEADING_LINE.match(section.strip().split("\n", 1)[0]))


def split_sections(text: str) -> List[str]:
    return [section for section in _SECTION_SPLIT.split(text) if section.strip()]


def _analysis_from_sections(text: str) -> ViralAnalysis:
    why_viral = ""
    shoot_ideas: List[str] = []
    pr_outline: List[str] = []
    key_takeaways: List[str] = []

    for section in split_sections(text):
        if not is_headed(section):
            continue
        kind = classify_section(section)
        if kind == "why_viral":
            why_viral = _strip_label(section) or why_viral
        elif kind == "shoot_ideas":
            shoot_ideas = _split_items(section, _BULLET_SPLIT)[:MAX_SHOOT_IDEAS] or shoot_ideas
        elif kind == "pr_outline":
            pr_outline = _split_items(section, _BULLET_OR_NUMBER_SPLIT) or pr_outline
        elif kind == "key_takeaways":
            key_takeaways = _split_items(section, _BULLET_SPLIT)[:MAX_KEY_TAKEAWAYS] or key_takeaways

    return ViralAnalysis(
        why_viral=why_viral,
        shoot_ideas=shoot_ideas,
        pr_outline=pr_outline,
        key_takeaways=key_takeaways,
    )


def _raw_fallback_analysis(raw: str) -> ViralAnalysis:
    return ViralAnalysis(
        why_viral=raw[:RAW_PREVIEW_CHARS],
        shoot_ideas=[SHOOT_PLACEHOLDER],
        pr_outline=[PR_PLACEHOLDER],
        key_takeaways=[TAKEAWAY_PLACEHOLDER],
    )


def _build_result(post: Optional[Post], provider: str, **fields: Any) -> CanonicalResult:
    return CanonicalResult(
        post_id=post.id if post is not None else None,
        provider=provider,
        original_post=OriginalPostSummary.from_post(post) if post is not None else None,
        **fields,
    )


def _from_json_item(item: Dict[str, Any], post: Optional[Post], provider: str) -> CanonicalResult:
    title = item.get("title")
    return _build_result(
        post,
        provider,
        title=title if isinstance(title, str) else None,
        analysis=_analysis_from_item(item),
        parse_mode="json",
    )


def _from_text(raw: str, cleaned: str, post: Optional[Post], provider: str) -> CanonicalResult:
    analysis = _analysis_from_sections(cleaned)
    if analysis.why_viral or analysis.shoot_ideas:
        logger.warning(
            "Parse recovery used (heuristic sections) for post=%s provider=%s",
            post.id if post else None,
            provider,
        )
        return _build_result(
            post,
            provider,
            analysis=analysis,
            parse_mode="heuristic",
            parse_recovery_used=True,
        )

    logger.warning(
        "Parse recovery used (raw text) for post=%s provider=%s chars=%s",
        post.id if post else None,
        provider,
        len(raw),
    )
    return _build_result(
        post,
        provider,
        analysis=_raw_fallback_analysis(raw),
        full_response=raw,
        parse_mode="raw",
        parse_recovery_used=True,
    )


def parse_many(text: Any, post: Optional[Post] = None, provider: str = "openai") -> List[CanonicalResult]:
    """
    Parse a model reply into zero or more canonical results.

    A JSON array or ``results`` field yields one result per object, and an
    empty array yields an empty list. Every other reply yields exactly one result.
    """
    raw = text if isinstance(text, str) else ("" if text is None else str(text))
    try:
        cleaned = strip_code_fence(raw)
        data = _load_json(cleaned)
        items = _result_items(data) if data is not None else None
        if items is not None:
            return [_from_json_item(item, post, provider) for item in items]
        return [_from_text(raw, cleaned, post, provider)]
    except Exception as exc:
        logger.warning(
            "Response parsing failed for post=%s provider=%s: %s",
            post.id if post else None,
            provider,
            exc,
        )
        return [
            _build_result(
                post,
                provider,
                analysis=ViralAnalysis(why_viral=FORMAT_ERROR_SUMMARY),
                full_response=raw,
                parse_mode="raw",
                parse_recovery_used=True,
            )
        ]


def parse(text: Any, post: Optional[Post] = None, provider: str = "openai") -> CanonicalResult:
    """Parse a model reply into a single canonical result. Never raises."""
    results = parse_many(text, post, provider)
    if results:
        return results[0]
    return _build_result(post, provider, parse_mode="json")
