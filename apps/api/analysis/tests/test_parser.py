import json
import logging
import random

import pytest

from analysis.models import CanonicalResult, Post, PRStep, ShootIdea
from analysis.parser import (
    PR_PLACEHOLDER,
    SHOOT_PLACEHOLDER,
    TAKEAWAY_PLACEHOLDER,
    classify_section,
    parse,
    parse_many,
    strip_code_fence,
)


HEADED_REPLY = """WHY IT'S VIRAL: The hook lands in the first second and the payoff is shareable.

PHOTOGRAPHY SHOOT IDEAS:
- Golden hour portrait on a rooftop
- Flat lay of the workspace
- Candid behind-the-scenes moment

PR CAMPAIGN OUTLINE:
1. Draft a press release about the launch
2. Pitch industry journalists
3. Coordinate a social media push

KEY TAKEAWAYS:
- Lead with the payoff
- Keep captions short
- Post consistently
"""


@pytest.fixture
def post():
    return Post(id="post-1", platform="youtube", title="Viral clip", metrics={"views": 1000, "likes": 50})


def test_fenced_results_object_yields_title():
    result = parse('```json\n{"results":[{"title":"A"}]}\n```')

    assert isinstance(result, CanonicalResult)
    assert result.title == "A"
    assert result.parse_mode == "json"
    assert result.parse_recovery_used is False


def test_round_trip_of_requested_schema(post):
    source = {
        "whyViral": "Relatable humor and perfect timing.",
        "shootIdeas": ["Idea 1", "Idea 2", "Idea 3", "Idea 4", "Idea 5"],
        "prOutline": ["Step one", "Step two"],
        "keyTakeaways": ["One", "Two", "Three"],
    }

    result = parse(json.dumps(source), post, "claude")

    assert result.analysis.why_viral == source["whyViral"]
    assert result.analysis.shoot_ideas == source["shootIdeas"]
    assert result.analysis.pr_outline == source["prOutline"]
    assert result.analysis.key_takeaways == source["keyTakeaways"]
    assert result.provider == "claude"
    assert result.post_id == "post-1"
    assert result.original_post.title == "Viral clip"
    assert result.full_response is None


def test_snake_case_and_nested_analysis_keys():
    text = json.dumps({"title": "T", "analysis": {"why_viral": "W", "shoot_ideas": ["S"], "takeaways": ["K"]}})
    result = parse(text)

    assert result.title == "T"
    assert result.analysis.why_viral == "W"
    assert result.analysis.shoot_ideas == ["S"]
    assert result.analysis.key_takeaways == ["K"]


def test_json_embedded_in_prose_is_found():
    text = 'Sure! Here is the analysis:\n{"whyViral": "Because", "shootIdeas": ["a"]}\nHope this helps.'
    result = parse(text)

    assert result.parse_mode == "json"
    assert result.analysis.why_viral == "Because"


def test_json_array_yields_one_result_per_item(post):
    text = json.dumps([{"whyViral": "first"}, {"whyViral": "second"}])
    results = parse_many(text, post, "gemini")

    assert [r.analysis.why_viral for r in results] == ["first", "second"]
    assert all(r.provider == "gemini" for r in results)


def test_empty_json_array_yields_no_results():
    assert parse_many("[]") == []


def test_json_lists_are_truncated_not_padded():
    text = json.dumps({"shootIdeas": [f"idea {i}" for i in range(8)], "keyTakeaways": ["a", "b", "c", "d"]})
    result = parse(text)

    assert len(result.analysis.shoot_ideas) == 5
    assert len(result.analysis.key_takeaways) == 3

    short = parse(json.dumps({"shootIdeas": ["only one"]}))
    assert short.analysis.shoot_ideas == ["only one"]


def test_structured_entries_are_kept_as_models():
    text = json.dumps({
        "shootIdeas": [{"title": "Hero", "description": "Hero shot at dusk"}],
        "prOutline": [{"step": 1, "title": "Release", "description": "Send the press release"}],
    })
    result = parse(text)

    assert isinstance(result.analysis.shoot_ideas[0], ShootIdea)
    assert result.analysis.shoot_ideas[0].description == "Hero shot at dusk"
    assert isinstance(result.analysis.pr_outline[0], PRStep)


def test_heading_sections_are_recovered(caplog):
    with caplog.at_level(logging.WARNING, logger="analysis.parser"):
        result = parse(HEADED_REPLY, provider="grok")

    analysis = result.analysis
    assert result.parse_mode == "heuristic"
    assert result.parse_recovery_used is True
    assert analysis.why_viral.startswith("The hook lands")
    assert analysis.shoot_ideas == [
        "Golden hour portrait on a rooftop",
        "Flat lay of the workspace",
        "Candid behind-the-scenes moment",
    ]
    assert analysis.pr_outline == [
        "Draft a press release about the launch",
        "Pitch industry journalists",
        "Coordinate a social media push",
    ]
    assert analysis.key_takeaways == ["Lead with the payoff", "Keep captions short", "Post consistently"]
    assert "Parse recovery used" in caplog.text


def test_numbered_markdown_headings_are_recovered():
    text = (
        "## 1. WHY IT'S VIRAL\nIt taps into nostalgia.\n\n"
        "## 2. PHOTOGRAPHY SHOOT IDEAS\n- Film grain portrait\n- Retro props\n"
    )
    result = parse(text)

    assert result.analysis.why_viral == "It taps into nostalgia."
    assert result.analysis.shoot_ideas == ["Film grain portrait", "Retro props"]


def test_sentence_case_numbered_headings_are_recovered():
    text = (
        "1. Why it's viral: Strong hook in the first second.\n"
        "2. Photography shoot ideas:\n- Golden hour portrait\n- Flat lay\n"
        "3. PR campaign outline:\n- Send press release\n"
        "4. Key takeaways:\n- Hook early\n"
    )
    result = parse(text)

    assert result.parse_mode == "heuristic"
    assert result.analysis.why_viral == "Strong hook in the first second."
    assert result.analysis.shoot_ideas == ["Golden hour portrait", "Flat lay"]
    assert result.analysis.pr_outline == ["Send press release"]
    assert result.analysis.key_takeaways == ["Hook early"]


def test_numbered_pr_steps_stay_in_their_section():
    text = (
        "1. Why it's viral: Timing.\n"
        "2. PR campaign:\n1. Launch campaign on TikTok\n2. Pitch journalists\n"
    )
    result = parse(text)

    assert result.analysis.why_viral == "Timing."
    assert result.analysis.pr_outline == ["Launch campaign on TikTok", "Pitch journalists"]


def test_heuristic_lists_are_capped():
    ideas = "\n".join(f"- idea {i}" for i in range(7))
    takeaways = "\n".join(f"- lesson {i}" for i in range(5))
    text = f"WHY IT'S VIRAL: yes\n\nSHOOT IDEAS:\n{ideas}\n\nKEY TAKEAWAYS:\n{takeaways}"
    result = parse(text)

    assert len(result.analysis.shoot_ideas) == 5
    assert len(result.analysis.key_takeaways) == 3


def test_section_precedence_is_first_match_wins():
    assert classify_section("VIRAL PHOTO NOTES:\nanything") == "why_viral"
    assert classify_section("PHOTO PR PLAN:\n- item") == "shoot_ideas"
    assert classify_section("PR CAMPAIGN:\n- item") == "pr_outline"
    assert classify_section("LESSONS LEARNED:\n- item") == "key_takeaways"
    assert classify_section("KEY TAKEAWAYS:\n- a more impressive approach") == "key_takeaways"


def test_unstructured_text_falls_back_to_raw():
    text = "This clip spread quickly because " + "people loved the twist at the end and shared it widely. " * 10
    result = parse(text)

    assert result.parse_mode == "raw"
    assert result.parse_recovery_used is True
    assert result.full_response == text
    assert result.analysis.why_viral == text[:200]
    assert result.analysis.shoot_ideas == [SHOOT_PLACEHOLDER]
    assert result.analysis.pr_outline == [PR_PLACEHOLDER]
    assert result.analysis.key_takeaways == [TAKEAWAY_PLACEHOLDER]


def test_missing_answer_text_uses_raw_fallback(post):
    result = parse("", post, "openai")

    assert result.parse_mode == "raw"
    assert result.post_id == "post-1"
    assert result.analysis.why_viral == ""


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "{",
        '{"whyViral": "trunc',
        "[1, 2, 3]",
        "null",
        "42",
        "```",
        "```json\n```",
        "\x00\x01\x02\xff",
        None,
        12345,
    ],
)
def test_parser_is_total(text):
    result = parse(text)
    assert isinstance(result, CanonicalResult)


def test_parser_is_total_on_random_text():
    rng = random.Random(7)
    alphabet = "{}[]\":,abcXYZ -*•\n0123456789`"
    for _ in range(200):
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 120)))
        assert isinstance(parse(text), CanonicalResult)


def test_strip_code_fence_handles_bare_and_tagged_fences():
    assert strip_code_fence("```\n{}\n```") == "{}"
    assert strip_code_fence("```json\n[1]\n```") == "[1]"
    assert strip_code_fence("no fence") == "no fence"
