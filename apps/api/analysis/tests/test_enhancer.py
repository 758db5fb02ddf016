import random

import pytest

from analysis.enhancer import (
    ANGLES,
    COMPOSITION,
    LIGHTING,
    OUTREACH_EMAIL_TEMPLATE,
    PRESS_RELEASE_TEMPLATE,
    SHOOT_TIPS,
    ResultEnhancer,
    extract_keyword,
    extract_title,
    timeline_for_step,
)
from analysis.models import CanonicalResult, PRStep, ShootIdea, ViralAnalysis


def _result(shoot_ideas=None, pr_outline=None):
    return CanonicalResult(
        provider="openai",
        post_id="post-1",
        analysis=ViralAnalysis(
            why_viral="Strong hook",
            shoot_ideas=shoot_ideas or [],
            pr_outline=pr_outline or [],
            key_takeaways=["Be bold"],
        ),
    )


@pytest.fixture
def enhancer():
    return ResultEnhancer(random.Random(42))


@pytest.mark.parametrize("count", [1, 3, 5])
def test_shoot_idea_count_is_preserved(enhancer, count):
    ideas = [f"Golden hour portrait number {i}" for i in range(count)]
    enhanced = enhancer.enhance(_result(shoot_ideas=ideas))

    assert len(enhanced.analysis.shoot_ideas) == count
    assert all(isinstance(idea, ShootIdea) for idea in enhanced.analysis.shoot_ideas)


@pytest.mark.parametrize("count", [1, 4, 9])
def test_pr_step_count_is_preserved(enhancer, count):
    steps = [f"Step {i} outreach" for i in range(count)]
    enhanced = enhancer.enhance(_result(pr_outline=steps))

    outline = enhanced.analysis.pr_outline
    assert len(outline) == count
    assert [step.step for step in outline] == list(range(1, count + 1))


def test_empty_lists_get_fixed_default_counts():
    for seed in range(5):
        enhanced = ResultEnhancer(random.Random(seed)).enhance(_result())
        assert len(enhanced.analysis.shoot_ideas) == 3
        assert len(enhanced.analysis.pr_outline) == 4


def test_default_pr_campaign_is_the_four_step_plan(enhancer):
    outline = enhancer.enhance(_result()).analysis.pr_outline

    assert [step.title for step in outline] == [
        "Draft Press Release",
        "Media Outreach",
        "Social Media Campaign",
        "Monitor and Measure",
    ]


def test_enhance_is_pure(enhancer):
    original = _result(shoot_ideas=["Golden hour portrait"], pr_outline=["Send press release"])
    before = original.model_dump()

    enhanced = enhancer.enhance(original)

    assert original.model_dump() == before
    assert original.enhanced is False
    assert enhanced.enhanced is True
    assert enhanced.enhanced_at is not None
    assert enhanced.post_id == original.post_id
    assert enhanced.analysis.key_takeaways == ["Be bold"]


def test_shoot_idea_details_come_from_catalogs(enhancer):
    idea = enhancer.describe_shoot("Golden hour portrait on the beach")

    assert idea.technical.lighting in LIGHTING
    assert idea.technical.angle in ANGLES
    assert idea.technical.composition in COMPOSITION
    assert len(idea.technical.equipment) == 2
    assert idea.technical.settings.aperture.startswith("f/")
    assert idea.technical.settings.shutter_speed.startswith("1/")
    assert idea.technical.settings.iso in ("100", "200", "400", "800")
    assert idea.tips == list(SHOOT_TIPS)
    assert idea.references == [
        "https://pinterest.com/search/pins/?q=Golden%20hour%20portrait%20on%20the%20beach",
        "https://unsplash.com/s/photos/Golden",
    ]


def test_same_seed_gives_same_output():
    first = ResultEnhancer(random.Random(3)).describe_shoot("Neon street portrait")
    second = ResultEnhancer(random.Random(3)).describe_shoot("Neon street portrait")
    assert first == second


def test_structured_entries_pass_through(enhancer):
    idea = ShootIdea(title="Custom", description="Already detailed")
    step = PRStep(step=7, title="Custom step", description="Already planned")

    enhanced = enhancer.enhance(_result(shoot_ideas=[idea], pr_outline=[step]))

    assert enhanced.analysis.shoot_ideas == [idea]
    assert enhanced.analysis.pr_outline[0].description == "Already planned"


def test_structured_pr_steps_are_renumbered_and_scheduled(enhancer):
    steps = [
        "Draft a press release",
        PRStep(step=7, title="Custom step", description="Already planned"),
        PRStep(step=2, title="Scheduled", description="Has a date", timeline="Week 3"),
    ]

    outline = enhancer.enhance(_result(pr_outline=steps)).analysis.pr_outline

    assert [entry.step for entry in outline] == [1, 2, 3]
    assert outline[1].timeline == timeline_for_step(2)
    assert outline[2].timeline == "Week 3"


def test_pr_step_templates_follow_keywords(enhancer):
    press = enhancer.describe_pr_step("Write a press release for launch day", 1)
    email = enhancer.describe_pr_step("Email outreach to podcasters", 2)
    other = enhancer.describe_pr_step("Review results", 3)

    assert press.templates == [PRESS_RELEASE_TEMPLATE]
    assert email.templates == [OUTREACH_EMAIL_TEMPLATE]
    assert other.templates == []
    assert other.actions == ["Define objectives", "Execute plan", "Monitor progress", "Optimize based on results"]


def test_timeline_is_capped_at_last_bucket():
    assert timeline_for_step(1) == "Day 1-2"
    assert timeline_for_step(6) == "Day 22-30"
    assert timeline_for_step(12) == "Day 22-30"


def test_title_and_keyword_extraction():
    assert extract_title("Short idea. With more detail") == "Short idea"
    assert len(extract_title("x" * 80)) == 50
    assert extract_keyword("A big shot") == "photography"
    assert extract_keyword("Moody portrait") == "Moody"
