import pytest

from analysis.models import Post
from analysis.prompts import build_prompt


@pytest.fixture
def post():
    return Post(id="p1", title="X", metrics={"views": 1000, "likes": 50})


def test_full_prompt_contains_sections_and_metrics(post):
    prompt = build_prompt([post], "full")

    for section in ("WHY IT'S VIRAL", "PHOTOGRAPHY SHOOT IDEAS", "PR CAMPAIGN OUTLINE", "KEY TAKEAWAYS"):
        assert section in prompt
    assert "Views: 1000" in prompt
    assert "Likes: 50" in prompt
    assert "Title: X" in prompt


def test_prompt_requests_json_keys(post):
    prompt = build_prompt([post])
    for key in ("whyViral", "shootIdeas", "prOutline", "keyTakeaways"):
        assert f'"{key}"' in prompt


def test_quick_and_full_directives_differ(post):
    quick = build_prompt([post], "quick")
    full = build_prompt([post], "full")

    assert quick != full
    assert "concise" in quick
    assert "comprehensive" in full
    assert "concise" not in full


def test_prompt_is_deterministic(post):
    assert build_prompt([post], "quick") == build_prompt([post], "quick")


def test_multiple_posts_are_numbered():
    posts = [Post(id="a", title="First"), Post(id="b", title="Second")]
    prompt = build_prompt(posts)

    assert "Post 1:" in prompt
    assert "Post 2:" in prompt
    assert prompt.index("First") < prompt.index("Second")


def test_prompt_does_not_alter_posts(post):
    before = post.model_dump()
    build_prompt([post])
    assert post.model_dump() == before


def test_unknown_mode_raises(post):
    with pytest.raises(ValueError):
        build_prompt([post], "detailed")


def test_empty_posts_raise():
    with pytest.raises(ValueError):
        build_prompt([])
