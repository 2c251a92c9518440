from datetime import datetime, timezone

from conftest import make_post
from models.views import (
    PostCard,
    PostDetail,
    author_initial,
    category_options,
    empty_message,
    format_date,
    truncate_content,
)


def test_long_content_is_truncated_with_ellipsis():
    preview = truncate_content("x" * 200)
    assert len(preview) == 153
    assert preview == "x" * 150 + "..."


def test_short_content_is_unchanged():
    assert truncate_content("short") == "short"
    assert truncate_content("y" * 150) == "y" * 150


def test_format_date():
    assert format_date(datetime(2024, 1, 5, tzinfo=timezone.utc)) == "1/5/2024"
    assert format_date(None) == "Just now"


def test_author_initial():
    assert author_initial("ada") == "A"
    assert author_initial("zoe") == "Z"
    assert author_initial(None) == "A"
    assert author_initial("") == "A"


def test_post_card_for_long_post():
    post = make_post("1", content="x" * 200, comments=["c1", "c2"], likes=4, category=None)

    card = PostCard.from_post(post)

    assert len(card.preview) == 153
    assert card.has_more
    assert card.category == "general"
    assert card.comment_count == 2
    assert card.likes == 4
    assert card.date == "3/1/2024"


def test_post_card_edit_actions_only_for_author():
    post = make_post("1", authorId="user-1")

    assert PostCard.from_post(post, "user-1").can_edit
    assert not PostCard.from_post(post, "someone-else").can_edit
    assert not PostCard.from_post(post, None).can_edit


def test_post_detail():
    post = make_post("9", author="grace", content="full text " * 40, createdAt=None, isLiked=True)

    detail = PostDetail.from_post(post)

    assert detail.content == post.content
    assert detail.author_initial == "G"
    assert detail.date == "Just now"
    assert detail.is_liked


def test_category_options():
    values = [o.value for o in category_options()]
    assert values == ["all", "general", "health", "technology", "lifestyle", "personal"]
    assert "all" not in [o.value for o in category_options(include_all=False)]


def test_empty_message():
    assert empty_message("cats") == "No posts found matching your search."
    assert empty_message("") == "No blog posts yet."
