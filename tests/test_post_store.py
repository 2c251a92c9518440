import pytest

from conftest import make_post
from models.post import SortOrder
from services.post_store import FilterState, PostStore, StoreRegistry, filter_posts


@pytest.fixture
def posts():
    return [
        make_post("1", title="Hello World", content="first", category="Technology",
                  createdAt="2024-01-01T00:00:00Z", likes=3),
        make_post("2", title="Cooking", content="Say HELLO to pasta", category="Lifestyle",
                  createdAt="2024-03-01T00:00:00Z", likes=7),
        make_post("3", title="Misc", content="nothing here", category="Other",
                  createdAt=None, likes=1),
    ]


@pytest.fixture
def store(posts):
    s = PostStore()
    s.replace(posts)
    return s


def ids(posts):
    return [p.id for p in posts]


def test_search_is_case_insensitive_over_title_and_content(posts):
    assert ids(filter_posts(posts, search="hello")) == ["1", "2"]
    assert ids(filter_posts(posts, search="WORLD")) == ["1"]


def test_empty_search_and_all_category_keep_everything(posts):
    assert ids(filter_posts(posts)) == ["1", "2", "3"]


def test_category_is_an_exact_match_ignoring_case(posts):
    assert ids(filter_posts(posts, category="technology")) == ["1"]
    assert ids(filter_posts(posts, category="Lifestyle")) == ["2"]
    assert ids(filter_posts(posts, category="Other")) == ["3"]


def test_labels_sharing_a_backend_category_do_not_match_it():
    posts = [make_post("g", category="Other")]
    assert ids(filter_posts(posts, category="health")) == []
    assert ids(filter_posts(posts, category="general")) == []
    assert ids(filter_posts(posts, category="personal")) == []


def test_filtering_is_idempotent(posts):
    once = filter_posts(posts, search="hello", category="lifestyle")
    twice = filter_posts(once, search="hello", category="lifestyle")
    assert ids(once) == ids(twice) == ["2"]


def test_search_and_category_commute(posts):
    search_first = filter_posts(filter_posts(posts, search="hello"), category="technology")
    category_first = filter_posts(filter_posts(posts, category="technology"), search="hello")
    assert ids(search_first) == ids(category_first)


def test_newest_first_puts_undated_posts_last(store):
    assert ids(store.visible(FilterState())) == ["2", "1", "3"]


def test_most_liked_sort(store):
    assert ids(store.visible(FilterState(sort_by=SortOrder.MOST_LIKED))) == ["2", "1", "3"]
    store.apply_like("3", True)
    store.apply_like("3", True)
    store.apply_like("3", True)
    store.apply_like("3", True)
    assert ids(store.visible(FilterState(sort_by=SortOrder.MOST_LIKED)))[0:2] == ["2", "3"]


def test_needs_refresh_only_on_sort_or_category_change():
    store = PostStore()
    assert store.needs_refresh(FilterState())

    store.replace([], FilterState())
    assert not store.needs_refresh(FilterState(search="anything"))
    assert store.needs_refresh(FilterState(category="technology"))
    assert store.needs_refresh(FilterState(sort_by=SortOrder.MOST_LIKED))


def test_invalidate_forces_refresh(store):
    assert not store.needs_refresh(FilterState())
    store.invalidate()
    assert store.needs_refresh(FilterState())


def test_like_then_unlike_restores_state(store):
    before = store.get("1")

    liked = store.apply_like("1", True)
    assert liked.likes == before.likes + 1
    assert liked.is_liked

    unliked = store.apply_like("1", False)
    assert unliked.likes == before.likes
    assert unliked.is_liked == before.is_liked


def test_unlike_never_goes_negative():
    store = PostStore()
    store.replace([make_post("1", likes=0, isLiked=True)])

    post = store.apply_like("1", False)

    assert post.likes == 0
    assert not post.is_liked


def test_apply_like_unknown_post(store):
    assert store.apply_like("missing", True) is None


def test_registry_keeps_one_store_per_viewer():
    registry = StoreRegistry()
    assert registry.for_viewer("a") is registry.for_viewer("a")
    assert registry.for_viewer("a") is not registry.for_viewer("b")
    assert registry.for_viewer(None) is registry.for_viewer(None)


def test_registry_invalidate_all():
    registry = StoreRegistry()
    a = registry.for_viewer("a")
    b = registry.for_viewer(None)
    a.replace([])
    b.replace([])

    registry.invalidate_all()

    assert a.needs_refresh(FilterState())
    assert b.needs_refresh(FilterState())


def test_invalidate_keeps_last_filters():
    store = PostStore()
    lifestyle = FilterState(category="lifestyle")
    store.replace([], lifestyle)

    store.invalidate()

    assert store.filters == lifestyle
    assert store.needs_refresh(lifestyle)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_registry_drops_least_recently_used_viewer():
    registry = StoreRegistry(maxsize=2, ttl=60)
    a = registry.for_viewer("a")
    registry.for_viewer("b")
    # touching "a" makes "b" the oldest
    assert registry.for_viewer("a") is a

    registry.for_viewer("c")

    assert len(registry) == 2
    assert "a" in registry
    assert "b" not in registry
    assert "c" in registry


def test_registry_expires_idle_stores():
    clock = FakeClock()
    registry = StoreRegistry(maxsize=10, ttl=60, timer=clock)
    first = registry.for_viewer("a")
    first.replace([make_post("1")])

    clock.now = 61

    assert "a" not in registry
    fresh = registry.for_viewer("a")
    assert fresh is not first
    assert not fresh.loaded
