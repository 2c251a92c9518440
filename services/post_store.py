import time
from datetime import datetime, timezone
from typing import List, Optional

from cachetools import TTLCache
from pydantic import BaseModel

from models.post import ALL_CATEGORIES, Post, SortOrder

ANONYMOUS = "anonymous"

# bounds on per-viewer page state
MAX_VIEWER_STORES = 1024
STORE_TTL_SECONDS = 30 * 60

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class FilterState(BaseModel):
    search: str = ""
    category: str = ALL_CATEGORIES
    sort_by: SortOrder = SortOrder.NEWEST


def matches_search(post: Post, search: str) -> bool:
    query = search.lower()
    return query in post.title.lower() or query in post.content.lower()


def matches_category(post: Post, category: str) -> bool:
    """Exact category match; letter case is ignored so "technology" matches "Technology"."""
    if category == ALL_CATEGORIES:
        return True
    return (post.category or "").lower() == category.lower()


def filter_posts(posts: List[Post], search: str = "", category: str = ALL_CATEGORIES) -> List[Post]:
    return [p for p in posts if matches_search(p, search) and matches_category(p, category)]


def sort_posts(posts: List[Post], sort_by: SortOrder) -> List[Post]:
    if sort_by == SortOrder.MOST_LIKED:
        return sorted(posts, key=lambda p: p.likes, reverse=True)
    return sorted(posts, key=lambda p: p.created_at or _OLDEST, reverse=True)


class PostStore:
    """Posts currently on one viewer's page, plus the filters they were fetched under"""

    def __init__(self):
        self.posts: List[Post] = []
        self.filters = FilterState()
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def replace(self, posts: List[Post], filters: Optional[FilterState] = None) -> None:
        self.posts = list(posts)
        self.filters = filters or FilterState()
        self._loaded = True

    def invalidate(self) -> None:
        # filters are kept so a refetch can reuse the viewer's current selection
        self._loaded = False

    def needs_refresh(self, filters: FilterState) -> bool:
        # search is applied locally; only sort or category changes go back to the API
        if not self._loaded:
            return True
        return (
            self.filters.sort_by != filters.sort_by
            or self.filters.category != filters.category
        )

    def visible(self, filters: FilterState) -> List[Post]:
        return sort_posts(filter_posts(self.posts, filters.search, filters.category), filters.sort_by)

    def get(self, post_id: str) -> Optional[Post]:
        for post in self.posts:
            if post.id == post_id:
                return post
        return None

    def apply_like(self, post_id: str, liked: bool) -> Optional[Post]:
        """
        Optimistically set the viewer's like on a post.

        The count moves by one in the requested direction and never drops
        below zero. Returns the updated post, or None if it isn't loaded.
        """
        for i, post in enumerate(self.posts):
            if post.id != post_id:
                continue
            likes = post.likes + 1 if liked else max(post.likes - 1, 0)
            updated = post.model_copy(update={"likes": likes, "is_liked": liked})
            self.posts[i] = updated
            return updated
        return None


class StoreRegistry:
    """
    One PostStore per viewer; anonymous viewers share a single store.

    Stores expire after `ttl` seconds and the least recently used ones are
    dropped once `maxsize` viewers are held. An evicted viewer simply gets a
    fresh store, which refetches on its next load.
    """

    def __init__(self, maxsize: int = MAX_VIEWER_STORES, ttl: float = STORE_TTL_SECONDS, timer=time.monotonic):
        self._stores = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, viewer_id: Optional[str]) -> bool:
        return (viewer_id or ANONYMOUS) in self._stores

    def for_viewer(self, viewer_id: Optional[str]) -> PostStore:
        key = viewer_id or ANONYMOUS
        store = self._stores.get(key)
        if store is None:
            store = PostStore()
            self._stores[key] = store
        return store

    def invalidate_all(self) -> None:
        for store in list(self._stores.values()):
            store.invalidate()
