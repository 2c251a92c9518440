from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from models.post import ALL_CATEGORIES, CATEGORY_LABELS, Post

MAX_PREVIEW_LENGTH = 150


def truncate_content(content: str, limit: int = MAX_PREVIEW_LENGTH) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def format_date(created_at: Optional[datetime]) -> str:
    """Short M/D/YYYY label, or "Just now" for posts without a usable timestamp"""
    if created_at is None:
        return "Just now"
    return f"{created_at.month}/{created_at.day}/{created_at.year}"


def author_initial(author: Optional[str]) -> str:
    return author[0].upper() if author else "A"


class CategoryOption(BaseModel):
    value: str
    label: str


def category_options(include_all: bool = True) -> List[CategoryOption]:
    options = [CategoryOption(value=value, label=label) for value, label in CATEGORY_LABELS.items()]
    if include_all:
        options.insert(0, CategoryOption(value=ALL_CATEGORIES, label="All Categories"))
    return options


class PostCard(BaseModel):
    id: str
    title: str
    preview: str
    has_more: bool
    category: str
    image_url: Optional[str] = None
    date: str
    likes: int
    is_liked: bool
    comment_count: int
    can_edit: bool = False

    @classmethod
    def from_post(cls, post: Post, viewer_id: Optional[str] = None) -> "PostCard":
        return cls(
            id=post.id,
            title=post.title,
            preview=truncate_content(post.content),
            has_more=len(post.content) > MAX_PREVIEW_LENGTH,
            category=post.category or "general",
            image_url=post.image_url,
            date=format_date(post.created_at),
            likes=post.likes,
            is_liked=post.is_liked,
            comment_count=len(post.comments),
            # edit/delete are only shown to the author; neither is wired to an action yet
            can_edit=viewer_id is not None and viewer_id == post.author_id,
        )


class PostDetail(BaseModel):
    id: str
    title: str
    content: str
    image_url: Optional[str] = None
    author: Optional[str] = None
    author_initial: str
    date: str
    likes: int
    is_liked: bool
    comment_count: int

    @classmethod
    def from_post(cls, post: Post) -> "PostDetail":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            author=post.author,
            author_initial=author_initial(post.author),
            date=format_date(post.created_at),
            likes=post.likes,
            is_liked=post.is_liked,
            comment_count=len(post.comments),
        )


class BlogPage(BaseModel):
    posts: List[PostCard]
    empty_message: Optional[str] = None
    categories: List[CategoryOption]
    signed_in: bool
    search: str = ""
    category: str = ALL_CATEGORIES
    sort_by: str = "newest"


def empty_message(search: str) -> str:
    return "No posts found matching your search." if search else "No blog posts yet."
