from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SortOrder(str, Enum):
    NEWEST = "newest"
    MOST_LIKED = "mostLiked"


# UI-facing category labels and the backend category each one is stored as
CATEGORY_LABELS = {
    "general": "General",
    "health": "Health & Wellness",
    "technology": "Technology",
    "lifestyle": "Lifestyle",
    "personal": "Personal Story",
}

CATEGORY_MAP = {
    "general": "Other",
    "health": "Other",
    "technology": "Technology",
    "lifestyle": "Lifestyle",
    "personal": "Other",
}

ALL_CATEGORIES = "all"


def to_backend_category(label: Optional[str]) -> str:
    """Map a compose-form category label to the backend enum value"""
    return CATEGORY_MAP.get(label or "", "Other")


def _as_utc(value: datetime) -> datetime:
    # naive values are treated as UTC so mixed inputs stay comparable
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of the many createdAt shapes the blogs API hands back.

    Accepts datetimes (Firestore's DatetimeWithNanoseconds included), ISO
    strings, epoch milliseconds and serialized timestamps such as
    {"_seconds": 1700000000, "_nanoseconds": 0}.
    Returns None when the value can't be understood.
    """
    if value is None or value == "":
        return None

    if hasattr(value, "to_datetime"):
        value = value.to_datetime()

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None

    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("_nanoseconds", value.get("nanoseconds", 0)) or 0
            try:
                return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                return None

    return None


class Post(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    content: str = ""
    author: Optional[str] = None
    author_id: Optional[str] = Field(None, alias="authorId")
    category: Optional[str] = None
    image_url: Optional[str] = Field(
        None,
        alias="imageUrl",
        validation_alias=AliasChoices("imageUrl", "image"),
    )
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    likes: int = 0
    is_liked: bool = Field(False, alias="isLiked")
    comments: List[Any] = []

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return str(value) if value is not None else value

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value if value is not None else ""

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_image(cls, value):
        return value or None

    @field_validator("created_at", mode="before")
    @classmethod
    def _tolerant_timestamp(cls, value):
        return parse_timestamp(value)

    @field_validator("likes", mode="before")
    @classmethod
    def _non_negative_likes(cls, value):
        try:
            return max(int(value or 0), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("comments", mode="before")
    @classmethod
    def _comments_list(cls, value):
        return list(value) if value else []


class NewPost(BaseModel):
    """Body sent to POST /api/blogs"""
    title: str
    content: str
    category: str
    image: str = ""
    author: str
    author_id: Optional[str] = Field(None, alias="authorId")

    model_config = ConfigDict(populate_by_name=True)


class LikeResult(BaseModel):
    post_id: str
    likes: int
    liked: bool
