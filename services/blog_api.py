import asyncio
import logging
from typing import List

import aiohttp
from pydantic import ValidationError

from models.post import NewPost, Post

logger = logging.getLogger(__name__)


class BlogApiError(Exception):
    """Raised when the blogs API refuses or fails a write"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BlogApiClient:

    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self.session = session
        self.base_url = base_url.rstrip("/")

    @property
    def blogs_url(self) -> str:
        return f"{self.base_url}/api/blogs"

    async def list_posts(self) -> List[Post]:
        """
        Fetch every post from the blogs API.

        Any failure (transport, bad JSON, success=false) is logged and
        results in an empty list.
        """
        try:
            async with self.session.get(self.blogs_url) as response:
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Error fetching posts: %s", e)
            return []

        if not isinstance(data, dict) or not data.get("success"):
            return []

        posts = []
        for raw in data.get("data") or []:
            try:
                posts.append(Post.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed post %r: %s", raw, e)
        return posts

    async def create_post(self, new_post: NewPost) -> dict:
        """
        Submit a new post.

        Returns:
            The API's response body

        Raises:
            BlogApiError: If the request fails or the API answers success=false
        """
        payload = new_post.model_dump(by_alias=True)
        try:
            async with self.session.post(self.blogs_url, json=payload) as response:
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Error creating blog post: %s", e)
            raise BlogApiError("Please try again.") from e

        if not isinstance(data, dict) or not data.get("success"):
            message = data.get("message") if isinstance(data, dict) else None
            raise BlogApiError(message or "Unknown error")

        return data
