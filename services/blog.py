import html
import logging
from typing import List, Optional

import bleach
from fastapi import HTTPException, UploadFile

from models.post import NewPost, Post, to_backend_category
from models.user import User
from services.blog_api import BlogApiClient, BlogApiError
from services.firestore import FirestoreDB
from services.media import MediaUploadError
from services.post_store import FilterState, PostStore

logger = logging.getLogger(__name__)


def strip_markup(text: str) -> str:
    """Drop HTML tags but keep the author's text as written (bleach escapes &, < and >)"""
    return html.unescape(bleach.clean(text, tags=[], strip=True))


class BlogService:

    def __init__(self, api: BlogApiClient, db: Optional[FirestoreDB], uploader):
        self.api = api
        self.db = db
        self.uploader = uploader

    async def fetch_posts(self, viewer: Optional[User]) -> List[Post]:
        """
        Fetch all posts and mark the ones the viewer has liked
        """
        posts = await self.api.list_posts()
        if viewer is None or self.db is None or not posts:
            return posts

        try:
            liked = self.db.liked_post_ids([p.id for p in posts], viewer.user_id)
        except Exception as e:
            logger.error("Error loading likes for %s: %s", viewer.user_id, e)
            return posts

        return [p.model_copy(update={"is_liked": p.id in liked}) for p in posts]

    async def load(self, store: PostStore, filters: FilterState, viewer: Optional[User], force: bool = False) -> List[Post]:
        """Refresh the store when the filters call for it, then return the visible posts"""
        if force or store.needs_refresh(filters):
            store.replace(await self.fetch_posts(viewer), filters)
        return store.visible(filters)

    async def create_post(
            self,
            author: User,
            title: str,
            content: str,
            category: str,
            image: Optional[UploadFile] = None,
    ) -> dict:
        """
        Upload the optional image, then submit the post to the blogs API.

        Raises:
            HTTPException: 502 with the message to show the author on any failure
        """
        image_url = ""
        if image is not None:
            try:
                image_url = await self.uploader.upload(image, author.user_id)
            except MediaUploadError as e:
                logger.error("Error creating blog post: %s", e)
                raise HTTPException(status_code=502, detail="Error creating blog post. Please try again.")

        new_post = NewPost(
            title=strip_markup(title),
            content=strip_markup(content),
            category=to_backend_category(category),
            image=image_url,
            author=author.display_name,
            author_id=author.user_id,
        )

        try:
            return await self.api.create_post(new_post)
        except BlogApiError as e:
            raise HTTPException(status_code=502, detail=f"Error creating blog post: {e.message}")
