import logging

from fastapi import BackgroundTasks, HTTPException

from models.post import LikeResult
from services.firestore import FirestoreDB
from services.post_store import PostStore

logger = logging.getLogger(__name__)


def sync_like(db: FirestoreDB, post_id: str, user_id: str, liked: bool) -> None:
    """
    Mirror a like toggle into Firestore.

    Runs after the response has gone out; failures are only logged, so the
    local count stays as-is until the next refetch.
    """
    try:
        if liked:
            db.add_like(post_id, user_id)
        else:
            db.remove_like(post_id, user_id)
    except Exception as e:
        logger.error("Error updating like for post %s: %s", post_id, e)


def toggle_like(
        store: PostStore,
        db: FirestoreDB,
        background_tasks: BackgroundTasks,
        post_id: str,
        user_id: str,
) -> LikeResult:
    post = store.get(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")

    liked = not post.is_liked
    updated = store.apply_like(post_id, liked)

    background_tasks.add_task(sync_like, db, post_id, user_id, liked)

    return LikeResult(post_id=post_id, likes=updated.likes, liked=liked)
