import logging
from typing import Annotated, Optional

from fastapi import Request, Depends, HTTPException
from firebase_admin.auth import verify_id_token

from models.user import User
from services.blog import BlogService
from services.firestore import FirestoreDB
from services.post_store import PostStore, StoreRegistry

logger = logging.getLogger(__name__)


def _decode_user(token: str) -> User:
    decoded_token = verify_id_token(token, check_revoked=True, clock_skew_seconds=10)
    return User(
        user_id=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )


async def get_optional_user(request: Request) -> Optional[User]:
    """
    Viewer from the Firebase ID token, or None for anonymous visitors.
    A token that is present but invalid is still rejected.
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header"
        )

    token = authorization.split("Bearer ")[1]
    try:
        return _decode_user(token)
    except Exception as e:
        logger.warning("Invalid authentication token: %s", e)
        raise HTTPException(
            status_code=401,
            detail=f"Invalid authentication token: {str(e)}"
        )


async def get_firestore(request: Request) -> FirestoreDB:
    """ Get Firestore DB from app state """
    return request.app.state.firestore


async def get_blog_service(request: Request) -> BlogService:
    """Get blog service from app state"""
    return request.app.state.blog_service


async def get_store_registry(request: Request) -> StoreRegistry:
    """Get per-viewer post stores from app state"""
    return request.app.state.stores


async def get_post_store(
        registry: Annotated[StoreRegistry, Depends(get_store_registry)],
        viewer: Annotated[Optional[User], Depends(get_optional_user)],
) -> PostStore:
    """Get the post store backing the current viewer's page"""
    return registry.for_viewer(viewer.user_id if viewer else None)


# Type annotations for dependency injection
Viewer = Annotated[Optional[User], Depends(get_optional_user)]
Firestore = Annotated[FirestoreDB, Depends(get_firestore)]
Blog = Annotated[BlogService, Depends(get_blog_service)]
Stores = Annotated[StoreRegistry, Depends(get_store_registry)]
Store = Annotated[PostStore, Depends(get_post_store)]
