from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Query, UploadFile

from dependencies import Blog, Firestore, Store, Stores, Viewer
from models.post import ALL_CATEGORIES, LikeResult, SortOrder
from models.views import BlogPage, CategoryOption, PostCard, PostDetail, category_options, empty_message
from services.likes import toggle_like
from services.post_store import FilterState

router = APIRouter()


def _page(posts, filters: FilterState, viewer) -> BlogPage:
    viewer_id = viewer.user_id if viewer else None
    return BlogPage(
        posts=[PostCard.from_post(p, viewer_id) for p in posts],
        empty_message=None if posts else empty_message(filters.search),
        categories=category_options(),
        signed_in=viewer is not None,
        search=filters.search,
        category=filters.category,
        sort_by=filters.sort_by.value,
    )


@router.get("")
async def get_blog_page(
        blog: Blog,
        store: Store,
        viewer: Viewer,
        search: str = "",
        category: str = ALL_CATEGORIES,
        sort_by: SortOrder = Query(SortOrder.NEWEST, alias="sortBy"),
) -> BlogPage:
    """Posts for the grid, filtered locally and refetched only when sort or category changes"""
    filters = FilterState(search=search, category=category, sort_by=sort_by)
    posts = await blog.load(store, filters, viewer)
    return _page(posts, filters, viewer)


@router.post("/refresh")
async def refresh_blog_page(
        blog: Blog,
        store: Store,
        viewer: Viewer,
        search: str = "",
        category: str = ALL_CATEGORIES,
        sort_by: SortOrder = Query(SortOrder.NEWEST, alias="sortBy"),
) -> BlogPage:
    filters = FilterState(search=search, category=category, sort_by=sort_by)
    posts = await blog.load(store, filters, viewer, force=True)
    return _page(posts, filters, viewer)


@router.get("/categories")
async def get_categories() -> List[CategoryOption]:
    return category_options(include_all=False)


@router.get("/{post_id}")
async def get_post(post_id: str, store: Store) -> PostDetail:
    """Full post for the reading modal"""
    post = store.get(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return PostDetail.from_post(post)


@router.post("")
async def create_post(
        blog: Blog,
        stores: Stores,
        viewer: Viewer,
        title: Annotated[str, Form(min_length=1)],
        content: Annotated[str, Form(min_length=1)],
        category: Annotated[str, Form()] = "general",
        image: Annotated[Optional[UploadFile], File()] = None,
) -> Dict[str, Any]:
    """Publish a new post; every viewer's list is refetched on their next load"""
    if viewer is None:
        raise HTTPException(status_code=401, detail="Please login to create a blog post")

    # browsers send an empty file part when no image was picked
    if image is not None and not image.filename:
        image = None

    result = await blog.create_post(viewer, title, content, category, image)

    stores.invalidate_all()
    store = stores.for_viewer(viewer.user_id)
    await blog.load(store, store.filters, viewer, force=True)

    return {"success": True, "message": result.get("message")}


@router.post("/{post_id}/like")
async def like_post(
        post_id: str,
        store: Store,
        db: Firestore,
        viewer: Viewer,
        background_tasks: BackgroundTasks,
) -> LikeResult:
    """Toggle the viewer's like locally and write it through in the background"""
    if viewer is None:
        raise HTTPException(status_code=401, detail="Please login to like posts")
    return toggle_like(store, db, background_tasks, post_id, viewer.user_id)
