"""Shared fixtures: fakes for the blogs API, Firestore and the media host."""

import pytest
from fastapi.testclient import TestClient

from dependencies import get_blog_service, get_firestore, get_optional_user, get_store_registry
from main import app
from models.post import Post
from models.user import User
from services.blog import BlogService
from services.blog_api import BlogApiError
from services.media import MediaUploadError
from services.post_store import StoreRegistry


def make_post(post_id, **overrides):
    data = {
        "id": post_id,
        "title": f"Post {post_id}",
        "content": f"Content of post {post_id}",
        "author": "Ada",
        "authorId": "author-1",
        "category": "Other",
        "createdAt": "2024-03-01T10:00:00Z",
        "likes": 0,
        "comments": [],
    }
    data.update(overrides)
    return Post.model_validate(data)


class FakeBlogApi:
    def __init__(self, posts=None):
        self.posts = list(posts or [])
        self.list_calls = 0
        self.created = []
        self.create_error = None

    async def list_posts(self):
        self.list_calls += 1
        return [p.model_copy() for p in self.posts]

    async def create_post(self, new_post):
        if self.create_error:
            raise BlogApiError(self.create_error)
        self.created.append(new_post)
        return {"success": True, "message": "Blog created"}


class FakeFirestore:
    def __init__(self, liked=None):
        self.liked = set(liked or [])
        self.calls = []
        self.fail = False

    def add_like(self, post_id, user_id):
        self.calls.append(("like", post_id, user_id))
        if self.fail:
            raise RuntimeError("firestore unavailable")

    def remove_like(self, post_id, user_id):
        self.calls.append(("unlike", post_id, user_id))
        if self.fail:
            raise RuntimeError("firestore unavailable")

    def liked_post_ids(self, post_ids, user_id):
        return {p for p in post_ids if p in self.liked}


class FakeUploader:
    def __init__(self, url="https://img.example/cat.png"):
        self.url = url
        self.uploads = []
        self.fail = False

    async def upload(self, file, user_id):
        if self.fail:
            raise MediaUploadError("host down")
        self.uploads.append((file.filename, user_id))
        return self.url


@pytest.fixture
def viewer():
    return {"user": User(user_id="user-1", email="ada@example.com", name="Ada Lovelace")}


@pytest.fixture
def blog_api():
    return FakeBlogApi([
        make_post("1", title="Hello World", content="First post", likes=2,
                  category="Technology", createdAt="2024-01-01T00:00:00Z"),
        make_post("2", title="Second", content="Gardening tips", likes=5,
                  category="Lifestyle", createdAt="2024-02-01T00:00:00Z", authorId="user-1"),
        make_post("3", title="Third", content="A hello from the mountains", likes=0,
                  category="Other", createdAt=None),
    ])


@pytest.fixture
def firestore_db():
    return FakeFirestore()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def client(blog_api, firestore_db, uploader, viewer):
    service = BlogService(blog_api, firestore_db, uploader)
    stores = StoreRegistry()

    app.dependency_overrides[get_blog_service] = lambda: service
    app.dependency_overrides[get_store_registry] = lambda: stores
    app.dependency_overrides[get_firestore] = lambda: firestore_db
    app.dependency_overrides[get_optional_user] = lambda: viewer["user"]

    yield TestClient(app)

    app.dependency_overrides.clear()
