import logging
import os
from contextlib import asynccontextmanager

import aiohttp
import boto3
import firebase_admin
from botocore.config import Config
from dotenv import load_dotenv
from fastapi import FastAPI
from firebase_admin import credentials
from starlette.middleware.cors import CORSMiddleware

from context import RequestContextMiddleware, RequestPathFilter
from routes.blog import router as blog_router
from routes.health import router as health_router
from services.blog import BlogService
from services.blog_api import BlogApiClient
from services.firestore import FirestoreDB
from services.media import CloudinaryUploader, S3Uploader
from services.post_store import StoreRegistry

load_dotenv()

# ─── logging ────────────────────────────────────────────────
logging.basicConfig(level=logging.INFO,
                    format="%(asctime)s %(levelname)s [%(request_path)s] %(name)s: %(message)s")
for handler in logging.getLogger().handlers:
    handler.addFilter(RequestPathFilter())

BLOG_API_URL = os.environ.get("BLOG_API_URL", "http://localhost:5000")
MEDIA_BACKEND = os.environ.get("MEDIA_BACKEND", "cloudinary")
FRONTEND_ORIGIN = os.environ.get("FRONTEND_ORIGIN", "http://localhost:3000")


def create_uploader(session: aiohttp.ClientSession):
    """Media host for post images, picked by MEDIA_BACKEND"""
    if MEDIA_BACKEND == "s3":
        region = os.environ.get("AWS_REGION", "us-east-2")
        s3_client = boto3.client(
            's3',
            aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            region_name=region,
            config=Config(signature_version="s3v4")
        )
        return S3Uploader(os.environ.get("S3_BUCKET_NAME"), s3_client, region)

    return CloudinaryUploader(
        session,
        cloud_name=os.environ.get("CLOUDINARY_CLOUD_NAME", ""),
        upload_preset=os.environ.get("CLOUDINARY_UPLOAD_PRESET", ""),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize Firebase Admin SDK
    cred = credentials.Certificate(os.environ.get("FIREBASE_CREDENTIALS", "./firebase.json"))
    firebase_app = firebase_admin.initialize_app(cred)

    # Initialize dependencies
    session = aiohttp.ClientSession()
    firestore = FirestoreDB(firebase_app)
    api = BlogApiClient(session, BLOG_API_URL)

    app.state.session = session
    app.state.firestore = firestore
    app.state.blog_service = BlogService(api, firestore, create_uploader(session))
    app.state.stores = StoreRegistry()

    yield
    # Cleanup resources
    await session.close()
    firebase_admin.delete_app(firebase_app)


app = FastAPI(lifespan=lifespan)

# middleware to set request context
app.add_middleware(RequestContextMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(blog_router, prefix="/blogs", tags=["blogs"])
app.include_router(health_router, prefix="/health", tags=["health"])
