import asyncio
import logging
import os
import uuid
from datetime import datetime

import aiohttp
import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class MediaUploadError(Exception):
    """Raised when the media host doesn't hand back a URL"""


def validate_image(file: UploadFile) -> None:
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")


class CloudinaryUploader:
    def __init__(self, session: aiohttp.ClientSession, cloud_name: str, upload_preset: str):
        self.session = session
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset

    async def upload(self, file: UploadFile, user_id: str) -> str:
        """
        Upload an image with an unsigned preset

        Args:
            file: The image to upload
            user_id: The uploader, unused by Cloudinary's unsigned presets

        Returns:
            The secure URL of the hosted image

        Raises:
            MediaUploadError: If the upload fails or no URL comes back
        """
        validate_image(file)
        content = await file.read()

        form = aiohttp.FormData()
        form.add_field("file", content, filename=file.filename or "image", content_type=file.content_type)
        form.add_field("upload_preset", self.upload_preset)

        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)
        try:
            async with self.session.post(url, data=form) as response:
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Error uploading image: %s", e)
            raise MediaUploadError(str(e)) from e

        secure_url = data.get("secure_url") if isinstance(data, dict) else None
        if not secure_url:
            logger.error("Image upload returned no URL: %s", data)
            raise MediaUploadError("No URL returned for uploaded image")
        return secure_url


class S3Uploader:
    def __init__(self, bucket_name: str, client: boto3.client, region: str):
        """
        Initialize the uploader with bucket name, client and region
        """
        self.bucket_name = bucket_name
        self.s3 = client
        self.region = region

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, file: UploadFile, user_id: str, max_size_mb: int = 5) -> str:
        """
        Upload an image to S3 under the uploader's prefix

        Args:
            file: The image to upload
            user_id: The ID of the user uploading the file
            max_size_mb: Maximum file size in MB

        Returns:
            The public URL of the stored image

        Raises:
            HTTPException: If validation fails
            MediaUploadError: If S3 rejects the upload
        """
        validate_image(file)

        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        extension = os.path.splitext(file.filename or "")[1].lower()
        key = f"blog-images/{user_id}/{timestamp}-{uuid.uuid4()}{extension}"

        content = await file.read()
        if len(content) > max_size_mb * 1024 * 1024:
            raise HTTPException(
                status_code=400,
                detail=f"File size exceeds {max_size_mb}MB limit"
            )

        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=file.content_type,
                Metadata={
                    'user_id': user_id
                }
            )
        except ClientError as e:
            logger.error("S3 upload error: %s", e)
            raise MediaUploadError("Failed to upload image to S3") from e

        return self.public_url(key)
