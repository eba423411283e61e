"""
Media upload relay to S3

Validates the declared size and mime type of an upload and forwards the bytes
to the media bucket, returning the public URL to store on the owning record.
The declared mime type is trusted as-is for the stored content type.
"""

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool
from typing import Any, Optional
from urllib.parse import quote
import os
import time
import boto3
import structlog

from porchboard.core.config import Settings, get_settings
from porchboard.core.exceptions import PayloadTooLarge, ValidationError
from porchboard.core.utils import is_valid_image_type

logger = structlog.get_logger(__name__)


class MediaStorage:
    """Public-read object storage for logos and event images"""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        """Lazy-load the S3 client"""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.settings.AWS_REGION,
                aws_access_key_id=self.settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self.settings.AWS_SECRET_ACCESS_KEY,
            )
        return self._client

    def public_url(self, key: str) -> str:
        quoted = quote(key)
        if self.settings.MEDIA_PUBLIC_BASE_URL:
            return f"{self.settings.MEDIA_PUBLIC_BASE_URL.rstrip('/')}/{quoted}"
        return f"https://{self.settings.AWS_S3_BUCKET}.s3.{self.settings.AWS_REGION}.amazonaws.com/{quoted}"

    @staticmethod
    def build_key(prefix: str, filename: Optional[str]) -> str:
        """Timestamped object key under prefix, keeping the original file name"""
        name = os.path.basename(filename or "upload") or "upload"
        return f"{prefix.rstrip('/')}-{int(time.time() * 1000)}-{name}"

    @staticmethod
    def check_size(size: int, max_bytes: int) -> None:
        if size > max_bytes:
            raise PayloadTooLarge(f"File exceeds the {max_bytes // (1024 * 1024)}MB limit")

    def upload(self, data: bytes, mime_type: str, size: int, destination: str, max_bytes: int) -> str:
        """
        Store bytes at destination and return the public URL

        Args:
            data: File contents
            mime_type: Caller-declared content type
            size: Declared size in bytes
            destination: Object key
            max_bytes: Ceiling for this route

        Raises:
            PayloadTooLarge: size (or actual length) exceeds max_bytes
            ValidationError: mime type is not an accepted image type
        """
        self.check_size(max(size, len(data)), max_bytes)

        if not is_valid_image_type(mime_type):
            raise ValidationError(f"Unsupported file type: {mime_type}")

        self.client.put_object(
            Bucket=self.settings.AWS_S3_BUCKET,
            Key=destination,
            Body=data,
            ContentType=mime_type,
            ACL="public-read",
        )
        url = self.public_url(destination)
        logger.info(f"Uploaded media object: {destination} ({len(data)} bytes)")
        return url

    async def upload_file(self, file: UploadFile, prefix: str, max_bytes: int) -> str:
        """Read an incoming multipart file and relay it"""
        # Oversized parts are refused before their bytes are read
        if file.size is not None:
            self.check_size(file.size, max_bytes)

        data = await file.read()
        return await run_in_threadpool(
            self.upload,
            data,
            file.content_type or "application/octet-stream",
            len(data),
            self.build_key(prefix, file.filename),
            max_bytes,
        )


def get_media_storage() -> MediaStorage:
    """Dependency to get the media storage relay"""
    return MediaStorage()
