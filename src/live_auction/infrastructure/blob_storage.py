"""
Blob Storage Adapters

Image uploads for auction banners, team icons and player photos.
"""

import asyncio
import logging
from typing import Dict, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..application.interfaces import IBlobStorage
from ..domain.exceptions import BlobStorageError

logger = logging.getLogger(__name__)


class S3BlobStorage(IBlobStorage):
    """Stores images in an S3 bucket and returns their public URLs"""

    def __init__(self, bucket: str, region_name: str = "ap-northeast-2", client=None):
        if not bucket:
            raise ValueError("Bucket name is required")
        self.bucket = bucket
        self.region_name = region_name
        if client is None:
            session = boto3.session.Session()
            client = session.client(service_name="s3", region_name=region_name)
        self.client = client

    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        key = path.lstrip("/")
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading {key} to {self.bucket}: {e}")
            raise BlobStorageError(f"Failed to upload image {key}") from e

        logger.debug(f"Uploaded {len(data)} bytes to s3://{self.bucket}/{key}")
        return self.public_url(key)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region_name}.amazonaws.com/{key}"


class MemoryBlobStorage(IBlobStorage):
    """Keeps uploads in memory; used when no bucket is configured"""

    def __init__(self, base_url: str = "memory://images"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, Tuple[bytes, str]] = {}

    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        key = path.lstrip("/")
        self.objects[key] = (bytes(data), content_type)
        return f"{self.base_url}/{key}"

    def get(self, key: str) -> Optional[bytes]:
        stored = self.objects.get(key)
        return stored[0] if stored else None
