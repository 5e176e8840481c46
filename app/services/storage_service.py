import asyncio
import mimetypes
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from app.core.config import StorageSettings, get_storage_settings
from app.core.exceptions import StorageError


@dataclass(frozen=True)
class StoredBlob:
    url: str
    key: str
    size: int
    content_type: Optional[str] = None


class BlobStorage:
    """Uploads local files to an S3-compatible bucket and returns public URLs."""

    def __init__(self, settings: StorageSettings):
        self.settings = settings
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.settings.storage_endpoint_url,
                aws_access_key_id=self.settings.storage_access_key,
                aws_secret_access_key=self.settings.storage_secret_key,
                region_name=self.settings.storage_region,
            )
        return self._client

    def public_url(self, key: str) -> str:
        return f"{self.settings.public_base_url}/{self.settings.storage_bucket}/{key}"

    def _upload_sync(self, local_path: Path, key: str, content_type: Optional[str]) -> None:
        extra_args = {"ContentType": content_type} if content_type else None
        self.client.upload_file(str(local_path), self.settings.storage_bucket, key, ExtraArgs=extra_args)

    async def upload(
        self,
        local_path: Path,
        folder: str,
        content_type: Optional[str] = None,
    ) -> StoredBlob:
        local_path = Path(local_path)
        if not local_path.exists():
            raise StorageError(f"Local file not found: {local_path.name}")

        content_type = content_type or mimetypes.guess_type(local_path.name)[0]
        key = f"{folder}/{uuid4().hex}{local_path.suffix.lower()}"
        size = local_path.stat().st_size

        try:
            await asyncio.to_thread(self._upload_sync, local_path, key, content_type)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {local_path.name} to {key} failed: {e}")
            raise StorageError("File could not be uploaded to storage")

        url = self.public_url(key)
        logger.info(f"File uploaded successfully | URL: {url}")
        return StoredBlob(url=url, key=key, size=size, content_type=content_type)


@lru_cache
def _blob_storage() -> BlobStorage:
    return BlobStorage(get_storage_settings())


def get_blob_storage() -> BlobStorage:
    return _blob_storage()
