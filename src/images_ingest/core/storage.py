"""S3-backed object store for originals and derivatives."""

from typing import List, Optional

from .error_handling import with_error_handling
from .exceptions import S3Error
from .keys import build_s3_url, folder_key
from .protocols import S3ClientProtocol

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ObjectStore:
    """Durable blob storage addressed by bucket and key.

    Writes go to the configured repository bucket; reads and copies may
    name any source bucket.
    """

    def __init__(self, s3_client: S3ClientProtocol, bucket: str):
        self._s3 = s3_client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def url_for(self, key: str) -> str:
        return build_s3_url(self._bucket, key)

    @with_error_handling(S3Error)
    async def ensure_folder(self, item_id: str) -> str:
        """Put the zero-byte ``<itemId>/`` marker. Safe to repeat."""
        key = folder_key(item_id)
        await self._s3.put_object(Bucket=self._bucket, Key=key, Body=b"")
        return key

    @with_error_handling(S3Error)
    async def put_bytes(self, key: str, body: bytes, content_type: Optional[str] = None) -> str:
        """Upload ``body`` under ``key`` and return its canonical URL."""
        await self._s3.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type or DEFAULT_CONTENT_TYPE,
        )
        return self.url_for(key)

    @with_error_handling(S3Error)
    async def get_bytes(self, bucket: str, key: str) -> bytes:
        response = await self._s3.get_object(Bucket=bucket, Key=key)
        async with response["Body"] as stream:
            return await stream.read()

    @with_error_handling(S3Error)
    async def copy_from(self, source_bucket: str, source_key: str, key: str) -> str:
        """Server-side copy into the repository bucket, without downloading."""
        await self._s3.copy_object(
            Bucket=self._bucket,
            Key=key,
            CopySource={"Bucket": source_bucket, "Key": source_key},
        )
        return self.url_for(key)

    @with_error_handling(S3Error)
    async def list_item_keys(self, item_id: str) -> List[str]:
        """Keys stored under an item, folder markers excluded."""
        keys: List[str] = []
        paginator = self._s3.get_paginator("list_objects_v2")
        async for page in paginator.paginate(Bucket=self._bucket, Prefix=folder_key(item_id)):
            for obj in page.get("Contents", []):
                if not obj["Key"].endswith("/"):
                    keys.append(obj["Key"])
        return keys

    @with_error_handling(S3Error)
    async def presigned_item_urls(self, item_id: str, ttl_seconds: int) -> List[str]:
        """Time-limited GET links for every object stored under an item."""
        urls = []
        for key in await self.list_item_keys(item_id):
            url = await self._s3.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
            urls.append(url)
        return urls
