from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from minio.error import S3Error
from starlette.concurrency import run_in_threadpool

from .config import settings
from .minio_client import minio_client

logger = logging.getLogger("gs-portfolio")

MISSING_KEY_CODES = {"NoSuchKey", "NoSuchObject"}
CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredObject:
    key: str
    size: int
    content_type: Optional[str]
    body: Any

    async def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        try:
            # read via threadpool so the event loop is not blocked
            while True:
                chunk = await run_in_threadpool(self.body.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await self.close()

    async def read(self) -> bytes:
        parts = [chunk async for chunk in self.iter_chunks()]
        return b"".join(parts)

    async def close(self) -> None:
        await run_in_threadpool(self.body.close)
        release = getattr(self.body, "release_conn", None)
        if release is not None:
            await run_in_threadpool(release)


class BlobStorage:
    """Object store adapter keyed by generated paths.

    Errors from the underlying store propagate to the caller untouched, except
    for a missing key, which reads as ``None`` / ``False``. Nothing is retried.
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    async def upload_file(self, key: str, data: bytes, content_type: str) -> None:
        await run_in_threadpool(
            self.client.put_object,
            self.bucket,
            key,
            io.BytesIO(data),
            len(data),
            content_type=content_type,
        )
        logger.info("Stored object %s/%s (%s bytes)", self.bucket, key, len(data))

    async def get_file(self, key: str) -> Optional[StoredObject]:
        try:
            stat = await run_in_threadpool(self.client.stat_object, self.bucket, key)
            body = await run_in_threadpool(self.client.get_object, self.bucket, key)
        except S3Error as e:
            if e.code in MISSING_KEY_CODES:
                return None
            raise
        return StoredObject(
            key=key,
            size=getattr(stat, "size", 0) or 0,
            content_type=getattr(stat, "content_type", None),
            body=body,
        )

    async def delete_file(self, key: str) -> None:
        await run_in_threadpool(self.client.remove_object, self.bucket, key)
        logger.info("Removed object %s/%s", self.bucket, key)

    async def file_exists(self, key: str) -> bool:
        try:
            await run_in_threadpool(self.client.stat_object, self.bucket, key)
        except S3Error as e:
            if e.code in MISSING_KEY_CODES:
                return False
            raise
        return True


def get_storage() -> BlobStorage:
    return BlobStorage(minio_client, settings.MINIO_BUCKET)
