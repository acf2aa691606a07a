"""Test helpers: an in-memory stand-in for the MinIO client and row seeding."""
import io
from types import SimpleNamespace

from minio.error import S3Error

from gs_portfolio.repositories import GSFileRepository

TEST_BUCKET = "test-bucket"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"


def make_s3_error(code: str) -> S3Error:
    return S3Error(
        code=code,
        message=code,
        resource="/",
        request_id="test",
        host_id="test",
        response=None,
    )


class FakeObject:
    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)
        self.closed = False
        self.released = False

    def read(self, amt=None):
        return self._buf.read(amt)

    def close(self):
        self.closed = True

    def release_conn(self):
        self.released = True


class FakeMinio:
    """Just enough of minio.Minio for the storage adapter."""

    def __init__(self):
        self.buckets = set()
        self.objects = {}
        self.fail_removes = False
        self.fail_reads = False

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def put_object(self, bucket, key, data, length, content_type="application/octet-stream"):
        self.objects[(bucket, key)] = (data.read(length), content_type)

    def stat_object(self, bucket, key):
        if self.fail_reads:
            raise make_s3_error("InternalError")
        if (bucket, key) not in self.objects:
            raise make_s3_error("NoSuchKey")
        data, content_type = self.objects[(bucket, key)]
        return SimpleNamespace(size=len(data), content_type=content_type)

    def get_object(self, bucket, key):
        if (bucket, key) not in self.objects:
            raise make_s3_error("NoSuchKey")
        return FakeObject(self.objects[(bucket, key)][0])

    def remove_object(self, bucket, key):
        if self.fail_removes:
            raise make_s3_error("InternalError")
        self.objects.pop((bucket, key), None)

    def keys(self, prefix=""):
        return sorted(k for (_, k) in self.objects if k.startswith(prefix))


async def seed_file(session_factory, storage, name="Scene", data=b"splat-data", thumbnail=None, filename="scene.splat"):
    """Store a blob (and optional PNG thumbnail) and insert the matching active row."""
    file_path = f"gs-files/{name}-{filename}"
    await storage.upload_file(file_path, data, "application/octet-stream")
    thumbnail_path = None
    if thumbnail is not None:
        thumbnail_path = f"thumbnails/{name}.png"
        await storage.upload_file(thumbnail_path, thumbnail, "image/png")
    async with session_factory() as db:
        return await GSFileRepository(db).create(
            filename=filename,
            display_name=name,
            description=f"{name} description",
            file_size=len(data),
            mime_type="application/octet-stream",
            file_path=file_path,
            thumbnail_path=thumbnail_path,
        )
