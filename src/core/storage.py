"""Object storage helpers backed by Supabase Storage."""

import logging

from supabase import Client

from src.core.config import get_settings
from src.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when an upload to object storage fails."""


class ObjectStorage:
    """Uploads blobs to a public bucket and hands back download URLs."""

    def __init__(self, bucket: str | None = None, client: Client | None = None) -> None:
        settings = get_settings()
        self.bucket = bucket or settings.proofs_bucket
        self.base_url = settings.supabase_url.rstrip("/")
        self.client = client or get_supabase_client()

    def public_url(self, key: str) -> str:
        """Public download URL for an object in this bucket."""
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{key}"

    async def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Upload ``data`` under ``key``.

        Args:
            key: Object path inside the bucket.
            data: Raw bytes to store.
            content_type: MIME type recorded on the object.

        Returns:
            str: Public download URL of the stored object.

        Raises:
            StorageError: If the upload is rejected.
        """
        try:
            self.client.storage.from_(self.bucket).upload(
                path=key,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error("Upload of %s to bucket %s failed: %s", key, self.bucket, e)
            raise StorageError(f"Failed to upload {key}: {e}") from e

        logger.info("Uploaded %s (%d bytes) to bucket %s", key, len(data), self.bucket)
        return self.public_url(key)


_object_storage: ObjectStorage | None = None


def get_object_storage() -> ObjectStorage:
    """Get or create the global object storage instance."""
    global _object_storage
    if _object_storage is None:
        _object_storage = ObjectStorage()
    return _object_storage
