"""Supabase Storage implementation of the blob store."""

import asyncio
import logging
from dataclasses import dataclass

from supabase import Client

from photo_albums.services.blobs import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores media in a public Supabase Storage bucket."""

    client: Client
    bucket: str
    public_base_url: str | None = None

    async def put(self, key: str, file_path: str, content_type: str) -> str:
        """Upload a file, overwriting any object already under ``key``."""
        await asyncio.to_thread(self._upload, key, file_path, content_type)
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        """Remove an object; the storage API ignores keys that do not exist."""
        removed = await asyncio.to_thread(
            self.client.storage.from_(self.bucket).remove, [key]
        )
        if not removed:
            logger.info("Blob already absent", extra={"key": key})

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return self.client.storage.from_(self.bucket).get_public_url(key).rstrip("?")

    async def close(self) -> None:
        """The Supabase client holds no per-store resources."""

    def _upload(self, key: str, file_path: str, content_type: str) -> None:
        self.client.storage.from_(self.bucket).upload(
            path=key,
            file=file_path,
            file_options={"content-type": content_type, "upsert": "true"},
        )
