"""Background ingestion of uploaded media.

Each accepted file becomes one task that runs transform, upload and persist
strictly in that order. Tasks run detached from the request that accepted
them and report progress only through the task registry; nothing raised
inside a task escapes it. Temporary files are owned by their task and are
removed when it finishes, whatever the outcome.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID

from photo_albums.domain.errors import UnsupportedMediaTypeError
from photo_albums.domain.models import PhotoRecord
from photo_albums.domain.tasks import (
    IngestionFailure,
    IngestionTask,
    StagedUpload,
    TaskStatus,
)
from photo_albums.services.albums import AlbumService
from photo_albums.services.blobs import BlobStore, StorageKeyBuilder
from photo_albums.services.catalog import AlbumRepository, PhotoRepository
from photo_albums.services.media import MediaTransformService
from photo_albums.services.tasks import TaskRegistry

logger = logging.getLogger(__name__)


@dataclass
class IngestionPipeline:
    """Drives uploads through transform, blob upload and catalog persistence."""

    album_service: AlbumService
    album_repository: AlbumRepository
    photo_repository: PhotoRepository
    blob_store: BlobStore
    transformer: MediaTransformService
    registry: TaskRegistry
    keys: StorageKeyBuilder
    task_ttl_seconds: float = 600
    max_concurrent: int = 4
    _jobs: set[asyncio.Task[IngestionTask]] = field(default_factory=set)
    _semaphore: asyncio.Semaphore | None = None

    async def submit(
        self, uploads: list[StagedUpload], target_album_id: UUID | None = None
    ) -> list[IngestionTask]:
        """Register one task per upload and start processing in the background.

        Returns the PENDING tasks immediately.
        """
        started = await self._start(uploads, target_album_id)
        return [task for task, _ in started]

    async def ingest(
        self, uploads: list[StagedUpload], target_album_id: UUID | None = None
    ) -> list[IngestionTask]:
        """Submit uploads and wait for every task to reach a terminal state."""
        started = await self._start(uploads, target_album_id)
        return list(await asyncio.gather(*(job for _, job in started)))

    async def drain(self) -> None:
        """Wait for all in-flight tasks."""
        if self._jobs:
            await asyncio.gather(*self._jobs, return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._jobs)

    async def _start(
        self, uploads: list[StagedUpload], target_album_id: UUID | None
    ) -> list[tuple[IngestionTask, asyncio.Task[IngestionTask]]]:
        try:
            album = await asyncio.to_thread(
                self.album_service.resolve_target_album, target_album_id
            )
        except Exception:
            await asyncio.to_thread(remove_files, [upload.path for upload in uploads])
            raise
        started = []
        for upload in uploads:
            task = self.registry.create(upload.original_file_name, album.id)
            job = asyncio.create_task(self._run(task.id, upload, album.id))
            self._jobs.add(job)
            job.add_done_callback(self._jobs.discard)
            started.append((task, job))
            logger.info(
                "Accepted upload",
                extra={"task_id": task.id, "file_name": upload.original_file_name},
            )
        return started

    async def _run(
        self, task_id: str, upload: StagedUpload, album_id: UUID
    ) -> IngestionTask:
        owned_files = [upload.path]
        try:
            async with self._limiter():
                return await self._process(task_id, upload, album_id, owned_files)
        except Exception as exc:
            logger.exception("Ingestion task crashed", extra={"task_id": task_id})
            return self._fail(task_id, IngestionFailure.INTERNAL_ERROR, str(exc))
        finally:
            await asyncio.to_thread(remove_files, owned_files)
            self.registry.schedule_purge(task_id, self.task_ttl_seconds)

    async def _process(
        self,
        task_id: str,
        upload: StagedUpload,
        album_id: UUID,
        owned_files: list[str],
    ) -> IngestionTask:
        self.registry.update(
            task_id, status=TaskStatus.PROCESSING, message="Processing media"
        )
        try:
            result = await asyncio.to_thread(
                self.transformer.transform,
                upload.path,
                upload.content_type,
                upload.original_file_name,
            )
        except UnsupportedMediaTypeError as exc:
            return self._fail(task_id, IngestionFailure.UNSUPPORTED_MEDIA_TYPE, str(exc))
        except Exception as exc:
            logger.exception("Media transform failed", extra={"task_id": task_id})
            return self._fail(task_id, IngestionFailure.TRANSFORM_FAILED, str(exc))
        if result.created_file:
            owned_files.append(result.output_path)

        storage_file_name = self.keys.storage_file_name(
            upload.original_file_name, result.output_ext
        )
        key = self.keys.blob_key(storage_file_name)
        self.registry.update(task_id, message="Uploading to storage")
        try:
            url = await self.blob_store.put(key, result.output_path, result.output_mime)
        except Exception as exc:
            logger.exception("Blob upload failed", extra={"task_id": task_id, "key": key})
            return self._fail(
                task_id, IngestionFailure.UPLOAD_FAILED, f"Upload failed: {exc}"
            )

        self.registry.update(task_id, message="Saving photo record")
        try:
            photo = await asyncio.to_thread(
                self._persist,
                upload.original_file_name,
                storage_file_name,
                url,
                album_id,
            )
        except Exception as exc:
            logger.exception("Saving photo failed", extra={"task_id": task_id})
            await self._discard_blob(key)
            return self._fail(
                task_id, IngestionFailure.PERSIST_FAILED, f"Saving photo failed: {exc}"
            )
        logger.info(
            "Ingested photo",
            extra={"task_id": task_id, "photo_id": str(photo.id), "key": key},
        )
        return self.registry.update(
            task_id,
            status=TaskStatus.COMPLETED,
            message="Upload complete",
            result_url=url,
        )

    def _persist(
        self,
        original_file_name: str,
        storage_file_name: str,
        remote_url: str,
        album_id: UUID,
    ) -> PhotoRecord:
        photo = self.photo_repository.create_photo(
            original_file_name=original_file_name,
            storage_file_name=storage_file_name,
            remote_url=remote_url,
            album_id=album_id,
        )
        try:
            self.album_repository.increment_photo_count(album_id, 1)
        except Exception:
            try:
                self.photo_repository.delete_photo(photo.id)
            except Exception:
                logger.exception(
                    "Could not remove photo after counter update failed",
                    extra={"photo_id": str(photo.id)},
                )
            raise
        return photo

    async def _discard_blob(self, key: str) -> None:
        try:
            await self.blob_store.delete(key)
        except Exception:
            logger.exception("Could not remove orphaned blob", extra={"key": key})

    def _fail(
        self, task_id: str, code: IngestionFailure, message: str
    ) -> IngestionTask:
        logger.warning(
            "Ingestion failed",
            extra={"task_id": task_id, "error_code": code.value},
        )
        return self.registry.update(
            task_id, status=TaskStatus.FAILED, message=message, error_code=code
        )

    def _limiter(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(max(1, self.max_concurrent))
        return self._semaphore


def remove_files(paths: list[str]) -> None:
    """Delete temporary files, logging instead of raising on failure."""
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove temp file", exc_info=True, extra={"path": path})
