"""Photo rename, move and delete, single and in bulk."""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from uuid import UUID

from photo_albums.domain.bulk import BulkDeleteReport, BulkFailure, BulkMoveReport
from photo_albums.domain.errors import (
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from photo_albums.domain.models import PhotoRecord
from photo_albums.services.blobs import BlobStore, StorageKeyBuilder
from photo_albums.services.catalog import AlbumRepository, PhotoRepository

logger = logging.getLogger(__name__)

_MOVE_ATTEMPTS = 3


@dataclass
class PhotoService:
    """Application service for photo mutations.

    Album counters are only ever changed through
    ``AlbumRepository.increment_photo_count`` so concurrent moves and deletes
    cannot lose updates.
    """

    photo_repository: PhotoRepository
    album_repository: AlbumRepository
    blob_store: BlobStore
    keys: StorageKeyBuilder
    bulk_delete_concurrency: int = 1

    def get_photo(self, photo_id: UUID) -> PhotoRecord:
        photo = self.photo_repository.get_photo(photo_id)
        if photo is None:
            raise NotFoundError("Photo not found")
        return photo

    def rename_photo(self, photo_id: UUID, original_file_name: str | None) -> PhotoRecord:
        """Change the user-facing file name of a photo."""
        cleaned = (original_file_name or "").strip()
        if not cleaned:
            raise ValidationError("originalFileName is required")
        updated = self.photo_repository.rename_photo(photo_id, cleaned)
        if updated is None:
            raise NotFoundError("Photo not found")
        return updated

    def move_photo(self, photo_id: UUID, target_album_id: UUID | None) -> bool:
        """Move one photo; returns false when it already sits in the target.

        The update only applies while the photo is still in the album it was
        read from, so counters move exactly once per actual change.
        """
        if target_album_id is None:
            raise ValidationError("targetAlbumId is required")
        photo = self.get_photo(photo_id)
        if self.album_repository.get_album(target_album_id) is None:
            raise NotFoundError("Target album not found")
        for _ in range(_MOVE_ATTEMPTS):
            if photo.album_id == target_album_id:
                return False
            changed = self.photo_repository.set_album(
                [photo.id], target_album_id, photo.album_id
            )
            if changed:
                if photo.album_id is not None:
                    self.album_repository.increment_photo_count(photo.album_id, -1)
                self.album_repository.increment_photo_count(target_album_id, 1)
                return True
            photo = self.get_photo(photo_id)
        raise ConflictError("Photo was changed concurrently, try again")

    async def delete_photo(self, photo_id: UUID) -> PhotoRecord:
        """Delete the blob, then the record, then decrement the album counter."""
        photo = await asyncio.to_thread(self.get_photo, photo_id)
        await self._delete(photo)
        return photo

    async def bulk_delete(self, photo_ids: list[UUID]) -> BulkDeleteReport:
        """Delete many photos, isolating failures per item.

        Items are processed with at most ``bulk_delete_concurrency`` in
        flight; the default of one keeps object-store calls sequential.
        """
        if not photo_ids:
            raise ValidationError("photoIds must not be empty")
        photos = await asyncio.to_thread(self.photo_repository.list_by_ids, photo_ids)
        found = {photo.id for photo in photos}
        report = BulkDeleteReport()
        for missing in dict.fromkeys(pid for pid in photo_ids if pid not in found):
            report.failed.append(BulkFailure(photo_id=missing, error="Photo not found"))

        limiter = asyncio.Semaphore(max(1, self.bulk_delete_concurrency))

        async def delete_one(photo: PhotoRecord) -> None:
            async with limiter:
                try:
                    await self._delete(photo)
                except Exception as exc:
                    logger.warning(
                        "Bulk delete item failed",
                        extra={"photo_id": str(photo.id), "error": str(exc)},
                    )
                    report.failed.append(BulkFailure(photo_id=photo.id, error=str(exc)))
                else:
                    report.succeeded.append(photo.id)

        await asyncio.gather(*(delete_one(photo) for photo in photos))
        return report

    def bulk_move(
        self, photo_ids: list[UUID], target_album_id: UUID | None
    ) -> BulkMoveReport:
        """Reassign many photos with one update per source album.

        Counter deltas come from the rows each update actually changed. Photos
        moved elsewhere in the meantime are re-read and retried.
        """
        if not photo_ids:
            raise ValidationError("photoIds must not be empty")
        if target_album_id is None:
            raise ValidationError("targetAlbumId is required")
        if self.album_repository.get_album(target_album_id) is None:
            raise NotFoundError("Target album not found")
        requested = list(dict.fromkeys(photo_ids))
        pending = self.photo_repository.list_by_ids(requested)
        report = BulkMoveReport(target_album_id=target_album_id)
        found = {photo.id for photo in pending}
        report.not_found.extend(pid for pid in requested if pid not in found)

        for _ in range(_MOVE_ATTEMPTS):
            report.already_in_target.extend(
                photo.id for photo in pending if photo.album_id == target_album_id
            )
            by_source: dict[UUID | None, list[UUID]] = defaultdict(list)
            for photo in pending:
                if photo.album_id != target_album_id:
                    by_source[photo.album_id].append(photo.id)
            stale: list[UUID] = []
            for source_album_id, ids in by_source.items():
                changed = self.photo_repository.set_album(
                    ids, target_album_id, source_album_id
                )
                if changed and source_album_id is not None:
                    self.album_repository.increment_photo_count(
                        source_album_id, -len(changed)
                    )
                report.moved.extend(changed)
                updated = set(changed)
                stale.extend(pid for pid in ids if pid not in updated)
            if not stale:
                pending = []
                break
            pending = self.photo_repository.list_by_ids(stale)
            still_present = {photo.id for photo in pending}
            report.not_found.extend(pid for pid in stale if pid not in still_present)
        report.conflicted.extend(photo.id for photo in pending)

        if report.moved:
            self.album_repository.increment_photo_count(
                target_album_id, len(report.moved)
            )
        return report

    async def _delete(self, photo: PhotoRecord) -> None:
        key = self.keys.blob_key(photo.storage_file_name)
        try:
            await self.blob_store.delete(key)
        except Exception as exc:
            raise UpstreamError(f"Could not delete blob {key}: {exc}") from exc
        deleted = await asyncio.to_thread(self.photo_repository.delete_photo, photo.id)
        if deleted is None:
            raise NotFoundError("Photo not found")
        if deleted.album_id is not None:
            await asyncio.to_thread(
                self.album_repository.increment_photo_count, deleted.album_id, -1
            )
        logger.info("Deleted photo", extra={"photo_id": str(photo.id), "key": key})
