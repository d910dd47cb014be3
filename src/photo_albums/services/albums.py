"""Album lifecycle and default-album bookkeeping."""

import logging
from dataclasses import dataclass
from uuid import UUID

from photo_albums.domain.errors import (
    ConflictError,
    NotFoundError,
    ProtectedAlbumError,
    ValidationError,
)
from photo_albums.domain.models import DEFAULT_ALBUM_NAME, AlbumRecord, PhotoRecord
from photo_albums.services.catalog import AlbumRepository, PhotoRepository

logger = logging.getLogger(__name__)

_DELETE_ATTEMPTS = 3


@dataclass
class AlbumService:
    """Application service for album CRUD."""

    album_repository: AlbumRepository
    photo_repository: PhotoRepository

    def ensure_default_album(self) -> AlbumRecord:
        """Return the default album, creating it on first use."""
        existing = self.album_repository.get_by_name(DEFAULT_ALBUM_NAME)
        if existing:
            return existing
        try:
            created = self.album_repository.create_album(DEFAULT_ALBUM_NAME)
        except ConflictError:
            # Another request created it between the lookup and the insert.
            existing = self.album_repository.get_by_name(DEFAULT_ALBUM_NAME)
            if existing is None:
                raise
            return existing
        logger.info("Created default album", extra={"album_id": str(created.id)})
        return created

    def resolve_target_album(self, album_id: UUID | None) -> AlbumRecord:
        """Return the requested album when it exists, else the default album."""
        if album_id is not None:
            album = self.album_repository.get_album(album_id)
            if album:
                return album
            logger.info(
                "Target album missing, falling back to default",
                extra={"album_id": str(album_id)},
            )
        return self.ensure_default_album()

    def list_albums(self) -> list[AlbumRecord]:
        """Return all albums newest first, ensuring the default one exists."""
        self.ensure_default_album()
        return self.album_repository.list_albums()

    def get_album(self, album_id: UUID) -> AlbumRecord:
        album = self.album_repository.get_album(album_id)
        if album is None:
            raise NotFoundError("Album not found")
        return album

    def create_album(self, name: str | None) -> AlbumRecord:
        """Create a uniquely named album."""
        cleaned = _clean_name(name)
        if self.album_repository.get_by_name(cleaned):
            raise ConflictError(f"Album name '{cleaned}' already exists")
        return self.album_repository.create_album(cleaned)

    def update_album(
        self, album_id: UUID, name: str | None = None, cover_url: str | None = None
    ) -> AlbumRecord:
        """Rename an album and/or change its cover."""
        album = self.get_album(album_id)
        changes: dict[str, object] = {}
        if name is not None:
            cleaned = _clean_name(name)
            if cleaned != album.name:
                if cleaned == DEFAULT_ALBUM_NAME:
                    raise ProtectedAlbumError(
                        f"'{DEFAULT_ALBUM_NAME}' is a reserved album name"
                    )
                if album.is_default:
                    raise ProtectedAlbumError("The default album cannot be renamed")
                taken = self.album_repository.get_by_name(cleaned)
                if taken and taken.id != album.id:
                    raise ConflictError(f"Album name '{cleaned}' already exists")
                changes["name"] = cleaned
        if cover_url is not None:
            changes["cover_url"] = cover_url
        if not changes:
            return album
        updated = self.album_repository.update_album(album_id, changes)
        if updated is None:
            raise NotFoundError("Album not found")
        return updated

    def delete_album(self, album_id: UUID) -> int:
        """Delete an album, moving its photos to the default album.

        Photos are re-pointed first, then the default album is credited, and
        only then is the album row removed, so an interruption never leaves
        photos referencing a deleted album. A photo that lands in the album
        between those steps blocks the delete; the sweep then repeats.
        """
        album = self.get_album(album_id)
        if album.is_default:
            raise ProtectedAlbumError("The default album cannot be deleted")
        default_album = self.ensure_default_album()
        moved = 0
        for attempt in range(1, _DELETE_ATTEMPTS + 1):
            swept = self.photo_repository.reassign_album(album.id, default_album.id)
            if swept:
                self.album_repository.increment_photo_count(default_album.id, swept)
            moved += swept
            try:
                self.album_repository.delete_album(album.id)
            except ConflictError:
                if attempt == _DELETE_ATTEMPTS:
                    raise
                logger.info(
                    "Album gained photos while deleting, sweeping again",
                    extra={"album_id": str(album.id)},
                )
                continue
            break
        logger.info(
            "Deleted album",
            extra={"album_id": str(album.id), "reassigned": moved},
        )
        return moved

    def list_photos(self, album_id: UUID) -> list[PhotoRecord]:
        """Return the photos of an existing album."""
        self.get_album(album_id)
        return self.photo_repository.list_by_album(album_id)


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Album name is required")
    return cleaned
