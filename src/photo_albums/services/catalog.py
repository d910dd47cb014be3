"""Persistence interfaces for the album and photo catalog."""

from typing import Protocol
from uuid import UUID

from photo_albums.domain.models import AlbumRecord, PhotoRecord


class AlbumRepository(Protocol):
    """Persistence interface for albums."""

    def list_albums(self) -> list[AlbumRecord]:
        """Return all albums, newest first."""

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        """Return an album by id, if present."""

    def get_by_name(self, name: str) -> AlbumRecord | None:
        """Return the album with an exact name, if present."""

    def create_album(self, name: str, cover_url: str = "") -> AlbumRecord:
        """Create an album with a zero photo count and return it."""

    def update_album(
        self, album_id: UUID, changes: dict[str, object]
    ) -> AlbumRecord | None:
        """Apply name/cover changes and return the updated album."""

    def delete_album(self, album_id: UUID) -> None:
        """Delete an album row.

        Raises ``ConflictError`` while photos still reference the album.
        """

    def increment_photo_count(self, album_id: UUID, delta: int) -> None:
        """Atomically add ``delta`` to the album's photo count."""


class PhotoRepository(Protocol):
    """Persistence interface for photos."""

    def create_photo(
        self,
        original_file_name: str,
        storage_file_name: str,
        remote_url: str,
        album_id: UUID,
    ) -> PhotoRecord:
        """Create a photo row and return it."""

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""

    def list_by_ids(self, photo_ids: list[UUID]) -> list[PhotoRecord]:
        """Return the photos matching the given ids."""

    def list_by_album(self, album_id: UUID) -> list[PhotoRecord]:
        """Return an album's photos, newest first."""

    def rename_photo(
        self, photo_id: UUID, original_file_name: str
    ) -> PhotoRecord | None:
        """Update the user-facing file name."""

    def set_album(
        self, photo_ids: list[UUID], album_id: UUID, from_album_id: UUID | None
    ) -> list[UUID]:
        """Point the listed photos at ``album_id`` in one update.

        Only photos still in ``from_album_id`` change; returns the ids of the
        rows actually updated.
        """

    def reassign_album(self, from_album_id: UUID, to_album_id: UUID) -> int:
        """Move all photos of one album to another and return how many moved."""

    def delete_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Delete a photo row and return it as it was, or None if already gone."""
