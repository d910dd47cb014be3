"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from photo_albums.domain.models import PhotoRecord
from photo_albums.services.catalog import PhotoRepository

_COLUMNS = "id, original_file_name, storage_file_name, remote_url, album_id, uploaded_at"


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo metadata persistence."""

    client: Client

    def create_photo(
        self,
        original_file_name: str,
        storage_file_name: str,
        remote_url: str,
        album_id: UUID,
    ) -> PhotoRecord:
        """Create a photo metadata row and return it."""
        response = (
            self.client.table("photos")
            .insert(
                {
                    "original_file_name": original_file_name,
                    "storage_file_name": storage_file_name,
                    "remote_url": remote_url,
                    "album_id": str(album_id),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo metadata")
        return _parse_photo(response.data[0])

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        response = (
            self.client.table("photos")
            .select(_COLUMNS)
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def list_by_ids(self, photo_ids: list[UUID]) -> list[PhotoRecord]:
        if not photo_ids:
            return []
        response = (
            self.client.table("photos")
            .select(_COLUMNS)
            .in_("id", [str(photo_id) for photo_id in photo_ids])
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]

    def list_by_album(self, album_id: UUID) -> list[PhotoRecord]:
        """Return an album's photos, newest first."""
        response = (
            self.client.table("photos")
            .select(_COLUMNS)
            .eq("album_id", str(album_id))
            .order("uploaded_at", desc=True)
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]

    def rename_photo(
        self, photo_id: UUID, original_file_name: str
    ) -> PhotoRecord | None:
        response = (
            self.client.table("photos")
            .update({"original_file_name": original_file_name})
            .eq("id", str(photo_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def set_album(
        self, photo_ids: list[UUID], album_id: UUID, from_album_id: UUID | None
    ) -> list[UUID]:
        """Point photos still in ``from_album_id`` at an album with one update."""
        if not photo_ids:
            return []
        query = self.client.table("photos").update({"album_id": str(album_id)}).in_(
            "id", [str(photo_id) for photo_id in photo_ids]
        )
        if from_album_id is None:
            query = query.is_("album_id", "null")
        else:
            query = query.eq("album_id", str(from_album_id))
        response = query.execute()
        return [UUID(str(row["id"])) for row in response.data or []]

    def reassign_album(self, from_album_id: UUID, to_album_id: UUID) -> int:
        """Move every photo of one album to another and return the count."""
        response = (
            self.client.table("photos")
            .update({"album_id": str(to_album_id)})
            .eq("album_id", str(from_album_id))
            .execute()
        )
        return len(response.data or [])

    def delete_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Delete a photo metadata row and return the removed row."""
        response = (
            self.client.table("photos").delete().eq("id", str(photo_id)).execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])


def _parse_photo(row: dict[str, object]) -> PhotoRecord:
    uploaded_raw = row.get("uploaded_at")
    album_raw = row.get("album_id")
    return PhotoRecord(
        id=UUID(str(row["id"])),
        original_file_name=str(row.get("original_file_name") or ""),
        storage_file_name=str(row["storage_file_name"]),
        remote_url=str(row.get("remote_url") or ""),
        album_id=UUID(str(album_raw)) if album_raw else None,
        uploaded_at=(
            datetime.fromisoformat(uploaded_raw)
            if isinstance(uploaded_raw, str) and uploaded_raw
            else datetime.now(tz=UTC)
        ),
    )
