"""Supabase-backed album repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from photo_albums.domain.errors import ConflictError
from photo_albums.domain.models import AlbumRecord
from photo_albums.services.catalog import AlbumRepository

_COLUMNS = "id, name, cover_url, photo_count, created_at"
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


@dataclass
class SupabaseAlbumRepository(AlbumRepository):
    """Supabase implementation for album persistence."""

    client: Client

    def list_albums(self) -> list[AlbumRecord]:
        """Return all albums, newest first."""
        response = (
            self.client.table("albums")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_album(row) for row in response.data or []]

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        """Return an album by id, if present."""
        response = (
            self.client.table("albums")
            .select(_COLUMNS)
            .eq("id", str(album_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_album(response.data[0])

    def get_by_name(self, name: str) -> AlbumRecord | None:
        """Return the album with this exact name, if present."""
        response = (
            self.client.table("albums")
            .select(_COLUMNS)
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_album(response.data[0])

    def create_album(self, name: str, cover_url: str = "") -> AlbumRecord:
        """Insert an album row and return it."""
        try:
            response = (
                self.client.table("albums")
                .insert({"name": name, "cover_url": cover_url, "photo_count": 0})
                .execute()
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise ConflictError(f"Album name '{name}' already exists") from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create album")
        return _parse_album(response.data[0])

    def update_album(
        self, album_id: UUID, changes: dict[str, object]
    ) -> AlbumRecord | None:
        """Update album fields and return the new row."""
        try:
            response = (
                self.client.table("albums")
                .update(changes)
                .eq("id", str(album_id))
                .execute()
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise ConflictError("Album name already exists") from exc
            raise
        if not response.data:
            return None
        return _parse_album(response.data[0])

    def delete_album(self, album_id: UUID) -> None:
        """Delete an album row."""
        try:
            self.client.table("albums").delete().eq("id", str(album_id)).execute()
        except APIError as exc:
            if exc.code == _FOREIGN_KEY_VIOLATION:
                raise ConflictError("Album still has photos") from exc
            raise

    def increment_photo_count(self, album_id: UUID, delta: int) -> None:
        """Adjust the counter server-side so concurrent callers never race."""
        self.client.rpc(
            "increment_album_photo_count",
            {"target_album_id": str(album_id), "delta": delta},
        ).execute()


def _parse_album(row: dict[str, object]) -> AlbumRecord:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.now(tz=UTC)
    )
    return AlbumRecord(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        cover_url=str(row.get("cover_url") or ""),
        photo_count=int(row.get("photo_count") or 0),
        created_at=created_at,
    )
