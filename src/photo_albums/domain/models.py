"""Domain models for albums and photos."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

DEFAULT_ALBUM_NAME = "Unsorted"


@dataclass(frozen=True)
class AlbumRecord:
    """Represents an album stored in the catalog."""

    id: UUID
    name: str
    cover_url: str
    photo_count: int
    created_at: datetime

    @property
    def is_default(self) -> bool:
        """Return true for the reserved default album."""
        return self.name == DEFAULT_ALBUM_NAME


@dataclass(frozen=True)
class PhotoRecord:
    """Represents a stored photo and the blob backing it."""

    id: UUID
    original_file_name: str
    storage_file_name: str
    remote_url: str
    album_id: UUID | None
    uploaded_at: datetime
