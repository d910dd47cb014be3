"""Pydantic request models and response serializers for the HTTP API."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from photo_albums.domain.bulk import BulkDeleteReport, BulkMoveReport
from photo_albums.domain.models import AlbumRecord, PhotoRecord
from photo_albums.domain.tasks import IngestionTask


class AlbumCreate(BaseModel):
    """Payload for creating an album."""

    name: str | None = None


class AlbumUpdate(BaseModel):
    """Payload for renaming an album or changing its cover."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    cover_url: str | None = Field(default=None, alias="coverUrl")


class PhotoRename(BaseModel):
    """Payload for renaming a photo."""

    model_config = ConfigDict(populate_by_name=True)

    original_file_name: str | None = Field(default=None, alias="originalFileName")


class PhotoMove(BaseModel):
    """Payload for moving one photo."""

    model_config = ConfigDict(populate_by_name=True)

    target_album_id: UUID | None = Field(default=None, alias="targetAlbumId")


class BulkDeleteRequest(BaseModel):
    """Payload for deleting many photos."""

    model_config = ConfigDict(populate_by_name=True)

    photo_ids: list[UUID] = Field(default_factory=list, alias="photoIds")


class BulkMoveRequest(BaseModel):
    """Payload for moving many photos into one album."""

    model_config = ConfigDict(populate_by_name=True)

    photo_ids: list[UUID] = Field(default_factory=list, alias="photoIds")
    target_album_id: UUID | None = Field(default=None, alias="targetAlbumId")


def serialize_album(album: AlbumRecord) -> dict[str, object]:
    return {
        "id": str(album.id),
        "name": album.name,
        "coverUrl": album.cover_url,
        "photoCount": album.photo_count,
        "createdAt": album.created_at.isoformat(),
    }


def serialize_photo(photo: PhotoRecord) -> dict[str, object]:
    return {
        "id": str(photo.id),
        "originalFileName": photo.original_file_name,
        "storageFileName": photo.storage_file_name,
        "remoteUrl": photo.remote_url,
        "albumId": str(photo.album_id) if photo.album_id else None,
        "uploadedAt": photo.uploaded_at.isoformat(),
    }


def serialize_task(task: IngestionTask) -> dict[str, object]:
    """Render task state for status polling; optional keys appear only when set."""
    payload: dict[str, object] = {
        "taskId": task.id,
        "status": task.status.value,
        "message": task.message,
        "originalFileName": task.original_file_name,
        "targetAlbumId": str(task.target_album_id),
        "startTime": task.start_time.isoformat(),
    }
    if task.result_url:
        payload["resultUrl"] = task.result_url
    if task.error_code:
        payload["errorCode"] = task.error_code.value
    return payload


def serialize_bulk_delete(report: BulkDeleteReport) -> dict[str, object]:
    return {
        "succeeded": [str(photo_id) for photo_id in report.succeeded],
        "failed": [
            {"photoId": str(failure.photo_id), "error": failure.error}
            for failure in report.failed
        ],
    }


def serialize_bulk_move(report: BulkMoveReport) -> dict[str, object]:
    return {
        "targetAlbumId": str(report.target_album_id),
        "movedCount": len(report.moved),
        "moved": [str(photo_id) for photo_id in report.moved],
        "alreadyInTarget": [str(photo_id) for photo_id in report.already_in_target],
        "notFound": [str(photo_id) for photo_id in report.not_found],
        "conflicted": [str(photo_id) for photo_id in report.conflicted],
    }
