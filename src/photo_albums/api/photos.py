"""Photo endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from photo_albums.api.models import (
    BulkDeleteRequest,
    BulkMoveRequest,
    PhotoMove,
    PhotoRename,
    serialize_bulk_delete,
    serialize_bulk_move,
    serialize_photo,
)

if TYPE_CHECKING:
    from photo_albums.containers import AppContainer

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("/bulkDelete")
async def bulk_delete(payload: BulkDeleteRequest, request: Request) -> JSONResponse:
    """Delete many photos; fails as a whole only when every item failed."""
    container: AppContainer = request.app.state.container
    report = await container.photo_service.bulk_delete(payload.photo_ids)
    body = serialize_bulk_delete(report)
    if report.all_failed:
        body["error"] = "No photos could be deleted"
        return JSONResponse(body, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    body["message"] = (
        f"Deleted {len(report.succeeded)} photos, {len(report.failed)} failed"
    )
    return JSONResponse(body)


@router.post("/bulkMove")
async def bulk_move(payload: BulkMoveRequest, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    report = container.photo_service.bulk_move(
        payload.photo_ids, payload.target_album_id
    )
    return serialize_bulk_move(report)


@router.put("/{photo_id}")
async def rename_photo(
    photo_id: UUID, payload: PhotoRename, request: Request
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    photo = container.photo_service.rename_photo(photo_id, payload.original_file_name)
    return serialize_photo(photo)


@router.patch("/{photo_id}/move")
async def move_photo(
    photo_id: UUID, payload: PhotoMove, request: Request
) -> dict[str, object]:
    """Move one photo; moving into its current album is a no-op."""
    container: AppContainer = request.app.state.container
    moved = container.photo_service.move_photo(photo_id, payload.target_album_id)
    return {
        "moved": moved,
        "photoId": str(photo_id),
        "targetAlbumId": str(payload.target_album_id),
    }


@router.delete("/{photo_id}")
async def delete_photo(photo_id: UUID, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    photo = await container.photo_service.delete_photo(photo_id)
    return {"message": "Photo deleted", "photoId": str(photo.id)}
