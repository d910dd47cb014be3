"""Album endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Request, status

from photo_albums.api.models import (
    AlbumCreate,
    AlbumUpdate,
    serialize_album,
    serialize_photo,
)

if TYPE_CHECKING:
    from photo_albums.containers import AppContainer

router = APIRouter(prefix="/albums", tags=["albums"])


@router.get("")
async def list_albums(request: Request) -> list[dict[str, object]]:
    """Return all albums newest first, creating the default album if needed."""
    container: AppContainer = request.app.state.container
    return [serialize_album(album) for album in container.album_service.list_albums()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_album(payload: AlbumCreate, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return serialize_album(container.album_service.create_album(payload.name))


@router.put("/{album_id}")
async def update_album(
    album_id: UUID, payload: AlbumUpdate, request: Request
) -> dict[str, object]:
    """Rename an album and/or change its cover URL."""
    container: AppContainer = request.app.state.container
    album = container.album_service.update_album(
        album_id, name=payload.name, cover_url=payload.cover_url
    )
    return serialize_album(album)


@router.delete("/{album_id}")
async def delete_album(album_id: UUID, request: Request) -> dict[str, object]:
    """Delete an album after moving its photos to the default album."""
    container: AppContainer = request.app.state.container
    reassigned = container.album_service.delete_album(album_id)
    return {"message": "Album deleted", "reassignedCount": reassigned}


@router.get("/{album_id}/photos")
async def list_album_photos(album_id: UUID, request: Request) -> list[dict[str, object]]:
    container: AppContainer = request.app.state.container
    return [
        serialize_photo(photo)
        for photo in container.album_service.list_photos(album_id)
    ]
