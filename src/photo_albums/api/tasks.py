"""Background upload submission and task status polling."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, File, Form, Request, UploadFile

from photo_albums.api.models import serialize_task
from photo_albums.api.uploads import parse_album_id, stage_uploads
from photo_albums.domain.errors import ValidationError

if TYPE_CHECKING:
    from photo_albums.containers import AppContainer

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/submit-upload")
async def submit_upload(
    request: Request,
    files: list[UploadFile] | None = File(default=None),
    target_album_id: str | None = Form(default=None, alias="targetAlbumId"),
) -> dict[str, object]:
    """Accept files and return task ids before any processing happens."""
    container: AppContainer = request.app.state.container
    if not files:
        raise ValidationError("No files received")
    album_id = parse_album_id(target_album_id)
    staged = await stage_uploads(files, container.settings.upload_tmp_dir)
    tasks = await container.ingestion_pipeline.submit(staged, album_id)
    return {"taskIds": [task.id for task in tasks]}


@router.get("/status/{task_id}")
async def task_status(task_id: str, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return serialize_task(container.task_registry.get(task_id))
