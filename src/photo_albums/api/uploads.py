"""Upload staging and the synchronous batch upload endpoint."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from fastapi import APIRouter, File, Form, Request, UploadFile

from photo_albums.domain.errors import ValidationError
from photo_albums.domain.tasks import StagedUpload, TaskStatus
from photo_albums.services.ingestion import remove_files

if TYPE_CHECKING:
    from photo_albums.containers import AppContainer

router = APIRouter(tags=["uploads"])


async def stage_uploads(files: list[UploadFile], directory: str) -> list[StagedUpload]:
    """Copy request files to private temporary paths."""
    staged: list[StagedUpload] = []
    try:
        for upload in files:
            staged.append(await asyncio.to_thread(_stage_one, upload, directory))
    except Exception:
        await asyncio.to_thread(remove_files, [item.path for item in staged])
        raise
    return staged


def parse_album_id(raw: str | None) -> UUID | None:
    """Parse an optional album id form field."""
    if raw is None or not raw.strip():
        return None
    try:
        return UUID(raw.strip())
    except ValueError as exc:
        raise ValidationError("targetAlbumId must be a valid id") from exc


def _stage_one(upload: UploadFile, directory: str) -> StagedUpload:
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    file_name = upload.filename or "upload"
    path = target_dir / f"{uuid4().hex}{Path(file_name).suffix.lower()}"
    with path.open("wb") as handle:
        shutil.copyfileobj(upload.file, handle)
    return StagedUpload(
        path=str(path),
        original_file_name=file_name,
        content_type=upload.content_type,
    )


@router.post("/upload")
async def upload_batch(
    request: Request,
    photos: list[UploadFile] | None = File(default=None),
    target_album_id: str | None = Form(default=None, alias="targetAlbumId"),
) -> dict[str, object]:
    """Ingest files and wait for each one, reporting per-file results."""
    container: AppContainer = request.app.state.container
    if not photos:
        raise ValidationError("No photo files received")
    album_id = parse_album_id(target_album_id)
    staged = await stage_uploads(photos, container.settings.upload_tmp_dir)
    tasks = await container.ingestion_pipeline.ingest(staged, album_id)
    results: list[dict[str, object]] = []
    for task in tasks:
        if task.status is TaskStatus.COMPLETED:
            results.append(
                {
                    "status": "success",
                    "fileName": task.original_file_name,
                    "url": task.result_url,
                }
            )
        else:
            results.append(
                {
                    "status": "error",
                    "fileName": task.original_file_name,
                    "error": task.message,
                }
            )
    return {
        "message": f"Batch upload finished, {len(results)} files in total.",
        "results": results,
    }
