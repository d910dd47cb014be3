"""Domain models for ingestion tasks."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class TaskStatus(StrEnum):
    """Lifecycle states of an ingestion task."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in {TaskStatus.COMPLETED, TaskStatus.FAILED}


class IngestionFailure(StrEnum):
    """Error codes reported for failed ingestion tasks."""

    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    TRANSFORM_FAILED = "TransformFailed"
    UPLOAD_FAILED = "UploadFailed"
    PERSIST_FAILED = "PersistFailed"
    INTERNAL_ERROR = "InternalError"


@dataclass(frozen=True)
class IngestionTask:
    """Snapshot of one file's transform, upload and persist journey."""

    id: str
    status: TaskStatus
    message: str
    original_file_name: str
    target_album_id: UUID
    start_time: datetime
    result_url: str | None = None
    error_code: IngestionFailure | None = None
    finished_at: datetime | None = None


@dataclass(frozen=True)
class StagedUpload:
    """An accepted upload written to a local temporary file."""

    path: str
    original_file_name: str
    content_type: str | None
