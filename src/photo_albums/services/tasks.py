"""Registry of in-flight ingestion tasks."""

import asyncio
import logging
import secrets
import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from photo_albums.domain.errors import NotFoundError
from photo_albums.domain.tasks import IngestionTask, TaskStatus

logger = logging.getLogger(__name__)


class TaskRegistry(Protocol):
    """Storage for ingestion task state polled by clients."""

    def create(self, original_file_name: str, target_album_id: UUID) -> IngestionTask:
        """Register a PENDING task and return it."""

    def get(self, task_id: str) -> IngestionTask:
        """Return a task or raise ``NotFoundError``."""

    def update(self, task_id: str, **changes: object) -> IngestionTask:
        """Apply field changes to a task and return the new snapshot."""

    def schedule_purge(self, task_id: str, delay_seconds: float) -> None:
        """Forget a task after ``delay_seconds``."""


@dataclass
class InMemoryTaskRegistry(TaskRegistry):
    """Process-local task registry.

    Entries live only in this process: with several server processes,
    status polls must reach the process that accepted the upload.
    """

    _tasks: dict[str, IngestionTask] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _purge_handles: dict[str, asyncio.TimerHandle] = field(default_factory=dict)

    def create(self, original_file_name: str, target_album_id: UUID) -> IngestionTask:
        task = IngestionTask(
            id=secrets.token_urlsafe(16),
            status=TaskStatus.PENDING,
            message="Waiting to be processed",
            original_file_name=original_file_name,
            target_album_id=target_album_id,
            start_time=datetime.now(tz=UTC),
        )
        with self._lock:
            self._tasks[task.id] = task
        return task

    def get(self, task_id: str) -> IngestionTask:
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task not found or expired")
        return task

    def update(self, task_id: str, **changes: object) -> IngestionTask:
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise NotFoundError("Task not found or expired")
            updated = replace(current, **changes)
            if updated.status.is_terminal and updated.finished_at is None:
                updated = replace(updated, finished_at=datetime.now(tz=UTC))
            self._tasks[task_id] = updated
        return updated

    def schedule_purge(self, task_id: str, delay_seconds: float) -> None:
        """Forget a task after a delay on the running event loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            previous = self._purge_handles.pop(task_id, None)
            if previous is not None:
                previous.cancel()
            self._purge_handles[task_id] = loop.call_later(
                delay_seconds, self.purge, task_id
            )

    def purge(self, task_id: str) -> None:
        with self._lock:
            self._tasks.pop(task_id, None)
            self._purge_handles.pop(task_id, None)
        logger.debug("Purged task", extra={"task_id": task_id})

    def close(self) -> None:
        """Cancel pending purge timers."""
        with self._lock:
            for handle in self._purge_handles.values():
                handle.cancel()
            self._purge_handles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)
