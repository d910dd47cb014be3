"""Tests for the in-memory task registry."""

import asyncio
from uuid import uuid4

import pytest

from photo_albums.domain.errors import NotFoundError
from photo_albums.domain.tasks import TaskStatus
from photo_albums.services.tasks import InMemoryTaskRegistry


def test_create_returns_pending_task_with_unguessable_id() -> None:
    registry = InMemoryTaskRegistry()
    album_id = uuid4()

    first = registry.create("a.jpg", album_id)
    second = registry.create("b.jpg", album_id)

    assert first.status is TaskStatus.PENDING
    assert first.id != second.id
    assert len(first.id) >= 16
    assert registry.get(first.id) == first


def test_update_sets_finished_at_on_terminal_status() -> None:
    registry = InMemoryTaskRegistry()
    task = registry.create("a.jpg", uuid4())

    processing = registry.update(task.id, status=TaskStatus.PROCESSING)
    done = registry.update(
        task.id, status=TaskStatus.COMPLETED, result_url="https://cdn/x.jpg"
    )

    assert processing.finished_at is None
    assert done.finished_at is not None
    assert registry.get(task.id).result_url == "https://cdn/x.jpg"


def test_get_unknown_task_raises() -> None:
    registry = InMemoryTaskRegistry()

    with pytest.raises(NotFoundError):
        registry.get("missing")
    with pytest.raises(NotFoundError):
        registry.update("missing", message="nope")


def test_schedule_purge_removes_task_after_delay() -> None:
    registry = InMemoryTaskRegistry()
    task = registry.create("a.jpg", uuid4())

    async def scenario() -> None:
        registry.schedule_purge(task.id, 0.01)
        assert registry.get(task.id)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    with pytest.raises(NotFoundError):
        registry.get(task.id)
    assert len(registry) == 0


def test_close_cancels_pending_purges() -> None:
    registry = InMemoryTaskRegistry()
    task = registry.create("a.jpg", uuid4())

    async def scenario() -> None:
        registry.schedule_purge(task.id, 0.01)
        registry.close()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert registry.get(task.id).id == task.id
