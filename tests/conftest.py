"""Shared test fixtures."""

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import UUID, uuid4

import pytest

from photo_albums.config import Settings
from photo_albums.containers import AppContainer
from photo_albums.domain.errors import ConflictError
from photo_albums.domain.models import AlbumRecord, PhotoRecord
from photo_albums.services.albums import AlbumService
from photo_albums.services.blobs import BlobStore, StorageKeyBuilder
from photo_albums.services.catalog import AlbumRepository, PhotoRepository
from photo_albums.services.ingestion import IngestionPipeline
from photo_albums.services.media import MediaTransformService
from photo_albums.services.photos import PhotoService
from photo_albums.services.tasks import InMemoryTaskRegistry

_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


@dataclass
class InMemoryAlbumRepository(AlbumRepository):
    """In-memory album repository for tests."""

    albums: dict[UUID, AlbumRecord] = field(default_factory=dict)
    fail_increment: bool = False
    increments: list[tuple[UUID, int]] = field(default_factory=list)
    photo_references: Callable[[UUID], int] | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _sequence: itertools.count = field(default_factory=itertools.count)

    def list_albums(self) -> list[AlbumRecord]:
        return sorted(self.albums.values(), key=lambda a: a.created_at, reverse=True)

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        return self.albums.get(album_id)

    def get_by_name(self, name: str) -> AlbumRecord | None:
        return next((a for a in self.albums.values() if a.name == name), None)

    def create_album(self, name: str, cover_url: str = "") -> AlbumRecord:
        with self._lock:
            if self.get_by_name(name):
                raise ConflictError(f"Album name '{name}' already exists")
            album = AlbumRecord(
                id=uuid4(),
                name=name,
                cover_url=cover_url,
                photo_count=0,
                created_at=_BASE_TIME + timedelta(seconds=next(self._sequence)),
            )
            self.albums[album.id] = album
        return album

    def update_album(
        self, album_id: UUID, changes: dict[str, object]
    ) -> AlbumRecord | None:
        current = self.albums.get(album_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self.albums[album_id] = updated
        return updated

    def delete_album(self, album_id: UUID) -> None:
        if self.photo_references and self.photo_references(album_id):
            raise ConflictError("Album still has photos")
        self.albums.pop(album_id, None)

    def increment_photo_count(self, album_id: UUID, delta: int) -> None:
        if self.fail_increment:
            raise RuntimeError("counter update failed")
        with self._lock:
            current = self.albums.get(album_id)
            if current is None:
                return
            self.albums[album_id] = replace(
                current, photo_count=max(current.photo_count + delta, 0)
            )
            self.increments.append((album_id, delta))


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository for tests."""

    photos: dict[UUID, PhotoRecord] = field(default_factory=dict)
    fail_create: bool = False
    set_album_calls: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, album_id: UUID, name: str = "a.jpg") -> PhotoRecord:
        photo = PhotoRecord(
            id=uuid4(),
            original_file_name=name,
            storage_file_name=f"{uuid4().hex}-{name}",
            remote_url=f"https://cdn.example.com/images/{name}",
            album_id=album_id,
            uploaded_at=datetime.now(tz=UTC),
        )
        self.photos[photo.id] = photo
        return photo

    def create_photo(
        self,
        original_file_name: str,
        storage_file_name: str,
        remote_url: str,
        album_id: UUID,
    ) -> PhotoRecord:
        if self.fail_create:
            raise RuntimeError("insert failed")
        photo = PhotoRecord(
            id=uuid4(),
            original_file_name=original_file_name,
            storage_file_name=storage_file_name,
            remote_url=remote_url,
            album_id=album_id,
            uploaded_at=datetime.now(tz=UTC),
        )
        with self._lock:
            self.photos[photo.id] = photo
        return photo

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        return self.photos.get(photo_id)

    def list_by_ids(self, photo_ids: list[UUID]) -> list[PhotoRecord]:
        return [self.photos[pid] for pid in dict.fromkeys(photo_ids) if pid in self.photos]

    def list_by_album(self, album_id: UUID) -> list[PhotoRecord]:
        return [p for p in self.photos.values() if p.album_id == album_id]

    def rename_photo(
        self, photo_id: UUID, original_file_name: str
    ) -> PhotoRecord | None:
        current = self.photos.get(photo_id)
        if current is None:
            return None
        updated = replace(current, original_file_name=original_file_name)
        self.photos[photo_id] = updated
        return updated

    def set_album(
        self, photo_ids: list[UUID], album_id: UUID, from_album_id: UUID | None
    ) -> list[UUID]:
        changed: list[UUID] = []
        with self._lock:
            self.set_album_calls += 1
            for photo_id in photo_ids:
                current = self.photos.get(photo_id)
                if current is not None and current.album_id == from_album_id:
                    self.photos[photo_id] = replace(current, album_id=album_id)
                    changed.append(photo_id)
        return changed

    def reassign_album(self, from_album_id: UUID, to_album_id: UUID) -> int:
        with self._lock:
            moved = [p.id for p in self.photos.values() if p.album_id == from_album_id]
            for photo_id in moved:
                current = self.photos[photo_id]
                self.photos[photo_id] = replace(current, album_id=to_album_id)
        return len(moved)

    def delete_photo(self, photo_id: UUID) -> PhotoRecord | None:
        with self._lock:
            return self.photos.pop(photo_id, None)

    def count_in(self, album_id: UUID) -> int:
        return len(self.list_by_album(album_id))


@dataclass
class FakeBlobStore(BlobStore):
    """Blob store that keeps objects in memory."""

    base_url: str = "https://cdn.example.com"
    objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)
    fail_put: bool = False
    fail_delete_keys: set[str] = field(default_factory=set)
    deleted: list[str] = field(default_factory=list)
    closed: bool = False

    async def put(self, key: str, file_path: str, content_type: str) -> str:
        if self.fail_put:
            raise RuntimeError("storage unavailable")
        self.objects[key] = (Path(file_path).read_bytes(), content_type)
        return f"{self.base_url}/{key}"

    async def delete(self, key: str) -> None:
        if key in self.fail_delete_keys:
            raise RuntimeError("storage unavailable")
        self.objects.pop(key, None)
        self.deleted.append(key)

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeImageCodec:
    """Image codec that writes marker bytes instead of decoding images."""

    resize: bool = False
    fail_normalize: bool = False
    fail_convert: bool = False

    def normalize(self, input_path: str, output_path: str, mime_type: str) -> bool:
        if self.fail_normalize:
            raise OSError("cannot identify image file")
        if not self.resize:
            return False
        Path(output_path).write_bytes(b"resized")
        return True

    def convert_to_jpeg(self, input_path: str, output_path: str) -> None:
        Path(output_path).write_bytes(b"partial")
        if self.fail_convert:
            raise OSError("cannot decode heif")
        Path(output_path).write_bytes(b"jpeg")


@dataclass
class FakeVideoCodec:
    """Video codec that copies bytes instead of running ffmpeg."""

    fail: bool = False

    def transcode(self, input_path: str, output_path: str) -> None:
        if self.fail:
            raise RuntimeError("ffmpeg exited with 1")
        Path(output_path).write_bytes(Path(input_path).read_bytes())


def stage_file(directory: Path, name: str, content: bytes = b"data") -> str:
    """Write a staged upload the way the HTTP layer does."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{uuid4().hex}{Path(name).suffix.lower()}"
    path.write_bytes(content)
    return str(path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        upload_tmp_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def album_repository(
    photo_repository: InMemoryPhotoRepository,
) -> InMemoryAlbumRepository:
    return InMemoryAlbumRepository(photo_references=photo_repository.count_in)


@pytest.fixture
def photo_repository() -> InMemoryPhotoRepository:
    return InMemoryPhotoRepository()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def keys() -> StorageKeyBuilder:
    return StorageKeyBuilder(prefix="images/", millis=itertools.count(1700000000000).__next__)


@pytest.fixture
def image_codec() -> FakeImageCodec:
    return FakeImageCodec()


@pytest.fixture
def video_codec() -> FakeVideoCodec:
    return FakeVideoCodec()


@pytest.fixture
def album_service(
    album_repository: InMemoryAlbumRepository,
    photo_repository: InMemoryPhotoRepository,
) -> AlbumService:
    return AlbumService(
        album_repository=album_repository, photo_repository=photo_repository
    )


@pytest.fixture
def photo_service(
    album_repository: InMemoryAlbumRepository,
    photo_repository: InMemoryPhotoRepository,
    blob_store: FakeBlobStore,
    keys: StorageKeyBuilder,
) -> PhotoService:
    return PhotoService(
        photo_repository=photo_repository,
        album_repository=album_repository,
        blob_store=blob_store,
        keys=keys,
    )


@pytest.fixture
def task_registry() -> InMemoryTaskRegistry:
    return InMemoryTaskRegistry()


@pytest.fixture
def pipeline(
    album_service: AlbumService,
    album_repository: InMemoryAlbumRepository,
    photo_repository: InMemoryPhotoRepository,
    blob_store: FakeBlobStore,
    keys: StorageKeyBuilder,
    image_codec: FakeImageCodec,
    video_codec: FakeVideoCodec,
    task_registry: InMemoryTaskRegistry,
) -> IngestionPipeline:
    return IngestionPipeline(
        album_service=album_service,
        album_repository=album_repository,
        photo_repository=photo_repository,
        blob_store=blob_store,
        transformer=MediaTransformService(
            image_codec=image_codec, video_codec=video_codec
        ),
        registry=task_registry,
        keys=keys,
    )


@pytest.fixture
def container(
    settings: Settings,
    album_service: AlbumService,
    photo_service: PhotoService,
    task_registry: InMemoryTaskRegistry,
    pipeline: IngestionPipeline,
    blob_store: FakeBlobStore,
) -> AppContainer:
    async def close_resources() -> None:
        await pipeline.drain()
        task_registry.close()
        await blob_store.close()

    return AppContainer(
        settings=settings,
        album_service=album_service,
        photo_service=photo_service,
        task_registry=task_registry,
        ingestion_pipeline=pipeline,
        close_resources=close_resources,
    )
