"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, create_client

from photo_albums.adapters.ffmpeg_video_codec import FfmpegVideoCodec
from photo_albums.adapters.github_blob_store import GithubBlobStore
from photo_albums.adapters.pillow_image_codec import PillowImageCodec
from photo_albums.adapters.supabase_album_repository import SupabaseAlbumRepository
from photo_albums.adapters.supabase_blob_store import SupabaseBlobStore
from photo_albums.adapters.supabase_photo_repository import SupabasePhotoRepository
from photo_albums.config import Settings, parse_storage_prefix
from photo_albums.services.albums import AlbumService
from photo_albums.services.blobs import BlobStore, StorageKeyBuilder
from photo_albums.services.ingestion import IngestionPipeline
from photo_albums.services.media import MediaTransformService
from photo_albums.services.photos import PhotoService
from photo_albums.services.tasks import InMemoryTaskRegistry, TaskRegistry


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    album_service: AlbumService
    photo_service: PhotoService
    task_registry: TaskRegistry
    ingestion_pipeline: IngestionPipeline
    close_resources: Callable[[], Awaitable[None]]


def build_blob_store(settings: Settings, supabase_client: Client) -> BlobStore:
    """Select the object-store backend named in settings."""
    if settings.storage_backend == "github":
        if not (
            settings.github_token
            and settings.github_repo_owner
            and settings.github_repo_name
        ):
            raise ValueError(
                "github storage requires GITHUB_TOKEN, GITHUB_REPO_OWNER "
                "and GITHUB_REPO_NAME"
            )
        return GithubBlobStore.create(
            token=settings.github_token,
            owner=settings.github_repo_owner,
            repo=settings.github_repo_name,
            branch=settings.github_branch,
            public_base_url=settings.public_base_url,
        )
    if settings.storage_backend == "supabase":
        return SupabaseBlobStore(
            client=supabase_client,
            bucket=settings.supabase_bucket,
            public_base_url=settings.public_base_url,
        )
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    album_repository = SupabaseAlbumRepository(supabase_client)
    photo_repository = SupabasePhotoRepository(supabase_client)
    blob_store = build_blob_store(resolved_settings, supabase_client)
    keys = StorageKeyBuilder(prefix=parse_storage_prefix(resolved_settings.storage_prefix))
    album_service = AlbumService(
        album_repository=album_repository,
        photo_repository=photo_repository,
    )
    photo_service = PhotoService(
        photo_repository=photo_repository,
        album_repository=album_repository,
        blob_store=blob_store,
        keys=keys,
        bulk_delete_concurrency=resolved_settings.bulk_delete_concurrency,
    )
    transformer = MediaTransformService(
        image_codec=PillowImageCodec(
            max_dimension=resolved_settings.image_max_dimension,
            jpeg_quality=resolved_settings.jpeg_quality,
        ),
        video_codec=FfmpegVideoCodec(ffmpeg_path=resolved_settings.ffmpeg_path),
        normalize_images=resolved_settings.normalize_images,
        transcode_video=resolved_settings.transcode_video,
    )
    task_registry = InMemoryTaskRegistry()
    ingestion_pipeline = IngestionPipeline(
        album_service=album_service,
        album_repository=album_repository,
        photo_repository=photo_repository,
        blob_store=blob_store,
        transformer=transformer,
        registry=task_registry,
        keys=keys,
        task_ttl_seconds=resolved_settings.task_ttl_seconds,
        max_concurrent=resolved_settings.max_concurrent_ingestions,
    )

    async def close_resources() -> None:
        await ingestion_pipeline.drain()
        task_registry.close()
        await blob_store.close()

    return AppContainer(
        settings=resolved_settings,
        album_service=album_service,
        photo_service=photo_service,
        task_registry=task_registry,
        ingestion_pipeline=ingestion_pipeline,
        close_resources=close_resources,
    )
