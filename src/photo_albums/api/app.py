"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from photo_albums.api.albums import router as albums_router
from photo_albums.api.photos import router as photos_router
from photo_albums.api.tasks import router as tasks_router
from photo_albums.api.uploads import router as uploads_router
from photo_albums.app_logging import configure_logging
from photo_albums.containers import AppContainer
from photo_albums.domain.errors import PhotoAlbumsError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        Path(container.settings.upload_tmp_dir).mkdir(parents=True, exist_ok=True)
        logger.info(
            "Starting photo albums API",
            extra={"storage_backend": container.settings.storage_backend},
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Photo Albums", lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(PhotoAlbumsError)
    async def handle_domain_error(
        request: Request, exc: PhotoAlbumsError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed: %s", exc, extra={"path": request.url.path}
            )
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    app.include_router(albums_router)
    app.include_router(photos_router)
    app.include_router(tasks_router)
    app.include_router(uploads_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
