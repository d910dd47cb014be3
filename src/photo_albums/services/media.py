"""Media classification and normalization before storage."""

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from photo_albums.domain.errors import TransformFailedError, UnsupportedMediaTypeError
from photo_albums.domain.media import MediaKind, TransformResult

logger = logging.getLogger(__name__)

STANDARD_IMAGE_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
LEGACY_IMAGE_TYPES: dict[str, str] = {
    ".heic": "image/heic",
    ".heif": "image/heif",
}
VIDEO_TYPES: dict[str, str] = {
    ".mp4": "video/mp4",
    ".m4v": "video/x-m4v",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
    ".3gp": "video/3gpp",
}
_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}


class ImageCodec(Protocol):
    """Raster image operations used by the transform."""

    def normalize(
        self, input_path: str, output_path: str, mime_type: str
    ) -> bool:
        """Re-encode an image into ``output_path``.

        Returns false when the image is already within limits and no output
        was written.
        """

    def convert_to_jpeg(self, input_path: str, output_path: str) -> None:
        """Decode a legacy container and write a JPEG."""


class VideoCodec(Protocol):
    """Video transcoding used by the transform."""

    def transcode(self, input_path: str, output_path: str) -> None:
        """Transcode to a baseline H.264/AAC MP4."""


def classify(mime_type: str | None, file_name: str) -> MediaKind:
    """Classify a file by declared MIME type, falling back to its extension."""
    mime = _normalize_mime(mime_type)
    ext = Path(file_name).suffix.lower()
    if mime in STANDARD_IMAGE_TYPES.values() or ext in STANDARD_IMAGE_TYPES:
        return MediaKind.STANDARD_IMAGE
    if mime in LEGACY_IMAGE_TYPES.values() or ext in LEGACY_IMAGE_TYPES:
        return MediaKind.LEGACY_IMAGE
    if mime.startswith("video/") or ext in VIDEO_TYPES:
        return MediaKind.VIDEO
    return MediaKind.UNSUPPORTED


@dataclass
class MediaTransformService:
    """Turns a staged upload into a storage-ready file.

    Holds only configuration, so one instance can serve concurrent calls for
    unrelated files. Input files are never deleted here; any file this
    service writes is flagged via ``TransformResult.created_file``.
    """

    image_codec: ImageCodec
    video_codec: VideoCodec
    normalize_images: bool = True
    transcode_video: bool = True

    def transform(
        self, input_path: str, declared_mime: str | None, declared_file_name: str
    ) -> TransformResult:
        kind = classify(declared_mime, declared_file_name)
        if kind is MediaKind.STANDARD_IMAGE:
            return self._standard_image(input_path, declared_mime, declared_file_name)
        if kind is MediaKind.LEGACY_IMAGE:
            return self._legacy_image(input_path, declared_file_name)
        if kind is MediaKind.VIDEO:
            return self._video(input_path, declared_mime, declared_file_name)
        raise UnsupportedMediaTypeError(
            f"Unsupported media type: {declared_mime or 'unknown'} ({declared_file_name})"
        )

    def _standard_image(
        self, input_path: str, declared_mime: str | None, file_name: str
    ) -> TransformResult:
        mime, ext = _resolve_type(declared_mime, file_name, STANDARD_IMAGE_TYPES)
        passthrough = TransformResult(
            output_path=input_path, output_mime=mime, output_ext=ext
        )
        if not self.normalize_images:
            return passthrough
        output_path = _sibling_path(input_path, ext)
        try:
            written = self.image_codec.normalize(input_path, output_path, mime)
        except Exception:
            logger.warning(
                "Image re-encode failed, storing original",
                exc_info=True,
                extra={"file_name": file_name},
            )
            Path(output_path).unlink(missing_ok=True)
            return passthrough
        if not written:
            return passthrough
        return TransformResult(
            output_path=output_path, output_mime=mime, output_ext=ext, created_file=True
        )

    def _legacy_image(self, input_path: str, file_name: str) -> TransformResult:
        output_path = _sibling_path(input_path, ".jpg")
        try:
            self.image_codec.convert_to_jpeg(input_path, output_path)
        except Exception as exc:
            Path(output_path).unlink(missing_ok=True)
            raise TransformFailedError(
                f"Could not convert {file_name} to JPEG: {exc}"
            ) from exc
        return TransformResult(
            output_path=output_path,
            output_mime="image/jpeg",
            output_ext=".jpg",
            created_file=True,
        )

    def _video(
        self, input_path: str, declared_mime: str | None, file_name: str
    ) -> TransformResult:
        if not self.transcode_video:
            mime, ext = _resolve_type(declared_mime, file_name, VIDEO_TYPES)
            return TransformResult(output_path=input_path, output_mime=mime, output_ext=ext)
        output_path = _sibling_path(input_path, ".mp4")
        try:
            self.video_codec.transcode(input_path, output_path)
        except Exception as exc:
            Path(output_path).unlink(missing_ok=True)
            raise TransformFailedError(
                f"Could not transcode {file_name}: {exc}"
            ) from exc
        return TransformResult(
            output_path=output_path,
            output_mime="video/mp4",
            output_ext=".mp4",
            created_file=True,
        )


def _normalize_mime(mime_type: str | None) -> str:
    mime = (mime_type or "").split(";", maxsplit=1)[0].strip().lower()
    return _MIME_ALIASES.get(mime, mime)


def _resolve_type(
    declared_mime: str | None, file_name: str, known: dict[str, str]
) -> tuple[str, str]:
    """Pick the output MIME type and extension for a pass-through file."""
    mime = _normalize_mime(declared_mime)
    ext = Path(file_name).suffix.lower()
    if ext in known:
        return (mime if mime in known.values() else known[ext]), ext
    if mime in known.values():
        return mime, next(key for key, value in known.items() if value == mime)
    guessed = mimetypes.guess_extension(mime) if mime else None
    return mime or "application/octet-stream", guessed or ext


def _sibling_path(input_path: str, extension: str) -> str:
    source = Path(input_path)
    return str(source.with_name(f"{source.stem}-{uuid.uuid4().hex}{extension}"))
