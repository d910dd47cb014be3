"""Error taxonomy shared by services and the HTTP layer."""


class PhotoAlbumsError(Exception):
    """Base error carrying the HTTP status used on synchronous paths."""

    status_code = 500


class ValidationError(PhotoAlbumsError):
    """A required field is missing or blank."""

    status_code = 400


class NotFoundError(PhotoAlbumsError):
    """An album, photo or task does not exist."""

    status_code = 404


class ConflictError(PhotoAlbumsError):
    """The request collides with existing state."""

    status_code = 409


class ProtectedAlbumError(ConflictError):
    """The default album cannot be renamed, deleted, or impersonated."""

    status_code = 403


class UnsupportedMediaTypeError(PhotoAlbumsError):
    """The media transform does not handle this file type."""

    status_code = 415


class TransformFailedError(PhotoAlbumsError):
    """Converting or re-encoding a file failed with no fallback."""


class UpstreamError(PhotoAlbumsError):
    """The blob store or catalog store call failed."""
