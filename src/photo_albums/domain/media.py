"""Domain models for media normalization."""

from dataclasses import dataclass
from enum import StrEnum


class MediaKind(StrEnum):
    """Classification of an inbound file."""

    STANDARD_IMAGE = "standard_image"
    LEGACY_IMAGE = "legacy_image"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TransformResult:
    """Normalized output of the media transform."""

    output_path: str
    output_mime: str
    output_ext: str
    created_file: bool = False
