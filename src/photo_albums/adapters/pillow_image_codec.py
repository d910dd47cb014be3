"""Pillow-based image normalization and HEIC conversion."""

from dataclasses import dataclass

from PIL import Image, ImageOps
from pillow_heif import register_heif_opener

register_heif_opener()

_PIL_FORMATS = {"image/jpeg": "JPEG", "image/png": "PNG", "image/webp": "WEBP"}


@dataclass(frozen=True)
class PillowImageCodec:
    """Resizes oversized images and converts HEIC/HEIF to JPEG."""

    max_dimension: int = 2560
    jpeg_quality: int = 85

    def normalize(self, input_path: str, output_path: str, mime_type: str) -> bool:
        """Downscale images whose longest side exceeds ``max_dimension``."""
        image_format = _PIL_FORMATS.get(mime_type)
        if image_format is None:
            return False
        with Image.open(input_path) as img:
            if max(img.size) <= self.max_dimension:
                return False
            out = ImageOps.exif_transpose(img)
            out.thumbnail((self.max_dimension, self.max_dimension))
            if image_format == "JPEG":
                out = out.convert("RGB")
                out.save(
                    output_path, format="JPEG", quality=self.jpeg_quality, optimize=True
                )
            elif image_format == "WEBP":
                out.save(output_path, format="WEBP", quality=self.jpeg_quality)
            else:
                out.save(output_path, format="PNG", optimize=True)
        return True

    def convert_to_jpeg(self, input_path: str, output_path: str) -> None:
        """Decode any Pillow-readable image (HEIC included) and write a JPEG."""
        with Image.open(input_path) as img:
            out = ImageOps.exif_transpose(img).convert("RGB")
            if max(out.size) > self.max_dimension:
                out.thumbnail((self.max_dimension, self.max_dimension))
            out.save(output_path, format="JPEG", quality=self.jpeg_quality, optimize=True)
